"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_DELETING,
    EVENT_REASON_REGISTER_FAILED,
    EVENT_REASON_REGISTERED,
    EVENT_REASON_UNREGISTERED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Resource the event refers to
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_registered(body: dict[str, Any], server: str) -> None:
    """Emit cluster registered event."""
    emit_event(body, EVENT_REASON_REGISTERED, f"Cluster {server} registered with ArgoCD")


def emit_register_failed(body: dict[str, Any], message: str) -> None:
    """Emit registration failed event."""
    emit_event(body, EVENT_REASON_REGISTER_FAILED, message, type_="Warning")


def emit_unregistered(body: dict[str, Any], server: str) -> None:
    """Emit cluster unregistered event."""
    emit_event(body, EVENT_REASON_UNREGISTERED, f"Cluster {server} unregistered from ArgoCD")


def emit_deleting(body: dict[str, Any]) -> None:
    """Emit the warning raised right before a Register is released for deletion."""
    meta = body.get("metadata", {})
    emit_event(
        body,
        EVENT_REASON_DELETING,
        f"Register CR {meta.get('name')} from the namespace {meta.get('namespace')} will be deleted.",
        type_="Warning",
    )


class KopfEventRecorder:
    """Records reconciliation events on the Register through kopf."""

    def registered(self, body: dict[str, Any], server: str) -> None:
        emit_registered(body, server)

    def register_failed(self, body: dict[str, Any], message: str) -> None:
        emit_register_failed(body, message)

    def unregistered(self, body: dict[str, Any], server: str) -> None:
        emit_unregistered(body, server)

    def deleting(self, body: dict[str, Any]) -> None:
        emit_deleting(body)
