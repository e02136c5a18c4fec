"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import (
    COND_AVAILABLE,
    COND_DEGRADED,
    COND_PROGRESSING,
)

CONDITION_STATUSES = ("True", "False", "Unknown")


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def find_condition(conditions: list[dict[str, Any]], condition_type: str) -> dict[str, Any] | None:
    """Return the condition of the given type, if any."""
    for cond in conditions:
        if cond.get("type") == condition_type:
            return cond
    return None


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Update or add a condition to the conditions list.

    At most one entry exists per type. An existing entry keeps its position
    and its lastTransitionTime unless status or reason changes.

    Args:
        conditions: List of existing conditions
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message
        observed_generation: Generation when condition was observed

    Returns:
        Updated list of conditions

    Raises:
        ValueError: If status is not one of True, False, Unknown
    """
    if status not in CONDITION_STATUSES:
        raise ValueError(f"invalid condition status {status!r}")

    now = _now()

    existing_idx = None
    for idx, cond in enumerate(conditions):
        if cond.get("type") == condition_type:
            existing_idx = idx
            break

    new_condition = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": now,
    }

    if existing_idx is not None:
        existing = conditions[existing_idx]
        if existing.get("status") == status and existing.get("reason") == reason:
            new_condition["lastTransitionTime"] = existing.get("lastTransitionTime", now)
        if observed_generation is None and "observedGeneration" in existing:
            new_condition["observedGeneration"] = existing["observedGeneration"]

    if observed_generation is not None:
        new_condition["observedGeneration"] = observed_generation

    if existing_idx is not None:
        conditions[existing_idx] = new_condition
    else:
        conditions.append(new_condition)

    return conditions


def set_available_condition(
    conditions: list[dict[str, Any]],
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Available condition."""
    return update_condition(conditions, COND_AVAILABLE, status, reason, message, observed_generation)


def set_progressing_condition(
    conditions: list[dict[str, Any]],
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Progressing condition."""
    return update_condition(conditions, COND_PROGRESSING, status, reason, message, observed_generation)


def set_degraded_condition(
    conditions: list[dict[str, Any]],
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Degraded condition."""
    return update_condition(conditions, COND_DEGRADED, status, reason, message, observed_generation)
