"""Utility functions for the ArgoCD Register Operator."""

from .conditions import (
    find_condition,
    set_available_condition,
    set_degraded_condition,
    set_progressing_condition,
    update_condition,
)
from .errors import (
    ConfigurationError,
    ConflictError,
    NotFoundError,
    RegistrationError,
    TransientError,
    sanitize_exception,
)
from .events import emit_event
from .kubeconfig import parse_kubeconfig
from .secrets import decode_token, read_secret_data

__all__ = [
    "update_condition",
    "find_condition",
    "set_available_condition",
    "set_degraded_condition",
    "set_progressing_condition",
    "RegistrationError",
    "NotFoundError",
    "ConfigurationError",
    "TransientError",
    "ConflictError",
    "sanitize_exception",
    "emit_event",
    "parse_kubeconfig",
    "decode_token",
    "read_secret_data",
]
