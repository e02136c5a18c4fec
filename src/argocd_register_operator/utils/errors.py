"""Error taxonomy and sanitization utilities to prevent information leakage."""

from __future__ import annotations

import re

from kubernetes import client


class RegistrationError(Exception):
    """Base class for every error raised while reconciling a registration.

    Args:
        message: Human readable description
        operation: Name of the operation that failed
    """

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class NotFoundError(RegistrationError):
    """A referenced entity does not exist."""


class ConfigurationError(RegistrationError):
    """Credential data or a kubeconfig is missing or malformed."""


class TransientError(RegistrationError):
    """The ArgoCD API or the Kubernetes API failed in a retryable way."""


class ConflictError(RegistrationError):
    """A write was rejected because the object changed since it was read."""


def translate_api_exception(error: client.exceptions.ApiException, operation: str) -> RegistrationError:
    """Map a Kubernetes ApiException onto the registration error taxonomy."""
    reason = error.reason or "unknown"
    message = f"{operation} failed: ({error.status}) {reason}"
    if error.status == 404:
        return NotFoundError(message, operation=operation)
    if error.status == 409:
        return ConflictError(message, operation=operation)
    return TransientError(message, operation=operation)


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"bearer\s+([A-Za-z0-9\-\._~\+/]+=*)",
    r"bearerToken[\"']?[:\s]+[\"']?([^\s,;\"'\}]+)",
    r"client-key-data[:\s]+([A-Za-z0-9/+=]+)",
    r"client-certificate-data[:\s]+([A-Za-z0-9/+=]+)",
]

def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(
            pattern,
            lambda m: m.group(0).replace(m.group(1), "[REDACTED]"),
            sanitized,
            flags=re.IGNORECASE,
        )

    for field in ("password", "token"):
        sanitized = re.sub(
            rf"\b{field}=([^\s,;\)&]+)",
            rf"{field}=[REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message."""
    return sanitize_error_message(str(error))

