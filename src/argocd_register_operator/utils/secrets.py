"""Utilities for reading Kubernetes secrets."""

from __future__ import annotations

import base64
import binascii

from kubernetes import client

from .errors import ConfigurationError, NotFoundError, translate_api_exception


def read_secret_data(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
) -> dict[str, bytes]:
    """Read all data from a Kubernetes secret.

    The API transports secret values base64 encoded; the returned values are
    the stored bytes.

    Args:
        api: Kubernetes API client
        namespace: Namespace of the secret
        secret_name: Name of the secret

    Returns:
        Dictionary of secret data

    Raises:
        NotFoundError: If the secret does not exist
        TransientError: On any other API failure
    """
    try:
        secret = api.read_namespaced_secret(name=secret_name, namespace=namespace)
    except client.exceptions.ApiException as e:
        if e.status == 404:
            raise NotFoundError(
                f"Secret '{secret_name}' not found in namespace '{namespace}'",
                operation="read_secret",
            ) from e
        raise translate_api_exception(e, "read_secret") from e

    result = {}
    for key, value in (secret.data or {}).items():
        if isinstance(value, bytes):
            result[key] = value
        else:
            result[key] = base64.b64decode(value)
    return result


def decode_token(data: dict[str, bytes], key: str, secret_name: str = "") -> str:
    """Decode the bearer token stored base64 encoded under ``key``.

    Raises:
        ConfigurationError: If the field is missing or is not valid base64
    """
    if key not in data:
        location = f" in secret '{secret_name}'" if secret_name else " in secret"
        raise ConfigurationError(f"{key} not found{location}", operation="decode_token")

    try:
        return base64.b64decode(data[key], validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ConfigurationError(f"{key} is not valid base64: {e}", operation="decode_token") from e
