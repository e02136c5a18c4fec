"""Runtime configuration for the ArgoCD registration target."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from .constants import (
    DEFAULT_ARGOAPI_ENDPOINT,
    DEFAULT_ARGOAPI_TIMEOUT,
    DEFAULT_ARGOCD_NAMESPACE,
    DEFAULT_ARGOCD_SECRET_NAME,
    DEFAULT_ARGOCD_TOKEN_KEY,
    DEFAULT_KUBECONFIG_SECRET_KEY,
    DEFAULT_RETRY_DELAY,
    ENV_ARGOAPI_ENDPOINT,
    ENV_ARGOAPI_INSECURE,
    ENV_ARGOAPI_TIMEOUT,
    ENV_ARGOCD_NAMESPACE,
    ENV_ARGOCD_SECRET_NAME,
    ENV_ARGOCD_TOKEN_KEY,
    ENV_KUBECONFIG_SECRET_KEY,
    ENV_KUBECONFIG_SECRET_SUFFIX,
    ENV_RETRY_DELAY,
)
from .utils.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrationConfig:
    """Coordinates of the ArgoCD instance clusters are registered with.

    Attributes:
        argocd_namespace: Namespace holding the ArgoCD credential secret
        argocd_secret_name: Name of the ArgoCD credential secret
        token_key: Secret field holding the base64 encoded bearer token
        api_endpoint: Base URL of the ArgoCD API
        timeout: Timeout in seconds for every ArgoCD API request
        verify_tls: Verify the ArgoCD API certificate
        kubeconfig_secret_key: Field of the workload cluster secret holding the kubeconfig
        kubeconfig_secret_suffix: Suffix appended to the cluster name to locate its secret
        retry_delay: Seconds the operator waits before retrying a failed reconciliation
    """

    argocd_namespace: str = DEFAULT_ARGOCD_NAMESPACE
    argocd_secret_name: str = DEFAULT_ARGOCD_SECRET_NAME
    token_key: str = DEFAULT_ARGOCD_TOKEN_KEY
    api_endpoint: str = DEFAULT_ARGOAPI_ENDPOINT
    timeout: float = DEFAULT_ARGOAPI_TIMEOUT
    verify_tls: bool = True
    kubeconfig_secret_key: str = DEFAULT_KUBECONFIG_SECRET_KEY
    kubeconfig_secret_suffix: str = ""
    retry_delay: int = DEFAULT_RETRY_DELAY

    def kubeconfig_secret_name(self, cluster_name: str) -> str:
        """Name of the secret holding the kubeconfig of a workload cluster."""
        return f"{cluster_name}{self.kubeconfig_secret_suffix}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RegistrationConfig:
        """Build the configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Configuration with defaults applied for every unset variable

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        env = os.environ if environ is None else environ

        def lookup(name: str, default: str) -> str:
            value = env.get(name)
            if value is None:
                logger.info(f"{name} is not provided via environment, using default value ({default})")
                return default
            return value

        try:
            timeout = float(env.get(ENV_ARGOAPI_TIMEOUT, DEFAULT_ARGOAPI_TIMEOUT))
            retry_delay = int(env.get(ENV_RETRY_DELAY, DEFAULT_RETRY_DELAY))
        except ValueError as e:
            raise ConfigurationError(f"invalid numeric configuration: {e}", operation="load_config") from e

        if timeout <= 0:
            raise ConfigurationError(
                f"{ENV_ARGOAPI_TIMEOUT} must be positive, got {timeout}", operation="load_config"
            )

        return cls(
            argocd_namespace=lookup(ENV_ARGOCD_NAMESPACE, DEFAULT_ARGOCD_NAMESPACE),
            argocd_secret_name=lookup(ENV_ARGOCD_SECRET_NAME, DEFAULT_ARGOCD_SECRET_NAME),
            token_key=env.get(ENV_ARGOCD_TOKEN_KEY, DEFAULT_ARGOCD_TOKEN_KEY),
            api_endpoint=lookup(ENV_ARGOAPI_ENDPOINT, DEFAULT_ARGOAPI_ENDPOINT).rstrip("/"),
            timeout=timeout,
            verify_tls=env.get(ENV_ARGOAPI_INSECURE, "false").lower() != "true",
            kubeconfig_secret_key=env.get(ENV_KUBECONFIG_SECRET_KEY, DEFAULT_KUBECONFIG_SECRET_KEY),
            kubeconfig_secret_suffix=env.get(ENV_KUBECONFIG_SECRET_SUFFIX, ""),
            retry_delay=retry_delay,
        )
