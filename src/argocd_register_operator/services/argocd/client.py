"""ArgoCD API client implementation.

More info on the API: https://cd.apps.argoproj.io/swagger-ui
"""

from __future__ import annotations

import base64
import logging
import time
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from ... import metrics
from ...config import RegistrationConfig
from ...constants import ARGOCD_CLUSTERS_PATH
from ...tracing import trace_span
from ...utils.errors import ConfigurationError, NotFoundError, TransientError
from ...utils.kubeconfig import parse_kubeconfig
from ...utils.secrets import decode_token
from .models import ClusterDescriptor

logger = logging.getLogger(__name__)


class SecretReader(Protocol):
    """Anything able to return the data of a secret."""

    def get_secret_data(self, namespace: str, name: str) -> dict[str, bytes]:
        ...


class ArgoCDAPIManager:
    """Performs cluster registration operations against the ArgoCD API.

    A manager lives for a single reconciliation.
    """

    def __init__(
        self,
        server: str,
        name: str,
        kubeconfig: bytes,
        token: str,
        endpoint: str,
        timeout: float = 30.0,
        verify_tls: bool = True,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the API manager.

        Args:
            server: Cluster control plane address ("host:port")
            name: Cluster name
            kubeconfig: Kubeconfig content of the cluster
            token: ArgoCD API bearer token
            endpoint: ArgoCD API endpoint
            timeout: Request timeout in seconds
            verify_tls: Verify the ArgoCD API certificate
            http_client: Client to send requests with; a short-lived one is created per request otherwise
        """
        self.server = server
        self.name = name
        self.kubeconfig = kubeconfig
        self.token = token
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.verify_tls = verify_tls
        self.http_client = http_client

    def __repr__(self) -> str:
        return f"ArgoCDAPIManager(server={self.server!r}, name={self.name!r}, endpoint={self.endpoint!r})"

    def validate_credentials(self) -> None:
        """Check that the kubeconfig is structurally valid.

        Raises:
            ConfigurationError: If the kubeconfig is malformed
        """
        parse_kubeconfig(self.kubeconfig)

    def build_register_payload(self) -> dict[str, Any]:
        """Build the body of the cluster registration request."""
        return {
            "server": self.server,
            "name": self.name,
            # Raw bytes travel base64 encoded in JSON
            "kubeconfig": base64.b64encode(self.kubeconfig).decode("ascii"),
            "config": {
                "bearerToken": self.token,
            },
        }

    def list_clusters(self) -> list[dict[str, Any]]:
        """Return the clusters ArgoCD knows about.

        Raises:
            TransientError: If the cluster list cannot be retrieved
        """
        response = self._send("GET", ARGOCD_CLUSTERS_PATH, "list_clusters")
        if response.status_code != 200:
            raise TransientError(
                f"error listing clusters, status: {_status_text(response)}", operation="list_clusters"
            )

        try:
            return response.json().get("items") or []
        except ValueError as e:
            raise TransientError(f"error decoding cluster list: {e}", operation="list_clusters") from e

    def is_registered(self) -> bool:
        """Check whether ArgoCD already knows a cluster with this server and name.

        Raises:
            TransientError: If the cluster list cannot be retrieved
        """
        return any(
            item.get("server") == self.server and item.get("name") == self.name for item in self.list_clusters()
        )

    def find_server_by_name(self) -> str | None:
        """Return the server ArgoCD has registered under this cluster name, if any.

        Raises:
            TransientError: If the cluster list cannot be retrieved
        """
        for item in self.list_clusters():
            if item.get("name") == self.name and item.get("server"):
                return item["server"]
        return None

    def register(self) -> None:
        """Register the cluster with ArgoCD.

        Raises:
            ConfigurationError: If the kubeconfig is malformed
            TransientError: If the request fails or ArgoCD does not answer 200
        """
        self.validate_credentials()

        with trace_span("argocd_register", attributes={"cluster.name": self.name, "cluster.server": self.server}):
            response = self._send("POST", ARGOCD_CLUSTERS_PATH, "register_cluster", json=self.build_register_payload())

        if response.status_code != 200:
            metrics.registration_operations_total.labels(operation="register", result="failed").inc()
            raise TransientError(
                f"error registering cluster, status: {_status_text(response)}", operation="register_cluster"
            )

        metrics.registration_operations_total.labels(operation="register", result="success").inc()
        logger.info(f"Registered cluster {self.name} ({self.server}) with {self.endpoint}")

    def unregister(self) -> None:
        """Remove the cluster from ArgoCD. A cluster ArgoCD does not know counts as removed.

        Raises:
            TransientError: If the request fails or ArgoCD answers anything but 200 or 404
        """
        path = f"{ARGOCD_CLUSTERS_PATH}/{quote(self.server, safe='')}"
        with trace_span("argocd_unregister", attributes={"cluster.name": self.name, "cluster.server": self.server}):
            response = self._send("DELETE", path, "unregister_cluster", params={"id.type": "url"})

        if response.status_code == 404:
            logger.info(f"Cluster {self.name} ({self.server}) is not registered, nothing to remove")
            metrics.registration_operations_total.labels(operation="unregister", result="absent").inc()
            return

        if response.status_code != 200:
            metrics.registration_operations_total.labels(operation="unregister", result="failed").inc()
            raise TransientError(
                f"error unregistering cluster, status: {_status_text(response)}", operation="unregister_cluster"
            )

        metrics.registration_operations_total.labels(operation="unregister", result="success").inc()
        logger.info(f"Unregistered cluster {self.name} ({self.server}) from {self.endpoint}")

    def _send(self, method: str, path: str, operation: str, **kwargs: Any) -> httpx.Response:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
        }
        url = self.endpoint + path

        start_time = time.time()
        try:
            if self.http_client is not None:
                response = self.http_client.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
            else:
                with httpx.Client(timeout=self.timeout, verify=self.verify_tls) as http:
                    response = http.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            metrics.api_call_total.labels(api_type="argocd", operation=operation, result="error").inc()
            raise TransientError(f"error sending request: {e}", operation=operation) from e
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="argocd", operation=operation).observe(duration)

        result = "success" if response.is_success else "failed"
        metrics.api_call_total.labels(api_type="argocd", operation=operation, result=result).inc()
        return response


def _status_text(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".strip()


def new_api_manager(
    secrets: SecretReader,
    cluster: ClusterDescriptor,
    kubeconfig: bytes,
    config: RegistrationConfig,
    http_client: httpx.Client | None = None,
) -> ArgoCDAPIManager:
    """Create the API manager for a cluster, resolving the ArgoCD token.

    Args:
        secrets: Secret lookup capability
        cluster: Workload cluster identity and endpoint
        kubeconfig: Kubeconfig content of the workload cluster
        config: ArgoCD coordinates
        http_client: Optional client to send requests with

    Returns:
        Configured API manager

    Raises:
        ConfigurationError: If the credential secret or its token field is missing or malformed
    """
    try:
        data = secrets.get_secret_data(config.argocd_namespace, config.argocd_secret_name)
    except NotFoundError as e:
        raise ConfigurationError(f"error fetching secret: {e}", operation="new_api_manager") from e

    token = decode_token(data, config.token_key, config.argocd_secret_name)

    return ArgoCDAPIManager(
        server=cluster.server,
        name=cluster.name,
        kubeconfig=kubeconfig,
        token=token,
        endpoint=config.api_endpoint,
        timeout=config.timeout,
        verify_tls=config.verify_tls,
        http_client=http_client,
    )
