"""Access to the Kubernetes objects the reconciler reads and writes."""

from __future__ import annotations

import time
from typing import Any, Callable, Protocol

from kubernetes import client, config

from . import metrics
from .constants import (
    API_GROUP,
    API_VERSION,
    CLUSTER_API_GROUP,
    CLUSTER_API_VERSION,
    FIELD_MANAGER,
    PLURAL_CLUSTER,
    PLURAL_REGISTER,
)
from .utils.errors import translate_api_exception
from .utils.secrets import read_secret_data


class ClusterStore(Protocol):
    """Read access to Cluster API Clusters."""

    def get(self, namespace: str, name: str) -> dict[str, Any]:
        ...


class RecordStore(Protocol):
    """Read/write access to Register objects."""

    def get(self, namespace: str, name: str) -> dict[str, Any]:
        ...

    def create(self, body: dict[str, Any]) -> dict[str, Any]:
        ...

    def update(self, body: dict[str, Any]) -> dict[str, Any]:
        ...

    def update_status(self, body: dict[str, Any]) -> dict[str, Any]:
        ...

    def delete(self, namespace: str, name: str) -> None:
        ...


class SecretStore(Protocol):
    """Read access to secrets."""

    def get_secret_data(self, namespace: str, name: str) -> dict[str, bytes]:
        ...


def load_kube_credentials() -> None:
    """Load in-cluster credentials, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


def _call_k8s(operation: str, fn: Callable[..., Any], **kwargs: Any) -> Any:
    start_time = time.time()
    try:
        result = fn(**kwargs)
    except client.exceptions.ApiException as e:
        metrics.api_call_total.labels(api_type="k8s", operation=operation, result="error").inc()
        raise translate_api_exception(e, operation) from e
    finally:
        duration = time.time() - start_time
        metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)
    metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
    return result


class KubernetesClusterStore:
    """Reads Cluster API Clusters through the CustomObjectsApi."""

    def __init__(self, api: client.CustomObjectsApi | None = None) -> None:
        self.api = api or client.CustomObjectsApi()

    def get(self, namespace: str, name: str) -> dict[str, Any]:
        return _call_k8s(
            "get_cluster",
            self.api.get_namespaced_custom_object,
            group=CLUSTER_API_GROUP,
            version=CLUSTER_API_VERSION,
            namespace=namespace,
            plural=PLURAL_CLUSTER,
            name=name,
        )


class KubernetesRecordStore:
    """Reads and writes Register objects through the CustomObjectsApi.

    Updates replace the whole object, including its resourceVersion, so a
    write based on a stale read is rejected with a conflict.
    """

    def __init__(self, api: client.CustomObjectsApi | None = None) -> None:
        self.api = api or client.CustomObjectsApi()

    def _coordinates(self, namespace: str) -> dict[str, str]:
        return {
            "group": API_GROUP,
            "version": API_VERSION,
            "namespace": namespace,
            "plural": PLURAL_REGISTER,
        }

    def get(self, namespace: str, name: str) -> dict[str, Any]:
        return _call_k8s(
            "get_register", self.api.get_namespaced_custom_object, name=name, **self._coordinates(namespace)
        )

    def create(self, body: dict[str, Any]) -> dict[str, Any]:
        return _call_k8s(
            "create_register",
            self.api.create_namespaced_custom_object,
            body=body,
            field_manager=FIELD_MANAGER,
            **self._coordinates(body["metadata"]["namespace"]),
        )

    def update(self, body: dict[str, Any]) -> dict[str, Any]:
        meta = body["metadata"]
        return _call_k8s(
            "update_register",
            self.api.replace_namespaced_custom_object,
            name=meta["name"],
            body=body,
            field_manager=FIELD_MANAGER,
            **self._coordinates(meta["namespace"]),
        )

    def update_status(self, body: dict[str, Any]) -> dict[str, Any]:
        meta = body["metadata"]
        return _call_k8s(
            "update_register_status",
            self.api.replace_namespaced_custom_object_status,
            name=meta["name"],
            body=body,
            field_manager=FIELD_MANAGER,
            **self._coordinates(meta["namespace"]),
        )

    def delete(self, namespace: str, name: str) -> None:
        _call_k8s(
            "delete_register",
            self.api.delete_namespaced_custom_object,
            name=name,
            propagation_policy="Background",
            **self._coordinates(namespace),
        )


class KubernetesSecretStore:
    """Reads secrets through the CoreV1Api."""

    def __init__(self, api: client.CoreV1Api | None = None) -> None:
        self.api = api or client.CoreV1Api()

    def get_secret_data(self, namespace: str, name: str) -> dict[str, bytes]:
        start_time = time.time()
        try:
            data = read_secret_data(self.api, namespace, name)
        except Exception:
            metrics.api_call_total.labels(api_type="k8s", operation="read_secret", result="error").inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation="read_secret").observe(duration)
        metrics.api_call_total.labels(api_type="k8s", operation="read_secret", result="success").inc()
        return data
