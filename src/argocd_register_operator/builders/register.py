"""Builder for Register manifests."""

from __future__ import annotations

from typing import Any

from ..config import RegistrationConfig
from ..constants import (
    API_GROUP_VERSION,
    FIELD_MANAGER,
    FINALIZER,
    KIND_REGISTER,
    LABEL_MANAGED_BY,
)
from ..services.argocd.models import ClusterDescriptor
from ..utils.errors import ConfigurationError


def cluster_descriptor(cluster: dict[str, Any]) -> ClusterDescriptor:
    """Extract name and control plane endpoint from a Cluster API Cluster.

    Raises:
        ConfigurationError: If the control plane endpoint is not set
    """
    meta = cluster.get("metadata", {})
    endpoint = cluster.get("spec", {}).get("controlPlaneEndpoint") or {}
    host = endpoint.get("host")
    if not host:
        raise ConfigurationError(
            f"Cluster {meta.get('name')} has no controlPlaneEndpoint host",
            operation="cluster_descriptor",
        )
    return ClusterDescriptor(name=meta["name"], host=host, port=int(endpoint.get("port", 0)))


def build_register_body(cluster: dict[str, Any], config: RegistrationConfig) -> dict[str, Any]:
    """Create the Register representing the ArgoCD registration of a cluster.

    The Register shares the cluster's name and namespace and is owned by it,
    so it is garbage collected with the cluster once its finalizer is gone.

    Args:
        cluster: Cluster API Cluster object
        config: ArgoCD coordinates

    Returns:
        Register manifest
    """
    meta = cluster["metadata"]
    return {
        "apiVersion": API_GROUP_VERSION,
        "kind": KIND_REGISTER,
        "metadata": {
            "name": meta["name"],
            "namespace": meta["namespace"],
            "labels": {LABEL_MANAGED_BY: FIELD_MANAGER},
            "finalizers": [FINALIZER],
            "ownerReferences": [
                {
                    "apiVersion": cluster.get("apiVersion"),
                    "kind": cluster.get("kind"),
                    "name": meta["name"],
                    "uid": meta["uid"],
                    "controller": True,
                    "blockOwnerDeletion": True,
                }
            ],
        },
        "spec": {
            "argoCDEndpoint": config.api_endpoint,
        },
    }
