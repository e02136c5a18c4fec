"""Models for ArgoCD registration operations."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ClusterDescriptor:
    """Identity and control plane endpoint of a workload cluster."""

    name: str
    host: str
    port: int

    @property
    def server(self) -> str:
        """Server address as registered with ArgoCD ("host:port")."""
        return f"{self.host}:{self.port}"
