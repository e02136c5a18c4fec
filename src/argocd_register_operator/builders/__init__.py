"""Builders for Kubernetes manifests and API clients."""

from .register import build_register_body, cluster_descriptor

__all__ = ["build_register_body", "cluster_descriptor"]
