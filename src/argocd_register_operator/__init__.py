"""Operator registering Cluster API workload clusters with ArgoCD."""

__version__ = "0.1.0"
