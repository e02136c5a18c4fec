"""Prometheus metrics for the ArgoCD Register Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "argocd_register_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "argocd_register_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

error_total = Counter(
    "argocd_register_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

# ArgoCD registration metrics
registration_operations_total = Counter(
    "argocd_register_operator_registration_operations_total",
    "Total number of ArgoCD cluster registration operations",
    ["operation", "result"],
)

# API call metrics
api_call_total = Counter(
    "argocd_register_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "argocd_register_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 30.0],
)
