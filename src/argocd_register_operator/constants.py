"""Constants for the ArgoCD Register Operator."""

# API Group
API_GROUP = "argocd.workload.com"
API_VERSION = "v1beta1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_REGISTER = "Register"
PLURAL_REGISTER = "registers"

# Workload clusters are owned by Cluster API
CLUSTER_API_GROUP = "cluster.x-k8s.io"
CLUSTER_API_VERSION = "v1beta1"
CLUSTER_API_GROUP_VERSION = f"{CLUSTER_API_GROUP}/{CLUSTER_API_VERSION}"
KIND_CLUSTER = "Cluster"
PLURAL_CLUSTER = "clusters"

# Labels
LABEL_MANAGED_BY = f"{API_GROUP}/managed-by"

# Finalizers
FINALIZER = "argocd.register.workload.com/finalizer"

# Field Manager
FIELD_MANAGER = "argocd-register-operator"

# Condition Types
COND_AVAILABLE = "Available"
COND_PROGRESSING = "Progressing"
COND_DEGRADED = "Degraded"

# Condition Reasons
REASON_CREATING = "Creating Register"
REASON_RECONCILING = "Reconciling"
REASON_REGISTERED = "Registered"
REASON_ERROR = "Error"
REASON_FINALIZING = "Finalizing"

# Event Reasons
EVENT_REASON_REGISTERED = "Registered"
EVENT_REASON_REGISTER_FAILED = "RegisterFailed"
EVENT_REASON_UNREGISTERED = "Unregistered"
EVENT_REASON_DELETING = "Deleting"

# Environment variables
ENV_ARGOCD_NAMESPACE = "ARGOCD_NAMESPACE"
ENV_ARGOCD_SECRET_NAME = "ARGOCD_SECRET_NAME"
ENV_ARGOCD_TOKEN_KEY = "ARGOCD_TOKEN_KEY"
ENV_ARGOAPI_ENDPOINT = "ARGOAPI_ENDPOINT"
ENV_ARGOAPI_TIMEOUT = "ARGOAPI_TIMEOUT_SECONDS"
ENV_ARGOAPI_INSECURE = "ARGOAPI_INSECURE_SKIP_VERIFY"
ENV_KUBECONFIG_SECRET_KEY = "KUBECONFIG_SECRET_KEY"
ENV_KUBECONFIG_SECRET_SUFFIX = "KUBECONFIG_SECRET_SUFFIX"
ENV_RETRY_DELAY = "RECONCILE_RETRY_DELAY_SECONDS"

# Defaults
DEFAULT_ARGOCD_NAMESPACE = "argocd"
DEFAULT_ARGOCD_SECRET_NAME = "argocd-secret"
DEFAULT_ARGOCD_TOKEN_KEY = "admin.password"
DEFAULT_ARGOAPI_ENDPOINT = "https://argocd-api.example.com"
DEFAULT_ARGOAPI_TIMEOUT = 30.0
DEFAULT_KUBECONFIG_SECRET_KEY = "kubeconfig"
DEFAULT_RETRY_DELAY = 30

# ArgoCD REST API
ARGOCD_CLUSTERS_PATH = "/api/v1/clusters"
