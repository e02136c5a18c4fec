"""ArgoCD API integration."""

from .client import ArgoCDAPIManager, new_api_manager
from .models import ClusterDescriptor

__all__ = ["ArgoCDAPIManager", "ClusterDescriptor", "new_api_manager"]
