"""Main entry point for the ArgoCD Register Operator.

Run with ``kopf run -m argocd_register_operator.main``.
"""

from __future__ import annotations

import os
from typing import Any

import kopf

from . import handlers  # noqa: F401
from . import health
from . import logging as structured_logging
from .handlers.register import get_reconciler
from .tracing import initialize_tracing


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging()
    initialize_tracing()

    # Use annotations to avoid conflicts with the status written by the reconciler
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = 0
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = int(os.getenv("MAX_WORKERS", "4"))

    # Fail fast on invalid configuration
    get_reconciler()

    health.start_metrics_server(int(os.getenv("METRICS_PORT", "8080")))
