"""Reconciliation of Cluster API Clusters into ArgoCD Register objects."""

from __future__ import annotations

import os
from typing import Any, Callable, Protocol

import httpx
import kopf

from ..builders.register import build_register_body, cluster_descriptor
from ..config import RegistrationConfig
from ..constants import (
    API_GROUP_VERSION,
    CLUSTER_API_GROUP_VERSION,
    COND_AVAILABLE,
    COND_DEGRADED,
    KIND_CLUSTER,
    KIND_REGISTER,
    REASON_CREATING,
    REASON_ERROR,
    REASON_FINALIZING,
    REASON_RECONCILING,
    REASON_REGISTERED,
)
from ..services.argocd.client import new_api_manager
from ..services.argocd.models import ClusterDescriptor
from ..stores import (
    ClusterStore,
    KubernetesClusterStore,
    KubernetesRecordStore,
    KubernetesSecretStore,
    RecordStore,
    SecretStore,
    load_kube_credentials,
)
from ..tracing import trace_span
from ..utils.conditions import (
    find_condition,
    set_available_condition,
    set_degraded_condition,
    set_progressing_condition,
)
from ..utils.errors import (
    ConfigurationError,
    NotFoundError,
    RegistrationError,
    sanitize_exception,
)
from ..utils.events import KopfEventRecorder
from .base import BaseHandler

# Condition setter, status, reason and message applied to a Register
ConditionUpdate = tuple[Callable[..., list[dict[str, Any]]], str, str, str]


class EventRecorder(Protocol):
    """Sink for the Kubernetes events raised while reconciling."""

    def registered(self, body: dict[str, Any], server: str) -> None:
        ...

    def register_failed(self, body: dict[str, Any], message: str) -> None:
        ...

    def unregistered(self, body: dict[str, Any], server: str) -> None:
        ...

    def deleting(self, body: dict[str, Any]) -> None:
        ...


def is_marked_for_deletion(body: dict[str, Any]) -> bool:
    """Check whether the object carries a deletion timestamp."""
    return bool(body.get("metadata", {}).get("deletionTimestamp"))


class RegisterReconciler(BaseHandler):
    """Keeps one Register per Cluster and the Cluster registered with ArgoCD.

    The state of a key is derived from what exists:

    * Cluster without Register: the Register is created.
    * Register without Cluster: the Register is deleted.
    * Both, Register not being deleted: the Cluster is registered with ArgoCD.
    * Register being deleted with the finalizer: the Cluster is unregistered
      and the finalizer removed.
    * Register being deleted without the finalizer: nothing to do.

    Every error is raised so the caller retries the whole reconciliation.
    """

    def __init__(
        self,
        clusters: ClusterStore,
        records: RecordStore,
        secrets: SecretStore,
        config: RegistrationConfig,
        events: EventRecorder | None = None,
        http_client: httpx.Client | None = None,
    ):
        """Initialize the reconciler.

        Args:
            clusters: Cluster lookup
            records: Register lookup and writes
            secrets: Secret lookup
            config: ArgoCD coordinates
            events: Event sink (defaults to kopf events)
            http_client: Optional client used for ArgoCD API requests
        """
        super().__init__(KIND_REGISTER)
        self.clusters = clusters
        self.records = records
        self.secrets = secrets
        self.config = config
        self.events = events or KopfEventRecorder()
        self.http_client = http_client

    def reconcile(self, namespace: str, name: str) -> None:
        """Advance the registration of the Cluster ``namespace/name``.

        Raises:
            RegistrationError: On any failure; the caller is expected to retry
        """
        meta = {"name": name, "namespace": namespace}
        with trace_span("reconcile_register", kind=KIND_REGISTER, attributes={"register.name": name}):
            self.reconcile_with_metrics(meta, lambda: self._reconcile(namespace, name))

    def _reconcile(self, namespace: str, name: str) -> None:
        cluster = self._fetch_cluster(namespace, name)

        if cluster is None:
            record = self._fetch_record(namespace, name)
            if record is None:
                self.log_info(
                    {"name": name, "namespace": namespace},
                    "Register resource not found. Ignoring since object must be deleted",
                )
                return

            # The Cluster is gone, so its registration goes too
            if not is_marked_for_deletion(record):
                self.log_info(record["metadata"], "Cluster no longer exists, deleting Register", reason="SourceDeleted")
                try:
                    self.records.delete(namespace, name)
                except NotFoundError:
                    return

            record = self._fetch_record(namespace, name)
            if record is None:
                return
        else:
            record = self._fetch_record(namespace, name)
            if record is None:
                record = self._create_record(cluster)

        if is_marked_for_deletion(record):
            self._finalize(record, cluster)
            return

        self._register(record, cluster)

    def _fetch_cluster(self, namespace: str, name: str) -> dict[str, Any] | None:
        try:
            return self.clusters.get(namespace, name)
        except NotFoundError:
            return None

    def _fetch_record(self, namespace: str, name: str) -> dict[str, Any] | None:
        try:
            return self.records.get(namespace, name)
        except NotFoundError:
            return None

    def _create_record(self, cluster: dict[str, Any]) -> dict[str, Any]:
        meta = cluster["metadata"]
        body = build_register_body(cluster, self.config)
        self.records.create(body)
        self.log_info(meta, "Created Register for Cluster", event="creation", reason="Created")

        return self._set_conditions(
            meta["namespace"],
            meta["name"],
            [(set_progressing_condition, "True", REASON_CREATING, "Preparing to Register Cluster with ArgoCD")],
        )

    def _set_conditions(
        self,
        namespace: str,
        name: str,
        updates: list[ConditionUpdate],
        status_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Apply condition updates to a freshly read Register and write its status."""
        record = self.records.get(namespace, name)
        generation = record.get("metadata", {}).get("generation")
        status = dict(record.get("status") or {})
        conditions = [dict(c) for c in status.get("conditions") or []]

        for setter, cond_status, reason, message in updates:
            conditions = setter(conditions, cond_status, reason, message, generation)

        status["conditions"] = conditions
        if status_data:
            status.update(status_data)
        if generation is not None:
            status["observedGeneration"] = generation
        record["status"] = status
        return self.records.update_status(record)

    def _degraded(self, namespace: str, name: str, message: str) -> dict[str, Any]:
        """Report Degraded and withdraw an Available condition reported earlier."""
        record = self.records.get(namespace, name)
        conditions = (record.get("status") or {}).get("conditions") or []
        updates: list[ConditionUpdate] = [(set_degraded_condition, "True", REASON_ERROR, message)]
        if find_condition(conditions, COND_AVAILABLE) is not None:
            updates.append((set_available_condition, "False", REASON_ERROR, message))
        return self._set_conditions(namespace, name, updates)

    def _read_kubeconfig(self, cluster: dict[str, Any]) -> bytes:
        meta = cluster["metadata"]
        secret_name = self.config.kubeconfig_secret_name(meta["name"])
        key = self.config.kubeconfig_secret_key
        try:
            data = self.secrets.get_secret_data(meta["namespace"], secret_name)
        except NotFoundError as e:
            raise ConfigurationError(str(e), operation="read_kubeconfig") from e
        if key not in data:
            raise ConfigurationError(f"{key} not found in secret '{secret_name}'", operation="read_kubeconfig")
        return data[key]

    def _register(self, record: dict[str, Any], cluster: dict[str, Any]) -> None:
        namespace = record["metadata"]["namespace"]
        name = record["metadata"]["name"]

        if not self.has_finalizer(record):
            record = self.records.get(namespace, name)
            if self.ensure_finalizer(record):
                self.records.update(record)

        try:
            kubeconfig = self._read_kubeconfig(cluster)
        except RegistrationError as e:
            self.log_error(record["metadata"], "Failed to get kubeconfig from secret", error=e)
            self._degraded(namespace, name, f"Unable to gathering kubeConfig: {sanitize_exception(e)}")
            raise

        try:
            descriptor = cluster_descriptor(cluster)
            manager = new_api_manager(self.secrets, descriptor, kubeconfig, self.config, self.http_client)
        except RegistrationError as e:
            self.log_error(record["metadata"], "Failed to gathering pre-requirements to connect with ArgoCD", error=e)
            self._degraded(
                namespace,
                name,
                f"Unable to gathering pre-requirements to connect with ArgoCD: {sanitize_exception(e)}",
            )
            raise

        try:
            registered = manager.is_registered()
        except RegistrationError as e:
            self.log_error(record["metadata"], "Failed to check Cluster registration", error=e)
            self._degraded(namespace, name, f"Unable to verify Cluster Registration: {sanitize_exception(e)}")
            raise

        if not registered:
            try:
                manager.register()
            except RegistrationError as e:
                message = f"Unable to register Cluster into ArgoCD: {sanitize_exception(e)}"
                self.log_error(record["metadata"], "Failed to register Cluster into ArgoCD", error=e)
                self._degraded(namespace, name, message)
                self.events.register_failed(record, message)
                raise
            self.events.registered(record, descriptor.server)

        updates = [
            (set_available_condition, "True", REASON_RECONCILING, "Cluster is Registered"),
            (set_progressing_condition, "False", REASON_REGISTERED, "Cluster is Registered"),
        ]
        conditions = (record.get("status") or {}).get("conditions") or []
        if find_condition(conditions, COND_DEGRADED) is not None:
            updates.append((set_degraded_condition, "False", REASON_REGISTERED, "Cluster is Registered"))

        self._set_conditions(
            namespace,
            name,
            updates,
            {"server": descriptor.server, "clusterName": descriptor.name},
        )
        self.log_info(record["metadata"], "Cluster is Registered", reason="Registered", server=descriptor.server)

    def _finalize(self, record: dict[str, Any], cluster: dict[str, Any] | None) -> None:
        namespace = record["metadata"]["namespace"]
        name = record["metadata"]["name"]

        if not self.has_finalizer(record):
            return

        self.log_info(record["metadata"], "Performing Finalizer Operations for Register before delete CR")
        self._set_conditions(
            namespace,
            name,
            [(set_degraded_condition, "True", REASON_FINALIZING, "Performing finalizer operations to delete Register")],
        )

        try:
            self._unregister(record, cluster)
        except RegistrationError as e:
            self.log_error(record["metadata"], "Failed to Unregister Cluster from ArgoCD", error=e)
            self._set_conditions(
                namespace,
                name,
                [(
                    set_degraded_condition,
                    "Unknown",
                    REASON_FINALIZING,
                    f"Error to perform required operations: {sanitize_exception(e)}",
                )],
            )
            raise

        record = self._set_conditions(
            namespace,
            name,
            [(set_degraded_condition, "True", REASON_FINALIZING, "Cluster is unregister successfully accomplished")],
        )
        self.events.deleting(record)

        self.log_info(record["metadata"], "Removing Finalizer for Register after successfully perform the operations")
        record = self.records.get(namespace, name)
        if self.remove_finalizer(record):
            self.records.update(record)

    def _unregister(self, record: dict[str, Any], cluster: dict[str, Any] | None) -> None:
        name = (record.get("status") or {}).get("clusterName") or record["metadata"]["name"]
        descriptor = self._registered_descriptor(record, cluster)
        manager = new_api_manager(
            self.secrets,
            descriptor or ClusterDescriptor(name=name, host="", port=0),
            b"",
            self.config,
            self.http_client,
        )

        if descriptor is None:
            # Neither the status nor the Cluster tells the server; ask ArgoCD by name
            server = manager.find_server_by_name()
            if server is None:
                self.log_warning(
                    record["metadata"],
                    f"ArgoCD has no cluster named {name}, nothing to unregister",
                    reason="UnregisterSkipped",
                )
                return
            manager.server = server

        manager.unregister()
        self.events.unregistered(record, manager.server)

    def _registered_descriptor(
        self,
        record: dict[str, Any],
        cluster: dict[str, Any] | None,
    ) -> ClusterDescriptor | None:
        status = record.get("status") or {}
        server = status.get("server")
        if server:
            host, _, port = server.rpartition(":")
            if host and port.isdigit():
                return ClusterDescriptor(
                    name=status.get("clusterName") or record["metadata"]["name"],
                    host=host,
                    port=int(port),
                )
            self.log_warning(record["metadata"], f"Ignoring malformed status.server {server!r}", reason="MalformedServer")
        if cluster is not None:
            return cluster_descriptor(cluster)
        return None


# Global reconciler instance, created on first use once credentials are loaded
_reconciler: RegisterReconciler | None = None


def get_reconciler() -> RegisterReconciler:
    """Return the process-wide reconciler, creating it on first use."""
    global _reconciler
    if _reconciler is None:
        load_kube_credentials()
        _reconciler = RegisterReconciler(
            clusters=KubernetesClusterStore(),
            records=KubernetesRecordStore(),
            secrets=KubernetesSecretStore(),
            config=RegistrationConfig.from_env(),
        )
    return _reconciler


def run_reconcile(namespace: str, name: str) -> None:
    """Reconcile a key, turning registration errors into kopf retries."""
    reconciler = get_reconciler()
    try:
        reconciler.reconcile(namespace, name)
    except RegistrationError as e:
        raise kopf.TemporaryError(sanitize_exception(e), delay=reconciler.config.retry_delay) from e


@kopf.on.create(CLUSTER_API_GROUP_VERSION, KIND_CLUSTER)
@kopf.on.update(CLUSTER_API_GROUP_VERSION, KIND_CLUSTER)
@kopf.on.resume(CLUSTER_API_GROUP_VERSION, KIND_CLUSTER)
def handle_cluster(
    name: str,
    namespace: str,
    **kwargs: Any,
) -> None:
    """Handle Cluster changes."""
    run_reconcile(namespace, name)


@kopf.on.delete(CLUSTER_API_GROUP_VERSION, KIND_CLUSTER, optional=True)
def handle_cluster_delete(
    name: str,
    namespace: str,
    **kwargs: Any,
) -> None:
    """Handle Cluster deletion without holding the Cluster with a finalizer."""
    run_reconcile(namespace, name)


@kopf.timer(CLUSTER_API_GROUP_VERSION, KIND_CLUSTER, interval=int(os.getenv("RESYNC_INTERVAL_SECONDS", "300")))
def resync_cluster(
    name: str,
    namespace: str,
    **kwargs: Any,
) -> None:
    """Periodically re-check the registration of every Cluster."""
    run_reconcile(namespace, name)


@kopf.on.delete(API_GROUP_VERSION, KIND_REGISTER)
def handle_register_delete(
    name: str,
    namespace: str,
    **kwargs: Any,
) -> None:
    """Unregister the Cluster before the Register is removed."""
    run_reconcile(namespace, name)
