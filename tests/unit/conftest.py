"""Shared fixtures: in-memory Kubernetes stores and a fake ArgoCD API."""

from __future__ import annotations

import base64
import copy
import json
from typing import Any

import httpx
import pytest

from argocd_register_operator.config import RegistrationConfig
from argocd_register_operator.utils.errors import ConflictError, NotFoundError

MOCK_KUBECONFIG = b"""
apiVersion: v1
clusters:
- cluster:
    certificate-authority-data: mocks
    server: https://your-cluster-server-here
  name: Test
contexts:
- context:
    cluster: Test
    user: mocks
  name: your-context
current-context: your-context
kind: Config
preferences: {}
users:
- name: mocks
  user:
    client-certificate-data: mocks
    client-key-data: mocks
"""

ARGOCD_TOKEN = "token-test"


def make_cluster(name: str = "test", namespace: str = "test", host: str = "Host", port: int = 80) -> dict[str, Any]:
    return {
        "apiVersion": "cluster.x-k8s.io/v1beta1",
        "kind": "Cluster",
        "metadata": {"name": name, "namespace": namespace, "uid": f"uid-{name}"},
        "spec": {"controlPlaneEndpoint": {"host": host, "port": port}},
    }


class FakeClusterStore:
    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], dict[str, Any]] = {}

    def add(self, cluster: dict[str, Any]) -> None:
        meta = cluster["metadata"]
        self.objects[(meta["namespace"], meta["name"])] = cluster

    def remove(self, namespace: str, name: str) -> None:
        del self.objects[(namespace, name)]

    def get(self, namespace: str, name: str) -> dict[str, Any]:
        try:
            return copy.deepcopy(self.objects[(namespace, name)])
        except KeyError:
            raise NotFoundError(f"cluster {namespace}/{name} not found") from None


class FakeRecordStore:
    """Mimics the API server: status subresource, resourceVersion checks and finalizer-gated deletion."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], dict[str, Any]] = {}
        self._version = 0
        self.status_writes = 0

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def _key(self, body: dict[str, Any]) -> tuple[str, str]:
        return body["metadata"]["namespace"], body["metadata"]["name"]

    def _stored(self, body: dict[str, Any]) -> dict[str, Any]:
        key = self._key(body)
        if key not in self.objects:
            raise NotFoundError(f"register {key} not found")
        stored = self.objects[key]
        if body["metadata"].get("resourceVersion") != stored["metadata"]["resourceVersion"]:
            raise ConflictError("the object has been modified")
        return stored

    def get(self, namespace: str, name: str) -> dict[str, Any]:
        try:
            return copy.deepcopy(self.objects[(namespace, name)])
        except KeyError:
            raise NotFoundError(f"register {namespace}/{name} not found") from None

    def create(self, body: dict[str, Any]) -> dict[str, Any]:
        key = self._key(body)
        if key in self.objects:
            raise ConflictError("already exists")
        obj = copy.deepcopy(body)
        obj.pop("status", None)
        obj["metadata"]["resourceVersion"] = self._next_version()
        obj["metadata"]["generation"] = 1
        obj["metadata"]["uid"] = f"register-uid-{key[1]}"
        self.objects[key] = obj
        return copy.deepcopy(obj)

    def update(self, body: dict[str, Any]) -> dict[str, Any]:
        stored = self._stored(body)
        obj = copy.deepcopy(body)
        if "status" in stored:
            obj["status"] = stored["status"]
        else:
            obj.pop("status", None)
        obj["metadata"]["resourceVersion"] = self._next_version()
        if obj["metadata"].get("deletionTimestamp") and not obj["metadata"].get("finalizers"):
            del self.objects[self._key(obj)]
        else:
            self.objects[self._key(obj)] = obj
        return copy.deepcopy(obj)

    def update_status(self, body: dict[str, Any]) -> dict[str, Any]:
        stored = self._stored(body)
        stored["status"] = copy.deepcopy(body.get("status", {}))
        stored["metadata"]["resourceVersion"] = self._next_version()
        self.status_writes += 1
        return copy.deepcopy(stored)

    def delete(self, namespace: str, name: str) -> None:
        key = (namespace, name)
        if key not in self.objects:
            raise NotFoundError(f"register {key} not found")
        obj = self.objects[key]
        if obj["metadata"].get("finalizers"):
            obj["metadata"].setdefault("deletionTimestamp", "2024-01-01T00:00:00Z")
            obj["metadata"]["resourceVersion"] = self._next_version()
        else:
            del self.objects[key]


class FakeSecretStore:
    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], dict[str, bytes]] = {}

    def add(self, namespace: str, name: str, data: dict[str, bytes]) -> None:
        self.objects[(namespace, name)] = data

    def get_secret_data(self, namespace: str, name: str) -> dict[str, bytes]:
        try:
            return dict(self.objects[(namespace, name)])
        except KeyError:
            raise NotFoundError(f"Secret '{name}' not found in namespace '{namespace}'") from None


class FakeArgoCD:
    """In-memory ArgoCD cluster API served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.clusters: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []
        self.register_status = 200
        self.list_status = 200
        self.delete_status: int | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "GET" and path == "/api/v1/clusters":
            if self.list_status != 200:
                return httpx.Response(self.list_status)
            return httpx.Response(200, json={"items": self.clusters})

        if request.method == "POST" and path == "/api/v1/clusters":
            if self.register_status != 200:
                return httpx.Response(self.register_status)
            payload = json.loads(request.content)
            self.clusters.append({"server": payload["server"], "name": payload["name"]})
            return httpx.Response(200, json=payload)

        if request.method == "DELETE" and path.startswith("/api/v1/clusters/"):
            if self.delete_status is not None:
                return httpx.Response(self.delete_status)
            server = path[len("/api/v1/clusters/"):]
            remaining = [c for c in self.clusters if c["server"] != server]
            if len(remaining) == len(self.clusters):
                return httpx.Response(404)
            self.clusters = remaining
            return httpx.Response(200, json={})

        return httpx.Response(404)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def requests_for(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]


@pytest.fixture
def config() -> RegistrationConfig:
    return RegistrationConfig(api_endpoint="https://argocd.test")


@pytest.fixture
def argocd() -> FakeArgoCD:
    return FakeArgoCD()


@pytest.fixture
def clusters() -> FakeClusterStore:
    return FakeClusterStore()


@pytest.fixture
def records() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def secrets(config: RegistrationConfig) -> FakeSecretStore:
    store = FakeSecretStore()
    store.add(
        config.argocd_namespace,
        config.argocd_secret_name,
        {config.token_key: base64.b64encode(ARGOCD_TOKEN.encode())},
    )
    return store


