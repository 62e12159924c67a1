"""Shared fixtures and factories for k8sintellect tests.

Provides serialized Kubernetes objects, an in-memory ClusterReader, a fake
connection, a K8sGPTAdapter whose subprocess layer replays canned output,
and a fake child process for exercising the real subprocess path. No test
touches a real cluster or the real k8sgpt binary.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from k8sintellect.k8sgpt.adapter import K8sGPTAdapter
from k8sintellect.models.cluster import ClusterInfo
from k8sintellect.models.config import AnalyzerConfig

# ---------------------------------------------------------------------------
# Timestamp helpers
# ---------------------------------------------------------------------------

NOW = datetime(2026, 2, 18, 12, 0, 0, tzinfo=UTC)


def ts(delta: timedelta) -> str:
    """RFC 3339 timestamp *delta* before NOW."""
    return (NOW - delta).strftime("%Y-%m-%dT%H:%M:%SZ")


# ---------------------------------------------------------------------------
# Kubernetes object factories (serialized, camelCase, like `kubectl -o json`)
# ---------------------------------------------------------------------------


def make_pod(
    name: str = "my-app-7b4f8c6d-x2kj",
    namespace: str | None = "default",
    phase: str = "Running",
    conditions: list[dict[str, Any]] | None = None,
    restarts: dict[str, int] | None = None,
) -> dict[str, Any]:
    metadata: dict[str, Any] = {"name": name}
    if namespace is not None:
        metadata["namespace"] = namespace
    return {
        "metadata": metadata,
        "status": {
            "phase": phase,
            "conditions": conditions or [],
            "containerStatuses": [
                {"name": container, "restartCount": count, "ready": True}
                for container, count in (restarts or {"app": 0}).items()
            ],
        },
    }


def make_deployment(
    name: str = "my-app",
    namespace: str = "default",
    desired: int | None = 3,
    available: int | None = 3,
) -> dict[str, Any]:
    spec: dict[str, Any] = {}
    status: dict[str, Any] = {}
    if desired is not None:
        spec["replicas"] = desired
    if available is not None:
        status["availableReplicas"] = available
    return {"metadata": {"name": name, "namespace": namespace}, "spec": spec, "status": status}


def make_service(
    name: str = "my-app-svc",
    namespace: str = "default",
    service_type: str = "ClusterIP",
    ingress: list[dict[str, str]] | None = None,
) -> dict[str, Any]:
    status: dict[str, Any] = {"loadBalancer": {}}
    if ingress is not None:
        status["loadBalancer"]["ingress"] = ingress
    return {
        "metadata": {"name": name, "namespace": namespace},
        "spec": {"type": service_type},
        "status": status,
    }


def make_k8s_event(
    reason: str = "BackOff",
    message: str = "Back-off restarting failed container",
    event_type: str = "Warning",
    age: timedelta = timedelta(minutes=5),
) -> dict[str, Any]:
    return {
        "type": event_type,
        "reason": reason,
        "message": message,
        "lastTimestamp": ts(age),
        "involvedObject": {"kind": "Pod"},
    }


def k8sgpt_result(kind: str, name: str, *texts: str, doc: str = "") -> dict[str, Any]:
    """One entry of k8sgpt's ``results`` list."""
    return {
        "kind": kind,
        "name": name,
        "error": [{"Text": text, "KubernetesDoc": doc, "Sensitive": []} for text in texts],
        "details": "",
        "parentObject": "",
    }


def k8sgpt_output(*results: dict[str, Any]) -> dict[str, Any]:
    return {
        "provider": "",
        "errors": None,
        "status": "ProblemDetected" if results else "OK",
        "problems": len(results),
        "results": list(results),
    }


# ---------------------------------------------------------------------------
# Cluster doubles
# ---------------------------------------------------------------------------


class FakeCluster:
    """In-memory ClusterReader.

    *fail* names list operations ("pods", "deployments", "services",
    "events", "namespaces") that raise as if the API server errored.
    """

    def __init__(
        self,
        pods: list[dict[str, Any]] | None = None,
        deployments: list[dict[str, Any]] | None = None,
        services: list[dict[str, Any]] | None = None,
        events: dict[tuple[str, str], list[dict[str, Any]]] | None = None,
        namespaces: list[str] | None = None,
        fail: set[str] | None = None,
    ) -> None:
        self.pods = pods or []
        self.deployments = deployments or []
        self.services = services or []
        self.events = events or {}
        self.namespaces = namespaces or ["default"]
        self.fail = fail or set()
        self.calls: list[tuple[str, str | None]] = []

    def _check(self, operation: str, namespace: str | None) -> None:
        self.calls.append((operation, namespace))
        if operation in self.fail:
            raise RuntimeError(f"{operation} API unavailable")

    @staticmethod
    def _in(items: list[dict[str, Any]], namespace: str | None) -> list[dict[str, Any]]:
        if namespace is None:
            return list(items)
        return [i for i in items if i.get("metadata", {}).get("namespace") == namespace]

    async def list_namespaces(self) -> list[str]:
        self._check("namespaces", None)
        return sorted(self.namespaces)

    async def list_pods(self, namespace: str | None) -> list[dict[str, Any]]:
        self._check("pods", namespace)
        return self._in(self.pods, namespace)

    async def list_deployments(self, namespace: str | None) -> list[dict[str, Any]]:
        self._check("deployments", namespace)
        return self._in(self.deployments, namespace)

    async def list_services(self, namespace: str | None) -> list[dict[str, Any]]:
        self._check("services", namespace)
        return self._in(self.services, namespace)

    async def list_pod_events(self, pod_name: str, namespace: str) -> list[dict[str, Any]]:
        self._check("events", namespace)
        return list(self.events.get((namespace, pod_name), []))


class FakeConnection:
    """Stands in for ClusterConnection: fixed ClusterInfo, FakeCluster client."""

    def __init__(self, cluster: FakeCluster | None = None, info: ClusterInfo | None = None) -> None:
        self.cluster = cluster or FakeCluster()
        self._info = info or ClusterInfo(name="test-cluster", context="test-context")
        self.clients_opened = 0

    @property
    def info(self) -> ClusterInfo:
        return self._info

    def client(self) -> Any:
        @asynccontextmanager
        async def _open() -> AsyncIterator[FakeCluster]:
            self.clients_opened += 1
            yield self.cluster

        return _open()


# ---------------------------------------------------------------------------
# k8sgpt doubles
# ---------------------------------------------------------------------------


def namespace_from_args(args: list[str]) -> str | None:
    for arg in args:
        if arg.startswith("--namespace="):
            return arg.split("=", 1)[1]
    return None


class ScriptedAdapter(K8sGPTAdapter):
    """K8sGPTAdapter whose subprocess layer replays canned results per namespace.

    ``outputs`` maps namespace (None = all namespaces) to either a JSON-able
    payload, a ``(returncode, stdout, stderr)`` tuple, or an exception to raise.
    ``delays`` maps namespace to seconds slept before answering.
    """

    def __init__(
        self,
        outputs: dict[str | None, Any] | None = None,
        delays: dict[str | None, float] | None = None,
        config: AnalyzerConfig | None = None,
    ) -> None:
        super().__init__(config)
        self.outputs = outputs or {}
        self.delays = delays or {}
        self.executed: list[list[str]] = []
        self.cancelled: list[str | None] = []

    async def _execute(
        self,
        args: list[str],
        *,
        timeout: float | None,
        max_output_bytes: int,
    ) -> tuple[int, bytes, bytes]:
        self.executed.append(list(args))
        namespace = namespace_from_args(args)
        try:
            if namespace in self.delays:
                await asyncio.sleep(self.delays[namespace])
        except asyncio.CancelledError:
            self.cancelled.append(namespace)
            raise
        output = self.outputs.get(namespace, k8sgpt_output())
        if isinstance(output, BaseException):
            raise output
        if isinstance(output, tuple):
            return output
        return 0, json.dumps(output).encode(), b""


class FakeProcess:
    """Minimal asyncio.subprocess.Process double backed by real StreamReaders.

    Use together with the ``group_kill`` fixture so the process-group kill
    never reaches a real pid.
    """

    pid = 4242

    def __init__(
        self,
        stdout: bytes = b"",
        stderr: bytes = b"",
        exit_code: int = 0,
        hang: bool = False,
    ) -> None:
        self.stdout = asyncio.StreamReader()
        self.stderr = asyncio.StreamReader()
        self.stdout.feed_data(stdout)
        self.stderr.feed_data(stderr)
        if not hang:
            self.stdout.feed_eof()
            self.stderr.feed_eof()
        self._exit_code = exit_code
        self.returncode: int | None = None
        self.killed = False

    def kill(self) -> None:
        self.killed = True
        self._exit_code = -9
        self.stdout.feed_eof()
        self.stderr.feed_eof()

    async def wait(self) -> int:
        self.returncode = self._exit_code
        return self._exit_code


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture()
def fake_connection(fake_cluster: FakeCluster) -> FakeConnection:
    return FakeConnection(fake_cluster)


@pytest.fixture()
def group_kill() -> Iterator[MagicMock]:
    """Intercept ``os.killpg`` for tests driving a FakeProcess."""
    with patch("os.killpg") as killpg:
        yield killpg
