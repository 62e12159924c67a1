"""Pod lifecycle and pod event collectors."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog

from k8sintellect.analysis.events import DEFAULT_WINDOW, deduplicate_events
from k8sintellect.analysis.normalizer import observation_issue
from k8sintellect.cluster.client import ClusterReader
from k8sintellect.collector.base import Collector
from k8sintellect.models.issues import Issue, Severity

_log = structlog.get_logger(component="collector.pods")

DEFAULT_RESTART_THRESHOLD = 5

_POD_SOLUTION = "Check pod logs and events for more details"


def inspect_pod(pod: dict[str, Any], restart_threshold: int = DEFAULT_RESTART_THRESHOLD) -> list[Issue]:
    """Phase, scheduling and restart-count issues for a single Pod."""
    metadata = pod.get("metadata")
    status = pod.get("status") or {}
    phase = status.get("phase")
    issues: list[Issue] = []

    if phase in ("Failed", "Unknown"):
        issues.append(
            observation_issue(
                "Pod",
                metadata,
                problem=f"Pod is in {phase} state",
                severity=Severity.CRITICAL,
                solution=_POD_SOLUTION,
            )
        )

    if phase == "Pending":
        unschedulable = next(
            (
                c
                for c in status.get("conditions") or []
                if isinstance(c, dict) and c.get("type") == "PodScheduled" and c.get("status") == "False"
            ),
            None,
        )
        if unschedulable is not None:
            issues.append(
                observation_issue(
                    "Pod",
                    metadata,
                    problem=f"Pod is Pending: {unschedulable.get('reason') or 'Unknown reason'}",
                    severity=Severity.WARNING,
                    solution="Check node resources and pod requirements",
                )
            )

    for container in status.get("containerStatuses") or []:
        if not isinstance(container, dict):
            continue
        restarts = int(container.get("restartCount") or 0)
        if restarts > restart_threshold:
            issues.append(
                observation_issue(
                    "Pod",
                    metadata,
                    problem=f"Container {container.get('name')} has {restarts} restarts",
                    severity=Severity.WARNING,
                    solution="Check container logs and resource limits",
                )
            )

    return issues


class PodLifecycleCollector(Collector):
    resource_kind = "Pod"

    def __init__(self, restart_threshold: int = DEFAULT_RESTART_THRESHOLD) -> None:
        self._restart_threshold = restart_threshold

    @property
    def name(self) -> str:
        return "pod_lifecycle"

    async def _collect_into(
        self,
        client: ClusterReader,
        namespace: str | None,
        issues: list[Issue],
    ) -> None:
        for pod in await client.list_pods(namespace):
            issues.extend(inspect_pod(pod, self._restart_threshold))


class PodEventCollector(Collector):
    """Recent Warning/Error events per pod, deduplicated per pod.

    A failed event fetch for one pod is logged and skipped; the other pods
    are still reported.
    """

    resource_kind = "Pod"

    def __init__(self, window: timedelta = DEFAULT_WINDOW, max_concurrency: int = 4) -> None:
        self._window = window
        self._max_concurrency = max(1, max_concurrency)

    @property
    def name(self) -> str:
        return "pod_events"

    async def _collect_into(
        self,
        client: ClusterReader,
        namespace: str | None,
        issues: list[Issue],
    ) -> None:
        pods = await client.list_pods(namespace)
        targets: list[tuple[str, str]] = []
        for pod in pods:
            metadata = pod.get("metadata") or {}
            if metadata.get("name") and metadata.get("namespace"):
                targets.append((metadata["name"], metadata["namespace"]))

        now = datetime.now(tz=UTC)
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _events_for(pod_name: str, pod_namespace: str) -> list[Issue]:
            async with semaphore:
                try:
                    events = await client.list_pod_events(pod_name, pod_namespace)
                except Exception as exc:  # noqa: BLE001
                    _log.debug(
                        "pod_events_fetch_failed",
                        pod=pod_name,
                        namespace=pod_namespace,
                        error=str(exc),
                    )
                    return []
            return deduplicate_events(
                events,
                kind="Pod",
                name=pod_name,
                namespace=pod_namespace,
                now=now,
                window=self._window,
            )

        for batch in await asyncio.gather(*(_events_for(name, ns) for name, ns in targets)):
            issues.extend(batch)
