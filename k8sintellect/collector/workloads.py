"""Deployment replica health collector."""

from __future__ import annotations

from typing import Any

from k8sintellect.analysis.normalizer import observation_issue
from k8sintellect.cluster.client import ClusterReader
from k8sintellect.collector.base import Collector
from k8sintellect.models.issues import Issue, Severity


def inspect_deployment(deployment: dict[str, Any]) -> Issue | None:
    """Flag a Deployment whose available replicas are below the desired count."""
    spec = deployment.get("spec") or {}
    status = deployment.get("status") or {}
    desired = int(spec.get("replicas") or 0)
    available = int(status.get("availableReplicas") or 0)
    if available >= desired:
        return None
    return observation_issue(
        "Deployment",
        deployment.get("metadata"),
        problem=f"Deployment has {available}/{desired} replicas available",
        severity=Severity.CRITICAL if available == 0 else Severity.WARNING,
        solution="Check pod status and resource availability",
    )


class WorkloadCollector(Collector):
    resource_kind = "Deployment"

    @property
    def name(self) -> str:
        return "workloads"

    async def _collect_into(
        self,
        client: ClusterReader,
        namespace: str | None,
        issues: list[Issue],
    ) -> None:
        for deployment in await client.list_deployments(namespace):
            issue = inspect_deployment(deployment)
            if issue is not None:
                issues.append(issue)
