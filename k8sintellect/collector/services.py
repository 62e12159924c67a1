"""LoadBalancer exposure collector."""

from __future__ import annotations

from typing import Any

from k8sintellect.analysis.normalizer import observation_issue
from k8sintellect.cluster.client import ClusterReader
from k8sintellect.collector.base import Collector
from k8sintellect.models.issues import Issue, Severity


def inspect_service(service: dict[str, Any]) -> Issue | None:
    """Flag a LoadBalancer Service that has not been given an external address."""
    spec = service.get("spec") or {}
    if spec.get("type") != "LoadBalancer":
        return None
    load_balancer = (service.get("status") or {}).get("loadBalancer") or {}
    if load_balancer.get("ingress"):
        return None
    return observation_issue(
        "Service",
        service.get("metadata"),
        problem="LoadBalancer service has no external IP assigned",
        severity=Severity.WARNING,
        solution="Check LoadBalancer configuration and cloud provider status",
    )


class ServiceCollector(Collector):
    resource_kind = "Service"

    @property
    def name(self) -> str:
        return "services"

    async def _collect_into(
        self,
        client: ClusterReader,
        namespace: str | None,
        issues: list[Issue],
    ) -> None:
        for service in await client.list_services(namespace):
            issue = inspect_service(service)
            if issue is not None:
                issues.append(issue)
