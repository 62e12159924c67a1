"""Collector base class and fan-out suite.

Collector      -- ABC every direct observation collector implements;
                  ``collect`` never raises, it logs and returns the issues
                  gathered so far.
CollectorSuite -- Runs every (namespace target, collector) pair
                  concurrently and reassembles the output in target order,
                  then collector order.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterable

import structlog

from k8sintellect.cluster.client import ClusterReader
from k8sintellect.models.issues import Issue
from k8sintellect.observability.metrics import collector_failures_total

_log = structlog.get_logger(component="collector.base")


class Collector(ABC):
    """Derives issues for one resource kind straight from the cluster API."""

    #: Filter name (as passed to ``k8sgpt --filter``) that enables this collector.
    resource_kind: str = ""

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifier used in logs and metrics."""

    @abstractmethod
    async def _collect_into(
        self,
        client: ClusterReader,
        namespace: str | None,
        issues: list[Issue],
    ) -> None:
        """Append issues for *namespace* (None = all) to *issues* as found."""

    async def collect(self, client: ClusterReader, namespace: str | None) -> list[Issue]:
        """Collect issues, recovering from any fetch or processing failure."""
        issues: list[Issue] = []
        try:
            await self._collect_into(client, namespace, issues)
        except Exception as exc:  # noqa: BLE001
            collector_failures_total.labels(collector=self.name).inc()
            _log.error(
                "collector_failed",
                collector=self.name,
                namespace=namespace or "*",
                error=str(exc),
                partial_issues=len(issues),
            )
        return issues


class CollectorSuite:
    """Ordered set of collectors run as one augmentation pass."""

    def __init__(self, collectors: list[Collector], max_concurrency: int = 4) -> None:
        self._collectors = list(collectors)
        self._max_concurrency = max(1, max_concurrency)

    @property
    def collectors(self) -> list[Collector]:
        return list(self._collectors)

    def active(self, filters: Iterable[str]) -> list[Collector]:
        """Collectors whose resource kind is in *filters*, in suite order."""
        wanted = set(filters)
        return [c for c in self._collectors if c.resource_kind in wanted]

    async def collect(
        self,
        client: ClusterReader,
        targets: list[str | None],
        filters: Iterable[str],
    ) -> list[Issue]:
        active = self.active(filters)
        if not active:
            _log.debug("no_collectors_active")
            return []

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _bounded(collector: Collector, target: str | None) -> list[Issue]:
            async with semaphore:
                return await collector.collect(client, target)

        batches = await asyncio.gather(
            *(_bounded(collector, target) for target in targets for collector in active)
        )
        issues = [issue for batch in batches for issue in batch]
        _log.info(
            "direct_collection_completed",
            collectors=[c.name for c in active],
            targets=[t or "*" for t in targets],
            issues=len(issues),
        )
        return issues
