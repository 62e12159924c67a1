"""Direct observation collectors.

Derive issues straight from live cluster state, independently of k8sgpt.

Submodules
----------
base      -- Collector ABC (never raises) and CollectorSuite fan-out.
pods      -- PodLifecycleCollector (phase, scheduling, restarts) and
             PodEventCollector (recent Warning/Error events, deduplicated).
services  -- ServiceCollector: LoadBalancer without an external address.
workloads -- WorkloadCollector: Deployments below desired replicas.
"""

from __future__ import annotations

from k8sintellect.collector.base import Collector, CollectorSuite
from k8sintellect.collector.pods import PodEventCollector, PodLifecycleCollector
from k8sintellect.collector.services import ServiceCollector
from k8sintellect.collector.workloads import WorkloadCollector
from k8sintellect.models.config import CollectorConfig

__all__ = [
    "Collector",
    "CollectorSuite",
    "PodEventCollector",
    "PodLifecycleCollector",
    "ServiceCollector",
    "WorkloadCollector",
    "build_collector_suite",
]


def build_collector_suite(config: CollectorConfig, max_concurrency: int = 4) -> CollectorSuite:
    """Default suite: pod lifecycle, pod events, services, workloads."""
    return CollectorSuite(
        collectors=[
            PodLifecycleCollector(restart_threshold=config.restart_threshold),
            PodEventCollector(window=config.event_window_delta, max_concurrency=max_concurrency),
            ServiceCollector(),
            WorkloadCollector(),
        ],
        max_concurrency=max_concurrency,
    )
