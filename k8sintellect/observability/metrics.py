"""Prometheus metrics for the analysis pipeline."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

analyzer_invocations_total = Counter(
    "k8sintellect_analyzer_invocations_total",
    "k8sgpt invocations by outcome",
    ["outcome"],
)

analyzer_duration_seconds = Histogram(
    "k8sintellect_analyzer_duration_seconds",
    "Wall-clock duration of one k8sgpt invocation",
    buckets=(0.5, 1, 2.5, 5, 10, 30, 60, 120, 300),
)

collector_failures_total = Counter(
    "k8sintellect_collector_failures_total",
    "Direct collector failures recovered locally",
    ["collector"],
)

analysis_runs_total = Counter(
    "k8sintellect_analysis_runs_total",
    "Aggregation runs by outcome",
    ["outcome"],
)

issues_reported_total = Counter(
    "k8sintellect_issues_reported_total",
    "Issues returned by aggregation runs",
    ["severity"],
)
