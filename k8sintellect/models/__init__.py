"""Core data structures for k8sintellect."""

from k8sintellect.models.cluster import ClusterInfo
from k8sintellect.models.config import K8sIntellectConfig
from k8sintellect.models.events import ObservedEvent
from k8sintellect.models.findings import Diagnostic, RawExternalFinding
from k8sintellect.models.issues import (
    AnalysisResult,
    AnalysisScope,
    Issue,
    Severity,
    Summary,
    sort_issues,
)

__all__ = [
    "AnalysisResult",
    "AnalysisScope",
    "ClusterInfo",
    "Diagnostic",
    "Issue",
    "K8sIntellectConfig",
    "ObservedEvent",
    "RawExternalFinding",
    "Severity",
    "Summary",
    "sort_issues",
]
