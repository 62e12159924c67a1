"""Analyst package -- aggregation coordinator and enhancement gate."""

from k8sintellect.analyst.coordinator import AnalysisCoordinator, AnalysisTimeoutError
from k8sintellect.analyst.enhancer import IssueEnhancer

__all__ = [
    "AnalysisCoordinator",
    "AnalysisTimeoutError",
    "IssueEnhancer",
]
