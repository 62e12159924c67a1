"""Pure analysis helpers: severity, normalization, event dedup, recommendations."""

from k8sintellect.analysis.events import deduplicate_events
from k8sintellect.analysis.normalizer import (
    normalize_finding,
    normalize_findings,
    observation_issue,
    parse_findings,
    split_composite_name,
)
from k8sintellect.analysis.recommendations import build_recommendations
from k8sintellect.analysis.severity import classify

__all__ = [
    "build_recommendations",
    "classify",
    "deduplicate_events",
    "normalize_finding",
    "normalize_findings",
    "observation_issue",
    "parse_findings",
    "split_composite_name",
]
