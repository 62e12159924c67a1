"""Keyword-based severity classification of diagnostic text."""

from __future__ import annotations

from k8sintellect.models.issues import Severity

CRITICAL_KEYWORDS: tuple[str, ...] = (
    "crash",
    "failed",
    "error",
    "deadline exceeded",
    "oomkilled",
)

WARNING_KEYWORDS: tuple[str, ...] = (
    "warning",
    "pending",
    "unschedulable",
)


def classify(text: str | None) -> Severity:
    """Map free-text diagnostics to a severity. Never raises.

    Critical keywords win over warning keywords; anything else is info.
    """
    lowered = (text or "").lower()
    if any(keyword in lowered for keyword in CRITICAL_KEYWORDS):
        return Severity.CRITICAL
    if any(keyword in lowered for keyword in WARNING_KEYWORDS):
        return Severity.WARNING
    return Severity.INFO
