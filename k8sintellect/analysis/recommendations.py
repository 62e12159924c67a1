"""Local rule-based recommendations derived from an issue list."""

from __future__ import annotations

from k8sintellect.models.issues import Issue, Severity

_WARNING_THRESHOLD = 5


def build_recommendations(issues: list[Issue] | tuple[Issue, ...]) -> list[str]:
    recommendations: list[str] = []

    if any(issue.severity == Severity.CRITICAL for issue in issues):
        recommendations.append("Address critical issues immediately to prevent service disruptions")

    warnings = sum(1 for issue in issues if issue.severity == Severity.WARNING)
    if warnings > _WARNING_THRESHOLD:
        recommendations.append(
            "High number of warnings detected. Consider implementing proactive monitoring"
        )

    if any("restart" in issue.problem for issue in issues):
        recommendations.append(
            "Multiple container restarts detected. Review resource limits and liveness probes"
        )

    return recommendations
