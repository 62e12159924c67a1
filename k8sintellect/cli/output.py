"""Rendering of AnalysisResult for the terminal."""

from __future__ import annotations

import json

import yaml

from k8sintellect.models.issues import AnalysisResult, sort_issues


def render_json(result: AnalysisResult) -> str:
    return json.dumps(result.to_dict(), indent=2)


def render_yaml(result: AnalysisResult) -> str:
    return yaml.safe_dump(result.to_dict(), sort_keys=False, default_flow_style=False)


def render_text(result: AnalysisResult) -> str:
    lines = ["", "=== Cluster Analysis Results ===", "", f"Cluster: {result.cluster}", ""]

    if result.issues:
        lines.append(f"Found {len(result.issues)} issue(s):")
        lines.append("")
        for index, issue in enumerate(sort_issues(list(result.issues)), start=1):
            lines.append(f"{index}. [{issue.severity.value.upper()}] {issue.kind}: {issue.name}")
            lines.append(f"   Namespace: {issue.namespace or 'N/A'}")
            lines.append(f"   Problem: {issue.problem}")
            if issue.solution:
                lines.append(f"   Solution: {issue.solution}")
            lines.append("")
    else:
        lines.append("No issues found. Cluster appears healthy!")
        lines.append("")

    summary = result.summary
    lines.append(
        f"Summary: {summary.total} total, {summary.critical} critical, "
        f"{summary.warning} warning, {summary.info} info"
    )

    if result.recommendations:
        lines.append("")
        lines.append("Recommendations:")
        lines.extend(f"  - {rec}" for rec in result.recommendations)

    if result.errors:
        lines.append("")
        lines.append("Incomplete analysis:")
        lines.extend(f"  ! {err}" for err in result.errors)

    if result.commands:
        lines.append("")
        lines.append("Commands executed:")
        lines.extend(f"  $ {cmd}" for cmd in result.commands)

    return "\n".join(lines)


RENDERERS = {
    "text": render_text,
    "json": render_json,
    "yaml": render_yaml,
}
