"""Normalization of raw findings into canonical Issue records.

k8sgpt is versioned independently of this project, so its JSON output is
treated as untrusted: every field access tolerates absent or mistyped
values. A malformed result record is skipped, never fatal to the batch.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from k8sintellect.analysis.severity import classify
from k8sintellect.models.findings import Diagnostic, RawExternalFinding
from k8sintellect.models.issues import Issue, Severity
from k8sintellect.observability.logging import get_logger

_log = get_logger("analysis.normalizer")

DEFAULT_SOLUTION = "Check k8sgpt documentation for more details"


def split_composite_name(composite: str) -> tuple[str | None, str]:
    """Split ``namespace/name`` on the first slash.

    ``kube-system/coredns-abc`` -> ("kube-system", "coredns-abc")
    ``my-node``                 -> (None, "my-node")
    """
    namespace, sep, name = composite.partition("/")
    if not sep:
        return None, composite
    return namespace or None, name or composite


def parse_findings(payload: Any) -> list[RawExternalFinding]:
    """Extract findings from decoded ``k8sgpt analyze --output=json`` output.

    Any unexpected shape yields zero findings for the affected part.
    """
    if not isinstance(payload, dict):
        _log.debug("analyzer_output_not_an_object", type=type(payload).__name__)
        return []
    results = payload.get("results")
    if not isinstance(results, list):
        _log.debug("analyzer_output_without_results")
        return []

    findings: list[RawExternalFinding] = []
    for index, record in enumerate(results):
        finding = _parse_result(record)
        if finding is None:
            _log.debug("malformed_finding_skipped", index=index)
            continue
        findings.append(finding)
    return findings


def _parse_result(record: Any) -> RawExternalFinding | None:
    if not isinstance(record, dict):
        return None
    kind = record.get("kind")
    name = record.get("name")
    if not isinstance(kind, str) or not kind or not isinstance(name, str) or not name:
        return None

    raw_errors = record.get("error")
    diagnostics: list[Diagnostic] = []
    if isinstance(raw_errors, list):
        for entry in raw_errors:
            if not isinstance(entry, dict):
                continue
            text = entry.get("Text")
            if not isinstance(text, str) or not text.strip():
                continue
            doc = entry.get("KubernetesDoc")
            sensitive = entry.get("Sensitive")
            diagnostics.append(
                Diagnostic(
                    text=text,
                    doc_ref=doc if isinstance(doc, str) else "",
                    sensitive=tuple(str(s) for s in sensitive) if isinstance(sensitive, list) else (),
                )
            )

    details = record.get("details")
    parent = record.get("parentObject")
    return RawExternalFinding(
        kind=kind,
        composite_name=name,
        diagnostics=tuple(diagnostics),
        details=details if isinstance(details, str) else "",
        parent_object=parent if isinstance(parent, str) else "",
    )


def normalize_finding(finding: RawExternalFinding) -> Iterator[Issue]:
    """Yield one Issue per diagnostic entry of *finding*."""
    namespace, name = split_composite_name(finding.composite_name)
    for diagnostic in finding.diagnostics:
        yield Issue(
            kind=finding.kind,
            name=name,
            namespace=namespace,
            problem=diagnostic.text,
            solution=diagnostic.doc_ref or DEFAULT_SOLUTION,
            severity=classify(diagnostic.text),
        )


def normalize_findings(findings: list[RawExternalFinding]) -> list[Issue]:
    issues: list[Issue] = []
    for finding in findings:
        issues.extend(normalize_finding(finding))
    return issues


def observation_issue(
    kind: str,
    metadata: Any,
    problem: str,
    severity: Severity,
    solution: str | None = None,
) -> Issue:
    """Build the Issue for one direct-API observation.

    *metadata* is the object's serialized ``metadata`` mapping.
    """
    meta = metadata if isinstance(metadata, dict) else {}
    return Issue(
        kind=kind,
        name=str(meta.get("name") or "unknown"),
        namespace=meta.get("namespace") or None,
        problem=problem,
        solution=solution,
        severity=severity,
    )
