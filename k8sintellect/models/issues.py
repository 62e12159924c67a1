"""Issue, scope and analysis result data structures."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum


class Severity(StrEnum):
    """Issue severity level."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Sort weight: higher is more severe."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.CRITICAL: 2,
    Severity.WARNING: 1,
    Severity.INFO: 0,
}


@dataclass(frozen=True)
class Issue:
    """A single detected problem on one Kubernetes resource.

    Produced by the normalizer, the event deduplicator and the direct
    collectors. Immutable once created.
    """

    kind: str
    name: str
    problem: str
    severity: Severity
    namespace: str | None = None
    solution: str | None = None

    @property
    def identity(self) -> tuple[str, str, str | None, str]:
        """Practical identity within one aggregation run."""
        return (self.kind, self.name, self.namespace, self.problem)

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind,
            "name": self.name,
            "namespace": self.namespace,
            "problem": self.problem,
            "solution": self.solution,
            "severity": self.severity.value,
        }


def sort_issues(issues: list[Issue]) -> list[Issue]:
    """Return issues ordered for display: severity, then kind, then name."""
    return sorted(issues, key=lambda i: (-i.severity.rank, i.kind, i.name, i.namespace or ""))


@dataclass(frozen=True)
class Summary:
    """Issue counts. ``total`` always equals the sum of the severity counts."""

    total: int = 0
    critical: int = 0
    warning: int = 0
    info: int = 0

    @classmethod
    def from_issues(cls, issues: list[Issue]) -> Summary:
        counts = Counter(issue.severity for issue in issues)
        return cls(
            total=len(issues),
            critical=counts[Severity.CRITICAL],
            warning=counts[Severity.WARNING],
            info=counts[Severity.INFO],
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "critical": self.critical,
            "warning": self.warning,
            "info": self.info,
        }


@dataclass(frozen=True)
class AnalysisScope:
    """Target of one aggregation run.

    An explicit, non-empty namespace list always wins over ``all_namespaces``.
    ``filters`` empty means every supported resource kind.
    """

    namespaces: tuple[str, ...] = ()
    all_namespaces: bool = False
    filters: tuple[str, ...] = ()

    @classmethod
    def build(
        cls,
        namespaces: list[str] | tuple[str, ...] | None = None,
        all_namespaces: bool = False,
        filters: list[str] | tuple[str, ...] | None = None,
    ) -> AnalysisScope:
        """Normalise user input: strip blanks, drop duplicates, keep order."""
        return cls(
            namespaces=_ordered_unique(namespaces or ()),
            all_namespaces=all_namespaces,
            filters=_ordered_unique(filters or ()),
        )

    def execution_plan(self) -> list[str | None]:
        """One entry per external analyzer run; ``None`` means all namespaces."""
        if self.namespaces:
            return list(self.namespaces)
        return [None]


def _ordered_unique(values: list[str] | tuple[str, ...]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for value in values:
        value = value.strip()
        if value:
            seen.setdefault(value, None)
    return tuple(seen)


@dataclass(frozen=True)
class AnalysisResult:
    """Output of one aggregation run.

    Built fresh per request and never mutated after it is returned.
    """

    timestamp: str  # ISO-8601 UTC
    cluster: str
    issues: tuple[Issue, ...]
    summary: Summary
    commands: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, object]:
        return {
            "timestamp": self.timestamp,
            "cluster": self.cluster,
            "issues": [issue.to_dict() for issue in self.issues],
            "summary": self.summary.to_dict(),
            "commands": list(self.commands),
            "errors": list(self.errors),
            "recommendations": list(self.recommendations),
        }
