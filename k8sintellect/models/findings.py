"""Raw analyzer findings, before normalization into Issues."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Diagnostic:
    """One entry of a finding's ``error`` list."""

    text: str
    doc_ref: str = ""
    sensitive: tuple[str, ...] = ()


@dataclass(frozen=True)
class RawExternalFinding:
    """A single result record emitted by ``k8sgpt analyze --output=json``.

    ``composite_name`` is ``namespace/name`` for namespaced resources and a
    bare ``name`` for cluster-scoped ones.
    """

    kind: str
    composite_name: str
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)
    details: str = ""
    parent_object: str = ""
