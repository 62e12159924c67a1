"""Cluster connection metadata."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ClusterInfo:
    """Read-only description of the active connection context."""

    name: str = ""
    context: str = ""
    server: str | None = None

    @property
    def display_name(self) -> str:
        """Cluster name, else current context name, else ``unknown``."""
        return self.name or self.context or "unknown"

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.display_name,
            "server": self.server,
            "context": self.context or "unknown",
        }
