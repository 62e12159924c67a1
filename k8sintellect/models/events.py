"""Cluster event observations consumed by the event deduplicator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True)
class ObservedEvent:
    """A core/v1 Event reduced to the fields the deduplicator needs.

    ``last_seen`` is always timezone-aware UTC.
    """

    type: str
    reason: str
    message: str
    last_seen: datetime

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> ObservedEvent | None:
        """Build from a serialized Event. Returns None when no timestamp is usable."""
        if not isinstance(raw, dict):
            return None
        series = raw.get("series") if isinstance(raw.get("series"), dict) else {}
        last_seen = (
            parse_timestamp(raw.get("lastTimestamp"))
            or parse_timestamp(series.get("lastObservedTime"))
            or parse_timestamp(raw.get("eventTime"))
        )
        if last_seen is None:
            return None
        return cls(
            type=str(raw.get("type") or ""),
            reason=str(raw.get("reason") or ""),
            message=str(raw.get("message") or ""),
            last_seen=last_seen,
        )


def parse_timestamp(value: object) -> datetime | None:
    """Parse an API timestamp (datetime or RFC 3339 string) into aware UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
