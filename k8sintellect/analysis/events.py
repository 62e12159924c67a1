"""Event deduplication for a single resource.

Recurring Kubernetes events (BackOff, FailedScheduling, ...) are collapsed
to one issue per distinct ``(reason, message)`` pair inside a trailing
time window.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

from k8sintellect.models.events import ObservedEvent
from k8sintellect.models.issues import Issue, Severity

DEFAULT_WINDOW = timedelta(hours=1)

EVENT_SOLUTION = "Check pod logs and events for more details"

_EVENT_SEVERITY = {
    "Error": Severity.CRITICAL,
    "Warning": Severity.WARNING,
}


def deduplicate_events(
    events: Iterable[ObservedEvent | dict[str, Any]],
    *,
    kind: str,
    name: str,
    namespace: str | None,
    now: datetime | None = None,
    window: timedelta = DEFAULT_WINDOW,
) -> list[Issue]:
    """Collapse the events of one resource into the minimal issue set.

    Only Warning/Error events last observed strictly inside the window are
    kept. For each ``(reason, message)`` key the survivor is the event with
    the latest ``last_seen`` regardless of input order. Output order is the
    order in which each key was first encountered.
    """
    cutoff = (now or datetime.now(tz=UTC)) - window

    survivors: dict[tuple[str, str], ObservedEvent] = {}
    for item in events:
        event = item if isinstance(item, ObservedEvent) else ObservedEvent.from_raw(item)
        if event is None or event.last_seen <= cutoff:
            continue
        if event.type not in _EVENT_SEVERITY:
            continue
        key = (event.reason, event.message)
        current = survivors.get(key)
        if current is None or event.last_seen > current.last_seen:
            survivors[key] = event

    return [
        Issue(
            kind=kind,
            name=name,
            namespace=namespace,
            problem=f"{event.reason or 'Unknown'}: {event.message or 'No details available'}",
            solution=EVENT_SOLUTION,
            severity=_EVENT_SEVERITY[event.type],
        )
        for event in survivors.values()
    ]
