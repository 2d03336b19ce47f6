"""Removal of near-duplicate refined events."""

from __future__ import annotations

from collections.abc import Iterable

from ..events import Event, EventKind

__all__ = ["dedupe", "dedupe_by_calendar_day"]


def dedupe(events: Iterable[Event], min_separation: float) -> list[Event]:
    """Drop events closer than ``min_separation`` days to the last kept one.

    Events are stably sorted by time and compared only against earlier kept
    events of the same kind. Events exactly ``min_separation`` apart are both
    kept, which makes the operation idempotent.
    """

    if min_separation < 0:
        raise ValueError("min_separation must be non-negative")
    last_kept: dict[EventKind, float] = {}
    kept: list[Event] = []
    for event in sorted(events, key=lambda e: e.t):
        previous = last_kept.get(event.kind)
        if previous is not None and (event.t - previous) < min_separation:
            continue
        last_kept[event.kind] = event.t
        kept.append(event)
    return kept


def dedupe_by_calendar_day(events: Iterable[Event]) -> list[Event]:
    """Keep the first event of each kind per UTC calendar date."""

    seen: set[tuple[EventKind, tuple[int, int, int]]] = set()
    kept: list[Event] = []
    for event in sorted(events, key=lambda e: e.t):
        key = (event.kind, event.calendar_date)
        if key in seen:
            continue
        seen.add(key)
        kept.append(event)
    return kept
