"""Planetary stations: refined zero crossings of longitude speed."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..events import BracketKind, Event
from ..exceptions import InvalidSample
from .refine import BISECT_MAX_ITER, DEFAULT_TOLERANCE, refine_root
from .scanner import scan

__all__ = ["classify_station", "find_stations"]

LOG = logging.getLogger(__name__)

_PROBE_OFFSETS = (0.5 / 24.0, 1.0 / 24.0, 2.0 / 24.0)


def classify_station(speed: Callable[[float], float], t: float) -> str:
    """Return ``"retrograde"``, ``"direct"`` or ``"stationary"`` for a station."""

    for delta in _PROBE_OFFSETS:
        try:
            before = speed(t - delta)
            after = speed(t + delta)
        except InvalidSample:
            continue
        if before > 0 and after < 0:
            return "retrograde"
        if before < 0 and after > 0:
            return "direct"
    return "stationary"


def find_stations(
    speed: Callable[[float], float],
    start: float,
    end: float,
    *,
    step_days: float = 0.5,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iter: int = BISECT_MAX_ITER,
    body: str | None = None,
) -> list[Event]:
    """Return station events between ``start`` and ``end``.

    Each event is labelled with the motion the body enters at the station.
    """

    if end <= start:
        return []

    events: list[Event] = []
    seen: set[int] = set()
    for bracket in scan(speed, start, end, step_days, kinds={BracketKind.ROOT_CROSSING}):
        event = refine_root(
            speed, bracket, tolerance=tolerance, max_iter=max_iter, body=body
        )
        if not start <= event.t <= end:
            continue
        key = int(round(event.t * 86400))
        if key in seen:
            continue
        seen.add(key)
        label = classify_station(speed, event.t)
        LOG.debug("Station of %s at jd=%.6f (%s)", body or "body", event.t, label)
        events.append(event.evolve(label=label))

    events.sort(key=lambda event: event.t)
    return events
