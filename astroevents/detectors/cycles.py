"""Classification of events against their bounding minimum/maximum cycle."""

from __future__ import annotations

import bisect
from collections.abc import Iterable, Sequence

from ..events import Classification, Event

__all__ = [
    "DEFAULT_FRACTION",
    "annotate",
    "bounding_extrema",
    "classify",
    "classify_value",
    "nearest",
]

DEFAULT_FRACTION = 0.10


def _times(events: Sequence[Event]) -> list[float]:
    return [e.t for e in events]


def nearest(events: Sequence[Event], t: float) -> Event | None:
    """Return the event of a time-ordered sequence closest to ``t``."""

    if not events:
        return None
    idx = bisect.bisect_left(_times(events), t)
    after = events[min(idx, len(events) - 1)]
    before = events[max(idx - 1, 0)]
    return after if abs(after.t - t) < abs(before.t - t) else before


def _prev_next(events: Sequence[Event], t: float) -> list[Event]:
    """Immediate predecessor (``<= t``) and successor (``> t``), clamped."""

    idx = bisect.bisect_right(_times(events), t)
    prev_i = max(0, min(len(events) - 1, idx - 1))
    next_i = max(0, min(len(events) - 1, idx))
    if prev_i == next_i:
        return [events[prev_i]]
    return [events[prev_i], events[next_i]]


def bounding_extrema(
    t: float, minima: Sequence[Event], maxima: Sequence[Event]
) -> tuple[Event, Event] | None:
    """Return the ``(minimum, maximum)`` pair framing the cycle around ``t``.

    Starts from the minimum nearest to ``t``; picks whichever of the maxima
    immediately before/after ``t`` is closest to it, then whichever of the
    minima immediately before/after ``t`` is closest to that maximum.
    """

    minima = sorted(minima, key=lambda e: e.t)
    maxima = sorted(maxima, key=lambda e: e.t)
    anchor = nearest(minima, t)
    if anchor is None or not maxima:
        return None
    peak = min(_prev_next(maxima, t), key=lambda e: abs(e.t - anchor.t))
    trough = min(_prev_next(minima, t), key=lambda e: abs(e.t - peak.t))
    return trough, peak


def classify_value(
    value: float,
    minimum: Event,
    maximum: Event,
    fraction: float = DEFAULT_FRACTION,
) -> Classification:
    """Place ``value`` in the lower, upper or middle band of a cycle span."""

    low = min(minimum.value, maximum.value)
    high = max(minimum.value, maximum.value)
    span = high - low
    if not span > 0:
        return Classification.NORMAL
    if value <= low + fraction * span:
        return Classification.NEAR_MINIMUM
    if value >= high - fraction * span:
        return Classification.NEAR_MAXIMUM
    return Classification.NORMAL


def classify(
    event: Event,
    minima: Sequence[Event],
    maxima: Sequence[Event],
    fraction: float = DEFAULT_FRACTION,
    *,
    value: float | None = None,
) -> Classification:
    """Classify ``event`` against its bounding extrema.

    ``value`` overrides ``event.value`` when the event was found on a different
    observable (e.g. a phase crossing classified by distance).
    """

    pair = bounding_extrema(event.t, minima, maxima)
    if pair is None:
        return Classification.NORMAL
    trough, peak = pair
    return classify_value(
        event.value if value is None else value, trough, peak, fraction
    )


def annotate(
    events: Iterable[Event],
    minima: Sequence[Event],
    maxima: Sequence[Event],
    fraction: float = DEFAULT_FRACTION,
) -> list[Event]:
    """Return copies of ``events`` carrying their classification."""

    return [
        e.evolve(classification=classify(e, minima, maxima, fraction)) for e in events
    ]
