from __future__ import annotations

import pytest

from astroevents.detectors.dedupe import dedupe, dedupe_by_calendar_day
from astroevents.events import EventKind

from ..synthetic import JD_2024, make_event


def test_events_exactly_min_separation_apart_are_kept():
    events = [make_event(JD_2024), make_event(JD_2024 + 1.0)]
    assert [e.t for e in dedupe(events, 1.0)] == [JD_2024, JD_2024 + 1.0]


def test_events_closer_than_min_separation_collapse_to_the_first():
    events = [make_event(JD_2024 + 0.999), make_event(JD_2024)]
    kept = dedupe(events, 1.0)
    assert [e.t for e in kept] == [JD_2024]


def test_comparison_is_against_last_kept_event():
    times = [0.0, 0.6, 1.2, 1.8]
    kept = dedupe([make_event(JD_2024 + t) for t in times], 1.0)
    assert [round(e.t - JD_2024, 6) for e in kept] == [0.0, 1.2]


def test_kinds_are_deduplicated_independently():
    events = [
        make_event(JD_2024, EventKind.MINIMUM),
        make_event(JD_2024 + 0.1, EventKind.MAXIMUM),
    ]
    assert len(dedupe(events, 1.0)) == 2


def test_dedupe_is_idempotent():
    events = [make_event(JD_2024 + t) for t in (0.0, 0.3, 0.5, 1.1, 1.4, 3.0)]
    once = dedupe(events, 0.5)
    assert dedupe(once, 0.5) == once


def test_negative_separation_rejected():
    with pytest.raises(ValueError):
        dedupe([], -1.0)


def test_dedupe_by_calendar_day_keeps_first_per_date():
    events = [
        make_event(JD_2024 + 0.9),
        make_event(JD_2024 + 0.1),
        make_event(JD_2024 + 1.2),
    ]
    kept = dedupe_by_calendar_day(events)
    assert [e.date_str for e in kept] == ["2024-01-01", "2024-01-02"]
    assert kept[0].t == JD_2024 + 0.1
