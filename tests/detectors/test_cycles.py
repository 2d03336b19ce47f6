from __future__ import annotations

import pytest

from astroevents.detectors.cycles import (
    annotate,
    bounding_extrema,
    classify,
    classify_value,
    nearest,
)
from astroevents.events import Classification, EventKind

from ..synthetic import make_event


@pytest.fixture
def cycle():
    minimum = make_event(2460000.0, EventKind.MINIMUM, value=0.9)
    maximum = make_event(2460014.0, EventKind.MAXIMUM, value=1.1)
    return minimum, maximum


@pytest.mark.parametrize(
    "value,expected",
    [
        (0.905, Classification.NEAR_MINIMUM),
        (1.095, Classification.NEAR_MAXIMUM),
        (1.0, Classification.NORMAL),
    ],
)
def test_classify_value_bands(cycle, value, expected):
    minimum, maximum = cycle
    assert classify_value(value, minimum, maximum, 0.10) is expected


def test_degenerate_span_is_normal():
    flat = make_event(2460000.0, value=1.0)
    assert classify_value(1.0, flat, flat) is Classification.NORMAL


def test_nearest():
    events = [make_event(2460000.0 + d) for d in (0.0, 10.0, 20.0)]
    assert nearest(events, 2460012.0).t == 2460010.0
    assert nearest(events, 2459990.0).t == 2460000.0
    assert nearest([], 2460000.0) is None


def test_bounding_extrema_pairs_the_surrounding_cycle():
    minima = [make_event(2460000.0 + d, value=0.9) for d in (0.0, 27.5, 55.0)]
    maxima = [
        make_event(2460000.0 + d, EventKind.MAXIMUM, value=1.1) for d in (13.7, 41.2)
    ]
    trough, peak = bounding_extrema(2460030.0, minima, maxima)
    assert trough.t == 2460027.5
    assert peak.t == pytest.approx(2460041.2)
    assert bounding_extrema(2460030.0, [], maxima) is None


def test_classify_uses_override_value():
    minima = [make_event(2460000.0, value=0.9)]
    maxima = [make_event(2460014.0, EventKind.MAXIMUM, value=1.1)]
    crossing = make_event(2460001.0, EventKind.CROSSING, value=0.0)
    assert classify(crossing, minima, maxima, value=0.91) is Classification.NEAR_MINIMUM
    assert classify(crossing, minima, maxima, value=1.0) is Classification.NORMAL


def test_annotate_returns_new_events():
    minima = [make_event(2460000.0, value=0.9)]
    maxima = [make_event(2460014.0, EventKind.MAXIMUM, value=1.1)]
    events = [make_event(2460002.0, EventKind.MINIMUM, value=1.09)]
    annotated = annotate(events, minima, maxima)
    assert annotated[0].classification is Classification.NEAR_MAXIMUM
    assert events[0].classification is None
