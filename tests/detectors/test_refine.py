from __future__ import annotations

import logging
import math

import pytest

from astroevents.detectors.refine import (
    DEFAULT_TOLERANCE,
    bisect_root,
    golden_section,
    refine_extremum,
    refine_root,
    require_bracket,
)
from astroevents.events import Bracket, BracketKind, EventKind
from astroevents.exceptions import BracketInvariantViolation, InvalidSample


def test_golden_section_finds_quadratic_minimum():
    outcome = golden_section(lambda t: (t - 3.3) ** 2, 0.0, 10.0)
    assert outcome.status == "ok"
    assert outcome.t == pytest.approx(3.3, abs=DEFAULT_TOLERANCE)
    assert outcome.iterations < 60


def test_golden_section_maximize():
    outcome = golden_section(lambda t: -((t - 7.25) ** 2), 5.0, 9.0, maximize=True)
    assert outcome.t == pytest.approx(7.25, abs=DEFAULT_TOLERANCE)


def test_golden_section_reports_exhausted_budget():
    outcome = golden_section(lambda t: (t - 1.0) ** 2, 0.0, 10.0, max_iter=3)
    assert outcome.status == "max_iter"
    assert outcome.iterations == 3


def test_golden_section_steps_away_from_failed_probes():
    def fn(t: float) -> float:
        if t > 6.0:
            raise InvalidSample("gap", t=t)
        return (t - 2.0) ** 2

    outcome = golden_section(fn, 0.0, 10.0)
    assert outcome.t == pytest.approx(2.0, abs=DEFAULT_TOLERANCE)


def test_bisect_root_of_sine():
    outcome = bisect_root(math.sin, 3.0, 3.5)
    assert outcome.status == "ok"
    assert outcome.t == pytest.approx(math.pi, abs=DEFAULT_TOLERANCE)


def test_bisect_root_exact_endpoint():
    outcome = bisect_root(lambda t: t - 2.0, 2.0, 3.0)
    assert outcome.t == 2.0
    assert outcome.iterations == 0


def test_bad_bracket_returns_midpoint_and_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="astroevents.detectors.refine"):
        outcome = bisect_root(lambda t: t * t + 1.0, 0.0, 1.0)
    assert outcome.status == "bad_bracket"
    assert outcome.t == pytest.approx(0.5)
    assert any("Degraded root refinement" in r.getMessage() for r in caplog.records)


def test_refine_root_marks_bad_bracket_low_confidence():
    event = refine_root(lambda t: 1.0, Bracket(0.0, 2.0, BracketKind.ROOT_CROSSING))
    assert event.kind is EventKind.CROSSING
    assert event.confidence == "low"
    assert event.t == pytest.approx(1.0)


def test_require_bracket():
    require_bracket(0.0, 1.0, -1.0, 1.0)
    require_bracket(0.0, 1.0, 0.0, 1.0)
    with pytest.raises(BracketInvariantViolation):
        require_bracket(0.0, 1.0, 1.0, 2.0)
    with pytest.raises(BracketInvariantViolation):
        require_bracket(0.0, 1.0, math.nan, 2.0)


def test_refine_extremum_recentres_and_clips_to_limits():
    bracket = Bracket(0.75, 1.25, BracketKind.MINIMUM)
    event = refine_extremum(
        lambda t: (t - 0.2) ** 2, bracket, pad=2.0, limits=(0.5, 10.0), body="test"
    )
    # The true minimum lies outside the limits; the search stops at the edge.
    assert event.t == pytest.approx(0.5, abs=DEFAULT_TOLERANCE)
    assert event.kind is EventKind.MINIMUM
    assert event.body == "test"


def test_refine_extremum_rejects_root_brackets():
    with pytest.raises(ValueError):
        refine_extremum(lambda t: t, Bracket(0.0, 1.0, BracketKind.ROOT_CROSSING))
