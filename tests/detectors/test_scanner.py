from __future__ import annotations

import math

import pytest

from astroevents.detectors.common import wrap180
from astroevents.detectors.refine import DEFAULT_TOLERANCE, refine_root
from astroevents.detectors.scanner import sample_grid, scan, scan_global_extremum
from astroevents.events import BracketKind
from astroevents.exceptions import InvalidSample


def test_sample_grid_clamps_last_sample_to_end():
    grid = list(sample_grid(0.0, 1.0, 0.3))
    assert grid[0] == 0.0
    assert grid[-1] == 1.0
    assert len(grid) == 5


@pytest.mark.parametrize("start,end,step", [(0.0, 1.0, 0.0), (1.0, 0.0, 0.1)])
def test_sample_grid_rejects_bad_input(start, end, step):
    with pytest.raises(ValueError):
        list(sample_grid(start, end, step))


def test_sine_roots_are_bracketed_half_a_period_apart():
    period = 10.0
    brackets = list(
        scan(
            lambda t: math.sin(2.0 * math.pi * t / period),
            0.1,
            49.0,
            0.25,
            kinds={BracketKind.ROOT_CROSSING},
        )
    )
    assert len(brackets) == 9
    for k, bracket in enumerate(brackets, start=1):
        assert bracket.lo <= 5.0 * k <= bracket.hi


def test_refined_sine_roots_are_ordered_half_a_period_apart():
    period = 10.0
    fn = lambda t: math.sin(2.0 * math.pi * t / period)  # noqa: E731
    brackets = scan(fn, 0.1, 49.0, 0.25, kinds={BracketKind.ROOT_CROSSING})
    roots = [refine_root(fn, bracket).t for bracket in brackets]
    assert roots == pytest.approx([5.0 * k for k in range(1, 10)], abs=DEFAULT_TOLERANCE)
    gaps = [b - a for a, b in zip(roots, roots[1:])]
    assert gaps == pytest.approx([period / 2.0] * 8, abs=2 * DEFAULT_TOLERANCE)


def test_extremum_brackets_contain_the_extremum():
    brackets = list(
        scan(
            lambda t: math.cos(2.0 * math.pi * t / 8.0),
            0.0,
            30.0,
            0.25,
            kinds={BracketKind.MINIMUM, BracketKind.MAXIMUM},
        )
    )
    minima = [b.center for b in brackets if b.kind is BracketKind.MINIMUM]
    maxima = [b.center for b in brackets if b.kind is BracketKind.MAXIMUM]
    assert minima == pytest.approx([4.0, 12.0, 20.0, 28.0])
    assert maxima == pytest.approx([8.0, 16.0, 24.0])


def test_always_failing_function_yields_nothing():
    def broken(t: float) -> float:
        raise InvalidSample("no data", t=t)

    assert list(scan(broken, 0.0, 30.0, 0.5)) == []


def test_non_finite_values_break_the_run():
    values = {1.0: math.nan}
    fn = lambda t: values.get(t, (t - 1.0) ** 2)  # noqa: E731
    kinds = {BracketKind.MINIMUM}
    assert list(scan(fn, 0.0, 3.0, 0.5, kinds=kinds)) == []


def test_wrap_seams_are_rejected():
    fn = lambda t: wrap180(20.0 * t)  # noqa: E731
    kinds = {BracketKind.ROOT_CROSSING}
    with_seams = list(scan(fn, 1.0, 40.0, 0.25, kinds=kinds))
    without_seams = list(scan(fn, 1.0, 40.0, 0.25, kinds=kinds, seam_jump=180.0))
    assert len(with_seams) == 4
    assert len(without_seams) == 2
    for bracket, root in zip(without_seams, (18.0, 36.0)):
        assert bracket.lo <= root <= bracket.hi


def test_exact_zero_on_final_sample_is_bracketed():
    brackets = list(
        scan(lambda t: t - 2.0, 0.0, 2.0, 0.5, kinds={BracketKind.ROOT_CROSSING})
    )
    assert len(brackets) == 1
    assert brackets[0].hi == 2.0


def test_global_extremum():
    best = scan_global_extremum(lambda t: (t - 4.0) ** 2, 0.0, 10.0, 0.5)
    assert best is not None and best.t == 4.0
    worst = scan_global_extremum(
        lambda t: (t - 4.0) ** 2, 0.0, 10.0, 0.5, BracketKind.MAXIMUM
    )
    assert worst is not None and worst.t == 10.0
    with pytest.raises(ValueError):
        scan_global_extremum(lambda t: t, 0.0, 1.0, 0.5, BracketKind.ROOT_CROSSING)
