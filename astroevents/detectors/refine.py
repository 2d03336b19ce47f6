"""Bracket refinement: golden-section for extrema, bisection for roots."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass

from ..events import Bracket, BracketKind, Event
from ..exceptions import BracketInvariantViolation, InvalidSample
from ..observability import BRACKET_VIOLATIONS, REFINE_ITERATIONS
from .common import jd_to_calendar

__all__ = [
    "BISECT_MAX_ITER",
    "DEFAULT_TOLERANCE",
    "GOLDEN_MAX_ITER",
    "RefineOutcome",
    "bisect_root",
    "golden_section",
    "refine_extremum",
    "refine_root",
    "require_bracket",
]

LOG = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 1.0 / 1440.0  # one minute, in days
GOLDEN_MAX_ITER = 120
BISECT_MAX_ITER = 80

_INV_PHI = (math.sqrt(5.0) - 1.0) / 2.0


@dataclass(frozen=True, slots=True)
class RefineOutcome:
    """Result of a single refinement call.

    ``status`` is ``"ok"`` when the tolerance was reached, ``"max_iter"`` when
    the iteration budget ran out first and ``"bad_bracket"`` when the input
    bracket did not satisfy its invariant and the midpoint was returned.
    """

    t: float
    value: float
    iterations: int
    status: str


def _probe(fn: Callable[[float], float], t: float) -> float:
    try:
        value = fn(t)
    except InvalidSample:
        return math.nan
    return value


def golden_section(
    fn: Callable[[float], float],
    a: float,
    b: float,
    *,
    maximize: bool = False,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iter: int = GOLDEN_MAX_ITER,
) -> RefineOutcome:
    """Locate the extremum of a unimodal ``fn`` on ``[a, b]``.

    Probes that fail or return non-finite values are treated as the worse side
    so the search moves away from them.
    """

    if not a < b:
        raise ValueError("golden_section requires a < b")
    sign = -1.0 if maximize else 1.0

    def cost(t: float) -> float:
        value = _probe(fn, t)
        return sign * value if math.isfinite(value) else math.inf

    c = b - _INV_PHI * (b - a)
    d = a + _INV_PHI * (b - a)
    fc = cost(c)
    fd = cost(d)
    iterations = 0
    while (b - a) > tolerance and iterations < max_iter:
        iterations += 1
        if fc <= fd:
            b, d, fd = d, c, fc
            c = b - _INV_PHI * (b - a)
            fc = cost(c)
        else:
            a, c, fc = c, d, fd
            d = a + _INV_PHI * (b - a)
            fd = cost(d)

    t = 0.5 * (a + b)
    value = _probe(fn, t)
    if not math.isfinite(value):
        t = c if fc <= fd else d
        value = _probe(fn, t)
    status = "ok" if (b - a) <= tolerance else "max_iter"
    return RefineOutcome(t=t, value=value, iterations=iterations, status=status)


def require_bracket(lo: float, hi: float, f_lo: float, f_hi: float) -> None:
    """Raise :class:`BracketInvariantViolation` unless ``f`` changes sign on ``[lo, hi]``."""

    if not (math.isfinite(f_lo) and math.isfinite(f_hi)):
        raise BracketInvariantViolation(lo, hi, f_lo, f_hi)
    if f_lo == 0.0 or f_hi == 0.0:
        return
    if f_lo * f_hi > 0.0:
        raise BracketInvariantViolation(lo, hi, f_lo, f_hi)


def _degraded(
    fn: Callable[[float], float], lo: float, hi: float, iterations: int
) -> RefineOutcome:
    mid = 0.5 * (lo + hi)
    return RefineOutcome(mid, _probe(fn, mid), iterations, "bad_bracket")


def bisect_root(
    fn: Callable[[float], float],
    a: float,
    b: float,
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iter: int = BISECT_MAX_ITER,
) -> RefineOutcome:
    """Bisect a sign change of ``fn`` on ``[a, b]``.

    A bracket without a sign change yields its midpoint with status
    ``"bad_bracket"``; the violation is logged and counted.
    """

    if not a < b:
        raise ValueError("bisect_root requires a < b")
    f_a = _probe(fn, a)
    f_b = _probe(fn, b)
    try:
        require_bracket(a, b, f_a, f_b)
    except BracketInvariantViolation as exc:
        BRACKET_VIOLATIONS.labels(operation="bisect").inc()
        LOG.warning("Degraded root refinement: %s", exc)
        return _degraded(fn, a, b, 0)
    if f_a == 0.0:
        return RefineOutcome(a, f_a, 0, "ok")
    if f_b == 0.0:
        return RefineOutcome(b, f_b, 0, "ok")

    lo, hi, f_lo = a, b, f_a
    iterations = 0
    while (hi - lo) > tolerance and iterations < max_iter:
        iterations += 1
        mid = 0.5 * (lo + hi)
        f_mid = _probe(fn, mid)
        if not math.isfinite(f_mid):
            BRACKET_VIOLATIONS.labels(operation="bisect").inc()
            LOG.warning(
                "Root refinement lost continuity at jd=%.6f within [%.6f, %.6f]",
                mid,
                lo,
                hi,
            )
            return _degraded(fn, lo, hi, iterations)
        if f_mid == 0.0:
            return RefineOutcome(mid, f_mid, iterations, "ok")
        if f_lo * f_mid < 0.0:
            hi = mid
        else:
            lo, f_lo = mid, f_mid

    t = 0.5 * (lo + hi)
    status = "ok" if (hi - lo) <= tolerance else "max_iter"
    return RefineOutcome(t, _probe(fn, t), iterations, status)


def _event_from(outcome: RefineOutcome, bracket: Bracket, body: str | None) -> Event:
    return Event(
        t=outcome.t,
        value=outcome.value,
        kind=bracket.event_kind,
        calendar_date=jd_to_calendar(outcome.t),
        confidence="low" if outcome.status == "bad_bracket" else "high",
        body=body,
    )


def refine_extremum(
    fn: Callable[[float], float],
    bracket: Bracket,
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iter: int = GOLDEN_MAX_ITER,
    pad: float | None = None,
    limits: tuple[float, float] | None = None,
    body: str | None = None,
) -> Event:
    """Refine an extremum bracket into an :class:`Event`.

    With ``pad`` the search interval is re-centred to ``centre +/- pad`` around
    the coarse candidate, clipped to ``limits`` when given.
    """

    if bracket.kind is BracketKind.ROOT_CROSSING:
        raise ValueError("refine_extremum requires a MINIMUM or MAXIMUM bracket")
    a, b = bracket.lo, bracket.hi
    if pad is not None:
        a, b = bracket.center - pad, bracket.center + pad
    if limits is not None:
        a, b = max(a, limits[0]), min(b, limits[1])
    if not a < b:
        a, b = bracket.lo, bracket.hi
    outcome = golden_section(
        fn,
        a,
        b,
        maximize=bracket.kind is BracketKind.MAXIMUM,
        tolerance=tolerance,
        max_iter=max_iter,
    )
    REFINE_ITERATIONS.labels(method="golden").observe(outcome.iterations)
    return _event_from(outcome, bracket, body)


def refine_root(
    fn: Callable[[float], float],
    bracket: Bracket,
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iter: int = BISECT_MAX_ITER,
    body: str | None = None,
) -> Event:
    """Refine a root bracket into a crossing :class:`Event`."""

    outcome = bisect_root(
        fn, bracket.lo, bracket.hi, tolerance=tolerance, max_iter=max_iter
    )
    REFINE_ITERATIONS.labels(method="bisect").observe(outcome.iterations)
    return _event_from(outcome, bracket, body)
