"""Fixed-step coarse scanning that yields extremum and root brackets."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Collection, Iterator

from ..events import Bracket, BracketKind, TimeSample
from ..exceptions import InvalidSample
from ..observability import INVALID_SAMPLES

__all__ = [
    "ALL_KINDS",
    "DEFAULT_STEPS",
    "evaluate_grid",
    "sample_grid",
    "scan",
    "scan_global_extremum",
]

LOG = logging.getLogger(__name__)

ALL_KINDS: frozenset[BracketKind] = frozenset(BracketKind)

DEFAULT_STEPS: dict[str, float] = {
    "distance": 0.25,
    "speed": 0.125,
    "phase_delta": 0.25,
}
"""Coarse step (days) per observable."""


def sample_grid(start: float, end: float, step: float) -> Iterator[float]:
    """Yield ``start, start + step, ...`` with the final sample clamped to ``end``."""

    if step <= 0:
        raise ValueError("step must be positive")
    if end < start:
        raise ValueError("end must not precede start")
    i = 0
    t = start
    while t < end:
        yield t
        i += 1
        t = start + i * step
    yield end


def evaluate_grid(
    fn: Callable[[float], float],
    start: float,
    end: float,
    step: float,
    *,
    stage: str = "scan",
) -> Iterator[TimeSample | None]:
    """Evaluate ``fn`` on the grid, yielding ``None`` for unusable samples."""

    skipped = INVALID_SAMPLES.labels(stage=stage)
    for t in sample_grid(start, end, step):
        try:
            value = fn(t)
        except InvalidSample as exc:
            skipped.inc()
            LOG.debug("Skipping invalid sample at jd=%.6f: %s", t, exc)
            yield None
            continue
        if not math.isfinite(value):
            skipped.inc()
            LOG.debug("Skipping non-finite sample at jd=%.6f", t)
            yield None
            continue
        yield TimeSample(t, value)


def scan(
    fn: Callable[[float], float],
    start: float,
    end: float,
    step: float,
    *,
    kinds: Collection[BracketKind] = ALL_KINDS,
    seam_jump: float | None = None,
) -> Iterator[Bracket]:
    """Yield brackets of the requested ``kinds`` found on a fixed-step grid.

    A minimum is bracketed by ``[t(i-1), t(i+1)]`` when sample ``i`` is strictly
    below its predecessor and not above its successor (maxima mirror this).
    Roots are bracketed by ``[t(i), t(i+1)]`` on a strict sign change or when
    sample ``i`` is exactly zero. When ``seam_jump`` is given, sign changes
    whose jump exceeds it are treated as wrap seams and skipped.

    Invalid samples are dropped and break the run of consecutive samples, so a
    permanently failing ``fn`` yields nothing.
    """

    want_min = BracketKind.MINIMUM in kinds
    want_max = BracketKind.MAXIMUM in kinds
    want_root = BracketKind.ROOT_CROSSING in kinds

    before: TimeSample | None = None
    prev: TimeSample | None = None
    for cur in evaluate_grid(fn, start, end, step):
        if cur is None:
            before = prev = None
            continue

        if want_root and prev is not None:
            if prev.value == 0.0:
                yield Bracket(prev.t, cur.t, BracketKind.ROOT_CROSSING)
            elif prev.value * cur.value < 0.0:
                jump = abs(cur.value - prev.value)
                if seam_jump is not None and jump > seam_jump:
                    LOG.debug(
                        "Ignoring wrap seam between jd=%.6f and jd=%.6f (jump %.3f)",
                        prev.t,
                        cur.t,
                        jump,
                    )
                else:
                    yield Bracket(prev.t, cur.t, BracketKind.ROOT_CROSSING)

        if before is not None and prev is not None:
            if want_min and before.value > prev.value <= cur.value:
                yield Bracket(before.t, cur.t, BracketKind.MINIMUM)
            elif want_max and before.value < prev.value >= cur.value:
                yield Bracket(before.t, cur.t, BracketKind.MAXIMUM)

        before, prev = prev, cur

    if want_root and prev is not None and before is not None:
        if prev.value == 0.0 and before.value != 0.0:
            yield Bracket(before.t, prev.t, BracketKind.ROOT_CROSSING)


def scan_global_extremum(
    fn: Callable[[float], float],
    start: float,
    end: float,
    step: float,
    kind: BracketKind = BracketKind.MINIMUM,
) -> TimeSample | None:
    """Return the lowest (or highest) valid coarse sample on the grid."""

    if kind is BracketKind.ROOT_CROSSING:
        raise ValueError("global extremum search requires MINIMUM or MAXIMUM")
    best: TimeSample | None = None
    for sample in evaluate_grid(fn, start, end, step):
        if sample is None:
            continue
        if best is None:
            best = sample
        elif kind is BracketKind.MINIMUM and sample.value < best.value:
            best = sample
        elif kind is BracketKind.MAXIMUM and sample.value > best.value:
            best = sample
    return best
