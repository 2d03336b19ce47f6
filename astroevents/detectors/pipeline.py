"""Strategy dispatch for the scan -> refine -> dedupe -> clip pipeline."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from ..config.strategies import (
    DistanceExtremumCfg,
    PhaseCrossingCfg,
    RefineCfg,
    RetrogradeExtremumCfg,
    SpeedReversalCfg,
)
from ..ephemeris.oracle import TimeOracle
from ..events import Bracket, BracketKind, Event, Window
from .dedupe import dedupe, dedupe_by_calendar_day
from .observables import Distance, PhaseDelta, series, speed_series
from .refine import refine_extremum, refine_root
from .scanner import scan, scan_global_extremum
from .stations import find_stations
from .windows import retrograde_windows, segment

__all__ = [
    "SearchResult",
    "clip_events",
    "clip_windows",
    "distance_extrema",
    "phase_crossings",
    "run_strategy",
    "speed_reversals",
]

LOG = logging.getLogger(__name__)

_EXTREMUM_KINDS = {
    "minimum": (BracketKind.MINIMUM,),
    "maximum": (BracketKind.MAXIMUM,),
    "both": (BracketKind.MINIMUM, BracketKind.MAXIMUM),
}


@dataclass(frozen=True)
class SearchResult:
    """Time-ordered events (and motion windows, when segmented) for one body."""

    events: list[Event]
    windows: list[Window] = field(default_factory=list)


def clip_events(events: Iterable[Event], clip: tuple[float, float] | None) -> list[Event]:
    """Keep events with ``clip[0] <= t < clip[1]``, ordered by time."""

    ordered = sorted(events, key=lambda e: e.t)
    if clip is None:
        return ordered
    lo, hi = clip
    return [e for e in ordered if lo <= e.t < hi]


def clip_windows(windows: Iterable[Window], clip: tuple[float, float] | None) -> list[Window]:
    """Trim windows to ``clip`` and drop those falling outside it."""

    if clip is None:
        return list(windows)
    lo, hi = clip
    trimmed: list[Window] = []
    for w in windows:
        start, end = max(w.start, lo), min(w.end, hi)
        if start < end:
            trimmed.append(Window(start, end, w.state))
    return trimmed


def distance_extrema(
    cfg: DistanceExtremumCfg,
    fn: Callable[[float], float],
    start: float,
    end: float,
    *,
    refine: RefineCfg,
    body: str | None = None,
) -> list[Event]:
    """Refined distance extrema of ``fn`` on ``[start, end]``."""

    kinds = _EXTREMUM_KINDS[cfg.extremum]
    limits = (start, end)
    brackets: list[Bracket] = []
    if cfg.global_in_window:
        for kind in kinds:
            best = scan_global_extremum(fn, start, end, cfg.step_days, kind)
            if best is not None:
                brackets.append(
                    Bracket(best.t - cfg.step_days, best.t + cfg.step_days, kind)
                )
    else:
        brackets.extend(scan(fn, start, end, cfg.step_days, kinds=kinds))

    events = [
        refine_extremum(
            fn,
            bracket,
            tolerance=refine.tolerance_days,
            max_iter=refine.golden_max_iter,
            pad=cfg.pad_days,
            limits=limits,
            body=body,
        )
        for bracket in brackets
    ]
    return dedupe(events, cfg.dedupe_days)


def phase_crossings(
    cfg: PhaseCrossingCfg,
    fn: Callable[[float], float],
    start: float,
    end: float,
    *,
    refine: RefineCfg,
    body: str | None = None,
) -> list[Event]:
    """Refined zero crossings of a wrapped phase difference."""

    events = [
        refine_root(
            fn,
            bracket,
            tolerance=refine.tolerance_days,
            max_iter=refine.bisect_max_iter,
            body=body,
        )
        for bracket in scan(
            fn,
            start,
            end,
            cfg.step_days,
            kinds={BracketKind.ROOT_CROSSING},
            seam_jump=cfg.seam_tolerance_deg,
        )
    ]
    return dedupe(events, cfg.dedupe_days)


def speed_reversals(
    cfg: SpeedReversalCfg,
    oracle: TimeOracle,
    start: float,
    end: float,
    *,
    refine: RefineCfg,
    body: str | None = None,
) -> SearchResult:
    """Motion windows and refined stations from the body's longitude speed."""

    fn = speed_series(oracle, cfg.speed_source)
    windows = segment(
        fn,
        start,
        end,
        cfg.step_days,
        epsilon=cfg.epsilon,
        hysteresis_count=cfg.hysteresis_count,
        min_duration=cfg.min_window_days,
    )
    stations = find_stations(
        fn,
        start,
        end,
        step_days=cfg.step_days,
        tolerance=refine.tolerance_days,
        max_iter=refine.bisect_max_iter,
        body=body,
    )
    return SearchResult(events=stations, windows=windows)


def _run_distance(cfg, oracle, start, end, *, reference, refine, body) -> SearchResult:
    fn = series(oracle, Distance())
    return SearchResult(distance_extrema(cfg, fn, start, end, refine=refine, body=body))


def _run_phase(cfg, oracle, start, end, *, reference, refine, body) -> SearchResult:
    if cfg.reference_body is not None and reference is None:
        raise ValueError(
            f"strategy targets a phase against '{cfg.reference_body}' but no reference oracle was given"
        )
    fn = series(oracle, PhaseDelta(cfg.target_deg), reference)
    return SearchResult(phase_crossings(cfg, fn, start, end, refine=refine, body=body))


def _run_speed(cfg, oracle, start, end, *, reference, refine, body) -> SearchResult:
    return speed_reversals(cfg, oracle, start, end, refine=refine, body=body)


def _run_retrograde_extremum(
    cfg, oracle, start, end, *, reference, refine, body
) -> SearchResult:
    motion = speed_reversals(cfg.windows, oracle, start, end, refine=refine, body=body)
    fn = series(oracle, Distance())
    events: list[Event] = []
    for window in retrograde_windows(motion.windows):
        found = distance_extrema(
            cfg.extremum, fn, window.start, window.end, refine=refine, body=body
        )
        if not found:
            LOG.debug(
                "No distance extremum inside retrograde window [%.4f, %.4f] for %s",
                window.start,
                window.end,
                body or "body",
            )
        events.extend(found)
    return SearchResult(dedupe_by_calendar_day(events), motion.windows)


_HANDLERS = {
    "distance_extremum": _run_distance,
    "phase_crossing": _run_phase,
    "speed_reversal": _run_speed,
    "retrograde_extremum": _run_retrograde_extremum,
}


def run_strategy(
    strategy: DistanceExtremumCfg | SpeedReversalCfg | PhaseCrossingCfg | RetrogradeExtremumCfg,
    oracle: TimeOracle,
    start: float,
    end: float,
    *,
    reference: TimeOracle | None = None,
    clip: tuple[float, float] | None = None,
    refine: RefineCfg | None = None,
    body: str | None = None,
) -> SearchResult:
    """Run ``strategy`` for one body on ``[start, end]``.

    Results are clipped to ``clip`` (half-open) and returned in time order.
    """

    if not start < end:
        raise ValueError("search interval requires start < end")
    handler = _HANDLERS[strategy.kind]
    result = handler(
        strategy,
        oracle,
        start,
        end,
        reference=reference,
        refine=refine or RefineCfg(),
        body=body,
    )
    LOG.debug(
        "Strategy %s for %s produced %d events and %d windows",
        strategy.kind,
        body or "body",
        len(result.events),
        len(result.windows),
    )
    return SearchResult(
        events=clip_events(result.events, clip),
        windows=clip_windows(result.windows, clip),
    )
