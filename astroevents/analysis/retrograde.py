"""Yearly retrograde windows and stations per body."""

from __future__ import annotations

from collections.abc import Sequence

from ..config.settings import Settings
from ..detectors.pipeline import run_strategy
from ..detectors.windows import retrograde_windows
from ..reports import BodyReport, EventRecord, RetrogradeYearReport, WindowRecord
from .batch import EphemerisSession, SessionFactory, checked_oracle, compute_bodies
from .common import resolve, validate_year, year_search_bounds

__all__ = ["NO_RETROGRADE", "retrograde_year"]

NO_RETROGRADE = "no retrograde window in this year"


def retrograde_year(
    year: int,
    *,
    bodies: Sequence[str] | None = None,
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
    workers: int | None = None,
) -> RetrogradeYearReport:
    """Return retrograde windows and refined stations for ``year``."""

    year = validate_year(year)
    settings, factory = resolve(settings, session_factory)
    cfg = settings.retrograde
    start, year_end, search_end = year_search_bounds(year)

    def compute(session: EphemerisSession, body: str) -> BodyReport:
        oracle = checked_oracle(session, body, start)
        result = run_strategy(
            cfg.strategy_for(body),
            oracle,
            start,
            search_end,
            clip=(start, year_end),
            refine=settings.refine,
            body=body,
        )
        windows = retrograde_windows(result.windows)
        return BodyReport(
            body=body,
            events=[EventRecord.from_event(e) for e in result.events],
            windows=[WindowRecord.from_window(w) for w in windows],
            info=None if windows else NO_RETROGRADE,
        )

    def on_error(body: str, exc: Exception) -> BodyReport:
        return BodyReport(body=body, error=str(exc))

    reports = compute_bodies(
        list(bodies) if bodies is not None else cfg.bodies,
        compute,
        factory,
        on_error=on_error,
        workers=workers or settings.perf.workers,
        feature="retrograde",
    )
    return RetrogradeYearReport(year=year, bodies=reports)
