"""Yearly perigee list for the Sun, the planets and Chiron."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..config.settings import Settings
from ..detectors.dedupe import dedupe_by_calendar_day
from ..detectors.pipeline import run_strategy
from ..detectors.windows import retrograde_windows
from ..reports import BodyReport, EventRecord, PerigeeYearReport, WindowRecord
from .batch import EphemerisSession, SessionFactory, checked_oracle, compute_bodies
from .common import resolve, validate_year, year_search_bounds

__all__ = ["NO_PERIGEE", "perigee_year"]

LOG = logging.getLogger(__name__)

NO_PERIGEE = "no perigee in this year"


def perigee_year(
    year: int,
    *,
    bodies: Sequence[str] | None = None,
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
    workers: int | None = None,
) -> PerigeeYearReport:
    """Return the perigees of each configured body during ``year`` (UTC).

    The Sun reports the annual distance minimum (Earth's perihelion); other
    bodies report one distance minimum inside each retrograde window. Events
    are unique per calendar date.
    """

    year = validate_year(year)
    settings, factory = resolve(settings, session_factory)
    cfg = settings.perigees
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
        events = dedupe_by_calendar_day(result.events)
        return BodyReport(
            body=body,
            events=[EventRecord.from_event(e, label="perigee") for e in events],
            windows=[WindowRecord.from_window(w) for w in retrograde_windows(result.windows)],
            info=None if events else NO_PERIGEE,
        )

    def on_error(body: str, exc: Exception) -> BodyReport:
        return BodyReport(body=body, info=NO_PERIGEE, error=str(exc))

    reports = compute_bodies(
        list(bodies) if bodies is not None else cfg.bodies,
        compute,
        factory,
        on_error=on_error,
        workers=workers or settings.perf.workers,
        feature="perigees",
    )
    total = sum(len(r.events) for r in reports)
    LOG.info("Perigee search for %d found %d events across %d bodies", year, total, len(reports))
    return PerigeeYearReport(year=year, total_count=total, bodies=reports)
