"""Prenatal crossings of the slow bodies' natal longitudes."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime

from ..config.settings import Settings
from ..config.strategies import PhaseCrossingCfg
from ..detectors.common import calendar_to_jd, format_zodiac, zodiac_position
from ..detectors.dedupe import dedupe_by_calendar_day
from ..detectors.observables import speed_series
from ..detectors.pipeline import run_strategy
from ..reports import NatalBodyReport, NatalTransitsReport, TransitHit
from .batch import EphemerisSession, SessionFactory, compute_bodies
from .common import resolve

__all__ = ["NO_CROSSING", "natal_transits", "parse_birth_date"]

NO_CROSSING = "no crossing of the natal longitude in the prenatal window"


def parse_birth_date(value: str | date) -> date:
    """Accept a :class:`date` or an ``YYYY-MM-DD`` string."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"invalid birth date: {value!r} (expected YYYY-MM-DD)") from exc


def natal_transits(
    birth_date: str | date,
    *,
    bodies: Sequence[str] | None = None,
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
    workers: int | None = None,
) -> NatalTransitsReport:
    """Find the days before birth on which each body crossed its natal longitude.

    The natal longitude is taken at 00:00 UT on ``birth_date``; the search
    covers ``[birth - lookback_days, birth - ignore_last_days)``. At most one
    hit is reported per calendar day.
    """

    birth = parse_birth_date(birth_date)
    settings, factory = resolve(settings, session_factory)
    cfg = settings.natal_transits
    if cfg.ignore_last_days >= cfg.lookback_days:
        raise ValueError("ignore_last_days must be smaller than lookback_days")
    birth_jd = calendar_to_jd(birth.year, birth.month, birth.day)
    start = birth_jd - cfg.lookback_days
    end = birth_jd - cfg.ignore_last_days

    def compute(session: EphemerisSession, body: str) -> NatalBodyReport:
        oracle = session.oracle(body)
        natal_lon = oracle.sample(birth_jd).lon_deg
        strategy = PhaseCrossingCfg(
            target_deg=natal_lon, step_days=cfg.step_days, dedupe_days=0.0
        )
        events = run_strategy(
            strategy,
            oracle,
            start,
            end,
            clip=(start, end),
            refine=settings.refine,
            body=body,
        ).events
        speed = speed_series(oracle)
        hits: list[TransitHit] = []
        for event in dedupe_by_calendar_day(events):
            lon = oracle.sample(event.t).lon_deg
            sign, degree, minute = zodiac_position(lon)
            hits.append(
                TransitHit.from_event(
                    event,
                    label="natal longitude",
                    longitude=round(lon, 4),
                    sign=sign,
                    degree=degree,
                    minute=minute,
                    position=format_zodiac(lon),
                    retrograde=speed(event.t) < 0,
                )
            )
        return NatalBodyReport(
            body=body,
            target_longitude=natal_lon,
            found=bool(hits),
            hits=hits,
            info=None if hits else NO_CROSSING,
        )

    def on_error(body: str, exc: Exception) -> NatalBodyReport:
        return NatalBodyReport(body=body, error=str(exc))

    reports = compute_bodies(
        list(bodies) if bodies is not None else cfg.bodies,
        compute,
        factory,
        on_error=on_error,
        workers=workers or settings.perf.workers,
        feature="natal_transits",
    )
    return NatalTransitsReport(
        birth_date=birth.isoformat(),
        lookback_days=cfg.lookback_days,
        ignore_last_days=cfg.ignore_last_days,
        bodies=reports,
    )
