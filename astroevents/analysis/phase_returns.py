"""Returns of the Sun-Moon phase angle to its value at birth."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from ..config.settings import PhaseReturnsCfg, Settings
from ..config.strategies import PhaseCrossingCfg
from ..detectors.common import calendar_to_jd, iso_to_jd, jd_to_iso, norm360
from ..detectors.dedupe import dedupe
from ..detectors.observables import phase_angle
from ..detectors.pipeline import run_strategy
from ..reports import PhaseReturnRecord, PhaseReturnsReport
from .batch import SessionFactory
from .common import resolve

__all__ = ["phase_returns", "parse_instant"]

LOG = logging.getLogger(__name__)


def parse_instant(value: str | datetime, name: str = "instant") -> float:
    """Parse an ISO-8601 string or datetime into a Julian day (UT).

    Naive values are taken as UTC.
    """

    if isinstance(value, datetime):
        dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return iso_to_jd(dt.isoformat())
    try:
        return iso_to_jd(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"invalid {name}: {value!r}") from exc


def phase_returns(
    birth: str | datetime,
    *,
    start: str | datetime | None = None,
    end: str | datetime | None = None,
    year: int | None = None,
    step_hours: float | None = None,
    tolerance_deg: float | None = None,
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
) -> PhaseReturnsReport:
    """Return the instants where the Sun-Moon phase angle equals its natal value.

    The interval is ``start``/``end`` or, failing that, the whole of ``year``
    in UTC. Crossings of the opposite phase are excluded by requiring the
    refined difference to stay below ``tolerance_deg``; hits within
    ``dedupe_minutes`` of each other are merged.
    """

    settings, factory = resolve(settings, session_factory)
    overrides: dict[str, float] = {}
    if step_hours is not None:
        overrides["step_hours"] = step_hours
    if tolerance_deg is not None:
        overrides["tolerance_deg"] = tolerance_deg
    cfg = PhaseReturnsCfg(**{**settings.phase_returns.model_dump(), **overrides})

    birth_jd = parse_instant(birth, "birth")
    if start is not None and end is not None:
        start_jd = parse_instant(start, "start")
        end_jd = parse_instant(end, "end")
    elif year is not None:
        start_jd = calendar_to_jd(int(year), 1, 1)
        end_jd = calendar_to_jd(int(year), 12, 31, 23.0 + 59.0 / 60.0 + 59.0 / 3600.0)
    else:
        raise ValueError("either year or both start and end are required")
    if end_jd <= start_jd:
        raise ValueError("end must be after start")

    with factory() as session:
        moon = session.oracle("moon")
        sun = session.oracle("sun")
        target = phase_angle(moon.sample(birth_jd), sun.sample(birth_jd))
        strategy = PhaseCrossingCfg(
            target_deg=target,
            reference_body="sun",
            step_days=cfg.step_hours / 24.0,
            dedupe_days=0.0,
        )
        events = run_strategy(
            strategy,
            moon,
            start_jd,
            end_jd,
            reference=sun,
            refine=settings.refine,
            body="moon",
        ).events

    accepted = [e for e in events if abs(e.value) < cfg.tolerance_deg]
    rejected = len(events) - len(accepted)
    if rejected:
        LOG.debug("Rejected %d phase crossings outside %.3f deg", rejected, cfg.tolerance_deg)
    hits = dedupe(accepted, cfg.dedupe_minutes / 1440.0)

    returns = [
        PhaseReturnRecord.from_event(
            e,
            label="phase return",
            phase_angle_deg=norm360(target + e.value),
            diff_deg=e.value,
        )
        for e in hits
    ]
    return PhaseReturnsReport(
        birth_iso=jd_to_iso(birth_jd),
        target_phase_angle_deg=target,
        start_iso=jd_to_iso(start_jd),
        end_iso=jd_to_iso(end_jd),
        step_hours=cfg.step_hours,
        tolerance_deg=cfg.tolerance_deg,
        count=len(returns),
        returns=returns,
    )
