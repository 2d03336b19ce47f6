"""Lunar perigees and apogees with super/mini new and full moons."""

from __future__ import annotations

import logging

from ..config.settings import Settings
from ..detectors.common import norm360
from ..detectors.cycles import classify, nearest
from ..detectors.observables import phase_angle
from ..detectors.pipeline import clip_events, run_strategy
from ..ephemeris.oracle import TimeOracle
from ..events import Classification, Event, EventKind
from ..exceptions import InvalidSample
from ..reports import EventRecord, LunarYearReport
from .batch import SessionFactory
from .common import resolve, validate_year, year_search_bounds

__all__ = ["SUPER_MINI_RULE", "lunar_year", "phase_label"]

LOG = logging.getLogger(__name__)

SUPER_MINI_RULE = (
    "New or full moon within the innermost {pct:g}% of the distance span between "
    "the perigee and apogee of its cycle."
)

# Margin around the year so the first and last phases have a bounding cycle.
_CYCLE_MARGIN_DAYS = 30.0


def phase_label(angle: float, tolerance: float = 5.0) -> str:
    """Name the Moon phase for a Sun-Moon elongation in degrees."""

    angle = norm360(angle)
    if min(angle, 360.0 - angle) <= tolerance:
        return "new moon"
    if abs(angle - 180.0) <= tolerance:
        return "full moon"
    if abs(angle - 90.0) <= tolerance:
        return "first quarter"
    if abs(angle - 270.0) <= tolerance:
        return "last quarter"
    if angle < 90.0:
        return "waxing crescent"
    if angle < 180.0:
        return "waxing gibbous"
    if angle < 270.0:
        return "waning gibbous"
    return "waning crescent"


def _label_at(moon: TimeOracle, sun: TimeOracle, t: float, tolerance: float) -> str | None:
    try:
        return phase_label(phase_angle(moon.sample(t), sun.sample(t)), tolerance)
    except InvalidSample:
        LOG.debug("No phase label at jd=%.6f", t)
        return None


def _attach_note(events: list[Event], t: float, note: str) -> None:
    target = nearest(events, t)
    if target is None:
        return
    index = events.index(target)
    events[index] = target.with_note(note)


def lunar_year(
    year: int,
    *,
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
) -> LunarYearReport:
    """Return the lunar perigees, apogees, new and full moons of ``year``.

    Each new or full moon is classified against the perigee/apogee cycle it
    falls in; super and mini events are noted on the nearest perigee or
    apogee respectively.
    """

    year = validate_year(year)
    settings, factory = resolve(settings, session_factory)
    cfg = settings.lunar
    start, year_end, search_end = year_search_bounds(year)
    clip = (start, year_end)
    pct = cfg.classification_fraction * 100.0

    with factory() as session:
        moon = session.oracle("moon")
        sun = session.oracle("sun")

        extrema = run_strategy(
            cfg.distance,
            moon,
            start - _CYCLE_MARGIN_DAYS,
            search_end + _CYCLE_MARGIN_DAYS,
            refine=settings.refine,
            body="moon",
        ).events
        perigees = [
            e.evolve(label=_label_at(moon, sun, e.t, cfg.label_tolerance_deg))
            for e in extrema
            if e.kind is EventKind.MINIMUM
        ]
        apogees = [
            e.evolve(label=_label_at(moon, sun, e.t, cfg.label_tolerance_deg))
            for e in extrema
            if e.kind is EventKind.MAXIMUM
        ]

        phases: dict[str, list[Event]] = {}
        for name, target in (("new moon", 0.0), ("full moon", 180.0)):
            strategy = cfg.phases.model_copy(update={"target_deg": target})
            found = run_strategy(
                strategy,
                moon,
                start,
                search_end,
                reference=sun,
                clip=clip,
                refine=settings.refine,
                body="moon",
            ).events
            classified: list[Event] = []
            for event in found:
                try:
                    distance = moon.sample(event.t).dist_au
                except InvalidSample:
                    classified.append(event.evolve(label=name))
                    continue
                verdict = classify(
                    event,
                    perigees,
                    apogees,
                    cfg.classification_fraction,
                    value=distance,
                )
                event = event.evolve(label=name, classification=verdict)
                if verdict is Classification.NEAR_MINIMUM:
                    note = f"super {name} on {event.date_str} (within the innermost {pct:g}% of the distance span)"
                    _attach_note(perigees, event.t, note)
                    event = event.with_note(f"super {name}")
                elif verdict is Classification.NEAR_MAXIMUM:
                    note = f"mini {name} on {event.date_str} (within the innermost {pct:g}% of the distance span)"
                    _attach_note(apogees, event.t, note)
                    event = event.with_note(f"mini {name}")
                classified.append(event)
            phases[name] = classified

    return LunarYearReport(
        year=year,
        super_mini_rule=SUPER_MINI_RULE.format(pct=pct),
        perigees=[EventRecord.from_event(e) for e in clip_events(perigees, clip)],
        apogees=[EventRecord.from_event(e) for e in clip_events(apogees, clip)],
        new_moons=[EventRecord.from_event(e) for e in phases["new moon"]],
        full_moons=[EventRecord.from_event(e) for e in phases["full moon"]],
    )
