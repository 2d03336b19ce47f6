"""Synthetic solar system served through fake ephemeris sessions."""

from __future__ import annotations

import math
from typing import Callable

from astroevents.detectors.common import calendar_to_jd, jd_to_calendar
from astroevents.ephemeris import FunctionOracle
from astroevents.events import Event, EventKind

JD_2024 = calendar_to_jd(2024, 1, 1)

SUN_RATE = 0.9856
SYNODIC_MONTH = 29.53
ANOMALISTIC_MONTH = 27.55
SUN_PERIGEE_DAY = 3.3
NEW_MOON_DAY = 10.0
PLANET_PERIOD = 200.0
PLANET_OPPOSITION_DAY = 100.0


def _sun_lon(t: float) -> float:
    return 280.0 + SUN_RATE * (t - JD_2024)


def _elongation(t: float) -> float:
    return 360.0 * (t - JD_2024 - NEW_MOON_DAY) / SYNODIC_MONTH


def _planet_phase(t: float) -> float:
    return 2.0 * math.pi * (t - JD_2024 - PLANET_OPPOSITION_DAY) / PLANET_PERIOD


def make_sun() -> FunctionOracle:
    return FunctionOracle(
        lon=_sun_lon,
        dist=lambda t: 1.0
        - 0.0167
        * math.cos(2.0 * math.pi * (t - JD_2024 - SUN_PERIGEE_DAY) / 365.25),
        speed=lambda t: SUN_RATE,
        name="sun",
    )


def make_moon() -> FunctionOracle:
    """Moon with a perigee at the first new moon of 2024 (day 10)."""

    return FunctionOracle(
        lon=lambda t: _sun_lon(t) + _elongation(t),
        dist=lambda t: 0.00257
        * (
            1.0
            - 0.055
            * math.cos(2.0 * math.pi * (t - JD_2024 - NEW_MOON_DAY) / ANOMALISTIC_MONTH)
        ),
        speed=lambda t: SUN_RATE + 360.0 / SYNODIC_MONTH,
        name="moon",
    )


def make_planet(name: str = "mars") -> FunctionOracle:
    """Outer planet retrograde around days 100 and 300 of 2024, closest at opposition."""

    amplitude = 20.0
    omega = 2.0 * math.pi / PLANET_PERIOD
    return FunctionOracle(
        lon=lambda t: 40.0 + 0.3 * (t - JD_2024) - amplitude * math.sin(_planet_phase(t)),
        dist=lambda t: 1.5 - 0.5 * math.cos(_planet_phase(t)),
        speed=lambda t: 0.3 - amplitude * omega * math.cos(_planet_phase(t)),
        name=name,
    )


class FakeSession:
    """Context-managed stand-in for :class:`SwissEphemeris`."""

    def __init__(self, factory: "FakeSessionFactory") -> None:
        self._factory = factory

    def __enter__(self) -> "FakeSession":
        self._factory.opened += 1
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._factory.closed += 1

    def oracle(self, body: str) -> FunctionOracle:
        try:
            builder = self._factory.oracles[body.strip().lower()]
        except KeyError:
            raise KeyError(f"unsupported body: {body!r}") from None
        return builder()


class FakeSessionFactory:
    def __init__(self, oracles: dict[str, Callable[[], FunctionOracle]]) -> None:
        self.oracles = oracles
        self.opened = 0
        self.closed = 0

    def __call__(self) -> FakeSession:
        return FakeSession(self)


def make_event(t: float, kind: EventKind = EventKind.MINIMUM, value: float = 0.0) -> Event:
    return Event(t=t, value=value, kind=kind, calendar_date=jd_to_calendar(t))
