"""Projection of oracle samples onto the scalar observables searched over."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal, Union

from ..ephemeris.oracle import OracleSample, TimeOracle
from ..exceptions import InvalidSample
from ..observability import ORACLE_SAMPLES
from .common import norm360, wrap180

__all__ = [
    "Distance",
    "ObservableMode",
    "PhaseDelta",
    "Speed",
    "SpeedSource",
    "observable",
    "phase_angle",
    "series",
    "speed_series",
]

SpeedSource = Literal["auto", "field", "finite_difference"]

_FD_STEP_DAYS = 1.0 / 24.0


@dataclass(frozen=True)
class Distance:
    """Geocentric distance in AU."""

    name: str = "distance"


@dataclass(frozen=True)
class Speed:
    """Signed ecliptic longitude speed in degrees per day."""

    name: str = "speed"


@dataclass(frozen=True)
class PhaseDelta:
    """Wrapped difference between the phase angle and ``target_deg``."""

    target_deg: float
    name: str = "phase_delta"


ObservableMode = Union[Distance, Speed, PhaseDelta]


def phase_angle(sample: OracleSample, reference: OracleSample | None = None) -> float:
    """Return ``lon - reference.lon`` in [0, 360), or ``lon`` without a reference."""

    if reference is None:
        return norm360(sample.lon_deg)
    return norm360(sample.lon_deg - reference.lon_deg)


def observable(
    sample: OracleSample,
    mode: ObservableMode,
    reference: OracleSample | None = None,
) -> float:
    """Project ``sample`` onto the scalar selected by ``mode``."""

    if isinstance(mode, Distance):
        value = sample.dist_au
        if not math.isfinite(value) or value <= 0.0:
            raise InvalidSample(f"distance must be finite and positive (got {value!r})")
        return value
    if isinstance(mode, Speed):
        value = sample.speed_deg_per_day
        if not math.isfinite(value):
            raise InvalidSample("oracle did not provide a finite longitude speed")
        return value
    if isinstance(mode, PhaseDelta):
        return wrap180(phase_angle(sample, reference) - mode.target_deg)
    raise TypeError(f"unsupported observable mode: {mode!r}")


def series(
    oracle: TimeOracle,
    mode: ObservableMode,
    reference: TimeOracle | None = None,
) -> Callable[[float], float]:
    """Bind ``oracle`` (and an optional reference body) to a function of time."""

    counter = ORACLE_SAMPLES.labels(observable=mode.name)

    def evaluate(t: float) -> float:
        counter.inc()
        sample = oracle.sample(t)
        ref_sample = reference.sample(t) if reference is not None else None
        try:
            return observable(sample, mode, ref_sample)
        except InvalidSample as exc:
            if exc.t is None:
                exc.t = t
            raise

    return evaluate


def speed_series(
    oracle: TimeOracle,
    source: SpeedSource = "auto",
    *,
    h: float = _FD_STEP_DAYS,
) -> Callable[[float], float]:
    """Return longitude speed as a function of time.

    ``field`` trusts the oracle's speed value, ``finite_difference`` uses a
    centred difference of wrapped longitude over ``2 * h`` days and ``auto``
    uses the field whenever it is finite.
    """

    if source not in ("auto", "field", "finite_difference"):
        raise ValueError(f"unknown speed source: {source!r}")
    if h <= 0:
        raise ValueError("finite difference step must be positive")

    counter = ORACLE_SAMPLES.labels(observable="speed")

    def finite_difference(t: float) -> float:
        counter.inc(2)
        before = oracle.sample(t - h).lon_deg
        after = oracle.sample(t + h).lon_deg
        return wrap180(after - before) / (2.0 * h)

    def evaluate(t: float) -> float:
        if source == "finite_difference":
            return finite_difference(t)
        counter.inc()
        value = oracle.sample(t).speed_deg_per_day
        if math.isfinite(value):
            return value
        if source == "field":
            raise InvalidSample("oracle did not provide a finite longitude speed", t=t)
        return finite_difference(t)

    return evaluate
