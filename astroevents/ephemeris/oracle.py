"""Oracle boundary: typed samples and the protocol consumed by the engine."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ..exceptions import InvalidSample

__all__ = [
    "FunctionOracle",
    "OracleSample",
    "TimeOracle",
    "sample_from_vector",
]


@dataclass(frozen=True, slots=True)
class OracleSample:
    """Instantaneous state of a body at a continuous time.

    ``speed_deg_per_day`` may be ``nan`` when the backend cannot provide a
    longitude rate; every other field is validated finite at construction by
    :func:`sample_from_vector`.
    """

    lon_deg: float
    lat_deg: float
    dist_au: float
    speed_deg_per_day: float


@runtime_checkable
class TimeOracle(Protocol):
    """Deterministic source of :class:`OracleSample` values.

    Implementations raise :class:`~astroevents.exceptions.InvalidSample` when
    the body/time combination is unsupported or non-finite. Oracles are not
    assumed to be re-entrant.
    """

    def sample(self, t: float) -> OracleSample:
        ...


def sample_from_vector(
    values: Sequence[float], *, t: float, body: str | None = None
) -> OracleSample:
    """Build an :class:`OracleSample` from a ``(lon, lat, dist, speed, ...)`` vector."""

    if len(values) < 3:
        raise InvalidSample(
            f"oracle returned {len(values)} values; expected at least 3",
            t=t,
            body=body,
        )
    lon, lat, dist = (float(values[0]), float(values[1]), float(values[2]))
    speed = float(values[3]) if len(values) > 3 else math.nan
    if not (math.isfinite(lon) and math.isfinite(lat) and math.isfinite(dist)):
        raise InvalidSample("oracle returned non-finite position", t=t, body=body)
    return OracleSample(
        lon_deg=lon % 360.0,
        lat_deg=lat,
        dist_au=dist,
        speed_deg_per_day=speed,
    )


class FunctionOracle:
    """Oracle backed by plain Python callables of time.

    Used for synthetic series and for adapting other ephemeris providers.
    Missing callables default to zero (``speed`` defaults to ``nan``).
    """

    def __init__(
        self,
        *,
        lon: Callable[[float], float] | None = None,
        lat: Callable[[float], float] | None = None,
        dist: Callable[[float], float] | None = None,
        speed: Callable[[float], float] | None = None,
        name: str | None = None,
    ) -> None:
        self._lon = lon
        self._lat = lat
        self._dist = dist
        self._speed = speed
        self.name = name
        self.calls = 0

    def sample(self, t: float) -> OracleSample:
        self.calls += 1
        vector = (
            self._lon(t) if self._lon else 0.0,
            self._lat(t) if self._lat else 0.0,
            self._dist(t) if self._dist else 1.0,
            self._speed(t) if self._speed else math.nan,
        )
        return sample_from_vector(vector, t=t, body=self.name)
