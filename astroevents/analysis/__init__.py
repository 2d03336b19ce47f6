"""Request-level features built on the detector pipeline."""

from __future__ import annotations

from .batch import EphemerisSession, SessionFactory, compute_bodies, swiss_session_factory
from .common import YEAR_MAX, YEAR_MIN, validate_year
from .lunar import lunar_year, phase_label
from .natal_transits import natal_transits
from .perigees import perigee_year
from .phase_returns import phase_returns
from .retrograde import retrograde_year

__all__ = [
    "EphemerisSession",
    "SessionFactory",
    "YEAR_MAX",
    "YEAR_MIN",
    "compute_bodies",
    "lunar_year",
    "natal_transits",
    "perigee_year",
    "phase_label",
    "phase_returns",
    "retrograde_year",
    "swiss_session_factory",
    "validate_year",
]
