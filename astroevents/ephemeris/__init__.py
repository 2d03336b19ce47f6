"""Ephemeris boundary: oracle protocol and the Swiss Ephemeris session."""

from __future__ import annotations

from .oracle import FunctionOracle, OracleSample, TimeOracle, sample_from_vector
from .swe import load_swisseph
from .swiss import BODY_CODES, SwissEphemeris, SwissOracle, body_code
from .utils import get_se_ephe_path, has_ephemeris_files

__all__ = [
    "BODY_CODES",
    "FunctionOracle",
    "OracleSample",
    "SwissEphemeris",
    "SwissOracle",
    "TimeOracle",
    "body_code",
    "get_se_ephe_path",
    "has_ephemeris_files",
    "load_swisseph",
    "sample_from_vector",
]
