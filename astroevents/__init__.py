"""astroevents: numeric search for astronomical events.

The engine samples a body's position from an ephemeris oracle on a coarse
grid, brackets extrema and crossings, refines them, and reports deduplicated,
classified events (perigees, stations, lunations, phase returns).
"""

from __future__ import annotations

from .ephemeris import FunctionOracle, OracleSample, SwissEphemeris, TimeOracle
from .events import (
    Bracket,
    BracketKind,
    Classification,
    Event,
    EventKind,
    MotionState,
    TimeSample,
    Window,
)
from .exceptions import BracketInvariantViolation, ConfigurationError, InvalidSample

__version__ = "0.1.0"

__all__ = [
    "Bracket",
    "BracketInvariantViolation",
    "BracketKind",
    "Classification",
    "ConfigurationError",
    "Event",
    "EventKind",
    "FunctionOracle",
    "InvalidSample",
    "MotionState",
    "OracleSample",
    "SwissEphemeris",
    "TimeOracle",
    "TimeSample",
    "Window",
    "__version__",
]
