"""Numeric event detectors: scanning, refinement, dedupe and classification."""

from __future__ import annotations

from .common import (
    calendar_to_jd,
    delta_deg,
    format_zodiac,
    iso_to_jd,
    jd_to_calendar,
    jd_to_iso,
    norm360,
    wrap180,
    year_bounds,
    zodiac_position,
)
from .cycles import annotate, bounding_extrema, classify, classify_value
from .dedupe import dedupe, dedupe_by_calendar_day
from .observables import Distance, PhaseDelta, Speed, observable, series, speed_series
from .pipeline import SearchResult, run_strategy
from .refine import RefineOutcome, bisect_root, golden_section, refine_extremum, refine_root
from .scanner import sample_grid, scan, scan_global_extremum
from .stations import find_stations
from .windows import WindowStateMachine, retrograde_windows, segment

__all__ = [
    "Distance",
    "PhaseDelta",
    "RefineOutcome",
    "SearchResult",
    "Speed",
    "WindowStateMachine",
    "annotate",
    "bisect_root",
    "bounding_extrema",
    "calendar_to_jd",
    "classify",
    "classify_value",
    "dedupe",
    "dedupe_by_calendar_day",
    "delta_deg",
    "find_stations",
    "format_zodiac",
    "golden_section",
    "iso_to_jd",
    "jd_to_calendar",
    "jd_to_iso",
    "norm360",
    "observable",
    "refine_extremum",
    "refine_root",
    "retrograde_windows",
    "run_strategy",
    "sample_grid",
    "scan",
    "scan_global_extremum",
    "segment",
    "series",
    "speed_series",
    "wrap180",
    "year_bounds",
    "zodiac_position",
]
