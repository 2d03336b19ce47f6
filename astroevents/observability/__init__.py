"""Runtime observability primitives for astroevents."""

from __future__ import annotations

from .metrics import (
    BODY_COMPUTE_DURATION,
    BRACKET_VIOLATIONS,
    COMPUTE_ERRORS,
    INVALID_SAMPLES,
    ORACLE_SAMPLES,
    REFINE_ITERATIONS,
    ensure_metrics_registered,
)

__all__ = [
    "BODY_COMPUTE_DURATION",
    "BRACKET_VIOLATIONS",
    "COMPUTE_ERRORS",
    "INVALID_SAMPLES",
    "ORACLE_SAMPLES",
    "REFINE_ITERATIONS",
    "ensure_metrics_registered",
]
