"""Prometheus metric definitions shared across astroevents components."""

from __future__ import annotations

from collections.abc import Iterable

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

__all__ = [
    "BODY_COMPUTE_DURATION",
    "BRACKET_VIOLATIONS",
    "COMPUTE_ERRORS",
    "INVALID_SAMPLES",
    "ORACLE_SAMPLES",
    "REFINE_ITERATIONS",
    "ensure_metrics_registered",
]


ORACLE_SAMPLES = Counter(
    "astroevents_oracle_samples_total",
    "Total oracle evaluations issued by scanners and refiners.",
    ("observable",),
    registry=None,
)

INVALID_SAMPLES = Counter(
    "astroevents_invalid_samples_total",
    "Oracle samples skipped because they were missing or non-finite.",
    ("stage",),
    registry=None,
)

BRACKET_VIOLATIONS = Counter(
    "astroevents_bracket_violations_total",
    "Root refinements whose bracket did not contain a sign change.",
    ("operation",),
    registry=None,
)

REFINE_ITERATIONS = Histogram(
    "astroevents_refine_iterations",
    "Iterations spent per refinement call.",
    ("method",),
    buckets=(5, 10, 15, 20, 30, 40, 60, 80, 120),
    registry=None,
)

BODY_COMPUTE_DURATION = Histogram(
    "astroevents_body_compute_duration_seconds",
    "Duration of a single body's search within a batch request.",
    ("feature", "body"),
    registry=None,
)

COMPUTE_ERRORS = Counter(
    "astroevents_compute_errors_total",
    "Count of per-body failures isolated by the batch runner.",
    ("component", "error"),
    registry=None,
)


def _iter_metrics() -> Iterable[Counter | Histogram]:
    yield ORACLE_SAMPLES
    yield INVALID_SAMPLES
    yield BRACKET_VIOLATIONS
    yield REFINE_ITERATIONS
    yield BODY_COMPUTE_DURATION
    yield COMPUTE_ERRORS


def ensure_metrics_registered(
    registry: CollectorRegistry | None = None,
) -> None:
    """Register shared metrics with ``registry`` if not already present."""

    target = registry or REGISTRY
    for metric in _iter_metrics():
        try:
            target.register(metric)
        except ValueError:
            # Prometheus raises when the metric name already exists.
            continue
