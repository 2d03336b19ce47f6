"""Exception taxonomy shared by the event search engine."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

__all__ = [
    "BracketInvariantViolation",
    "ConfigurationError",
    "InvalidSample",
]


class InvalidSample(ValueError):
    """Raised when the oracle cannot produce a finite sample at ``t``.

    Scanners treat this as a missing data point rather than a fatal error.
    """

    def __init__(
        self,
        message: str,
        *,
        t: float | None = None,
        body: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.t = t
        self.body = body
        self.context = dict(context or {})


class BracketInvariantViolation(ValueError):
    """Raised when a root bracket does not contain a sign change."""

    def __init__(self, lo: float, hi: float, f_lo: float, f_hi: float) -> None:
        super().__init__(
            f"bracket [{lo:.6f}, {hi:.6f}] has no sign change "
            f"(f(lo)={f_lo!r}, f(hi)={f_hi!r})"
        )
        self.lo = lo
        self.hi = hi
        self.f_lo = f_lo
        self.f_hi = f_hi


class ConfigurationError(RuntimeError):
    """Raised when the ephemeris resource cannot be initialised."""
