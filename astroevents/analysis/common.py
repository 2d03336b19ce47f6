"""Request validation shared by the analysis features."""

from __future__ import annotations

from ..config.settings import Settings
from ..detectors.common import year_bounds
from .batch import SessionFactory, swiss_session_factory

__all__ = ["YEAR_MAX", "YEAR_MIN", "resolve", "validate_year", "year_search_bounds"]

YEAR_MIN = 1900
YEAR_MAX = 2050


def validate_year(year: int) -> int:
    """Return ``year`` as an int, rejecting values outside 1900-2050."""

    try:
        value = int(year)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"year must be an integer (got {year!r})") from exc
    if not YEAR_MIN <= value <= YEAR_MAX:
        raise ValueError(f"year must be between {YEAR_MIN} and {YEAR_MAX} (got {value})")
    return value


def year_search_bounds(year: int) -> tuple[float, float, float]:
    """Return ``(start, year_end, search_end)`` Julian days for ``year``.

    The search runs one day past the end of the year so events close to
    midnight on 31 December are bracketed; results are clipped to
    ``[start, year_end)``.
    """

    start, year_end = year_bounds(year)
    return start, year_end, year_end + 1.0


def resolve(
    settings: Settings | None, session_factory: SessionFactory | None
) -> tuple[Settings, SessionFactory]:
    """Fill in default settings and the Swiss Ephemeris session factory."""

    settings = settings or Settings()
    return settings, session_factory or swiss_session_factory(settings.ephemeris)
