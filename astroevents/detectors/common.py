"""Shared angle and time helpers for the event detectors."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

__all__ = [
    "GREGORIAN_START_JD",
    "UNIX_EPOCH_JD",
    "ZODIAC_SIGNS",
    "calendar_to_jd",
    "delta_deg",
    "format_zodiac",
    "iso_to_jd",
    "jd_to_calendar",
    "jd_to_datetime",
    "jd_to_iso",
    "norm360",
    "wrap180",
    "year_bounds",
    "zodiac_position",
]

# --- Angle helpers -----------------------------------------------------------


def norm360(x: float) -> float:
    """Normalise ``x`` into the [0, 360) range."""

    x = math.fmod(x, 360.0)
    if x < 0:
        x += 360.0
    # tiny negatives round up to exactly 360.0
    return 0.0 if x >= 360.0 else x


def wrap180(d: float) -> float:
    """Wrap an angular difference into the (-180, 180] range."""

    wrapped = ((d + 540.0) % 360.0) - 180.0
    return 180.0 if wrapped == -180.0 else wrapped


def delta_deg(a: float, b: float) -> float:
    """Smallest signed angular difference ``a - b`` in degrees."""

    return wrap180(a - b)


# --- Time helpers ------------------------------------------------------------
UNIX_EPOCH_JD = 2440587.5  # JD at 1970-01-01T00:00:00Z
GREGORIAN_START_JD = 2299160.5  # 1582-10-15T00:00:00Z

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _jd_fields(jd_ut: float) -> tuple[int, int, int, float]:
    """Split ``jd_ut`` into ``(year, month, day, day_fraction)``.

    Meeus' algorithm: Julian calendar before 1582-10-15, Gregorian after,
    astronomical year numbering. Valid for any finite day count.
    """

    z = math.floor(jd_ut + 0.5)
    fraction = jd_ut + 0.5 - z
    a = z
    if z >= 2299161:
        alpha = math.floor((z - 1867216.25) / 36524.25)
        a = z + 1 + alpha - math.floor(alpha / 4)
    b = a + 1524
    c = math.floor((b - 122.1) / 365.25)
    d = math.floor(365.25 * c)
    e = math.floor((b - d) / 30.6001)
    day = b - d - math.floor(30.6001 * e)
    month = e - 1 if e < 14 else e - 13
    year = c - 4716 if month > 2 else c - 4715
    return int(year), int(month), int(day), fraction


def jd_to_datetime(jd_ut: float) -> datetime:
    """Convert a Julian day (UT) to an aware UTC :class:`datetime`.

    Raises :class:`OverflowError` outside the years 1-9999.
    """

    return _EPOCH + timedelta(seconds=(jd_ut - UNIX_EPOCH_JD) * 86400.0)


def jd_to_iso(jd_ut: float) -> str:
    """Convert a Julian day (UT) to an ISO-8601 UTC timestamp.

    Instants before the Gregorian reform or beyond :class:`datetime` range are
    rendered from the same calendar fields as :func:`jd_to_calendar`.
    """

    if GREGORIAN_START_JD <= jd_ut < _MAX_DATETIME_JD:
        dt = jd_to_datetime(jd_ut)
        return dt.replace(microsecond=0).isoformat().replace("+00:00", "Z")
    year, month, day, fraction = _jd_fields(jd_ut)
    seconds = min(int(fraction * 86400.0), 86399)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    year_str = f"{year:04d}" if year >= 0 else f"-{-year:04d}"
    return f"{year_str}-{month:02d}-{day:02d}T{hours:02d}:{minutes:02d}:{secs:02d}Z"


def iso_to_jd(iso_ts: str) -> float:
    """Convert an ISO-8601 timestamp into a Julian day (UT)."""

    dt = datetime.fromisoformat(iso_ts.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt.astimezone(timezone.utc).timestamp() / 86400.0) + UNIX_EPOCH_JD


def jd_to_calendar(jd_ut: float) -> tuple[int, int, int]:
    """Return the UTC calendar date ``(year, month, day)`` containing ``jd_ut``."""

    year, month, day, _ = _jd_fields(jd_ut)
    return (year, month, day)


def calendar_to_jd(year: int, month: int, day: int, hour: float = 0.0) -> float:
    """Return the Julian day (UT) for a Gregorian calendar date and hour."""

    dt = datetime(year, month, day, tzinfo=timezone.utc) + timedelta(hours=hour)
    return (dt - _EPOCH).total_seconds() / 86400.0 + UNIX_EPOCH_JD


_MAX_DATETIME_JD = calendar_to_jd(9999, 12, 31)


def year_bounds(year: int) -> tuple[float, float]:
    """Return ``(1 Jan 00:00 UT, 1 Jan 00:00 UT of year+1)`` as Julian days."""

    return calendar_to_jd(year, 1, 1), calendar_to_jd(year + 1, 1, 1)


# --- Zodiac formatting -------------------------------------------------------

ZODIAC_SIGNS: tuple[str, ...] = (
    "Aries",
    "Taurus",
    "Gemini",
    "Cancer",
    "Leo",
    "Virgo",
    "Libra",
    "Scorpio",
    "Sagittarius",
    "Capricorn",
    "Aquarius",
    "Pisces",
)


def zodiac_position(lon: float) -> tuple[str, int, int]:
    """Return ``(sign, degree, minute)`` for an ecliptic longitude.

    Degrees and minutes are truncated, so ``29°59'`` never rolls into the
    next sign.
    """

    lon = norm360(lon)
    sign_index = min(int(lon // 30.0), 11)
    within = lon - sign_index * 30.0
    degree = int(within)
    minute = min(int((within - degree) * 60.0 + 1e-9), 59)
    return ZODIAC_SIGNS[sign_index], degree, minute


def format_zodiac(lon: float) -> str:
    """Format an ecliptic longitude as e.g. ``"13°40' Virgo"``."""

    sign, degree, minute = zodiac_position(lon)
    return f"{degree}°{minute:02d}' {sign}"
