from __future__ import annotations

import pytest

from astroevents.detectors.common import (
    calendar_to_jd,
    delta_deg,
    format_zodiac,
    iso_to_jd,
    jd_to_calendar,
    jd_to_iso,
    norm360,
    year_bounds,
    zodiac_position,
)


def test_j2000_round_trip():
    assert iso_to_jd("2000-01-01T12:00:00Z") == pytest.approx(2451545.0)
    assert jd_to_iso(2451545.0) == "2000-01-01T12:00:00Z"


def test_naive_iso_is_utc_and_offsets_are_honoured():
    assert iso_to_jd("2000-01-01T12:00:00") == pytest.approx(2451545.0)
    assert iso_to_jd("2000-01-01T13:00:00+01:00") == pytest.approx(2451545.0)


def test_calendar_helpers():
    assert calendar_to_jd(2000, 1, 1, 12.0) == pytest.approx(2451545.0)
    assert jd_to_calendar(2451544.5) == (2000, 1, 1)
    assert jd_to_calendar(2451544.4999) == (1999, 12, 31)
    start, end = year_bounds(2024)
    assert end - start == 366.0


def test_angles():
    assert norm360(-10.0) == 350.0
    assert norm360(725.0) == 5.0
    assert delta_deg(5.0, 355.0) == pytest.approx(10.0)
    assert delta_deg(355.0, 5.0) == pytest.approx(-10.0)


@pytest.mark.parametrize(
    "lon,expected",
    [
        (0.0, ("Aries", 0, 0)),
        (163.6667, ("Virgo", 13, 40)),
        (359.99, ("Pisces", 29, 59)),
        (-30.0, ("Pisces", 0, 0)),
    ],
)
def test_zodiac_position(lon, expected):
    assert zodiac_position(lon) == expected


def test_format_zodiac():
    assert format_zodiac(163.6667) == "13°40' Virgo"


def test_norm360_never_returns_full_turn():
    assert norm360(-1e-20) == 0.0
    assert norm360(360.0) == 0.0
    assert zodiac_position(-1e-20) == ("Aries", 0, 0)


@pytest.mark.parametrize(
    "jd,expected",
    [
        (0.0, (-4712, 1, 1)),
        (10.0, (-4712, 1, 11)),
        (-1.0, (-4713, 12, 31)),
        (2299159.5, (1582, 10, 4)),
        (2299160.5, (1582, 10, 15)),
    ],
)
def test_calendar_date_for_any_day_count(jd, expected):
    assert jd_to_calendar(jd) == expected


def test_iso_outside_datetime_range():
    assert jd_to_iso(10.25) == "-4712-01-11T18:00:00Z"
    assert jd_to_iso(2299159.5) == "1582-10-04T00:00:00Z"
