from __future__ import annotations

import pytest

from astroevents.analysis import perigee_year, retrograde_year
from astroevents.analysis.perigees import NO_PERIGEE
from astroevents.config import Settings

from ..synthetic import JD_2024, SUN_PERIGEE_DAY

TOL = 2.0 / 1440.0


def test_perigees_for_sun_and_planet(fake_sessions):
    report = perigee_year(
        2024,
        bodies=["sun", "mars", "pluto"],
        settings=Settings(),
        session_factory=fake_sessions,
    )
    by_body = {b.body: b for b in report.bodies}
    assert list(by_body) == ["sun", "mars", "pluto"]

    sun = by_body["sun"]
    assert sun.ok
    assert [e.jd - JD_2024 for e in sun.events] == pytest.approx([SUN_PERIGEE_DAY], abs=TOL)
    assert sun.events[0].label == "perigee"
    assert sun.events[0].date == "2024-01-04"

    mars = by_body["mars"]
    assert [e.jd - JD_2024 for e in mars.events] == pytest.approx([100.0, 300.0], abs=TOL)
    assert len(mars.windows) == 2
    assert all(w.state == "retrograde" for w in mars.windows)

    pluto = by_body["pluto"]
    assert not pluto.ok
    assert pluto.info == NO_PERIGEE
    assert "pluto" in pluto.error

    assert report.total_count == 3
    assert report.time_basis == "UTC"


def test_parallel_workers_match_sequential(fake_sessions):
    bodies = ["sun", "mars", "jupiter"]
    sequential = perigee_year(2024, bodies=bodies, session_factory=fake_sessions)
    parallel = perigee_year(
        2024, bodies=bodies, session_factory=fake_sessions, workers=3
    )
    assert parallel == sequential


@pytest.mark.parametrize("year", [1899, 2051, "abc"])
def test_year_range_is_validated(fake_sessions, year):
    with pytest.raises(ValueError):
        perigee_year(year, session_factory=fake_sessions)


def test_retrograde_windows_and_stations(fake_sessions):
    report = retrograde_year(2024, bodies=["mars", "sun"], session_factory=fake_sessions)
    mars, sun = report.bodies
    assert [w.state for w in mars.windows] == ["retrograde", "retrograde"]
    assert [e.label for e in mars.events] == ["retrograde", "direct", "retrograde", "direct"]
    assert [e.jd - JD_2024 for e in mars.events] == pytest.approx(
        [65.85, 134.15, 265.85, 334.15], abs=0.02
    )
    assert sun.windows == []
    assert sun.events == []
    assert sun.info == "no retrograde window in this year"
