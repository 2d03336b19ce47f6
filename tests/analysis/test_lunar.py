from __future__ import annotations

import pytest

from astroevents.analysis import lunar_year, phase_label

from ..synthetic import JD_2024, NEW_MOON_DAY

TOL = 2.0 / 1440.0


@pytest.mark.parametrize(
    "angle,label",
    [
        (2.0, "new moon"),
        (358.0, "new moon"),
        (45.0, "waxing crescent"),
        (92.0, "first quarter"),
        (135.0, "waxing gibbous"),
        (181.0, "full moon"),
        (200.0, "waning gibbous"),
        (268.0, "last quarter"),
        (300.0, "waning crescent"),
    ],
)
def test_phase_label(angle, label):
    assert phase_label(angle) == label


def test_lunar_year(fake_sessions):
    report = lunar_year(2024, session_factory=fake_sessions)

    assert len(report.perigees) == 13
    assert len(report.apogees) == 13
    assert len(report.new_moons) == 13
    assert len(report.full_moons) == 12
    assert "10%" in report.super_mini_rule

    first_new = report.new_moons[0]
    assert first_new.jd - JD_2024 == pytest.approx(NEW_MOON_DAY, abs=TOL)
    assert first_new.label == "new moon"
    assert first_new.classification == "near_minimum"
    assert "super new moon" in first_new.notes

    first_perigee = report.perigees[0]
    assert first_perigee.jd - JD_2024 == pytest.approx(NEW_MOON_DAY, abs=TOL)
    assert first_perigee.label == "new moon"
    assert any(n.startswith("super new moon on") for n in first_perigee.notes)

    first_full = report.full_moons[0]
    assert first_full.classification == "near_maximum"
    assert "mini full moon" in first_full.notes
    assert any(any(n.startswith("mini full moon on") for n in a.notes) for a in report.apogees)

    for records in (report.perigees, report.apogees, report.new_moons, report.full_moons):
        assert all(r.date.startswith("2024-") for r in records)
        assert [r.jd for r in records] == sorted(r.jd for r in records)
