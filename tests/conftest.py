"""Pytest configuration for astroevents."""

from __future__ import annotations

import pytest

from .synthetic import FakeSessionFactory, make_moon, make_planet, make_sun


@pytest.fixture(autouse=True)
def _isolated_home(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("ASTROEVENTS_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("SWE_EPH_PATH", raising=False)
    monkeypatch.delenv("ASTROEVENTS_EPHEMERIS_PATH", raising=False)


@pytest.fixture
def fake_sessions() -> FakeSessionFactory:
    return FakeSessionFactory(
        {
            "sun": make_sun,
            "moon": make_moon,
            "mars": lambda: make_planet("mars"),
            "jupiter": lambda: make_planet("jupiter"),
        }
    )
