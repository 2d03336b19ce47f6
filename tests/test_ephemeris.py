from __future__ import annotations

import os
import sys

import pytest

from astroevents.config import EphemerisCfg
from astroevents.ephemeris import BODY_CODES, SwissEphemeris, body_code, load_swisseph
from astroevents.ephemeris.utils import (
    get_se_ephe_path,
    has_ephemeris_files,
    iter_candidate_paths,
)
from astroevents.exceptions import ConfigurationError


def test_body_codes_cover_planets_and_chiron():
    for name in ("sun", "moon", "mercury", "pluto", "chiron"):
        assert name in BODY_CODES
    swisseph = pytest.importorskip("swisseph")
    assert body_code(" Mars ") == body_code("mars") == swisseph.MARS
    with pytest.raises(KeyError):
        body_code("vulcan")


def test_missing_configured_path_is_a_configuration_error(tmp_path):
    session = SwissEphemeris.from_settings(EphemerisCfg(path=str(tmp_path / "missing")))
    with pytest.raises(ConfigurationError):
        session._resolve_path()


def test_environment_path_must_be_a_directory(monkeypatch, tmp_path):
    monkeypatch.setenv("SE_EPHE_PATH", str(tmp_path / "nowhere"))
    with pytest.raises(ConfigurationError, match="SE_EPHE_PATH"):
        SwissEphemeris()._resolve_path()


def test_oracle_requires_open_session():
    with pytest.raises(ConfigurationError):
        SwissEphemeris().oracle("sun")


def test_has_ephemeris_files(tmp_path):
    assert not has_ephemeris_files(tmp_path)
    (tmp_path / "sepl_18.se1").write_bytes(b"")
    assert has_ephemeris_files(tmp_path)
    assert not has_ephemeris_files(None)


def test_environment_path_wins_over_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv("SE_EPHE_PATH", str(tmp_path))
    assert get_se_ephe_path() == str(tmp_path)
    assert next(iter_candidate_paths(tmp_path)) == str(tmp_path)


@pytest.mark.swiss
@pytest.mark.skipif(not os.environ.get("SE_EPHE_PATH"), reason="SE_EPHE_PATH not set")
def test_swiss_session_samples_the_sun():
    pytest.importorskip("swisseph")
    with SwissEphemeris() as session:
        assert session.mode in {"swiss", "moshier"}
        sample = session.oracle("sun").sample(2451545.0)
    assert 280.0 < sample.lon_deg < 281.0
    assert sample.dist_au == pytest.approx(0.9833, abs=1e-3)
    assert sample.speed_deg_per_day == pytest.approx(1.019, abs=0.01)


def test_missing_pyswisseph_is_a_configuration_error(monkeypatch):
    load_swisseph.cache_clear()
    monkeypatch.setitem(sys.modules, "swisseph", None)
    try:
        with pytest.raises(ConfigurationError, match="pyswisseph"):
            load_swisseph()
    finally:
        load_swisseph.cache_clear()
