"""Configuration models and helpers for astroevents settings."""

from __future__ import annotations

import os
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .strategies import (
    DistanceExtremumCfg,
    PhaseCrossingCfg,
    RefineCfg,
    RetrogradeExtremumCfg,
    SpeedReversalCfg,
    Strategy,
)

__all__ = [
    "CONFIG_FILENAME",
    "CURRENT_SETTINGS_SCHEMA_VERSION",
    "EphemerisCfg",
    "LunarCfg",
    "NatalTransitsCfg",
    "PerfCfg",
    "PerigeesCfg",
    "PhaseReturnsCfg",
    "RetrogradeCfg",
    "Settings",
    "config_path",
    "default_settings",
    "ensure_default_config",
    "get_config_home",
    "load_settings",
    "save_settings",
]

CURRENT_SETTINGS_SCHEMA_VERSION = 2
CONFIG_FILENAME = "config.yaml"

PLANETS_AND_CHIRON: tuple[str, ...] = (
    "mercury",
    "venus",
    "mars",
    "jupiter",
    "saturn",
    "chiron",
    "uranus",
    "neptune",
    "pluto",
)

# -------------------- Settings Schema --------------------


class EphemerisCfg(BaseModel):
    """Swiss Ephemeris data location; ``None`` defers to ``SE_EPHE_PATH``."""

    path: Optional[str] = None
    prefer_moshier: bool = False


class PerfCfg(BaseModel):
    """Per-request parallelism across bodies."""

    workers: int = 1

    @field_validator("workers", mode="before")
    @classmethod
    def _cap_workers(cls, value: int) -> int:
        return max(1, min(8, int(value)))


class PerigeesCfg(BaseModel):
    """Yearly perigee search: the Sun's annual minimum, one per retrograde window otherwise."""

    bodies: List[str] = Field(default_factory=lambda: ["sun", *PLANETS_AND_CHIRON])
    profiles: Dict[str, Strategy] = Field(
        default_factory=lambda: {
            "sun": DistanceExtremumCfg(global_in_window=True, pad_days=0.75),
        }
    )
    default_profile: Strategy = Field(default_factory=RetrogradeExtremumCfg)

    def strategy_for(self, body: str) -> Strategy:
        return self.profiles.get(body.lower(), self.default_profile)


class RetrogradeCfg(BaseModel):
    """Retrograde window and station search."""

    bodies: List[str] = Field(default_factory=lambda: list(PLANETS_AND_CHIRON))
    profiles: Dict[str, SpeedReversalCfg] = Field(default_factory=dict)
    default_profile: SpeedReversalCfg = Field(default_factory=SpeedReversalCfg)

    def strategy_for(self, body: str) -> SpeedReversalCfg:
        return self.profiles.get(body.lower(), self.default_profile)


class LunarCfg(BaseModel):
    """Lunar perigee/apogee search with super/mini new and full moons."""

    distance: DistanceExtremumCfg = Field(
        default_factory=lambda: DistanceExtremumCfg(
            extremum="both", step_days=0.25, pad_days=1.0, dedupe_days=12.0
        )
    )
    phases: PhaseCrossingCfg = Field(
        default_factory=lambda: PhaseCrossingCfg(
            reference_body="sun", step_days=0.25, dedupe_days=0.3
        )
    )
    classification_fraction: float = 0.10
    label_tolerance_deg: float = 5.0

    @field_validator("classification_fraction", mode="before")
    @classmethod
    def _cap_fraction(cls, value: float) -> float:
        return max(0.0, min(0.5, float(value)))


class PhaseReturnsCfg(BaseModel):
    """Returns of the Sun-Moon phase angle to its natal value."""

    step_hours: float = 6.0
    tolerance_deg: float = 0.2
    dedupe_minutes: float = 2.0

    @field_validator("step_hours", mode="before")
    @classmethod
    def _cap_step_hours(cls, value: float) -> float:
        return max(1.0, min(24.0, float(value)))

    @field_validator("tolerance_deg", mode="before")
    @classmethod
    def _cap_tolerance(cls, value: float) -> float:
        return max(0.01, min(5.0, float(value)))


class NatalTransitsCfg(BaseModel):
    """Prenatal crossings of the slow bodies' natal longitudes."""

    bodies: List[str] = Field(
        default_factory=lambda: ["jupiter", "saturn", "uranus", "neptune", "pluto", "chiron"]
    )
    lookback_days: float = Field(default=270.0, gt=0)
    ignore_last_days: float = Field(default=30.0, ge=0)
    step_days: float = Field(default=0.5, gt=0)


class Settings(BaseModel):
    """Top-level settings model persisted on disk."""

    schema_version: int = Field(
        default=CURRENT_SETTINGS_SCHEMA_VERSION,
        ge=1,
        description="Version marker for persisted configuration payloads.",
    )
    ephemeris: EphemerisCfg = Field(default_factory=EphemerisCfg)
    perf: PerfCfg = Field(default_factory=PerfCfg)
    refine: RefineCfg = Field(default_factory=RefineCfg)
    perigees: PerigeesCfg = Field(default_factory=PerigeesCfg)
    retrograde: RetrogradeCfg = Field(default_factory=RetrogradeCfg)
    lunar: LunarCfg = Field(default_factory=LunarCfg)
    phase_returns: PhaseReturnsCfg = Field(default_factory=PhaseReturnsCfg)
    natal_transits: NatalTransitsCfg = Field(default_factory=NatalTransitsCfg)


# -------------------- Persistence --------------------


def get_config_home() -> Path:
    """Return the directory where settings should be stored."""

    if os.name == "nt" and "ASTROEVENTS_HOME" not in os.environ:
        base = Path(
            os.environ.get(
                "LOCALAPPDATA", str(Path.home() / "AppData" / "Local")
            )
        )
        return base / "AstroEvents"
    return Path(os.environ.get("ASTROEVENTS_HOME", str(Path.home() / ".astroevents")))


def config_path() -> Path:
    """Return the full path to the configuration file, creating directories as needed."""

    home = get_config_home()
    home.mkdir(parents=True, exist_ok=True)
    return home / CONFIG_FILENAME


def default_settings() -> Settings:
    """Instantiate a Settings object populated with defaults."""

    return Settings()


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    """Persist the given settings to disk as YAML."""

    target_path = Path(path) if path else config_path()
    target_path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump(mode="json")
    with target_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=True)
    return target_path


def _coerce_schema_version(raw: object) -> int:
    """Return a normalised schema version value with sane bounds."""

    try:
        value = int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 1
    return max(1, value)


def _upgrade_settings_payload(
    data: dict[str, object], *, schema_version: int
) -> tuple[dict[str, object], bool]:
    """Apply in-place upgrades required for older settings payloads."""

    upgraded = deepcopy(data)
    version = max(1, schema_version)
    changed = False

    if version < 2:
        # v1 stored the worker count at the top level.
        workers = upgraded.pop("workers", None)
        if workers is not None:
            perf = upgraded.get("perf")
            perf = dict(perf) if isinstance(perf, dict) else {}
            perf.setdefault("workers", workers)
            upgraded["perf"] = perf
        version = 2
        changed = True

    if upgraded.get("schema_version") != version:
        upgraded["schema_version"] = version
        changed = True

    return upgraded, changed


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from disk, creating defaults if missing."""

    source_path = Path(path) if path else config_path()
    if not source_path.exists():
        settings = default_settings()
        save_settings(settings, source_path)
        return settings
    with source_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raw = {}
    schema_version = _coerce_schema_version(raw.get("schema_version"))
    data, upgraded = _upgrade_settings_payload(raw, schema_version=schema_version)
    settings = Settings(**data)
    if upgraded:
        save_settings(settings, source_path)
    return settings


def ensure_default_config() -> Path:
    """Ensure a configuration file exists on disk and return its path."""

    target = config_path()
    if not target.exists():
        save_settings(default_settings(), target)
    return target
