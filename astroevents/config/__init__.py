"""Configuration models, search strategies and YAML persistence."""

from __future__ import annotations

from .settings import (
    CONFIG_FILENAME,
    CURRENT_SETTINGS_SCHEMA_VERSION,
    EphemerisCfg,
    LunarCfg,
    NatalTransitsCfg,
    PerfCfg,
    PerigeesCfg,
    PhaseReturnsCfg,
    RetrogradeCfg,
    Settings,
    config_path,
    default_settings,
    ensure_default_config,
    get_config_home,
    load_settings,
    save_settings,
)
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
    "DistanceExtremumCfg",
    "EphemerisCfg",
    "LunarCfg",
    "NatalTransitsCfg",
    "PerfCfg",
    "PerigeesCfg",
    "PhaseCrossingCfg",
    "PhaseReturnsCfg",
    "RefineCfg",
    "RetrogradeCfg",
    "RetrogradeExtremumCfg",
    "Settings",
    "SpeedReversalCfg",
    "Strategy",
    "config_path",
    "default_settings",
    "ensure_default_config",
    "get_config_home",
    "load_settings",
    "save_settings",
]
