"""Deferred import of the :mod:`swisseph` extension module."""

from __future__ import annotations

import importlib
from functools import lru_cache
from types import ModuleType

from ..exceptions import ConfigurationError

__all__ = ["load_swisseph"]


@lru_cache(maxsize=1)
def load_swisseph() -> ModuleType:
    """Return the imported :mod:`swisseph` module.

    A missing install surfaces as :class:`ConfigurationError` the first time a
    session or body code needs it; a successful import is cached.
    """

    try:
        return importlib.import_module("swisseph")
    except ImportError as exc:
        raise ConfigurationError(
            "pyswisseph is not installed; install 'pyswisseph' and point "
            "SE_EPHE_PATH at the ephemeris data directory"
        ) from exc
