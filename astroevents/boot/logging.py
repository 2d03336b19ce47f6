"""Root logger setup for the astroevents command line."""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

__all__ = ["LEVEL_ENV_VARS", "configure_logging", "parse_level"]

# Consulted in order when no explicit level is passed.
LEVEL_ENV_VARS = ("ASTROEVENTS_LOG_LEVEL", "LOG_LEVEL")

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def parse_level(value: str | int | None, default: int = logging.WARNING) -> int:
    """Map a level name or number onto a :mod:`logging` level, else ``default``."""

    if isinstance(value, int):
        return value
    text = (value or "").strip()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper()) if text else None
    return level if isinstance(level, int) else default


def configure_logging(
    *, level: str | int | None = None, stream: TextIO | None = None
) -> int:
    """Send log records to ``stream`` (stderr by default) and return the level.

    Stdout is left to the JSON reports.
    """

    if level is None:
        level = next((os.environ[key] for key in LEVEL_ENV_VARS if os.environ.get(key)), None)
    effective = parse_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, _DATEFMT))
    logging.basicConfig(level=effective, handlers=[handler], force=True)
    return effective
