"""Swiss Ephemeris backed oracles with scoped session management."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from types import TracebackType
from typing import Any, Final

from ..exceptions import ConfigurationError, InvalidSample
from .oracle import OracleSample, sample_from_vector
from .swe import load_swisseph
from .utils import DEFAULT_ENV_KEYS, get_se_ephe_path, has_ephemeris_files

__all__ = [
    "BODY_CODES",
    "SwissEphemeris",
    "SwissOracle",
    "body_code",
]

LOG = logging.getLogger(__name__)

# pyswisseph keeps process-wide state; calls are serialised and the library is
# closed only when the last open session exits.
_SWE_LOCK = threading.RLock()
_ACTIVE_SESSIONS = 0

BODY_CODES: Final[dict[str, str]] = {
    "sun": "SUN",
    "moon": "MOON",
    "mercury": "MERCURY",
    "venus": "VENUS",
    "mars": "MARS",
    "jupiter": "JUPITER",
    "saturn": "SATURN",
    "uranus": "URANUS",
    "neptune": "NEPTUNE",
    "pluto": "PLUTO",
    "chiron": "CHIRON",
}


def body_code(name: str) -> int:
    """Return the Swiss Ephemeris body index for ``name``."""

    key = name.strip().lower()
    try:
        attr = BODY_CODES[key]
    except KeyError as exc:
        raise KeyError(f"unsupported body '{name}'") from exc
    return int(getattr(load_swisseph(), attr))


class SwissOracle:
    """:class:`~astroevents.ephemeris.oracle.TimeOracle` for one Swiss body."""

    def __init__(self, name: str, code: int, flags: int) -> None:
        self.name = name
        self._code = code
        self._flags = flags

    def sample(self, t: float) -> OracleSample:
        try:
            with _SWE_LOCK:
                values, ret_flag = load_swisseph().calc_ut(t, self._code, self._flags)
        except Exception as exc:
            raise InvalidSample(
                f"Swiss ephemeris failed for {self.name}: {exc}", t=t, body=self.name
            ) from exc
        if ret_flag < 0:
            raise InvalidSample(
                f"Swiss ephemeris returned error code {ret_flag}", t=t, body=self.name
            )
        return sample_from_vector(values, t=t, body=self.name)

    def __repr__(self) -> str:
        return f"SwissOracle(name={self.name!r}, code={self._code})"


class SwissEphemeris:
    """Scoped Swiss Ephemeris session.

    Entering the context configures the data path (falling back to the
    built-in Moshier theory when no ``.se1`` files are available); leaving it
    calls ``swisseph.close()`` once no other session remains open. Oracle calls are
    serialised across threads because the library keeps global state.
    """

    def __init__(
        self,
        ephemeris_path: str | None = None,
        *,
        prefer_moshier: bool = False,
    ) -> None:
        self._requested_path = ephemeris_path
        self._prefer_moshier = prefer_moshier
        self._flags: int | None = None
        self.mode: str | None = None
        self.path: str | None = None

    @classmethod
    def from_settings(cls, cfg: Any) -> "SwissEphemeris":
        """Build a session from an :class:`~astroevents.config.EphemerisCfg`."""

        return cls(cfg.path, prefer_moshier=cfg.prefer_moshier)

    def __enter__(self) -> "SwissEphemeris":
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _resolve_path(self) -> str | None:
        if self._requested_path:
            candidate = Path(self._requested_path).expanduser()
            if not candidate.is_dir():
                raise ConfigurationError(
                    f"Swiss Ephemeris path '{candidate}' does not exist. "
                    "Set SE_EPHE_PATH or provide a valid ephemeris.path setting."
                )
            return str(candidate)
        for key in DEFAULT_ENV_KEYS:
            value = os.environ.get(key)
            if value and not Path(value).expanduser().is_dir():
                raise ConfigurationError(
                    f"{key} points to '{value}', which is not a directory"
                )
        return get_se_ephe_path()

    def open(self) -> None:
        global _ACTIVE_SESSIONS
        swe_module = load_swisseph()
        path = self._resolve_path()
        with _SWE_LOCK:
            if not self._prefer_moshier and path and has_ephemeris_files(path):
                swe_module.set_ephe_path(path)
                self._flags = int(swe_module.FLG_SWIEPH | swe_module.FLG_SPEED)
                self.mode = "swiss"
            else:
                self._flags = int(swe_module.FLG_MOSEPH | swe_module.FLG_SPEED)
                self.mode = "moshier"
            _ACTIVE_SESSIONS += 1
        self.path = path
        LOG.info("Ephemeris session opened (mode=%s, path=%s)", self.mode, path or "(auto)")

    def close(self) -> None:
        global _ACTIVE_SESSIONS
        if self._flags is None:
            return
        self._flags = None
        with _SWE_LOCK:
            _ACTIVE_SESSIONS = max(0, _ACTIVE_SESSIONS - 1)
            if _ACTIVE_SESSIONS == 0:
                load_swisseph().close()
        LOG.debug("Ephemeris session closed")

    def oracle(self, body: str) -> SwissOracle:
        """Return an oracle for ``body`` bound to this session."""

        if self._flags is None:
            raise ConfigurationError("ephemeris session is not open")
        return SwissOracle(body.strip().lower(), body_code(body), self._flags)
