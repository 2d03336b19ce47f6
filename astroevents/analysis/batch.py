"""Per-body batch execution with failure isolation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import CancelledError, ThreadPoolExecutor
from contextlib import AbstractContextManager
from typing import Any, Protocol, TypeVar

from ..config.settings import EphemerisCfg
from ..ephemeris.oracle import TimeOracle
from ..ephemeris.swiss import SwissEphemeris
from ..exceptions import ConfigurationError
from ..observability import BODY_COMPUTE_DURATION, COMPUTE_ERRORS

__all__ = [
    "EphemerisSession",
    "SessionFactory",
    "checked_oracle",
    "compute_bodies",
    "swiss_session_factory",
]

LOG = logging.getLogger(__name__)

T = TypeVar("T")


class EphemerisSession(Protocol):
    """Open oracle resource handing out per-body oracles."""

    def oracle(self, body: str) -> TimeOracle:
        ...


SessionFactory = Callable[[], AbstractContextManager[Any]]


def swiss_session_factory(cfg: EphemerisCfg | None = None) -> SessionFactory:
    """Return a factory of :class:`SwissEphemeris` sessions for ``cfg``."""

    cfg = cfg or EphemerisCfg()

    def factory() -> SwissEphemeris:
        return SwissEphemeris.from_settings(cfg)

    return factory


def checked_oracle(session: EphemerisSession, body: str, t: float) -> TimeOracle:
    """Return the oracle for ``body`` after confirming it can be sampled at ``t``.

    Propagates :class:`~astroevents.exceptions.InvalidSample` so a body the
    ephemeris cannot serve fails with a diagnostic instead of an empty result.
    """

    oracle = session.oracle(body)
    oracle.sample(t)
    return oracle


def _run_one(
    session: EphemerisSession,
    body: str,
    compute: Callable[[EphemerisSession, str], T],
    on_error: Callable[[str, Exception], T],
    feature: str,
) -> T:
    with BODY_COMPUTE_DURATION.labels(feature=feature, body=body).time():
        try:
            return compute(session, body)
        except ConfigurationError:
            raise
        except Exception as exc:
            COMPUTE_ERRORS.labels(component=feature, error=type(exc).__name__).inc()
            LOG.warning("%s computation failed for %s: %s", feature, body, exc, exc_info=True)
            return on_error(body, exc)


def _run_chunk(
    bodies: Sequence[str],
    compute: Callable[[EphemerisSession, str], T],
    session_factory: SessionFactory,
    on_error: Callable[[str, Exception], T],
    feature: str,
    cancel: threading.Event | None,
) -> dict[str, T]:
    results: dict[str, T] = {}
    with session_factory() as session:
        for body in bodies:
            if cancel is not None and cancel.is_set():
                raise CancelledError(f"{feature} cancelled before {body}")
            results[body] = _run_one(session, body, compute, on_error, feature)
    return results


def compute_bodies(
    bodies: Sequence[str],
    compute: Callable[[EphemerisSession, str], T],
    session_factory: SessionFactory,
    *,
    on_error: Callable[[str, Exception], T],
    workers: int = 1,
    feature: str = "batch",
    cancel: threading.Event | None = None,
) -> list[T]:
    """Compute ``compute(session, body)`` for every body, in body order.

    Bodies run sequentially on one session unless ``workers > 1``, in which
    case each worker thread opens its own session for its share of bodies.
    :class:`ConfigurationError` aborts the whole batch; any other exception is
    handed to ``on_error`` and becomes that body's result. Setting ``cancel``
    stops the batch before the next body starts.
    """

    ordered = list(dict.fromkeys(bodies))
    if not ordered:
        return []
    worker_count = max(1, min(int(workers), len(ordered)))

    if worker_count == 1:
        merged = _run_chunk(ordered, compute, session_factory, on_error, feature, cancel)
    else:
        chunks = [ordered[i::worker_count] for i in range(worker_count)]
        merged = {}
        with ThreadPoolExecutor(max_workers=worker_count) as executor:
            futures = [
                executor.submit(
                    _run_chunk, chunk, compute, session_factory, on_error, feature, cancel
                )
                for chunk in chunks
            ]
            for future in futures:
                merged.update(future.result())

    return [merged[body] for body in ordered]
