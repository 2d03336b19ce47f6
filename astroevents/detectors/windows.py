"""Hysteresis segmentation of a speed series into direct/retrograde windows."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from ..events import MotionState, Window
from .scanner import evaluate_grid

__all__ = [
    "DEFAULT_HYSTERESIS",
    "MIN_WINDOW_DAYS",
    "WindowStateMachine",
    "retrograde_windows",
    "segment",
]

LOG = logging.getLogger(__name__)

DEFAULT_HYSTERESIS = 3
MIN_WINDOW_DAYS = 1.0


class WindowStateMachine:
    """Debounced two-state machine over signed speed samples.

    Samples with ``|speed| <= epsilon`` are neutral and leave the streak
    counter untouched. A sample agreeing with the current state resets the
    opposing streak; ``hysteresis_count`` consecutive opposing samples flip the
    state. Retrograde onsets are back-dated by ``hysteresis_count + 1`` steps,
    never earlier than the start of the window being closed; a retrograde
    window ends at the first sample of the direct streak that ended it.
    """

    def __init__(
        self,
        start: float,
        step: float,
        *,
        epsilon: float,
        hysteresis_count: int = DEFAULT_HYSTERESIS,
    ) -> None:
        if step <= 0:
            raise ValueError("step must be positive")
        if epsilon < 0:
            raise ValueError("epsilon must be non-negative")
        if hysteresis_count < 1:
            raise ValueError("hysteresis_count must be at least 1")
        self.start = start
        self.step = step
        self.epsilon = epsilon
        self.hysteresis_count = hysteresis_count
        self.state = MotionState.DIRECT
        self._window_start = start
        self._streak = 0
        self._streak_start: float | None = None
        self._closed: list[Window] = []

    @property
    def streak(self) -> int:
        return self._streak

    def feed(self, t: float, speed: float) -> Window | None:
        """Consume one sample; return the window closed by a flip, if any."""

        if abs(speed) <= self.epsilon:
            return None
        observed = MotionState.RETROGRADE if speed < 0 else MotionState.DIRECT
        if observed is self.state:
            self._streak = 0
            self._streak_start = None
            return None
        if self._streak == 0:
            self._streak_start = t
        self._streak += 1
        if self._streak < self.hysteresis_count:
            return None
        return self._flip(t)

    def _flip(self, t: float) -> Window:
        if self.state is MotionState.DIRECT:
            onset = t - (self.hysteresis_count + 1) * self.step
            boundary = max(onset, self._window_start)
        else:
            boundary = self._streak_start if self._streak_start is not None else t
        closed = Window(self._window_start, boundary, self.state)
        self._closed.append(closed)
        self.state = (
            MotionState.RETROGRADE
            if self.state is MotionState.DIRECT
            else MotionState.DIRECT
        )
        LOG.debug(
            "Motion flipped to %s at jd=%.6f (boundary jd=%.6f)",
            self.state.value,
            t,
            boundary,
        )
        self._window_start = boundary
        self._streak = 0
        self._streak_start = None
        return closed

    def finish(self, end: float, *, min_duration: float = MIN_WINDOW_DAYS) -> list[Window]:
        """Close the open window at ``end`` and return the filtered timeline."""

        raw = [*self._closed, Window(self._window_start, max(end, self._window_start), self.state)]
        return _merge(w for w in raw if w.duration >= min_duration)


def _merge(windows: Iterable[Window]) -> list[Window]:
    merged: list[Window] = []
    for window in windows:
        if merged and merged[-1].state is window.state:
            merged[-1] = Window(merged[-1].start, window.end, window.state)
        else:
            merged.append(window)
    return merged


def segment(
    fn: Callable[[float], float],
    start: float,
    end: float,
    step: float,
    *,
    epsilon: float,
    hysteresis_count: int = DEFAULT_HYSTERESIS,
    min_duration: float = MIN_WINDOW_DAYS,
) -> list[Window]:
    """Segment ``[start, end]`` into direct and retrograde windows.

    ``fn`` returns the signed longitude speed; invalid samples are skipped
    without touching the streak counter.
    """

    machine = WindowStateMachine(
        start, step, epsilon=epsilon, hysteresis_count=hysteresis_count
    )
    for sample in evaluate_grid(fn, start, end, step, stage="window"):
        if sample is not None:
            machine.feed(sample.t, sample.value)
    return machine.finish(end, min_duration=min_duration)


def retrograde_windows(windows: Iterable[Window]) -> list[Window]:
    """Return only the retrograde windows of a timeline."""

    return [w for w in windows if w.retrograde]
