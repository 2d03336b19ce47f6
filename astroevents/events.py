"""Canonical search records shared across astroevents modules."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

__all__ = [
    "Bracket",
    "BracketKind",
    "Classification",
    "Event",
    "EventKind",
    "MotionState",
    "TimeSample",
    "Window",
]


class BracketKind(str, Enum):
    MINIMUM = "minimum"
    MAXIMUM = "maximum"
    ROOT_CROSSING = "root_crossing"


class EventKind(str, Enum):
    MINIMUM = "minimum"
    MAXIMUM = "maximum"
    CROSSING = "crossing"


class MotionState(str, Enum):
    DIRECT = "direct"
    RETROGRADE = "retrograde"


class Classification(str, Enum):
    NORMAL = "normal"
    NEAR_MINIMUM = "near_minimum"
    NEAR_MAXIMUM = "near_maximum"


@dataclass(frozen=True, slots=True)
class TimeSample:
    """Observable value at a continuous time ``t`` (days)."""

    t: float
    value: float


@dataclass(frozen=True, slots=True)
class Bracket:
    """Interval known to contain one extremum or one root."""

    lo: float
    hi: float
    kind: BracketKind

    def __post_init__(self) -> None:
        if not self.lo < self.hi:
            raise ValueError(f"bracket requires lo < hi (got {self.lo}, {self.hi})")

    @property
    def center(self) -> float:
        return 0.5 * (self.lo + self.hi)

    @property
    def event_kind(self) -> EventKind:
        if self.kind is BracketKind.MINIMUM:
            return EventKind.MINIMUM
        if self.kind is BracketKind.MAXIMUM:
            return EventKind.MAXIMUM
        return EventKind.CROSSING


@dataclass(frozen=True, slots=True)
class Window:
    """Contiguous span of direct or retrograde motion."""

    start: float
    end: float
    state: MotionState

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def retrograde(self) -> bool:
        return self.state is MotionState.RETROGRADE


@dataclass(frozen=True)
class Event:
    """A refined instant with its observable value.

    Events are immutable; annotation (classification, labels, notes) returns a
    new instance via :meth:`evolve`.
    """

    t: float
    value: float
    kind: EventKind
    calendar_date: tuple[int, int, int]
    classification: Classification | None = None
    confidence: str = "high"
    body: str | None = None
    label: str | None = None
    notes: tuple[str, ...] = ()

    @property
    def iso(self) -> str:
        from .detectors.common import jd_to_iso

        return jd_to_iso(self.t)

    @property
    def date_str(self) -> str:
        year, month, day = self.calendar_date
        return f"{year:04d}-{month:02d}-{day:02d}"

    def evolve(self, **changes: object) -> "Event":
        return replace(self, **changes)

    def with_note(self, note: str) -> "Event":
        if note in self.notes:
            return self
        return replace(self, notes=(*self.notes, note))
