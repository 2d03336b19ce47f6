"""Serializable report models produced by the analysis features."""

from __future__ import annotations

import math
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .detectors.common import jd_to_iso
from .events import Event, Window

__all__ = [
    "BodyReport",
    "EventRecord",
    "LunarYearReport",
    "NatalBodyReport",
    "NatalTransitsReport",
    "PerigeeYearReport",
    "PhaseReturnRecord",
    "PhaseReturnsReport",
    "RetrogradeYearReport",
    "TransitHit",
    "WindowRecord",
]


class EventRecord(BaseModel):
    """One refined event, rendered for output."""

    date: str
    iso: str
    jd: float
    kind: str
    value: Optional[float] = None
    classification: Optional[str] = None
    confidence: str = "high"
    label: Optional[str] = None
    notes: List[str] = Field(default_factory=list)

    @field_validator("value", mode="before")
    @classmethod
    def _drop_non_finite(cls, value: Optional[float]) -> Optional[float]:
        if value is None:
            return None
        numeric = float(value)
        return numeric if math.isfinite(numeric) else None

    @classmethod
    def from_event(cls, event: Event, **extra: object) -> "EventRecord":
        data: dict[str, object] = {
            "date": event.date_str,
            "iso": event.iso,
            "jd": event.t,
            "kind": event.kind.value,
            "value": event.value,
            "classification": event.classification.value if event.classification else None,
            "confidence": event.confidence,
            "label": event.label,
            "notes": list(event.notes),
        }
        data.update(extra)
        return cls(**data)


class TransitHit(EventRecord):
    """Crossing of a natal longitude with the body's zodiac position."""

    longitude: float
    sign: str
    degree: int
    minute: int
    position: str
    retrograde: bool


class PhaseReturnRecord(EventRecord):
    """Return of the Sun-Moon phase angle to its natal value."""

    phase_angle_deg: float
    diff_deg: float


class WindowRecord(BaseModel):
    """Direct or retrograde motion window."""

    state: str
    start_date: str
    end_date: str
    start_iso: str
    end_iso: str
    duration_days: float

    @classmethod
    def from_window(cls, window: Window) -> "WindowRecord":
        start_iso = jd_to_iso(window.start)
        end_iso = jd_to_iso(window.end)
        return cls(
            state=window.state.value,
            start_date=start_iso[:10],
            end_date=end_iso[:10],
            start_iso=start_iso,
            end_iso=end_iso,
            duration_days=window.duration,
        )


class BodyReport(BaseModel):
    """Per-body result; ``info`` explains empty results, ``error`` isolated failures."""

    body: str
    events: List[EventRecord] = Field(default_factory=list)
    windows: List[WindowRecord] = Field(default_factory=list)
    info: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PerigeeYearReport(BaseModel):
    year: int
    time_basis: str = "UTC"
    total_count: int
    bodies: List[BodyReport]


class RetrogradeYearReport(BaseModel):
    year: int
    time_basis: str = "UTC"
    bodies: List[BodyReport]


class LunarYearReport(BaseModel):
    year: int
    time_basis: str = "UTC"
    super_mini_rule: str
    perigees: List[EventRecord]
    apogees: List[EventRecord]
    new_moons: List[EventRecord]
    full_moons: List[EventRecord]


class PhaseReturnsReport(BaseModel):
    birth_iso: str
    target_phase_angle_deg: float
    start_iso: str
    end_iso: str
    step_hours: float
    tolerance_deg: float
    count: int
    returns: List[PhaseReturnRecord]


class NatalBodyReport(BaseModel):
    """Per-body prenatal crossings."""

    body: str
    target_longitude: Optional[float] = None
    found: bool = False
    hits: List[TransitHit] = Field(default_factory=list)
    info: Optional[str] = None
    error: Optional[str] = None


class NatalTransitsReport(BaseModel):
    birth_date: str
    lookback_days: float
    ignore_last_days: float
    bodies: List[NatalBodyReport]
