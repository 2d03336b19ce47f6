"""Tagged search strategies configured per body."""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

__all__ = [
    "DistanceExtremumCfg",
    "PhaseCrossingCfg",
    "RefineCfg",
    "RetrogradeExtremumCfg",
    "SpeedReversalCfg",
    "Strategy",
]


class RefineCfg(BaseModel):
    """Refinement tolerance and iteration budgets."""

    tolerance_days: float = 1.0 / 1440.0
    golden_max_iter: int = 120
    bisect_max_iter: int = 80

    @field_validator("tolerance_days", mode="before")
    @classmethod
    def _cap_tolerance(cls, value: float) -> float:
        return max(1e-7, min(1.0, float(value)))

    @field_validator("golden_max_iter", "bisect_max_iter", mode="before")
    @classmethod
    def _cap_iterations(cls, value: int) -> int:
        return max(10, min(200, int(value)))


class DistanceExtremumCfg(BaseModel):
    """Distance minima and/or maxima via three-point brackets and golden-section.

    With ``global_in_window`` only the single best coarse sample of the search
    interval is refined (``pad_days`` around it).
    """

    kind: Literal["distance_extremum"] = "distance_extremum"
    extremum: Literal["minimum", "maximum", "both"] = "minimum"
    step_days: float = Field(default=0.25, gt=0)
    pad_days: Optional[float] = Field(default=0.75, gt=0)
    global_in_window: bool = False
    dedupe_days: float = Field(default=1.0, ge=0)


class SpeedReversalCfg(BaseModel):
    """Direct/retrograde segmentation of longitude speed with hysteresis."""

    kind: Literal["speed_reversal"] = "speed_reversal"
    step_days: float = Field(default=0.125, gt=0)
    epsilon: float = Field(default=1e-4, ge=0)
    hysteresis_count: int = Field(default=3, ge=1)
    min_window_days: float = Field(default=1.0, ge=0)
    speed_source: Literal["auto", "field", "finite_difference"] = "auto"


class PhaseCrossingCfg(BaseModel):
    """Crossings of a target phase angle, optionally against a reference body.

    Sign changes whose jump exceeds ``seam_tolerance_deg`` are the +/-180 seam
    of the wrapped difference and are not reported.
    """

    kind: Literal["phase_crossing"] = "phase_crossing"
    target_deg: float = 0.0
    reference_body: Optional[str] = None
    step_days: float = Field(default=0.25, gt=0)
    seam_tolerance_deg: Optional[float] = Field(default=180.0, gt=0)
    dedupe_days: float = Field(default=0.3, ge=0)

    @field_validator("target_deg", mode="before")
    @classmethod
    def _normalise_target(cls, value: float) -> float:
        return float(value) % 360.0


class RetrogradeExtremumCfg(BaseModel):
    """One distance extremum per retrograde window."""

    kind: Literal["retrograde_extremum"] = "retrograde_extremum"
    windows: SpeedReversalCfg = Field(default_factory=SpeedReversalCfg)
    extremum: DistanceExtremumCfg = Field(
        default_factory=lambda: DistanceExtremumCfg(global_in_window=True)
    )


Strategy = Annotated[
    Union[DistanceExtremumCfg, SpeedReversalCfg, PhaseCrossingCfg, RetrogradeExtremumCfg],
    Field(discriminator="kind"),
]
