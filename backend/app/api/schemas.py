"""
Pydantic schemas for the climatology API.

Separated from the route handlers so they are reusable across the codebase
(background workers, tests).
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from backend.app.ml.decision_support import MissionProfile


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class ClimatologyRequest(BaseModel):
    """Raw POWER export plus an optional relocation target."""
    text: str = Field(
        ...,
        min_length=1,
        description="Full export text including the header region",
    )
    target_latitude: Optional[float] = Field(
        default=None, ge=-90.0, le=90.0,
        description="Relocate the series to this latitude before training",
        examples=[28.6139],
    )
    seed: Optional[int] = Field(
        default=None,
        description="Seed for relocation noise (overrides ADJUSTER_SEED)",
    )

    @field_validator("text")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("text must not be blank")
        return v


class ForecastRequest(ClimatologyRequest):
    """Climatology window starting at a day-of-year or a date."""
    start_day: Optional[int] = Field(default=None, ge=1, le=366)
    start_date: Optional[date] = Field(
        default=None,
        description="Used when start_day is omitted; defaults to today",
    )
    num_days: Optional[int] = Field(
        default=None, ge=1, le=366,
        description="Defaults to DEFAULT_FORECAST_DAYS",
    )


class MissionRequest(BaseModel):
    profile: MissionProfile
    temperature_c: float
    wind_speed_kmh: float = Field(..., ge=0)
    precip_mm: float = Field(..., ge=0)
    humidity_pct: float = Field(..., ge=0, le=100)


class ComparisonRequest(BaseModel):
    model_temp: float
    observed_temp: float


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class ClimatologyDayOut(BaseModel):
    day_of_year: int
    avg_temp: float
    avg_precip: float
    sample_count: int


class ForecastDayOut(BaseModel):
    date: date
    day_of_year: int
    label: str
    predicted_temp: float
    predicted_precip: float
    historical_avg_temp: float


class ClimatologySummary(BaseModel):
    record_count: int
    training_samples: int
    used_fallback: bool
    bias_offset: float
    days: int
    min_temp: Optional[float] = None
    max_temp: Optional[float] = None


class ClimatologyResponse(BaseModel):
    summary: ClimatologySummary
    climatology: List[ClimatologyDayOut]


class ForecastResponse(BaseModel):
    start_day: int
    used_fallback: bool
    window: List[ClimatologyDayOut]
    days: List[ForecastDayOut]
