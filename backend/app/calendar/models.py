"""
Data structures shared by the climatology pipeline.

═══════════════════════════════════════════════════════════════════════════
LIFECYCLE
═══════════════════════════════════════════════════════════════════════════

    raw text ──parse──▶ List[DailyRecord] ──engine──▶ ClimatologyMap
                                                          │
                             get_forecast / build_forecast_days
                                                          ▼
                                      List[ClimatologyDay] / List[ForecastDay]

A record list lives for exactly one ingestion event (initial load,
relocation or upload) and is discarded once its ClimatologyMap exists.
Nothing here is persisted.

═══════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Tuple

# Calendar length of a climatology (leap-year inclusive)
DAYS_IN_CLIMATOLOGY = 366


@dataclass(frozen=True)
class DailyRecord:
    """
    One day of the historical series.

    Frozen: the location adjuster returns new records rather than editing
    these in place. Chronological order is (year, day_of_year).
    """
    year: int
    day_of_year: int
    temp_range: float
    precip: float

    @property
    def sort_key(self) -> Tuple[int, int]:
        return (self.year, self.day_of_year)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "day_of_year": self.day_of_year,
            "temp_range": self.temp_range,
            "precip": self.precip,
        }


@dataclass(frozen=True)
class ClimatologyDay:
    """Expected conditions for one calendar day."""
    day_of_year: int
    avg_temp: float        # model prediction, °C
    avg_precip: float      # empirical mean, mm
    sample_count: int      # historical precipitation samples for this day

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day_of_year": self.day_of_year,
            "avg_temp": self.avg_temp,
            "avg_precip": self.avg_precip,
            "sample_count": self.sample_count,
        }


# day_of_year → ClimatologyDay, exactly DAYS_IN_CLIMATOLOGY entries on success
ClimatologyMap = Dict[int, ClimatologyDay]


@dataclass(frozen=True)
class ForecastDay:
    """A dated view of a climatology day for display."""
    date: date
    day_of_year: int
    label: str                 # "Mon, Jan 1"
    predicted_temp: float
    predicted_precip: float
    historical_avg_temp: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "day_of_year": self.day_of_year,
            "label": self.label,
            "predicted_temp": round(self.predicted_temp, 1),
            "predicted_precip": round(self.predicted_precip, 2),
            "historical_avg_temp": round(self.historical_avg_temp, 1),
        }
