"""
decision_support.py — Rule-based consumers of a climatology day.

    evaluate_mission         GO / NO-GO per operational profile
    compare_with_observation model vs. live observation accuracy score
    diurnal_profile          3-hourly temperature curve around a daily mean

Profiles and limits:

    profile    wind (km/h)   temperature (°C)   other
    drone      ≤ 20          —                  precip ≤ 0.5 mm
    concrete   —             10 … 32            humidity ≤ 85 %
    agri       ≤ 15          15 … 28            —

Rules are checked in the order listed; the first breach is reported.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

NOMINAL_REASON = "Conditions Nominal"

# Diurnal cycle: ±5 °C swing peaking at 14:00
DIURNAL_AMPLITUDE_C = 5.0
DIURNAL_PHASE_HOURS = 8
DIURNAL_STEP_HOURS = 3


class MissionProfile(str, Enum):
    DRONE = "drone"
    CONCRETE = "concrete"
    AGRI = "agri"


PROFILE_LABELS: Dict[MissionProfile, str] = {
    MissionProfile.DRONE: "Drone Flight",
    MissionProfile.CONCRETE: "Concrete Pour",
    MissionProfile.AGRI: "Agri-Spray",
}


@dataclass(frozen=True)
class MissionConditions:
    temperature_c: float
    wind_speed_kmh: float
    precip_mm: float
    humidity_pct: float


@dataclass(frozen=True)
class MissionStatus:
    profile: MissionProfile
    passed: bool
    reason: str

    @property
    def verdict(self) -> str:
        return "GO" if self.passed else "NO-GO"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": self.profile.value,
            "label": PROFILE_LABELS[self.profile],
            "verdict": self.verdict,
            "passed": self.passed,
            "reason": self.reason,
        }


def _check_drone(c: MissionConditions) -> Optional[str]:
    if c.wind_speed_kmh > 20:
        return f"Wind shear critical ({c.wind_speed_kmh:g} km/h > 20 km/h)"
    if c.precip_mm > 0.5:
        return "Precipitation detects sensor risk"
    return None


def _check_concrete(c: MissionConditions) -> Optional[str]:
    if c.temperature_c < 10 or c.temperature_c > 32:
        return f"Thermal limit breach ({c.temperature_c:.1f}°C outside 10-32°C)"
    if c.humidity_pct > 85:
        return f"Moisture saturation high ({c.humidity_pct:g}%)"
    return None


def _check_agri(c: MissionConditions) -> Optional[str]:
    if c.wind_speed_kmh > 15:
        return "Spray drift risk (Wind > 15 km/h)"
    if c.temperature_c < 15 or c.temperature_c > 28:
        return f"Ineffective uptake temp ({c.temperature_c:.1f}°C)"
    return None


_RULES = {
    MissionProfile.DRONE: _check_drone,
    MissionProfile.CONCRETE: _check_concrete,
    MissionProfile.AGRI: _check_agri,
}


def evaluate_mission(profile: MissionProfile, conditions: MissionConditions) -> MissionStatus:
    breach = _RULES[MissionProfile(profile)](conditions)
    return MissionStatus(
        profile=MissionProfile(profile),
        passed=breach is None,
        reason=breach or NOMINAL_REASON,
    )


@dataclass(frozen=True)
class ObservationComparison:
    """How close the climatology came to a live reading."""
    score: int           # 0..100
    diff: float          # |model − observed|, 1 dp
    direction: str       # "warmer" | "cooler" (observed relative to model)

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "diff": self.diff, "direction": self.direction}


def compare_with_observation(model_temp: float, observed_temp: float) -> ObservationComparison:
    """
    Percent-error accuracy of the model against an observation.

    score = clamp(100 − |model − observed| / |model| · 100, 0, 100); a model
    value of exactly 0 uses 1 as the denominator.
    """
    diff = abs(model_temp - observed_temp)
    denominator = abs(model_temp) or 1.0
    accuracy = min(max(100.0 - diff / denominator * 100.0, 0.0), 100.0)
    return ObservationComparison(
        score=int(round(accuracy)),
        diff=round(diff, 1),
        direction="warmer" if observed_temp > model_temp else "cooler",
    )


def _cycle(hour: float) -> float:
    return math.sin((hour - DIURNAL_PHASE_HOURS) / 24.0 * 2.0 * math.pi)


def diurnal_profile(
    base_temp: float,
    current_temp: Optional[float] = None,
    current_hour: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    Synthetic daily temperature curve at 00:00, 03:00 … 24:00.

    With ``current_temp`` and ``current_hour`` an "actual" curve is added,
    shifted by the gap between the reading and the model at that hour.
    """
    offset: Optional[float] = None
    if current_temp is not None and current_hour is not None:
        offset = current_temp - (base_temp + DIURNAL_AMPLITUDE_C * _cycle(current_hour))

    points = []
    for hour in range(0, 25, DIURNAL_STEP_HOURS):
        historical = base_temp + DIURNAL_AMPLITUDE_C * _cycle(hour)
        points.append({
            "time": f"{hour:02d}:00",
            "historical": round(historical, 1),
            "actual": round(historical + offset, 1) if offset is not None else None,
        })
    return points
