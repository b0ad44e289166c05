"""
location_adjuster.py — Approximate a series at a different latitude.

This is a presentation heuristic, not a climate model. Moving the analysis
point by Δ = |target| − |base| degrees of latitude shifts every temperature by

    shift   = −0.75 · Δ                    (°C; cooler away from the equator)
    penalty = −5.0 if |target| > 60 else 0 (polar regions)

and adds per-record noise

    noise   = 0.5 · sin(0.1 · doy) + U(−0.75, 0.75)

Precipitation is scaled by U(0.8, 1.2) and floored at zero.

Randomness comes only from the ``rng`` argument (a numpy Generator), so a
seeded generator reproduces the same perturbation sequence.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

import numpy as np

from backend.app.calendar.models import DailyRecord
from backend.app.core.errors import LocationAdjustmentError

logger = logging.getLogger(__name__)

LAPSE_PER_DEGREE_C = 0.75
POLAR_LATITUDE = 60.0
POLAR_PENALTY_C = 5.0
SEASONAL_NOISE_AMPLITUDE = 0.5
SEASONAL_NOISE_FREQUENCY = 0.1
UNIFORM_NOISE_HALF_WIDTH = 0.75
PRECIP_FACTOR_RANGE = (0.8, 1.2)


@dataclass(frozen=True)
class LatitudeShift:
    """Deterministic part of a relocation."""
    base_latitude: float
    target_latitude: float
    temp_shift: float
    polar_penalty: float

    @property
    def total(self) -> float:
        return self.temp_shift + self.polar_penalty


def _check_latitude(name: str, value: float) -> None:
    if not math.isfinite(value) or abs(value) > 90.0:
        raise LocationAdjustmentError(
            f"{name} must be a finite latitude in [-90, 90], got {value}",
            **{name: value},
        )


def compute_latitude_shift(base_latitude: float, target_latitude: float) -> LatitudeShift:
    """Temperature offset implied by moving from ``base`` to ``target``."""
    _check_latitude("base_latitude", base_latitude)
    _check_latitude("target_latitude", target_latitude)

    lat_diff = abs(target_latitude) - abs(base_latitude)
    penalty = -POLAR_PENALTY_C if abs(target_latitude) > POLAR_LATITUDE else 0.0
    return LatitudeShift(
        base_latitude=base_latitude,
        target_latitude=target_latitude,
        temp_shift=-LAPSE_PER_DEGREE_C * lat_diff,
        polar_penalty=penalty,
    )


def seasonal_component(day_of_year: int) -> float:
    return SEASONAL_NOISE_AMPLITUDE * math.sin(SEASONAL_NOISE_FREQUENCY * day_of_year)


def adjust_for_location(
    records: Sequence[DailyRecord],
    base_latitude: float,
    target_latitude: float,
    rng: Optional[np.random.Generator] = None,
) -> List[DailyRecord]:
    """
    Return a perturbed copy of ``records`` for ``target_latitude``.

    Parameters
    ----------
    records : sequence of DailyRecord
        Source series; left untouched.
    base_latitude, target_latitude : float
        Decimal degrees.
    rng : numpy Generator, optional
        Source of uniform noise. A fresh unseeded generator when omitted.

    Raises
    ------
    LocationAdjustmentError
        If either latitude is non-finite or beyond ±90°.
    """
    shift = compute_latitude_shift(base_latitude, target_latitude)
    rng = rng if rng is not None else np.random.default_rng()

    n = len(records)
    uniform = rng.uniform(-UNIFORM_NOISE_HALF_WIDTH, UNIFORM_NOISE_HALF_WIDTH, size=n)
    factors = rng.uniform(PRECIP_FACTOR_RANGE[0], PRECIP_FACTOR_RANGE[1], size=n)

    adjusted = [
        replace(
            rec,
            temp_range=(
                rec.temp_range + shift.total
                + seasonal_component(rec.day_of_year) + float(noise)
            ),
            precip=max(0.0, rec.precip * float(factor)),
        )
        for rec, noise, factor in zip(records, uniform, factors)
    ]

    logger.info(
        "Relocated %d records %.4f° → %.4f° (shift %.2f°C, polar %.1f°C)",
        n, base_latitude, target_latitude, shift.temp_shift, shift.polar_penalty,
        extra={"records": n, "lat_shift": shift.total},
    )
    return adjusted
