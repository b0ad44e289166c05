"""
climatology_engine.py — 366-day climatology from a multi-year daily series.

Pipeline:
    1. Sort records chronologically (year, day_of_year)
    2. Bias calibration on raw temperatures
    3. Min/max scaling to [0, 1]
    4. Sliding-window features (bias, sin/cos date, 7 lags)
    5. OLS fit via the normal equation (mean fallback on singularity)
    6. Generative rollout over day 1..366, each prediction fed back as lag_1
    7. Precipitation averaged per day-of-year, independent of the model

Architecture:
    ┌────────────────────────────────────────────────────────────┐
    │  List[DailyRecord] ─▶ sort ─▶ calibrate ─▶ scale           │
    └───────────────┬────────────────────────────────────────────┘
                    ▼
    ┌────────────────────────────────────────────────────────────┐
    │  build_training_set ─▶ train_ols ─▶ TrainingResult         │
    └───────────────┬────────────────────────────────────────────┘
                    ▼
    ┌────────────────────────────────────────────────────────────┐
    │  LagBuffer.seed(tail of series)                            │
    │  for doy in 1..366: forecast_step(weights, doy, buffer)    │
    │      ─▶ inverse_transform ─▶ ClimatologyDay                │
    └────────────────────────────────────────────────────────────┘

The rollout is generative: after the seed, every lag is one of the model's
own predictions, so errors compound along the year. Output on a smooth
input is smooth; it is not guaranteed to track ground truth.

All state is local to one call. Concurrent calls share nothing.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from backend.app.calendar.models import (
    DAYS_IN_CLIMATOLOGY,
    ClimatologyDay,
    ClimatologyMap,
    DailyRecord,
)
from backend.app.core.errors import (
    EmptyClimatologyError,
    InsufficientDataError,
    NoValidRecordsError,
)
from backend.app.features.climatology_features import (
    WINDOW_SIZE,
    build_feature_row,
    build_training_set,
)
from backend.app.ingestion.record_parser import parse_records
from backend.app.ml.linalg import SINGULARITY_EPSILON
from backend.app.ml.location_adjuster import adjust_for_location
from backend.app.ml.ols_trainer import TrainingResult, train_ols
from backend.app.ml.scaler import FittedScaler, UnfittedScaler

logger = logging.getLogger(__name__)


# ===================================================================
#  BIAS CALIBRATION
# ===================================================================

# The reference export labels its temperature column T2M_RANGE (diurnal
# range) while the UI treats it as a mean temperature. A mean strictly
# inside (-5, 15) °C is read as "range, not mean" and lifted by +20 °C.
# Calibrated on the bundled tropical dataset only.
BIAS_LOWER_C = -5.0
BIAS_UPPER_C = 15.0
BIAS_OFFSET_C = 20.0


@dataclass(frozen=True)
class BiasCalibration:
    raw_mean: float
    offset: float

    @property
    def applied(self) -> bool:
        return self.offset != 0.0


def calibrate_bias(
    raw_temps: Sequence[float],
    lower: float = BIAS_LOWER_C,
    upper: float = BIAS_UPPER_C,
    offset: float = BIAS_OFFSET_C,
) -> BiasCalibration:
    """
    Decide the flat offset for a raw temperature series.

    Returns offset ``offset`` when ``lower < mean < upper`` and 0 otherwise.
    The thresholds are exclusive on both ends.
    """
    if len(raw_temps) == 0:
        return BiasCalibration(raw_mean=float("nan"), offset=0.0)
    raw_mean = float(np.mean(raw_temps))
    return BiasCalibration(
        raw_mean=raw_mean,
        offset=offset if lower < raw_mean < upper else 0.0,
    )


# ===================================================================
#  LAG BUFFER
# ===================================================================


@dataclass(frozen=True)
class LagBuffer:
    """
    Fixed-length lag window, index 0 = most recent value.

    Immutable: ``push`` returns a new buffer with the value prepended and
    the oldest entry dropped.
    """
    values: Tuple[float, ...]

    @classmethod
    def seed(cls, scaled_series: Sequence[float], window_size: int = WINDOW_SIZE) -> "LagBuffer":
        """Last ``window_size`` values of a chronological series, newest first."""
        if len(scaled_series) < window_size:
            raise InsufficientDataError(
                records=len(scaled_series), required=window_size, unit="seed values",
            )
        tail = list(scaled_series[-window_size:])
        return cls(values=tuple(float(v) for v in reversed(tail)))

    def push(self, value: float) -> "LagBuffer":
        return LagBuffer(values=(float(value),) + self.values[:-1])

    def __len__(self) -> int:
        return len(self.values)


def forecast_step(
    weights: np.ndarray,
    day_of_year: int,
    buffer: LagBuffer,
) -> Tuple[float, LagBuffer]:
    """
    One transition of the generative rollout.

    Returns the scaled prediction for ``day_of_year`` and the buffer the
    next step should use.
    """
    features = build_feature_row(day_of_year, buffer.values)
    prediction = float(np.dot(weights, features))
    return prediction, buffer.push(prediction)


# ===================================================================
#  EMPIRICAL AGGREGATES
# ===================================================================


def _records_frame(records: Sequence[DailyRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        [(r.day_of_year, r.temp_range, r.precip) for r in records],
        columns=["day_of_year", "temp_range", "precip"],
    )


def aggregate_precipitation(records: Sequence[DailyRecord]) -> Dict[int, Tuple[float, int]]:
    """
    Mean precipitation and sample count per day-of-year across all years.

    Days without samples are absent from the result.
    """
    if not records:
        return {}
    grouped = _records_frame(records).groupby("day_of_year")["precip"].agg(["mean", "count"])
    return {
        int(doy): (float(row["mean"]), int(row["count"]))
        for doy, row in grouped.iterrows()
    }


def historical_temperature_means(records: Sequence[DailyRecord]) -> Dict[int, float]:
    """Plain per-day-of-year mean of the raw temperatures."""
    if not records:
        return {}
    grouped = _records_frame(records).groupby("day_of_year")["temp_range"].mean()
    return {int(doy): float(v) for doy, v in grouped.items()}


# ===================================================================
#  ROLLOUT
# ===================================================================


def generate_climatology(
    weights: np.ndarray,
    scaler: FittedScaler,
    seed_buffer: LagBuffer,
    precipitation: Dict[int, Tuple[float, int]],
    days: int = DAYS_IN_CLIMATOLOGY,
) -> ClimatologyMap:
    """Roll the model forward over ``1..days`` and assemble the map."""
    climatology: ClimatologyMap = {}
    buffer = seed_buffer

    for doy in range(1, days + 1):
        scaled, buffer = forecast_step(weights, doy, buffer)
        avg_temp = scaler.inverse_transform(scaled)
        avg_precip, count = precipitation.get(doy, (0.0, 0))

        climatology[doy] = ClimatologyDay(
            day_of_year=doy,
            avg_temp=round(avg_temp, 2),
            avg_precip=round(avg_precip, 2),
            sample_count=count,
        )

    non_finite = sum(1 for d in climatology.values() if not math.isfinite(d.avg_temp))
    if non_finite:
        logger.warning("Rollout diverged: %d non-finite temperatures", non_finite)
    return climatology


# ===================================================================
#  RESULT
# ===================================================================


@dataclass
class ClimatologyResult:
    """Climatology map plus how it was produced."""
    climatology: ClimatologyMap
    training: TrainingResult
    calibration: BiasCalibration
    record_count: int
    historical_temps: Dict[int, float] = field(default_factory=dict)

    @property
    def used_fallback(self) -> bool:
        return self.training.used_fallback

    def days(self) -> List[ClimatologyDay]:
        return [self.climatology[d] for d in sorted(self.climatology)]

    def summary(self) -> Dict[str, Any]:
        temps = [d.avg_temp for d in self.climatology.values()]
        return {
            "record_count": self.record_count,
            "training_samples": self.training.n_samples,
            "used_fallback": self.used_fallback,
            "bias_offset": self.calibration.offset,
            "days": len(self.climatology),
            "min_temp": min(temps) if temps else None,
            "max_temp": max(temps) if temps else None,
        }


# ===================================================================
#  ENTRY POINTS
# ===================================================================


def calculate_climatology(
    records: Sequence[DailyRecord],
    *,
    window_size: int = WINDOW_SIZE,
    epsilon: float = SINGULARITY_EPSILON,
    days: int = DAYS_IN_CLIMATOLOGY,
) -> ClimatologyResult:
    """
    Train the autoregressive model on ``records`` and roll it across the year.

    Raises
    ------
    InsufficientDataError
        If there are ``window_size`` or fewer records.
    EmptyClimatologyError
        If the rollout does not produce ``days`` entries.
    """
    required = window_size + 1
    if len(records) < required:
        raise InsufficientDataError(records=len(records), required=required)

    ordered = sorted(records, key=lambda r: r.sort_key)

    raw_temps = np.array([r.temp_range for r in ordered], dtype=np.float64)
    calibration = calibrate_bias(raw_temps)
    if calibration.applied:
        logger.info(
            "Raw mean %.2f°C inside (%.0f, %.0f); applying +%.0f°C offset",
            calibration.raw_mean, BIAS_LOWER_C, BIAS_UPPER_C, calibration.offset,
            extra={"bias_offset": calibration.offset},
        )
    temps = raw_temps + calibration.offset

    scaler = UnfittedScaler().fit(temps)
    scaled = scaler.transform(temps)

    training_set = build_training_set(
        [r.day_of_year for r in ordered], scaled, window_size=window_size,
    )
    training = train_ols(training_set, epsilon=epsilon)

    climatology = generate_climatology(
        training.weights,
        scaler,
        LagBuffer.seed(scaled, window_size),
        aggregate_precipitation(ordered),
        days=days,
    )
    if len(climatology) < days:
        raise EmptyClimatologyError(produced=len(climatology), expected=days)

    logger.info(
        "Climatology built from %d records (%d samples, fallback=%s)",
        len(ordered), training.n_samples, training.used_fallback,
        extra={"records": len(ordered), "samples": training.n_samples,
               "used_fallback": training.used_fallback},
    )
    return ClimatologyResult(
        climatology=climatology,
        training=training,
        calibration=calibration,
        record_count=len(ordered),
        historical_temps=historical_temperature_means(ordered),
    )


def run_pipeline(
    text: str,
    target_latitude: Optional[float] = None,
    *,
    base_latitude: float,
    rng: Optional[np.random.Generator] = None,
    window_size: int = WINDOW_SIZE,
    epsilon: float = SINGULARITY_EPSILON,
    days: int = DAYS_IN_CLIMATOLOGY,
) -> ClimatologyResult:
    """
    Parse → optionally relocate → build the climatology.

    Relocation runs only when ``target_latitude`` is given and differs from
    ``base_latitude``.

    Raises
    ------
    NoValidRecordsError
        If the text holds no parseable records.
    InsufficientDataError, EmptyClimatologyError, LocationAdjustmentError
        Propagated from the later stages.
    """
    records = parse_records(text)
    if not records:
        raise NoValidRecordsError()

    if target_latitude is not None and target_latitude != base_latitude:
        records = adjust_for_location(records, base_latitude, target_latitude, rng=rng)

    return calculate_climatology(
        records, window_size=window_size, epsilon=epsilon, days=days,
    )
