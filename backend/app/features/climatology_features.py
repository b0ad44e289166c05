"""
climatology_features.py — Feature rows for the autoregressive climatology model.

Feature vector (10 columns):

    index  name     value
    0      bias     1.0
    1      doy_sin  sin(2π · doy / 365.25)
    2      doy_cos  cos(2π · doy / 365.25)
    3..9   lag_1..lag_7   previous scaled temperatures, most recent first

The sin/cos pair keeps 31 Dec and 1 Jan adjacent; the lags give the model
its short-term memory. The same ``build_feature_row`` is used for training
and for each generative forecast step.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

WINDOW_SIZE = 7
DAYS_PER_YEAR = 365.25

FEATURE_NAMES: List[str] = (
    ["bias", "doy_sin", "doy_cos"]
    + [f"lag_{k}" for k in range(1, WINDOW_SIZE + 1)]
)

N_FEATURES = len(FEATURE_NAMES)


@dataclass
class TrainingSet:
    """Design matrix and targets; ``X`` is (n_samples, 3 + window)."""
    X: np.ndarray
    y: np.ndarray
    window_size: int

    @property
    def n_samples(self) -> int:
        return int(self.X.shape[0])

    @property
    def is_empty(self) -> bool:
        return self.n_samples == 0


def cyclical_encoding(day_of_year: int) -> tuple:
    """(sin θ, cos θ) with θ = 2π · doy / 365.25."""
    theta = 2.0 * math.pi * day_of_year / DAYS_PER_YEAR
    return math.sin(theta), math.cos(theta)


def build_feature_row(day_of_year: int, lags: Sequence[float]) -> np.ndarray:
    """Bias, cyclical date and lag features for one sample."""
    sin_doy, cos_doy = cyclical_encoding(day_of_year)
    return np.array([1.0, sin_doy, cos_doy, *lags], dtype=np.float64)


def build_training_set(
    days_of_year: Sequence[int],
    scaled_temps: Sequence[float],
    window_size: int = WINDOW_SIZE,
) -> TrainingSet:
    """
    Sliding-window dataset over a chronologically sorted, scaled series.

    Every index ``i >= window_size`` yields one row built from the date of
    record ``i`` and values ``i-1 … i-window_size``, with target value ``i``.
    A series of ``window_size`` or fewer points gives an empty set.
    """
    if len(days_of_year) != len(scaled_temps):
        raise ValueError(
            f"days_of_year ({len(days_of_year)}) and scaled_temps "
            f"({len(scaled_temps)}) differ in length"
        )

    n = len(scaled_temps)
    width = 3 + window_size
    if n <= window_size:
        return TrainingSet(
            X=np.empty((0, width)), y=np.empty((0, 1)), window_size=window_size,
        )

    rows = []
    targets = []
    for i in range(window_size, n):
        lags = [scaled_temps[i - k] for k in range(1, window_size + 1)]
        rows.append(build_feature_row(days_of_year[i], lags))
        targets.append(scaled_temps[i])

    return TrainingSet(
        X=np.vstack(rows),
        y=np.asarray(targets, dtype=np.float64).reshape(-1, 1),
        window_size=window_size,
    )
