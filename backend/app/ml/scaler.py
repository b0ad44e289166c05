"""
scaler.py — Min/max normalisation to [0, 1].

Two states, two types:

    UnfittedScaler().fit(values) ──▶ FittedScaler(min, max)

Only ``FittedScaler`` has ``transform`` / ``inverse_transform``, so using a
scaler before fitting is an AttributeError at the call site and a type error
under mypy, not a silent identity transform.

A flat series (min == max) is widened to max = min + 1 so the transform
never divides by zero. Values outside the fitted range extrapolate linearly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

from backend.app.core.errors import EmptySeriesError

ArrayLike = Union[Sequence[float], np.ndarray]


@dataclass(frozen=True)
class FittedScaler:
    """Scaler state; invariant ``max > min``."""
    min: float
    max: float

    def __post_init__(self) -> None:
        if not self.max > self.min:
            raise ValueError(f"FittedScaler requires max > min, got {self.min}..{self.max}")

    @property
    def span(self) -> float:
        return self.max - self.min

    def transform(self, values: ArrayLike) -> np.ndarray:
        return (np.asarray(values, dtype=np.float64) - self.min) / self.span

    def inverse_transform(self, scaled: float) -> float:
        return scaled * self.span + self.min


class UnfittedScaler:
    """Factory side of the scaler; exposes nothing but ``fit``."""

    def fit(self, values: ArrayLike) -> FittedScaler:
        arr = np.asarray(values, dtype=np.float64)
        if arr.size == 0:
            raise EmptySeriesError()

        lo = float(arr.min())
        hi = float(arr.max())
        if hi == lo:
            hi = lo + 1.0
        return FittedScaler(min=lo, max=hi)


def fit_scaler(values: ArrayLike) -> FittedScaler:
    """Shorthand for ``UnfittedScaler().fit(values)``."""
    return UnfittedScaler().fit(values)
