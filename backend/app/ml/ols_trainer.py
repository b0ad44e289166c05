"""
ols_trainer.py — Ordinary least squares via the normal equation.

    w = (XᵀX)⁻¹ Xᵀy

Degraded mode: when XᵀX cannot be inverted (``SingularMatrixError`` from the
kernel) the trainer does not raise. It returns the fallback weights

    [0.5, 0, 0, …, 0]

which predict the midpoint of the scaled range for every input, and sets
``TrainingResult.used_fallback`` so callers can tell a degenerate model from
a real fit. An empty training set is a different failure and does raise
``InsufficientDataError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np

from backend.app.core.errors import InsufficientDataError, SingularMatrixError
from backend.app.features.climatology_features import N_FEATURES, TrainingSet
from backend.app.ml.linalg import SINGULARITY_EPSILON, inverse, multiply, transpose

logger = logging.getLogger(__name__)

FALLBACK_INTERCEPT = 0.5


def fallback_weights(n_features: int = N_FEATURES) -> np.ndarray:
    """Intercept-only weights predicting the scaled midpoint."""
    w = np.zeros(n_features, dtype=np.float64)
    w[0] = FALLBACK_INTERCEPT
    w.setflags(write=False)
    return w


@dataclass
class TrainingResult:
    """Trained weight vector plus how it was obtained."""
    weights: np.ndarray
    n_samples: int
    used_fallback: bool = False
    fallback_reason: Optional[str] = None
    metrics: Dict[str, float] = field(default_factory=dict)

    def predict(self, features: np.ndarray) -> float:
        """Dot product of the weights with one feature row."""
        return float(np.dot(self.weights, features))

    def summary(self) -> Dict[str, Any]:
        return {
            "n_samples": self.n_samples,
            "used_fallback": self.used_fallback,
            "fallback_reason": self.fallback_reason,
            "weights": [round(float(w), 6) for w in self.weights],
            "metrics": {k: round(v, 6) for k, v in self.metrics.items()},
        }


def solve_normal_equation(
    X: np.ndarray,
    y: np.ndarray,
    epsilon: float = SINGULARITY_EPSILON,
) -> np.ndarray:
    """
    Solve for the weight vector; propagates ``SingularMatrixError``.

    Returns a flat array of length ``X.shape[1]``.
    """
    Xt = transpose(X)
    XtX_inv = inverse(multiply(Xt, X), epsilon=epsilon)
    beta = multiply(XtX_inv, multiply(Xt, y))
    return beta[:, 0]


def _in_sample_metrics(X: np.ndarray, y: np.ndarray, w: np.ndarray) -> Dict[str, float]:
    residuals = y[:, 0] - X @ w
    ss_res = float(np.sum(residuals ** 2))
    ss_tot = float(np.sum((y[:, 0] - y[:, 0].mean()) ** 2))
    return {
        "rmse_scaled": float(np.sqrt(ss_res / len(residuals))),
        "r_squared": 1.0 - ss_res / ss_tot if ss_tot > 0 else 0.0,
    }


def train_ols(
    training_set: TrainingSet,
    epsilon: float = SINGULARITY_EPSILON,
) -> TrainingResult:
    """
    Fit the autoregressive climatology model.

    Parameters
    ----------
    training_set : TrainingSet
        Output of ``build_training_set``.
    epsilon : float
        Pivot threshold forwarded to the matrix inverse.

    Returns
    -------
    TrainingResult
        ``used_fallback`` is True when XᵀX was singular.

    Raises
    ------
    InsufficientDataError
        If the training set has no rows.
    """
    if training_set.is_empty:
        raise InsufficientDataError(records=0, required=1, unit="training pairs")

    X, y = training_set.X, training_set.y
    n_features = X.shape[1]

    try:
        weights = solve_normal_equation(X, y, epsilon=epsilon)
    except SingularMatrixError as exc:
        logger.warning(
            "Matrix singularity in OLS (%s); falling back to mean predictor",
            exc.message,
            extra={"samples": training_set.n_samples, "used_fallback": True},
        )
        return TrainingResult(
            weights=fallback_weights(n_features),
            n_samples=training_set.n_samples,
            used_fallback=True,
            fallback_reason=exc.message,
        )

    weights.setflags(write=False)
    metrics = _in_sample_metrics(X, y, weights)
    logger.info(
        "OLS fit on %d samples (R²=%.4f)",
        training_set.n_samples, metrics["r_squared"],
        extra={"samples": training_set.n_samples, "used_fallback": False},
    )
    return TrainingResult(
        weights=weights,
        n_samples=training_set.n_samples,
        metrics=metrics,
    )
