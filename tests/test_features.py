"""
test_features.py — Feature rows and sliding-window training sets.

Run with:
    pytest tests/test_features.py -v
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from backend.app.features.climatology_features import (
    FEATURE_NAMES,
    N_FEATURES,
    build_feature_row,
    build_training_set,
    cyclical_encoding,
)


class TestFeatureRow:
    def test_layout(self):
        assert N_FEATURES == 10
        assert FEATURE_NAMES[:3] == ["bias", "doy_sin", "doy_cos"]
        assert FEATURE_NAMES[-1] == "lag_7"

    def test_values(self):
        lags = [0.7, 0.6, 0.5, 0.4, 0.3, 0.2, 0.1]
        row = build_feature_row(100, lags)
        theta = 2 * math.pi * 100 / 365.25
        assert row.shape == (10,)
        assert row[0] == 1.0
        assert row[1] == pytest.approx(math.sin(theta))
        assert row[2] == pytest.approx(math.cos(theta))
        np.testing.assert_allclose(row[3:], lags)

    def test_year_boundary_is_continuous(self):
        dec31 = np.array(cyclical_encoding(366))
        jan1 = np.array(cyclical_encoding(1))
        assert np.linalg.norm(dec31 - jan1) < 0.05


class TestTrainingSet:
    def test_windows(self):
        series = [i / 10 for i in range(10)]
        ts = build_training_set(list(range(1, 11)), series, window_size=7)
        assert ts.n_samples == 3
        assert ts.X.shape == (3, 10)
        assert ts.y.shape == (3, 1)
        # first row: target index 7, lag_1 = index 6 … lag_7 = index 0
        np.testing.assert_allclose(ts.X[0, 3:], [0.6, 0.5, 0.4, 0.3, 0.2, 0.1, 0.0])
        assert ts.y[0, 0] == pytest.approx(0.7)
        assert ts.X[0, 1] == pytest.approx(cyclical_encoding(8)[0])

    def test_exactly_window_size_is_empty(self):
        ts = build_training_set(list(range(1, 8)), [0.0] * 7, window_size=7)
        assert ts.is_empty
        assert ts.X.shape == (0, 10)

    def test_window_plus_one_gives_one_sample(self):
        ts = build_training_set(list(range(1, 9)), [0.0] * 8, window_size=7)
        assert ts.n_samples == 1

    def test_custom_window(self):
        ts = build_training_set([1, 2, 3, 4, 5], [0.1, 0.2, 0.3, 0.4, 0.5], window_size=2)
        assert ts.X.shape == (3, 5)

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            build_training_set([1, 2, 3], [0.1, 0.2])
