"""
test_location_adjuster.py — Latitude relocation heuristic.

Run with:
    pytest tests/test_location_adjuster.py -v
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from backend.app.calendar.models import DailyRecord
from backend.app.core.errors import LocationAdjustmentError
from backend.app.ml.location_adjuster import (
    adjust_for_location,
    compute_latitude_shift,
    seasonal_component,
)

# Chennai base point and New Delhi target
BASE_LAT = 13.1186
DELHI_LAT = 28.6139


def _make_records(n: int = 50, temp: float = 30.0, precip: float = 2.0):
    return [DailyRecord(2001, (i % 366) + 1, temp, precip) for i in range(n)]


class TestLatitudeShift:
    def test_lapse_rate(self):
        shift = compute_latitude_shift(BASE_LAT, DELHI_LAT)
        assert shift.temp_shift == pytest.approx(-0.75 * (DELHI_LAT - BASE_LAT))
        assert shift.polar_penalty == 0.0

    def test_hemisphere_symmetric(self):
        north = compute_latitude_shift(BASE_LAT, DELHI_LAT)
        south = compute_latitude_shift(BASE_LAT, -DELHI_LAT)
        assert north.total == pytest.approx(south.total)

    def test_towards_equator_warms(self):
        assert compute_latitude_shift(BASE_LAT, 0.0).temp_shift > 0

    def test_polar_penalty(self):
        assert compute_latitude_shift(BASE_LAT, 70.0).polar_penalty == -5.0
        assert compute_latitude_shift(BASE_LAT, -61.0).polar_penalty == -5.0

    def test_exactly_sixty_is_not_polar(self):
        assert compute_latitude_shift(BASE_LAT, 60.0).polar_penalty == 0.0

    @pytest.mark.parametrize("lat", [90.5, -91.0, float("nan"), float("inf")])
    def test_invalid_latitude(self, lat):
        with pytest.raises(LocationAdjustmentError):
            compute_latitude_shift(BASE_LAT, lat)


class TestAdjustForLocation:
    def test_noise_within_bounds(self):
        records = _make_records(200)
        shift = compute_latitude_shift(BASE_LAT, DELHI_LAT)
        adjusted = adjust_for_location(records, BASE_LAT, DELHI_LAT, rng=np.random.default_rng(1))
        for before, after in zip(records, adjusted):
            residual = (
                after.temp_range - before.temp_range
                - shift.total - seasonal_component(before.day_of_year)
            )
            assert abs(residual) <= 0.75 + 1e-9

    def test_precip_factor_bounds(self):
        records = _make_records(200)
        adjusted = adjust_for_location(records, BASE_LAT, DELHI_LAT, rng=np.random.default_rng(2))
        for before, after in zip(records, adjusted):
            assert 0.8 <= after.precip / before.precip <= 1.2

    def test_zero_precip_stays_zero(self):
        records = _make_records(20, precip=0.0)
        adjusted = adjust_for_location(records, BASE_LAT, DELHI_LAT, rng=np.random.default_rng(3))
        assert all(r.precip == 0.0 for r in adjusted)

    def test_seeded_generator_is_deterministic(self):
        records = _make_records(30)
        a = adjust_for_location(records, BASE_LAT, DELHI_LAT, rng=np.random.default_rng(42))
        b = adjust_for_location(records, BASE_LAT, DELHI_LAT, rng=np.random.default_rng(42))
        assert a == b

    def test_input_untouched(self):
        records = _make_records(10)
        adjust_for_location(records, BASE_LAT, 70.0, rng=np.random.default_rng(0))
        assert all(r.temp_range == 30.0 and r.precip == 2.0 for r in records)

    def test_keys_preserved(self):
        records = _make_records(10)
        adjusted = adjust_for_location(records, BASE_LAT, DELHI_LAT)
        assert [r.sort_key for r in adjusted] == [r.sort_key for r in records]

    def test_empty_input(self):
        assert adjust_for_location([], BASE_LAT, DELHI_LAT) == []

    def test_seasonal_component(self):
        assert seasonal_component(0) == 0.0
        assert seasonal_component(16) == pytest.approx(0.5 * math.sin(1.6))
