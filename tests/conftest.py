"""Synthetic NASA POWER exports shared by the engine and API tests."""

from __future__ import annotations

import math
from typing import List

import numpy as np
import pytest

from backend.app.calendar.models import DailyRecord
from backend.app.ingestion.record_parser import HEADER_SENTINEL

POWER_HEADER = "\n".join([
    "-BEGIN HEADER-",
    "NASA/POWER CERES/MERRA2 Native Resolution Daily Data",
    "Dates (month/day/year): 01/01/2001 through 12/31/2003",
    "Location: Latitude  13.1186   Longitude 80.1083",
    "T2M_RANGE     MERRA-2 Temperature at 2 Meters Range (C)",
    "PRECTOTCORR   MERRA-2 Precipitation Corrected (mm/day)",
    HEADER_SENTINEL,
    "YEAR,DOY,T2M_RANGE,PRECTOTCORR",
])


def make_seasonal_records(years=(2001, 2002, 2003), mean: float = 28.0, seed: int = 0) -> List[DailyRecord]:
    """Noisy annual cycle; the noise keeps the lag columns independent."""
    rng = np.random.default_rng(seed)
    records = []
    for year in years:
        for doy in range(1, 366):
            temp = mean + 4.0 * math.sin(2 * math.pi * (doy - 100) / 365.25) + rng.normal(0, 0.8)
            precip = max(0.0, rng.normal(3.0, 2.0))
            records.append(DailyRecord(year, doy, round(temp, 2), round(precip, 2)))
    return records


def records_to_text(records: List[DailyRecord]) -> str:
    rows = [f"{r.year},{r.day_of_year},{r.temp_range:.2f},{r.precip:.2f}" for r in records]
    return POWER_HEADER + "\n" + "\n".join(rows) + "\n"


@pytest.fixture(scope="session")
def power_header() -> str:
    return POWER_HEADER


@pytest.fixture(scope="session")
def seasonal_factory():
    return make_seasonal_records


@pytest.fixture(scope="session")
def to_power_text():
    return records_to_text


@pytest.fixture(scope="session")
def seasonal_records() -> List[DailyRecord]:
    return make_seasonal_records()


@pytest.fixture(scope="session")
def power_text(seasonal_records) -> str:
    return records_to_text(seasonal_records)
