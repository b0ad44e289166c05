"""
Calendar helpers over a ClimatologyMap.

    get_forecast(climatology, start_day, num_days)  wrap-around window
    day_of_year(d)                                   1-based ordinal in its year
    doy_to_date(doy, year)                           inverse of day_of_year
    format_date(d)                                   "Mon, Jan 1"
    build_forecast_days(...)                         dated display rows

All functions are pure; none of them look at model internals.
"""

from __future__ import annotations

from calendar import isleap
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Union

from backend.app.calendar.models import (
    DAYS_IN_CLIMATOLOGY,
    ClimatologyDay,
    ClimatologyMap,
    ForecastDay,
)

DEFAULT_FORECAST_DAYS = 7


def get_forecast(
    climatology: ClimatologyMap,
    start_day: int,
    num_days: int = DEFAULT_FORECAST_DAYS,
) -> List[ClimatologyDay]:
    """
    Walk ``num_days`` calendar days from ``start_day``, wrapping 366 → 1.

    Days missing from the map are skipped, so the result can be shorter
    than ``num_days``.
    """
    window: List[ClimatologyDay] = []
    doy = start_day
    for _ in range(max(num_days, 0)):
        if doy > DAYS_IN_CLIMATOLOGY:
            doy = 1
        entry = climatology.get(doy)
        if entry is not None:
            window.append(entry)
        doy += 1
    return window


def day_of_year(d: Union[date, datetime]) -> int:
    """Whole days since 31 Dec of the previous year (1 Jan → 1)."""
    if isinstance(d, datetime):
        d = d.date()
    return (d - date(d.year - 1, 12, 31)).days


def doy_to_date(doy: int, year: Optional[int] = None) -> date:
    """
    Calendar date of ``doy`` in ``year`` (current year by default).

    Day 366 of a non-leap year rolls over to 1 Jan of the next year.
    """
    year = year if year is not None else date.today().year
    return date(year, 1, 1) + timedelta(days=doy - 1)


def format_date(d: Union[date, datetime]) -> str:
    return f"{d.strftime('%a')}, {d.strftime('%b')} {d.day}"


def build_forecast_days(
    climatology: ClimatologyMap,
    start: date,
    num_days: int = DEFAULT_FORECAST_DAYS,
    historical_temps: Optional[Dict[int, float]] = None,
    start_doy: Optional[int] = None,
) -> List[ForecastDay]:
    """
    Dated forecast rows for the window ``get_forecast`` returns.

    The window starts at ``start_doy`` (the day-of-year of ``start`` by
    default). Entries are dated in ``start.year``, or the following year
    once the window has wrapped past day 366. Day 366 has no date in a
    non-leap year and is left out, so every row's ``day_of_year`` matches
    its date. ``historical_temps`` maps day-of-year to the empirical mean
    temperature; when a day is missing there the model value is repeated.
    """
    historical_temps = historical_temps or {}
    start_doy = start_doy if start_doy is not None else day_of_year(start)
    rows: List[ForecastDay] = []
    for entry in get_forecast(climatology, start_doy, num_days):
        year = start.year if entry.day_of_year >= start_doy else start.year + 1
        if entry.day_of_year == DAYS_IN_CLIMATOLOGY and not isleap(year):
            continue
        when = doy_to_date(entry.day_of_year, year)
        rows.append(ForecastDay(
            date=when,
            day_of_year=entry.day_of_year,
            label=format_date(when),
            predicted_temp=entry.avg_temp,
            predicted_precip=entry.avg_precip,
            historical_avg_temp=historical_temps.get(entry.day_of_year, entry.avg_temp),
        ))
    return rows
