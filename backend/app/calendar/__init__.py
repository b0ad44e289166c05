"""
Calendar view of a climatology.

This module provides:
- Daily record and climatology-day data structures
- Wrap-around forecast windows over the 366-day calendar
- Day-of-year / date conversions and display formatting
"""

from .models import ClimatologyDay, ClimatologyMap, DailyRecord, ForecastDay, DAYS_IN_CLIMATOLOGY
from .forecast_window import build_forecast_days, day_of_year, doy_to_date, format_date, get_forecast

__all__ = [
    "ClimatologyDay",
    "ClimatologyMap",
    "DailyRecord",
    "ForecastDay",
    "DAYS_IN_CLIMATOLOGY",
    "build_forecast_days",
    "day_of_year",
    "doy_to_date",
    "format_date",
    "get_forecast",
]
