"""
FastAPI endpoints for the climatology engine.

Routes:
    POST /api/v1/climatology/build        — Full 366-day climatology
    POST /api/v1/climatology/forecast     — Wrap-around forecast window
    POST /api/v1/climatology/mission      — GO / NO-GO for a mission profile
    POST /api/v1/climatology/compare      — Model vs. live observation
    GET  /api/v1/climatology/day-of-year  — Day-of-year for a date

Handlers are plain ``def`` so FastAPI runs the CPU-bound pipeline in its
worker threadpool. Each request builds its own engine state.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional

import numpy as np
from fastapi import APIRouter, Query

from backend.app.api.schemas import (
    ClimatologyRequest,
    ClimatologyResponse,
    ComparisonRequest,
    ForecastRequest,
    ForecastResponse,
    MissionRequest,
)
from backend.app.calendar.forecast_window import (
    build_forecast_days,
    day_of_year,
    get_forecast,
)
from backend.app.core.config import settings
from backend.app.core.errors import ValidationError
from backend.app.ml.climatology_engine import ClimatologyResult, run_pipeline
from backend.app.ml.decision_support import (
    MissionConditions,
    compare_with_observation,
    diurnal_profile,
    evaluate_mission,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/climatology",
    tags=["climatology"],
)


# ── Helpers ────────────────────────────────────────────────────────


def _build(req: ClimatologyRequest) -> ClimatologyResult:
    size = len(req.text.encode("utf-8"))
    if size > settings.MAX_UPLOAD_BYTES:
        raise ValidationError(
            f"Upload of {size} bytes exceeds limit of {settings.MAX_UPLOAD_BYTES}",
            field="text",
        )

    seed = req.seed if req.seed is not None else settings.ADJUSTER_SEED
    return run_pipeline(
        req.text,
        target_latitude=req.target_latitude,
        base_latitude=settings.BASE_LATITUDE,
        rng=np.random.default_rng(seed),
        window_size=settings.WINDOW_SIZE,
        epsilon=settings.SINGULARITY_EPSILON,
        days=settings.CLIMATOLOGY_DAYS,
    )


# ── Endpoints ──────────────────────────────────────────────────────


@router.post("/build", response_model=ClimatologyResponse, summary="Build climatology")
def build_climatology(req: ClimatologyRequest) -> Dict[str, Any]:
    """Parse, optionally relocate, train and roll out all 366 days."""
    result = _build(req)
    return {
        "summary": result.summary(),
        "climatology": [d.to_dict() for d in result.days()],
    }


@router.post("/forecast", response_model=ForecastResponse, summary="Forecast window")
def forecast_window(req: ForecastRequest) -> Dict[str, Any]:
    """
    Climatology entries for ``num_days`` starting at ``start_day``.

    When only ``start_date`` (or nothing) is given, the window starts at
    that date's day-of-year. Dated rows cover the same window, in the
    year of ``start_date``; day 366 is left out of them in a non-leap year.
    """
    result = _build(req)
    start = req.start_date or date.today()
    start_day = req.start_day or day_of_year(start)

    num_days = req.num_days or settings.DEFAULT_FORECAST_DAYS
    window = get_forecast(result.climatology, start_day, num_days)
    days = build_forecast_days(
        result.climatology, start, num_days, result.historical_temps,
        start_doy=start_day,
    )
    return {
        "start_day": start_day,
        "used_fallback": result.used_fallback,
        "window": [d.to_dict() for d in window],
        "days": [d.to_dict() for d in days],
    }


@router.post("/mission", summary="Mission GO / NO-GO")
def mission_status(req: MissionRequest) -> Dict[str, Any]:
    status = evaluate_mission(
        req.profile,
        MissionConditions(
            temperature_c=req.temperature_c,
            wind_speed_kmh=req.wind_speed_kmh,
            precip_mm=req.precip_mm,
            humidity_pct=req.humidity_pct,
        ),
    )
    return status.to_dict()


@router.post("/compare", summary="Compare model with a live reading")
def compare(req: ComparisonRequest, hour: Optional[int] = Query(None, ge=0, le=23)) -> Dict[str, Any]:
    return {
        "comparison": compare_with_observation(req.model_temp, req.observed_temp).to_dict(),
        "diurnal": diurnal_profile(req.model_temp, req.observed_temp, hour),
    }


@router.get("/day-of-year", summary="Day-of-year for a date")
def get_day_of_year(on: date = Query(..., description="ISO date, e.g. 2024-03-01")) -> Dict[str, Any]:
    return {"date": on.isoformat(), "day_of_year": day_of_year(on)}
