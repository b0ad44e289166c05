"""
Centralised error handling — exception hierarchy + FastAPI handlers.

Provides:
    • Domain exceptions for every failure class of the climatology pipeline
    • Consistent JSON error response format
    • Automatic logging of unhandled errors
    • Request context in error responses (non-production)

Failure taxonomy:
    NoValidRecordsError     ingestion produced zero records
    InsufficientDataError   too few records to build a training pair
    SingularMatrixError     Gauss-Jordan pivot below epsilon
    EmptyClimatologyError   rollout produced fewer days than the calendar

Usage:
    from backend.app.core.errors import InsufficientDataError

    raise InsufficientDataError(records=5, required=8)
"""

from __future__ import annotations

import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.app.core.config import settings

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Exception Hierarchy
# ═══════════════════════════════════════════════════════════════════════════

class ClimatologyError(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        *,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}


class NoValidRecordsError(ClimatologyError):
    """Parsing yielded no usable daily records (422)."""

    def __init__(self, message: str = "No valid meteorological records found", **details: Any):
        super().__init__(
            message=message,
            status_code=422,
            error_code="NO_VALID_RECORDS",
            details=details,
        )


class InsufficientDataError(ClimatologyError):
    """Not enough data to form a single training pair (422)."""

    def __init__(self, records: int, required: int, *, unit: str = "records"):
        super().__init__(
            message=(
                f"Insufficient data for regression: {records} {unit}, "
                f"at least {required} required"
            ),
            status_code=422,
            error_code="INSUFFICIENT_DATA",
            details={"count": records, "required": required, "unit": unit},
        )
        self.records = records
        self.required = required


class SingularMatrixError(ClimatologyError):
    """Matrix inversion hit a pivot below the singularity epsilon."""

    def __init__(self, column: int, pivot: float, epsilon: float):
        super().__init__(
            message=(
                f"Matrix is singular: pivot {pivot:.3e} in column {column} "
                f"is below {epsilon:.1e}"
            ),
            status_code=500,
            error_code="SINGULAR_MATRIX",
            details={"column": column, "pivot": pivot, "epsilon": epsilon},
        )
        self.column = column
        self.pivot = pivot


class ShapeMismatchError(ClimatologyError):
    """Matrix operands have incompatible dimensions."""

    def __init__(self, operation: str, left: tuple, right: tuple):
        super().__init__(
            message=f"Cannot {operation} shapes {left} and {right}",
            status_code=500,
            error_code="SHAPE_MISMATCH",
            details={"operation": operation, "left": list(left), "right": list(right)},
        )


class EmptySeriesError(ClimatologyError):
    """A scaler was asked to fit on an empty series (programming error)."""

    def __init__(self, message: str = "Cannot fit a scaler on an empty series"):
        super().__init__(
            message=message,
            status_code=500,
            error_code="EMPTY_SERIES",
        )


class EmptyClimatologyError(ClimatologyError):
    """The generative rollout did not cover the whole calendar (500)."""

    def __init__(self, produced: int, expected: int):
        super().__init__(
            message="Model training produced no usable output",
            status_code=500,
            error_code="EMPTY_CLIMATOLOGY",
            details={"produced": produced, "expected": expected},
        )


class LocationAdjustmentError(ClimatologyError):
    """Latitude inputs for relocation were out of range (422)."""

    def __init__(self, message: str, **details: Any):
        super().__init__(
            message=message,
            status_code=422,
            error_code="LOCATION_ADJUSTMENT_ERROR",
            details=details,
        )


class ValidationError(ClimatologyError):
    """Input validation failed (422)."""

    def __init__(self, message: str, *, field: Optional[str] = None, **details: Any):
        d = {**details}
        if field:
            d["field"] = field
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_ERROR",
            details=d,
        )


# ═══════════════════════════════════════════════════════════════════════════
# Error Response Builder
# ═══════════════════════════════════════════════════════════════════════════

def _build_error_response(
    status_code: int,
    error_code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: Dict[str, Any] = {
        "error": {
            "code": error_code,
            "message": message,
            "status": status_code,
        }
    }

    if details:
        body["error"]["details"] = details

    if request and not settings.is_production:
        body["error"]["path"] = str(request.url.path)
        body["error"]["method"] = request.method

    return JSONResponse(status_code=status_code, content=body)


# ═══════════════════════════════════════════════════════════════════════════
# FastAPI Exception Handlers
# ═══════════════════════════════════════════════════════════════════════════

def register_error_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app."""

    @app.exception_handler(ClimatologyError)
    async def handle_climatology_error(request: Request, exc: ClimatologyError):
        level = logging.WARNING if exc.status_code < 500 else logging.ERROR
        logger.log(
            level,
            "Pipeline error [%s]: %s | details=%s",
            exc.error_code, exc.message, exc.details,
        )
        return _build_error_response(
            exc.status_code, exc.error_code, exc.message,
            exc.details, request,
        )

    @app.exception_handler(ValueError)
    async def handle_value_error(request: Request, exc: ValueError):
        logger.warning("ValueError: %s", exc)
        return _build_error_response(
            422, "VALIDATION_ERROR", str(exc), request=request,
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.critical(
            "Unhandled exception: %s\n%s",
            exc, traceback.format_exc(),
        )
        message = str(exc) if settings.DEBUG else "Internal server error"
        return _build_error_response(500, "INTERNAL_ERROR", message, request=request)
