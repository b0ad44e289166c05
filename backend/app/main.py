"""
FastAPI application entry point.

Run with:
    uvicorn backend.app.main:app --reload --port 8000

Or from the project root:
    python -m uvicorn backend.app.main:app --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.core.config import settings
from backend.app.core.logging_config import setup_logging, get_logger
from backend.app.core.errors import register_error_handlers
from backend.app.core.middleware import RequestLoggingMiddleware

from backend.app.api.v1.climatology import router as climatology_router

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting %s v%s [%s] (base latitude %.4f, window %d)",
        settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT,
        settings.BASE_LATITUDE, settings.WINDOW_SIZE,
    )
    yield
    logger.info("Shutting down %s", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    description=(
        "Builds a smooth 366-day temperature and precipitation climatology "
        "from a multi-year daily NASA POWER series using an autoregressive "
        "least-squares model rolled forward across the calendar."
    ),
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS if not settings.CORS_ALLOW_ALL else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_error_handlers(app)

app.include_router(climatology_router)


@app.get("/", tags=["root"])
async def root():
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "base_location": {
            "latitude": settings.BASE_LATITUDE,
            "longitude": settings.BASE_LONGITUDE,
        },
        "modules": [
            "record-parser",
            "location-adjuster",
            "ols-climatology",
            "forecast-window",
            "mission-planner",
        ],
        "docs": "/docs",
    }


@app.get("/health/live", tags=["health"])
async def liveness():
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backend.app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower(),
    )
