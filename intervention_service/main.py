"""Main FastAPI application for the Learner Intervention Service."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog
from prometheus_fastapi_instrumentator import Instrumentator

from intervention_service.core.config import settings
from intervention_service.core.logging import setup_logging
from intervention_service.core.dependencies import get_analysis_cache, get_analysis_engine
from intervention_service.routers import analysis, reports

# Setup structured logging
setup_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle manager."""
    # Startup
    logger.info("Starting Learner Intervention Service", version=settings.APP_VERSION)

    app.state.analysis_cache = await get_analysis_cache()
    app.state.analysis_engine = get_analysis_engine()

    logger.info("Intervention service initialized successfully")

    yield

    # Shutdown
    logger.info("Shutting down Learner Intervention Service")


# Create FastAPI app
app = FastAPI(
    title="Learner Intervention Service",
    description="At-risk learner analysis, progress statistics and outreach reports",
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup Prometheus metrics
if settings.ENABLE_METRICS:
    Instrumentator().instrument(app).expose(app, endpoint="/metrics")

# Include routers
app.include_router(analysis.router, prefix="/api/analysis", tags=["analysis"])
app.include_router(reports.router, prefix="/api/reports", tags=["reports"])


@app.get("/", tags=["root"])
async def root():
    """Root endpoint."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "status": "operational"
    }


@app.get("/health", tags=["health"])
async def health_check(request: Request):
    """Health check endpoint."""
    health_status = {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "version": settings.APP_VERSION,
        "checks": {}
    }

    # Check cache
    try:
        cache = await get_analysis_cache()
        await cache.exists("health_check")
        health_status["checks"]["cache"] = "healthy"
    except Exception as e:
        health_status["checks"]["cache"] = f"unhealthy: {str(e)}"
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(content=health_status, status_code=status_code)


@app.get("/config", tags=["debug"])
async def get_config():
    """Get current configuration (development only)."""
    if settings.is_production():
        return JSONResponse(
            content={"error": "Not available in production"},
            status_code=403
        )

    return {
        "environment": settings.ENVIRONMENT,
        "analysis": {
            "at_risk_max_weeks_behind": settings.AT_RISK_MAX_WEEKS_BEHIND,
            "grace_period_weeks": settings.GRACE_PERIOD_WEEKS,
            "default_course_total_weeks": settings.DEFAULT_COURSE_TOTAL_WEEKS,
            "course_total_weeks": settings.COURSE_TOTAL_WEEKS,
            "max_program_week": settings.MAX_PROGRAM_WEEK
        },
        "uploads": {
            "max_bytes": settings.MAX_UPLOAD_BYTES
        },
        "cache_ttl": settings.CACHE_TTL
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "intervention_service.main:app",
        host="0.0.0.0",
        port=settings.SERVICE_PORT,
        reload=settings.ENVIRONMENT == "development",
        log_config=None  # Use structlog instead
    )
