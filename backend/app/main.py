"""
Admission Probability Engine - FastAPI Application

Main entry point for the backend API.
Provides admission probability predictions for an applicant profile
against a batch of schools.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config.settings import settings
from app.infrastructure.exceptions import (
    AdmissionEngineError,
    ConfigurationError,
    DatabaseError,
    ValidationError,
    NotFoundError,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    logger.info(f"Admission engine starting in {settings.environment} mode...")

    # Fail fast on a bad weight table or thresholds
    from app.api.dependencies import get_scoring_config
    config = get_scoring_config()
    logger.info(
        f"Scoring config loaded: engine {config.engine_version}, "
        f"weights {config.weights.version} {config.weights.as_dict()}"
    )

    if settings.database_url:
        try:
            from app.infrastructure.db.database import init_db
            await init_db()
            logger.info("SQLModel database connection pool initialized")
        except Exception as e:
            logger.warning(f"SQLModel database initialization skipped: {e}")

    yield

    # Shutdown
    if settings.database_url:
        try:
            from app.infrastructure.db.database import close_db
            await close_db()
            logger.info("SQLModel database connection pool closed")
        except Exception as e:
            logger.warning(f"SQLModel database shutdown error: {e}")

    logger.info("Admission engine shutting down...")


app = FastAPI(
    title="Admission Probability Engine",
    description="Calibrated admission probabilities with explainable factors",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS configuration from Settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Handle validation errors."""
    return JSONResponse(
        status_code=400,
        content=exc.to_dict(),
    )


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    """Handle unknown profile / school."""
    return JSONResponse(
        status_code=404,
        content=exc.to_dict(),
    )


@app.exception_handler(DatabaseError)
async def database_error_handler(request: Request, exc: DatabaseError):
    """Handle data store failures."""
    logger.error(f"Database error: {exc.message}")
    return JSONResponse(
        status_code=503,
        content=exc.to_dict(),
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    """Handle missing or invalid configuration."""
    logger.error(f"Configuration error: {exc.message}")
    return JSONResponse(
        status_code=500,
        content=exc.to_dict(),
    )


@app.exception_handler(AdmissionEngineError)
async def general_error_handler(request: Request, exc: AdmissionEngineError):
    """Handle all other application errors."""
    return JSONResponse(
        status_code=500,
        content=exc.to_dict(),
    )


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "admission-engine"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Admission Probability Engine API",
        "version": "1.0.0",
        "docs": "/docs",
    }


# ============================================================================
# Import and register routers
# ============================================================================

from app.api.routes import predictions

app.include_router(predictions.router)
