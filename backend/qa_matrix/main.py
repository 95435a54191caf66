"""FastAPI application entry point with structured logging and health checks."""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from qa_matrix.api import concerns, repeats
from qa_matrix.database import get_engine, init_db
from qa_matrix.dependencies import get_settings
from qa_matrix.health import router as health_router
from qa_matrix.logging_config import get_logger, setup_logging

_settings = get_settings()

# Setup structured logging
setup_logging(json_logs=_settings.json_logs, log_level=_settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the FastAPI application."""
    logger.info("application_startup", version="1.0.0")
    init_db(get_engine())
    logger.info("database_initialized")
    yield
    logger.info("application_shutdown")


app = FastAPI(
    title="QA Matrix",
    description=(
        "Tracks manufacturing quality concerns, computes control statuses and "
        "reconciles weekly repeat-issue reports against the concern ledger."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)

# Health checks (no versioning)
app.include_router(health_router, tags=["health"])

API_V1_PREFIX = "/api/v1"

app.include_router(concerns.router, prefix=f"{API_V1_PREFIX}/concerns", tags=["concerns"])
app.include_router(repeats.router, prefix=f"{API_V1_PREFIX}/repeats", tags=["repeats"])


@app.get("/")
def root():
    """Root endpoint - API information and available endpoints."""
    return {
        "service": "QA Matrix API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "api_version": "v1",
        "endpoints": {
            "concerns": f"{API_V1_PREFIX}/concerns/",
            "dashboard": f"{API_V1_PREFIX}/concerns/dashboard",
            "repeats": f"{API_V1_PREFIX}/repeats/status",
        },
    }
