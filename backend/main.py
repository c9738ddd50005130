"""
Component preview FastAPI application.

Entry point for the API server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from backend.config import settings
from backend.logging_config import configure_logging
from backend.models.preview import HealthResponse
from backend.routes import previews as preview_routes
from backend.services.orchestrator import PreviewPipeline

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Startup: configure logging, report which tiers are available.
    """
    configure_logging(settings.LOG_LEVEL)
    logger.info(
        "Component preview API starting (environment=%s, provider=%s, sandbox=%s)",
        settings.ENVIRONMENT,
        settings.GENERATION_PROVIDER,
        settings.SANDBOX_URL or "not configured",
    )
    yield
    logger.info("Component preview API stopped")


app = FastAPI(
    title="Component Preview",
    lifespan=lifespan,
)

# Register routes
app.include_router(preview_routes.router)


@app.get("/api/health")
async def health(pipeline: PreviewPipeline = Depends(preview_routes.get_pipeline)) -> HealthResponse:
    """Health check: sandbox availability and generation provider."""
    configured = pipeline.sandbox.is_configured
    healthy = await pipeline.sandbox.health() if configured else False
    return HealthResponse(
        status="ok",
        sandbox_configured=configured,
        sandbox_healthy=healthy,
        generation_provider=pipeline.client.provider,
    )
