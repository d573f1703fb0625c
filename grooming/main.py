"""Grooming recommender — FastAPI application factory."""

import logging

from fastapi import FastAPI

from grooming.config import settings
from grooming.infrastructure.api.routes_grooming import router as grooming_router
from grooming.infrastructure.api.routes_health import router as health_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Grooming Assignment Recommender",
        description="Multi-trial consensus recommendations for backlog grooming",
        version="0.1.0",
    )

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(grooming_router, prefix="/api")

    logger.info("Consensus trials per run: %d", settings.consensus_trials)
    return app


app = create_app()
