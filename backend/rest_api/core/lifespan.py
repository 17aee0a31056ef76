"""
Application lifespan handler.
Manages startup and shutdown events for the FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared.config.settings import settings
from shared.config.logging import setup_logging, rest_api_logger as logger
from shared.infrastructure.db import engine, get_db_context
from rest_api.models import Base
from rest_api.seed import seed_sample_users


def init_database(seed: bool = False) -> int:
    """
    Create missing tables and optionally insert the sample users.

    Returns the number of users seeded.
    """
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    if not seed:
        return 0
    with get_db_context() as db:
        return seed_sample_users(db)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    # Initialize logging
    setup_logging()

    # Validate production settings before startup
    config_errors = settings.validate_production_settings()
    if config_errors:
        for error in config_errors:
            logger.error("Configuration error: %s", error)
        if settings.environment == "production":
            raise RuntimeError(
                f"Production configuration errors: {'; '.join(config_errors)}. "
                "Server will not start with an unsafe configuration."
            )

    # Startup
    logger.info("Starting REST API", port=settings.rest_api_port, env=settings.environment)
    init_database(seed=settings.seed_sample_data)

    yield

    # Shutdown
    logger.info("Shutting down REST API")
    engine.dispose()
