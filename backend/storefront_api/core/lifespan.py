"""
Application lifespan handler.
Manages startup and shutdown events for the FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from storefront_shared.config.logging import api_logger as logger, setup_logging
from storefront_shared.config.settings import settings
from storefront_shared.infrastructure.db import engine
from storefront_api.models import Base


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    setup_logging()

    # Refuse to start in production with insecure configuration
    secret_errors = settings.validate_production_secrets()
    if secret_errors:
        for error in secret_errors:
            logger.error("Configuration error", error=error)
        if settings.environment == "production":
            raise RuntimeError(
                f"Production configuration errors: {'; '.join(secret_errors)}. "
                "Server will not start with insecure configuration."
            )

    logger.info(
        "Starting storefront admin API",
        port=settings.api_port,
        env=settings.environment,
        retention_days=settings.trash_retention_days,
    )

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    yield

    logger.info("Shutting down storefront admin API")
