"""
FastAPI Production Application

Main entry point for the COD Metrics API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
import structlog

from codmetrics.config import get_settings
from codmetrics.config.logging import configure_logging
from codmetrics.database.connection import init_database, close_database
from codmetrics.serving.api import create_api_app

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info("Starting COD Metrics API", environment=settings.app_env)
    try:
        await init_database()
    except Exception as e:
        # Readiness stays 503 until the database is reachable
        logger.warning("Database init failed", error=str(e))

    yield

    logger.info("Shutting down...")
    await close_database()


app = create_api_app(lifespan=lifespan)


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "codmetrics.main:app",
        host=settings.api_host,
        port=settings.api_port,
        workers=settings.api_workers,
        log_level=settings.monitoring.log_level.lower(),
        proxy_headers=True,
        server_header=False,
    )


if __name__ == "__main__":
    run()
