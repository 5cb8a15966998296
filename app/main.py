from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.schemas.feed_sync import HealthResponse


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _warn_unconfigured_feeds() -> dict[str, bool]:
    """
    Log one warning per feed without a source URL; those feeds sync as no-ops.
    """

    from app.services.feed_reconciliation_service import get_feed_sync_services

    configured: dict[str, bool] = {}
    for service in get_feed_sync_services():
        configured[service.feed_name] = service.is_configured
        if not service.is_configured:
            logging.getLogger(__name__).warning(
                "Feed %s has no source URL configured; sync requests will be no-ops.",
                service.feed_name,
            )
    return configured


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Warn about unconfigured feeds and start the scheduler on boot; shut it down on exit."""
    application.state.feeds = _warn_unconfigured_feeds()

    from app.scheduler.jobs import build_scheduler

    scheduler = build_scheduler()
    scheduler.start()
    logging.getLogger(__name__).info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        logging.getLogger(__name__).info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    from db.config import load_env_files

    load_env_files()
    _configure_logging()

    application = FastAPI(
        title="Venue Feed Sync API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import feed_sync_router

    application.include_router(feed_sync_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(status="ok", feeds=getattr(application.state, "feeds", {}))

    return application


app = create_app()
