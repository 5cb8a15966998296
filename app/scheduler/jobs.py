"""
app/scheduler/jobs.py

APScheduler-based periodic feed reconciliation.

Each configured feed gets one interval job when ``FEED_SYNC_INTERVAL_MINUTES``
is positive. Scheduled runs share the feed's sync guard with manual triggers,
so a tick that lands inside the cooldown is a no-op.

Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import get_feed_sync_settings
from app.services.errors import FeedSyncError
from app.services.feed_reconciliation_service import FeedReconciliationService, get_feed_sync_services

logger = logging.getLogger(__name__)


def run_feed_sync(service: FeedReconciliationService) -> None:
    """
    Scheduled entry point for one feed. Systemic failures are logged and left
    for the next tick.
    """

    logger.info("Scheduler: feed_sync starting feed=%s", service.feed_name)
    try:
        result = service.sync()
    except FeedSyncError as exc:
        logger.warning("Scheduler: feed_sync failed feed=%s: %s", service.feed_name, exc)
        return
    logger.info(
        "Scheduler: feed_sync complete feed=%s inserted=%s updated=%s skipped=%s errors=%s",
        service.feed_name,
        result.inserted,
        result.updated,
        result.skipped,
        len(result.errors),
    )


def build_scheduler(
    services_provider: Callable[[], list[FeedReconciliationService]] = get_feed_sync_services,
) -> BackgroundScheduler:
    """
    Build and register one interval job per configured feed.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    """

    settings = get_feed_sync_settings()
    scheduler = BackgroundScheduler(timezone=settings.source_timezone)
    if settings.schedule_interval_minutes <= 0:
        logger.info("Scheduler: feed sync interval disabled")
        return scheduler

    for service in services_provider():
        if not service.is_configured:
            continue
        scheduler.add_job(
            run_feed_sync,
            trigger="interval",
            minutes=settings.schedule_interval_minutes,
            args=[service],
            id=f"feed_sync_{service.feed_name}",
            name=f"Feed sync: {service.feed_name}",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=300,
        )

    return scheduler
