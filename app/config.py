"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import datetime as dt
import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache

from db.config import load_env_files

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _get_name_set_env(name: str, default: frozenset[str]) -> frozenset[str]:
    """
    Read a comma-separated list of names, lowercased.
    """

    raw = _get_optional_str_env(name)
    if raw is None:
        return default
    return frozenset(token.strip().lower() for token in raw.split(",") if token.strip())


def _get_date_env(name: str) -> dt.date | None:
    raw = _get_optional_str_env(name)
    if raw is None:
        return None
    try:
        return dt.date.fromisoformat(raw)
    except ValueError:
        logger.warning("Ignoring invalid date setting name=%s value=%r", name, raw)
        return None


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Shared HTTP behavior settings for the spreadsheet fetch.
    """

    timeout_seconds: float = 15.0
    max_retries: int = 2
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0


@dataclass(frozen=True)
class FeedSyncSettings:
    """
    Runtime settings shared by every feed reconciliation instance.
    """

    cooldown_seconds: float = 60.0
    batch_size: int = 50
    source_timezone: str = "Asia/Ho_Chi_Minh"
    schedule_interval_minutes: int = 0


@dataclass(frozen=True)
class DJBookingFeedSettings:
    """
    DJ bookings sheet ("week at a glance") settings.
    """

    csv_url: str | None = None
    base_rate_vnd: int = 500_000
    owner_names: frozenset[str] = field(default_factory=lambda: frozenset({"charles"}))
    foreign_names: frozenset[str] = field(default_factory=lambda: frozenset({"throbak", "amor"}))
    known_names: frozenset[str] = field(
        default_factory=lambda: frozenset(
            {"charles", "throbak", "amor", "dark", "kazho", "dcrown", "cece"}
        )
    )
    min_date: dt.date | None = None


@dataclass(frozen=True)
class ContentCalendarFeedSettings:
    """
    Marketing content calendar sheet settings.
    """

    csv_url: str | None = None
    default_post_time: dt.time = dt.time(18, 0)


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 2)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
    )


@lru_cache(maxsize=1)
def get_feed_sync_settings() -> FeedSyncSettings:
    """
    Return reconciliation settings shared by all feeds.
    """

    return FeedSyncSettings(
        cooldown_seconds=max(0.0, _get_float_env("FEED_SYNC_COOLDOWN_SECONDS", 60.0)),
        batch_size=max(1, _get_int_env("FEED_SYNC_BATCH_SIZE", 50)),
        source_timezone=_get_str_env("FEED_SOURCE_TIMEZONE", "Asia/Ho_Chi_Minh"),
        schedule_interval_minutes=max(0, _get_int_env("FEED_SYNC_INTERVAL_MINUTES", 0)),
    )


@lru_cache(maxsize=1)
def get_dj_booking_feed_settings() -> DJBookingFeedSettings:
    """
    Return DJ bookings feed settings from environment variables.
    """

    defaults = DJBookingFeedSettings()
    return DJBookingFeedSettings(
        csv_url=_get_optional_str_env("FEED_DJ_BOOKINGS_CSV_URL"),
        base_rate_vnd=max(0, _get_int_env("FEED_DJ_BASE_RATE_VND", defaults.base_rate_vnd)),
        owner_names=_get_name_set_env("FEED_DJ_OWNER_NAMES", defaults.owner_names),
        foreign_names=_get_name_set_env("FEED_DJ_FOREIGN_NAMES", defaults.foreign_names),
        known_names=_get_name_set_env("FEED_DJ_KNOWN_NAMES", defaults.known_names),
        min_date=_get_date_env("FEED_DJ_MIN_DATE"),
    )


@lru_cache(maxsize=1)
def get_content_calendar_feed_settings() -> ContentCalendarFeedSettings:
    """
    Return content calendar feed settings from environment variables.
    """

    raw_time = _get_str_env("FEED_CONTENT_DEFAULT_POST_TIME", "18:00")
    try:
        default_post_time = dt.time.fromisoformat(raw_time)
    except ValueError:
        logger.warning("Ignoring invalid FEED_CONTENT_DEFAULT_POST_TIME=%r", raw_time)
        default_post_time = dt.time(18, 0)

    return ContentCalendarFeedSettings(
        csv_url=_get_optional_str_env("FEED_CONTENT_CALENDAR_CSV_URL"),
        default_post_time=default_post_time,
    )
