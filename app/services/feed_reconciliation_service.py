"""
app/services/feed_reconciliation_service.py

Reconciles one external spreadsheet feed into its table.

A run moves IDLE -> FETCHING -> PARSING -> DIFFING -> WRITING -> IDLE. Fetch
and datastore failures abort the run (FAILED, then back to IDLE) and propagate
as `FeedSyncError`s; everything row-level is reported in the `SyncResult`.
"""

from __future__ import annotations

import datetime as dt
import logging
import time
from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager
from enum import Enum
from functools import lru_cache
from typing import Any
from zoneinfo import ZoneInfo

from app.builders.base import FeedRecordBuilder
from app.builders.content_post_builder import ContentPostBuilder
from app.builders.dj_booking_builder import DJBookingBuilder
from app.config import (
    get_content_calendar_feed_settings,
    get_dj_booking_feed_settings,
    get_external_http_settings,
    get_feed_sync_settings,
)
from app.connectors.base import BaseConnector, ConnectorRequestError
from app.connectors.sheet_csv_connector import SheetCSVConnector
from app.domain.feed_sync import BuildOutcome, ExistingRecord, SyncResult, WriteOutcome
from app.domain.field_ownership import ProtectedFieldError, SourceOwnedUpdate
from app.logging_utils import log_event
from app.parsing.tabular import TabularFormatError
from app.repositories.base import FeedRecordRepository
from app.repositories.sqlalchemy_feed_repository import sqlalchemy_repository_scope
from app.services.errors import FeedFetchError, UnknownFeedError
from app.services.sync_guard import SyncGuard
from db.models.content_post import ContentPost
from db.models.dj_payment import DJPayment

logger = logging.getLogger(__name__)

RepositoryScope = Callable[[], AbstractContextManager[FeedRecordRepository]]


class SyncState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    PARSING = "parsing"
    DIFFING = "diffing"
    WRITING = "writing"
    FAILED = "failed"


def _chunks(items: Sequence[Any], size: int) -> list[Sequence[Any]]:
    return [items[start : start + size] for start in range(0, len(items), size)]


class FeedReconciliationService:
    """
    Fetch, parse, diff and write for one feed instance.
    """

    def __init__(
        self,
        *,
        builder: FeedRecordBuilder,
        connector: BaseConnector | None,
        repository_scope: RepositoryScope,
        guard: SyncGuard,
        batch_size: int = 50,
        source_timezone: str = "Asia/Ho_Chi_Minh",
        today_provider: Callable[[], dt.date] | None = None,
    ) -> None:
        self._builder = builder
        self._connector = connector
        self._repository_scope = repository_scope
        self._guard = guard
        self._batch_size = max(1, batch_size)
        self._timezone = ZoneInfo(source_timezone)
        self._today_provider = today_provider or self._today_in_source_timezone
        self._state = SyncState.IDLE

    @property
    def feed_name(self) -> str:
        return self._builder.feed_name

    @property
    def is_configured(self) -> bool:
        return self._connector is not None

    @property
    def state(self) -> SyncState:
        return self._state

    def sync(self) -> SyncResult:
        """
        Run one reconciliation if the guard allows it.

        Returns an empty result when the feed is not configured or another run
        is active or cooling down.
        """

        if self._connector is None:
            logger.warning("Feed sync skipped, no source URL configured feed=%s", self.feed_name)
            return SyncResult(warnings=[f"{self.feed_name}: no source URL is configured."])

        if not self._guard.try_acquire():
            logger.info("Feed sync trigger ignored, run active or cooling down feed=%s", self.feed_name)
            return SyncResult()

        started = time.perf_counter()
        failed = False
        try:
            result = self._run(self._connector)
        except Exception:
            failed = True
            self._state = SyncState.FAILED
            logger.exception("Feed sync failed feed=%s", self.feed_name)
            raise
        finally:
            self._state = SyncState.IDLE
            self._guard.release(failed=failed)

        log_event(
            logger,
            logging.INFO,
            "feed_sync_completed",
            feed=self.feed_name,
            inserted=result.inserted,
            updated=result.updated,
            skipped=result.skipped,
            errors=len(result.errors),
            unrecognized=result.unrecognized_entities,
            warnings=len(result.warnings),
            duration_ms=round((time.perf_counter() - started) * 1000),
        )
        return result

    def _run(self, connector: BaseConnector) -> SyncResult:
        self._state = SyncState.FETCHING
        try:
            text = connector.fetch_text()
        except ConnectorRequestError as exc:
            raise FeedFetchError(str(exc)) from exc

        self._state = SyncState.PARSING
        try:
            outcome = self._builder.build(text, today=self._today_provider())
        except TabularFormatError as exc:
            raise FeedFetchError(f"{self.feed_name}: {exc}") from exc

        result = SyncResult(
            skipped=outcome.skipped,
            unrecognized_entities=list(outcome.unrecognized_entities),
            warnings=self._shape_warnings(text, outcome),
        )
        for warning in result.warnings:
            logger.warning("Feed shape warning feed=%s warning=%s", self.feed_name, warning)
        if not outcome.candidates:
            return result

        self._state = SyncState.DIFFING
        with self._repository_scope() as repository:
            keys = [candidate.sync_key for candidate in outcome.candidates]
            existing = {record.sync_key: record for record in repository.select_by_keys(keys)}
            to_insert = [c for c in outcome.candidates if c.sync_key not in existing]
            to_update = [(c, existing[c.sync_key]) for c in outcome.candidates if c.sync_key in existing]
            logger.info(
                "Feed diff computed feed=%s candidates=%s inserts=%s updates=%s",
                self.feed_name,
                len(outcome.candidates),
                len(to_insert),
                len(to_update),
            )

            self._state = SyncState.WRITING
            self._write_inserts(repository, to_insert, result)
            self._write_updates(repository, to_update, result)

        return result

    def _write_inserts(
        self,
        repository: FeedRecordRepository,
        candidates: Sequence[Any],
        result: SyncResult,
    ) -> None:
        for batch in _chunks(candidates, self._batch_size):
            payloads = [self._builder.insert_payload(candidate) for candidate in batch]
            outcomes = repository.insert_many(payloads)
            result.inserted += self._tally("insert", outcomes, result)

    def _write_updates(
        self,
        repository: FeedRecordRepository,
        pairs: Sequence[tuple[Any, ExistingRecord]],
        result: SyncResult,
    ) -> None:
        for batch in _chunks(pairs, self._batch_size):
            updates: list[SourceOwnedUpdate] = []
            for candidate, record in batch:
                try:
                    updates.append(self._builder.update_payload(candidate, record))
                except ProtectedFieldError as exc:
                    result.skipped += 1
                    result.errors.append(f"update {candidate.sync_key}: {exc}")
            if updates:
                result.updated += self._tally("update", repository.update_many(updates), result)

    def _tally(self, action: str, outcomes: Sequence[WriteOutcome], result: SyncResult) -> int:
        succeeded = 0
        for outcome in outcomes:
            if outcome.ok:
                succeeded += 1
                continue
            result.skipped += 1
            result.errors.append(f"{action} {outcome.sync_key}: {outcome.error or 'rejected'}")
            logger.warning(
                "Feed write rejected feed=%s action=%s sync_key=%s error=%s",
                self.feed_name,
                action,
                outcome.sync_key,
                outcome.error,
            )
        return succeeded

    def _shape_warnings(self, text: str, outcome: BuildOutcome) -> list[str]:
        if not outcome.header_found:
            return [f"{self.feed_name}: no recognizable header row; the sheet layout may have changed."]
        if not outcome.candidates and text.strip():
            return [f"{self.feed_name}: the document produced no records; the sheet layout may have changed."]
        return []

    def _today_in_source_timezone(self) -> dt.date:
        return dt.datetime.now(self._timezone).date()


def _build_service(builder: FeedRecordBuilder, csv_url: str | None, model: type) -> FeedReconciliationService:
    sync_settings = get_feed_sync_settings()
    connector = (
        SheetCSVConnector(
            source=builder.feed_name,
            csv_url=csv_url,
            http_settings=get_external_http_settings(),
        )
        if csv_url
        else None
    )
    return FeedReconciliationService(
        builder=builder,
        connector=connector,
        repository_scope=sqlalchemy_repository_scope(model),
        guard=SyncGuard(cooldown_seconds=sync_settings.cooldown_seconds),
        batch_size=sync_settings.batch_size,
        source_timezone=sync_settings.source_timezone,
    )


@lru_cache(maxsize=1)
def get_dj_booking_sync_service() -> FeedReconciliationService:
    """
    Build and cache the DJ bookings reconciliation service.
    """

    settings = get_dj_booking_feed_settings()
    return _build_service(DJBookingBuilder.from_settings(settings), settings.csv_url, DJPayment)


@lru_cache(maxsize=1)
def get_content_calendar_sync_service() -> FeedReconciliationService:
    """
    Build and cache the content calendar reconciliation service.
    """

    settings = get_content_calendar_feed_settings()
    builder = ContentPostBuilder(default_post_time=settings.default_post_time)
    return _build_service(builder, settings.csv_url, ContentPost)


FEED_SERVICE_FACTORIES: dict[str, Callable[[], FeedReconciliationService]] = {
    DJBookingBuilder.feed_name: get_dj_booking_sync_service,
    ContentPostBuilder.feed_name: get_content_calendar_sync_service,
}


def get_feed_sync_service(feed: str) -> FeedReconciliationService:
    factory = FEED_SERVICE_FACTORIES.get(feed.strip().lower())
    if factory is None:
        allowed = ", ".join(sorted(FEED_SERVICE_FACTORIES))
        raise UnknownFeedError(f"Unsupported feed '{feed}'. Allowed feeds: {allowed}.")
    return factory()


def get_feed_sync_services() -> list[FeedReconciliationService]:
    return [factory() for factory in FEED_SERVICE_FACTORIES.values()]
