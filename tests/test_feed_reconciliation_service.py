"""
tests/test_feed_reconciliation_service.py

Pytest unit tests for FeedReconciliationService.

The connector and the datastore are in-memory fakes, so every run is
deterministic and needs no network or database.

Coverage
--------
- Insert then update on a second run (idempotence)
- Amount override protection and payment status immunity
- Guard rejection and retry after a failed run
- Systemic failures: fetch, markup payload, datastore
- Partial write failure and batching
- Missing configuration and shape warnings
"""

from __future__ import annotations

import datetime as dt
import itertools
from collections.abc import Mapping, Sequence
from contextlib import nullcontext
from decimal import Decimal
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

import db.config as db_config
import db.session as db_session
from app.builders.content_post_builder import ContentPostBuilder
from app.builders.dj_booking_builder import DJBookingBuilder
from app.classifiers.dj import ParticipantRoster
from app.config import ExternalHTTPSettings
from app.connectors.base import BaseConnector, ConnectorRequestError
from app.connectors.sheet_csv_connector import SheetCSVConnector
from app.domain.feed_sync import ExistingRecord, SyncResult, WriteOutcome
from app.domain.field_ownership import SourceOwnedUpdate
from app.repositories.base import FeedRecordRepository
from app.repositories.sqlalchemy_feed_repository import sqlalchemy_repository_scope
from app.services.errors import DatastoreUnavailableError, FeedFetchError
from app.services.feed_reconciliation_service import FeedReconciliationService, SyncState
from app.services.sync_guard import SyncGuard
from db.models.dj_payment import DJPayment

TODAY = dt.date(2026, 8, 1)

BOOKINGS = "\n".join(
    [
        "WEEK AT A GLANCE,,,,",
        "Date,Event,DJ 1,DJ 2,Notes",
        "16.08.2026,Tet Countdown,DJ Amor 21:30 - 23:00,DJ Sample 23:00 - 01;00,",
        "17.08.2026,Sunday Session,DJ Charles 20:00 - 22:00,,",
    ]
)
AMOR_KEY = "2026-08-16:tet countdown:dj amor:21:30:00"


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeConnector(BaseConnector):
    def __init__(self, *responses: str | Exception) -> None:
        self.source = "fake"
        self._responses = itertools.cycle(responses)
        self.calls = 0

    def fetch_text(self) -> str:
        self.calls += 1
        response = next(self._responses)
        if isinstance(response, Exception):
            raise response
        return response


class InMemoryRepository(FeedRecordRepository):
    def __init__(self, *, reject_keys: Sequence[str] = ()) -> None:
        self.rows: dict[int, dict[str, Any]] = {}
        self.insert_batches: list[int] = []
        self.update_payloads: list[dict[str, Any]] = []
        self.select_error: Exception | None = None
        self._reject_keys = set(reject_keys)
        self._ids = itertools.count(1)

    def seed(self, **row: Any) -> int:
        row_id = next(self._ids)
        self.rows[row_id] = {"id": row_id, "amount_override": False, "payment_status": "unpaid", **row}
        return row_id

    def by_key(self, sync_key: str) -> dict[str, Any]:
        return next(row for row in self.rows.values() if row.get("sync_key") == sync_key)

    def select_by_keys(self, keys: Sequence[str]) -> list[ExistingRecord]:
        if self.select_error is not None:
            raise self.select_error
        wanted = set(keys)
        return [
            ExistingRecord(
                id=row["id"],
                sync_key=row["sync_key"],
                amount_override=row["amount_override"],
                payment_status=row["payment_status"],
            )
            for row in self.rows.values()
            if row.get("sync_key") in wanted
        ]

    def insert_many(self, payloads: Sequence[Mapping[str, Any]]) -> list[WriteOutcome]:
        self.insert_batches.append(len(payloads))
        outcomes = []
        for payload in payloads:
            if payload["sync_key"] in self._reject_keys:
                outcomes.append(WriteOutcome(sync_key=payload["sync_key"], ok=False, error="value too long"))
                continue
            self.seed(**payload)
            outcomes.append(WriteOutcome(sync_key=payload["sync_key"], ok=True))
        return outcomes

    def update_partial(self, update: SourceOwnedUpdate) -> WriteOutcome:
        fields = update.as_dict()
        self.update_payloads.append(fields)
        if update.sync_key in self._reject_keys:
            return WriteOutcome(sync_key=update.sync_key, ok=False, error="check constraint")
        self.rows[update.record_id].update(fields)
        return WriteOutcome(sync_key=update.sync_key, ok=True)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _roster() -> ParticipantRoster:
    return ParticipantRoster.from_names(
        owner_names={"charles"},
        foreign_names={"throbak", "amor"},
        known_names={"dark", "kazho"},
    )


def _service(
    connector: BaseConnector | None,
    repository: InMemoryRepository,
    *,
    cooldown_seconds: float = 0,
    clock: FakeClock | None = None,
    batch_size: int = 50,
    builder: Any = None,
) -> FeedReconciliationService:
    return FeedReconciliationService(
        builder=builder or DJBookingBuilder(roster=_roster(), base_rate_vnd=500_000),
        connector=connector,
        repository_scope=lambda: nullcontext(repository),
        guard=SyncGuard(cooldown_seconds=cooldown_seconds, clock=clock or FakeClock()),
        batch_size=batch_size,
        today_provider=lambda: TODAY,
    )


@pytest.fixture()
def repository() -> InMemoryRepository:
    return InMemoryRepository()


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestReconciliation:
    def test_first_run_inserts_every_candidate(self, repository: InMemoryRepository) -> None:
        result = _service(FakeConnector(BOOKINGS), repository).sync()

        assert (result.inserted, result.updated, result.skipped) == (3, 0, 0)
        assert result.errors == []
        assert result.unrecognized_entities == ["DJ Sample"]
        assert repository.by_key(AMOR_KEY)["amount_vnd"] == 1_125_000
        assert all(row["synced_from_source"] for row in repository.rows.values())

    def test_owner_row_is_inserted_as_not_applicable(self, repository: InMemoryRepository) -> None:
        _service(FakeConnector(BOOKINGS), repository).sync()

        owner = repository.by_key("2026-08-17:sunday session:dj charles:20:00:00")
        assert owner["amount_vnd"] == 0
        assert owner["payment_status"] == "na"

    def test_second_run_is_idempotent(self, repository: InMemoryRepository) -> None:
        service = _service(FakeConnector(BOOKINGS), repository)

        service.sync()
        second = service.sync()

        assert (second.inserted, second.updated) == (0, 3)
        assert len(repository.rows) == 3
        assert service.state is SyncState.IDLE

    def test_amount_override_is_preserved(self, repository: InMemoryRepository) -> None:
        repository.seed(
            sync_key=AMOR_KEY,
            amount_override=True,
            amount_vnd=999,
            dj_type="local",
            multiplier=Decimal("1.0"),
            payment_status="paid",
        )

        result = _service(FakeConnector(BOOKINGS), repository).sync()

        row = repository.by_key(AMOR_KEY)
        assert result.updated == 1
        assert row["amount_vnd"] == 999
        assert row["dj_type"] == "foreigner"
        assert row["multiplier"] == Decimal("1.5")

    def test_amount_is_recomputed_without_override(self, repository: InMemoryRepository) -> None:
        repository.seed(sync_key=AMOR_KEY, amount_vnd=999)

        _service(FakeConnector(BOOKINGS), repository).sync()

        assert repository.by_key(AMOR_KEY)["amount_vnd"] == 1_125_000

    def test_payment_status_is_never_updated(self, repository: InMemoryRepository) -> None:
        service = _service(FakeConnector(BOOKINGS), repository)
        service.sync()
        for row in repository.rows.values():
            row["payment_status"] = "paid"
            row["notes"] = "receipt in drive"

        service.sync()

        assert repository.update_payloads
        assert all("payment_status" not in payload for payload in repository.update_payloads)
        assert all("notes" not in payload for payload in repository.update_payloads)
        assert {row["payment_status"] for row in repository.rows.values()} == {"paid"}

    def test_names_are_written_on_insert_only(self, repository: InMemoryRepository) -> None:
        _service(FakeConnector(BOOKINGS), repository).sync()
        recased = BOOKINGS.replace("DJ Amor", "DJ AMOR").replace("Tet Countdown", "TET COUNTDOWN")

        second = _service(FakeConnector(recased), repository).sync()

        assert second.updated == 3
        assert all("dj_name" not in payload for payload in repository.update_payloads)
        assert all("event_name" not in payload for payload in repository.update_payloads)
        amor = repository.by_key(AMOR_KEY)
        assert (amor["dj_name"], amor["event_name"]) == ("DJ Amor", "Tet Countdown")

    def test_writes_are_batched(self, repository: InMemoryRepository) -> None:
        _service(FakeConnector(BOOKINGS), repository, batch_size=2).sync()
        assert repository.insert_batches == [2, 1]

    def test_content_feed(self, repository: InMemoryRepository) -> None:
        text = "Date,Pillar,Platform,Title/Ideas\n2026-08-20,Drinks,TikTok,Cocktail reel\n"
        service = _service(FakeConnector(text), repository, builder=ContentPostBuilder())

        result = service.sync()

        assert result.inserted == 1
        assert service.feed_name == "content_calendar"
        row = repository.by_key("content:2026-08-20:cocktail reel:tiktok")
        assert row["scheduled_time"] == dt.time(18, 0)


# ---------------------------------------------------------------------------
# Guard
# ---------------------------------------------------------------------------


class TestGuard:
    def test_second_trigger_inside_cooldown_is_a_no_op(self, repository: InMemoryRepository) -> None:
        connector = FakeConnector(BOOKINGS)
        service = _service(connector, repository, cooldown_seconds=60)

        first = service.sync()
        second = service.sync()

        assert first.inserted == 3
        assert second == SyncResult()
        assert connector.calls == 1

    def test_trigger_after_cooldown_runs(self, repository: InMemoryRepository) -> None:
        clock = FakeClock()
        connector = FakeConnector(BOOKINGS)
        service = _service(connector, repository, cooldown_seconds=60, clock=clock)

        service.sync()
        clock.now += 61
        result = service.sync()

        assert connector.calls == 2
        assert result.updated == 3

    def test_failed_run_can_be_retried_at_once(self, repository: InMemoryRepository) -> None:
        connector = FakeConnector(ConnectorRequestError("timeout"), BOOKINGS)
        service = _service(connector, repository, cooldown_seconds=60)

        with pytest.raises(FeedFetchError):
            service.sync()
        result = service.sync()

        assert result.inserted == 3
        assert service.state is SyncState.IDLE


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    def test_fetch_error_is_systemic(self, repository: InMemoryRepository) -> None:
        service = _service(FakeConnector(ConnectorRequestError("HTTP 500")), repository)

        with pytest.raises(FeedFetchError):
            service.sync()
        assert service.state is SyncState.IDLE
        assert repository.rows == {}

    def test_markup_payload_is_a_fetch_error(self, repository: InMemoryRepository) -> None:
        service = _service(FakeConnector("<!DOCTYPE html><html>login</html>"), repository)

        with pytest.raises(FeedFetchError):
            service.sync()

    def test_redirect_loop_is_a_fetch_error(self, repository: InMemoryRepository) -> None:
        session = MagicMock()
        session.request.side_effect = requests.TooManyRedirects("Exceeded 30 redirects.")
        connector = SheetCSVConnector(
            source="dj_bookings",
            csv_url="https://sheets.example.com/export?format=csv",
            http_settings=ExternalHTTPSettings(),
            session=session,
            sleep=lambda _: None,
        )
        service = _service(connector, repository)

        with pytest.raises(FeedFetchError):
            service.sync()
        assert service.state is SyncState.IDLE

    def test_url_without_scheme_is_a_fetch_error(self, repository: InMemoryRepository) -> None:
        connector = SheetCSVConnector(
            source="dj_bookings",
            csv_url="docs.google.com/pub?output=csv",
            http_settings=ExternalHTTPSettings(),
            sleep=lambda _: None,
        )

        with pytest.raises(FeedFetchError):
            _service(connector, repository).sync()

    def test_missing_database_url_is_datastore_unavailable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_DB_URL", raising=False)
        monkeypatch.setattr(db_config, "load_env_files", lambda: None)
        monkeypatch.setattr(db_session, "_engine", None)
        monkeypatch.setattr(db_session, "_session_factory", None)
        service = FeedReconciliationService(
            builder=DJBookingBuilder(roster=_roster(), base_rate_vnd=500_000),
            connector=FakeConnector(BOOKINGS),
            repository_scope=sqlalchemy_repository_scope(DJPayment),
            guard=SyncGuard(cooldown_seconds=60, clock=FakeClock()),
            today_provider=lambda: TODAY,
        )

        with pytest.raises(DatastoreUnavailableError):
            service.sync()
        assert service.state is SyncState.IDLE
        with pytest.raises(DatastoreUnavailableError):
            service.sync()

    def test_datastore_unavailable_propagates(self, repository: InMemoryRepository) -> None:
        repository.select_error = DatastoreUnavailableError("connection refused")

        with pytest.raises(DatastoreUnavailableError):
            _service(FakeConnector(BOOKINGS), repository).sync()

    def test_rejected_write_is_reported_and_others_succeed(self) -> None:
        repository = InMemoryRepository(reject_keys=[AMOR_KEY])

        result = _service(FakeConnector(BOOKINGS), repository).sync()

        assert result.inserted == 2
        assert result.skipped == 1
        assert len(result.errors) == 1
        assert AMOR_KEY in result.errors[0]

    def test_rejected_update_is_reported(self) -> None:
        repository = InMemoryRepository(reject_keys=[AMOR_KEY])
        repository.seed(sync_key=AMOR_KEY, amount_vnd=1)

        result = _service(FakeConnector(BOOKINGS), repository).sync()

        assert (result.inserted, result.updated, result.skipped) == (2, 0, 1)
        assert result.errors[0].startswith("update ")


# ---------------------------------------------------------------------------
# Configuration and shape
# ---------------------------------------------------------------------------


class TestConfigurationAndShape:
    def test_missing_url_is_a_no_op(self) -> None:
        opened: list[bool] = []

        def scope():
            opened.append(True)
            return nullcontext(InMemoryRepository())

        service = FeedReconciliationService(
            builder=DJBookingBuilder(roster=_roster(), base_rate_vnd=500_000),
            connector=None,
            repository_scope=scope,
            guard=SyncGuard(cooldown_seconds=0),
        )

        result = service.sync()

        assert service.is_configured is False
        assert (result.inserted, result.updated, result.skipped) == (0, 0, 0)
        assert len(result.warnings) == 1
        assert opened == []

    def test_missing_header_is_a_warning(self, repository: InMemoryRepository) -> None:
        result = _service(FakeConnector("Name,Phone\nDark,123\n"), repository).sync()

        assert result.inserted == 0
        assert result.errors == []
        assert "header" in result.warnings[0]

    def test_header_without_records_is_a_warning(self, repository: InMemoryRepository) -> None:
        result = _service(FakeConnector("Date,Event,DJ 1\n,,\n"), repository).sync()

        assert result.inserted == 0
        assert len(result.warnings) == 1

    def test_dropped_rows_are_counted_as_skipped(self, repository: InMemoryRepository) -> None:
        text = BOOKINGS + "\nsomeday,Party,DJ Dark 22:00 - 23:00,,\n"

        result = _service(FakeConnector(text), repository).sync()

        assert result.inserted == 3
        assert result.skipped == 1
