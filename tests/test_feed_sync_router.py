"""
tests/test_feed_sync_router.py

HTTP contract tests for the feed sync endpoint, using FastAPI's TestClient
with the service dependency overridden.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.routers.feed_sync import resolve_feed_service, router
from app.domain.feed_sync import SyncResult
from app.services.errors import DatastoreUnavailableError, FeedFetchError


class StubService:
    feed_name = "dj_bookings"

    def __init__(self, outcome: SyncResult | Exception) -> None:
        self._outcome = outcome

    def sync(self) -> SyncResult:
        if isinstance(self._outcome, Exception):
            raise self._outcome
        return self._outcome


def _client(outcome: SyncResult | Exception | None = None) -> TestClient:
    application = FastAPI()
    application.include_router(router)
    if outcome is not None:
        application.dependency_overrides[resolve_feed_service] = lambda: StubService(outcome)
    return TestClient(application)


class TestFeedSyncRouter:
    def test_returns_sync_summary(self) -> None:
        result = SyncResult(
            inserted=2,
            updated=1,
            skipped=1,
            errors=["insert k: value too long"],
            unrecognized_entities=["DJ Sample"],
        )

        response = _client(result).post("/feeds/dj_bookings/sync")

        assert response.status_code == 200
        assert response.json() == {
            "feed": "dj_bookings",
            "inserted": 2,
            "updated": 1,
            "skipped": 1,
            "errors": ["insert k: value too long"],
            "unrecognized_entities": ["DJ Sample"],
            "warnings": [],
        }

    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (FeedFetchError("sheet returned a web page"), 502),
            (DatastoreUnavailableError("connection refused"), 503),
        ],
    )
    def test_systemic_errors_map_to_status_codes(self, error: Exception, status_code: int) -> None:
        response = _client(error).post("/feeds/dj_bookings/sync")

        assert response.status_code == status_code
        assert response.json()["detail"] == str(error)

    def test_unknown_feed_is_not_found(self) -> None:
        response = _client().post("/feeds/payroll/sync")

        assert response.status_code == 404
        assert "dj_bookings" in response.json()["detail"]
