"""
app/api/routers/feed_sync.py

Manual feed sync HTTP endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path, status

from app.schemas.feed_sync import FeedSyncResponse
from app.services.errors import DatastoreUnavailableError, FeedFetchError, UnknownFeedError
from app.services.feed_reconciliation_service import FeedReconciliationService, get_feed_sync_service

router = APIRouter(tags=["feed-sync"])


def resolve_feed_service(
    feed: str = Path(..., description="Feed name, e.g. dj_bookings or content_calendar"),
) -> FeedReconciliationService:
    try:
        return get_feed_sync_service(feed)
    except UnknownFeedError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.args[0],
        ) from exc


@router.post("/feeds/{feed}/sync", response_model=FeedSyncResponse)
def sync_feed(
    service: FeedReconciliationService = Depends(resolve_feed_service),
) -> FeedSyncResponse:
    """
    Reconcile one feed now. Duplicate triggers inside the cooldown return an
    empty result.
    """

    try:
        result = service.sync()
    except FeedFetchError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc
    except DatastoreUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc

    return FeedSyncResponse.from_result(service.feed_name, result)
