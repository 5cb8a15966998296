"""
app/schemas/feed_sync.py

Response schemas for feed sync operations.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.feed_sync import SyncResult


class FeedSyncResponse(BaseModel):
    """
    API response model for one feed sync run.
    """

    feed: str
    inserted: int = Field(..., ge=0)
    updated: int = Field(..., ge=0)
    skipped: int = Field(..., ge=0)
    errors: list[str] = Field(default_factory=list)
    unrecognized_entities: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, feed: str, result: SyncResult) -> FeedSyncResponse:
        return cls(feed=feed, **result.to_dict())


class HealthResponse(BaseModel):
    status: str
    feeds: dict[str, bool]
