"""
app/schemas package marker.
"""

from app.schemas.feed_sync import FeedSyncResponse, HealthResponse

__all__ = [
    "FeedSyncResponse",
    "HealthResponse",
]
