"""
app/services package marker.
"""

from app.services.errors import (
    DatastoreUnavailableError,
    FeedFetchError,
    FeedSyncError,
    UnknownFeedError,
)
from app.services.sync_guard import SyncGuard

__all__ = [
    "DatastoreUnavailableError",
    "FeedFetchError",
    "FeedSyncError",
    "SyncGuard",
    "UnknownFeedError",
]
