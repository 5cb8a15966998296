"""
app/api/routers package marker.
"""

from app.api.routers.feed_sync import router as feed_sync_router

__all__ = [
    "feed_sync_router",
]
