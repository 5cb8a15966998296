"""
app/builders package marker.
"""

from app.builders.base import FeedRecordBuilder, RowBuild, deduplicate_by_key
from app.builders.content_post_builder import ContentPostBuilder, build_content_sync_key, extract_url
from app.builders.dj_booking_builder import DJBookingBuilder, build_dj_sync_key

__all__ = [
    "ContentPostBuilder",
    "DJBookingBuilder",
    "FeedRecordBuilder",
    "RowBuild",
    "build_content_sync_key",
    "build_dj_sync_key",
    "deduplicate_by_key",
    "extract_url",
]
