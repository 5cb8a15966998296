"""
app/domain package marker.
"""

from app.domain.content_post import ContentPostCandidate
from app.domain.dj_booking import DJBookingCandidate
from app.domain.feed_sync import BuildOutcome, ExistingRecord, FeedCandidate, SyncResult, WriteOutcome
from app.domain.field_ownership import FieldOwnership, ProtectedFieldError, SourceOwnedUpdate
from app.domain.source_rows import NormalizationResult, NormalizedRow, SlotCell
from app.domain.time_range import MINUTES_PER_DAY, TimeRange

__all__ = [
    "BuildOutcome",
    "ContentPostCandidate",
    "DJBookingCandidate",
    "ExistingRecord",
    "FeedCandidate",
    "FieldOwnership",
    "MINUTES_PER_DAY",
    "NormalizationResult",
    "NormalizedRow",
    "ProtectedFieldError",
    "SlotCell",
    "SourceOwnedUpdate",
    "SyncResult",
    "TimeRange",
    "WriteOutcome",
]
