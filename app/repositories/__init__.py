"""
app/repositories package marker.
"""

from app.repositories.base import FeedRecordRepository
from app.repositories.sqlalchemy_feed_repository import (
    SQLAlchemyFeedRepository,
    sqlalchemy_repository_scope,
)

__all__ = [
    "FeedRecordRepository",
    "SQLAlchemyFeedRepository",
    "sqlalchemy_repository_scope",
]
