"""
db/models/content_post.py

Scheduled marketing post imported from the content calendar sheet.
"""

from __future__ import annotations

import datetime as dt
import uuid

from sqlalchemy import Date, Index, String, Text, Time
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, SourceSyncMixin, TimestampMixin


class ContentPlatform:
    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    TIKTOK = "tiktok"
    ALL = "all"


class ContentType:
    POST = "post"
    STORY = "story"
    REEL = "reel"
    VIDEO = "video"
    CAROUSEL = "carousel"


class ContentPillar:
    HOLIDAYS = "holidays"
    ANNOUNCEMENTS = "announcements"
    REELS = "reels"
    COMMUNITY = "community"
    DRINKS = "drinks"
    ATMOSPHERE = "atmosphere"
    EVENTS_DJS = "events_djs"


class ContentPostStatus:
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    CANCELLED = "cancelled"


CONTENT_POST_SOURCE_FIELDS: frozenset[str] = frozenset(
    {
        "scheduled_date",
        "title",
        "pillar",
        "platform",
        "content_type",
        "caption",
        "media_url",
        "brief_url",
        "link_air",
        "status",
        "source_notes",
    }
)

CONTENT_POST_RECOMPUTED_FIELDS: frozenset[str] = frozenset()

CONTENT_POST_OPERATOR_FIELDS: frozenset[str] = frozenset(
    {
        "scheduled_time",
        "assigned_to",
        "notes",
    }
)


class ContentPost(Base, SourceSyncMixin, TimestampMixin):
    __tablename__ = "content_posts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    scheduled_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    scheduled_time: Mapped[dt.time | None] = mapped_column(Time, nullable=True)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pillar: Mapped[str] = mapped_column(String(32), nullable=False, default=ContentPillar.EVENTS_DJS)
    platform: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=ContentPlatform.ALL,
        comment="instagram, facebook, tiktok, all",
    )
    content_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    media_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    brief_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    link_air: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=ContentPostStatus.DRAFT)
    source_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_content_posts_scheduled_date", "scheduled_date"),
        Index("ix_content_posts_platform", "platform"),
    )
