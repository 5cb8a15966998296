"""
app/builders/content_post_builder.py

Builds `content_posts` candidates from the marketing content calendar sheet.
"""

from __future__ import annotations

import datetime as dt
import re
from typing import Any

from app.builders.base import FeedRecordBuilder, RowBuild
from app.classifiers.content import (
    classify_content_type,
    classify_pillar,
    classify_platform,
    classify_post_status,
)
from app.classifiers.rules import fold_text
from app.domain.content_post import ContentPostCandidate
from app.domain.field_ownership import FieldOwnership
from app.domain.source_rows import NormalizedRow
from app.normalizers.row_normalizer import HeaderSpec
from db.models.content_post import (
    CONTENT_POST_OPERATOR_FIELDS,
    CONTENT_POST_RECOMPUTED_FIELDS,
    CONTENT_POST_SOURCE_FIELDS,
)

CONTENT_FEED_NAME = "content_calendar"

_URL = re.compile(r"https?://\S+")

CONTENT_POST_OWNERSHIP = FieldOwnership(
    table="content_posts",
    source_fields=CONTENT_POST_SOURCE_FIELDS,
    operator_fields=CONTENT_POST_OPERATOR_FIELDS,
    recomputed_fields=CONTENT_POST_RECOMPUTED_FIELDS,
)

CONTENT_HEADER_SPEC = HeaderSpec(
    is_marker_column=lambda column: column.startswith("title") or column in {"platform", "pillar"},
)


def extract_url(raw: str | None) -> str | None:
    """
    First http(s) URL in a cell such as ``"Link Photo:\\nhttps://..."``.
    """

    match = _URL.search(raw or "")
    return match.group(0) if match else None


def build_content_sync_key(date: dt.date, title: str | None, platform: str) -> str:
    return f"content:{date.isoformat()}:{fold_text(title)[:40]}:{platform}"


class ContentPostBuilder(FeedRecordBuilder):
    """
    Record builder for the content calendar feed.
    """

    feed_name = CONTENT_FEED_NAME
    ownership = CONTENT_POST_OWNERSHIP

    def __init__(self, *, default_post_time: dt.time = dt.time(18, 0)) -> None:
        super().__init__(CONTENT_HEADER_SPEC)
        self._default_post_time = default_post_time

    def insert_payload(self, candidate: ContentPostCandidate) -> dict[str, Any]:
        return {
            **candidate.source_values(),
            "sync_key": candidate.sync_key,
            "scheduled_time": self._default_post_time,
            "synced_from_source": True,
        }

    def _build_row(self, row: NormalizedRow, *, today: dt.date) -> RowBuild:
        title = row.pick_prefixed("title", "ideas")
        caption = row.pick("caption")
        if not title and not caption:
            return RowBuild()

        platform = classify_platform(row.pick("platform"))
        link_media = row.pick_prefixed("link_photo", "link_media", "media")
        link_air = row.pick("link_air")

        candidate = ContentPostCandidate(
            sync_key=build_content_sync_key(row.date, title, platform),
            scheduled_date=row.date,
            title=title,
            pillar=classify_pillar(row.pick("pillar")),
            platform=platform,
            content_type=classify_content_type(row.pick("format")),
            caption=caption,
            media_url=extract_url(link_media) or extract_url(link_air),
            brief_url=extract_url(row.pick_prefixed("link_brief", "brief")),
            link_air=link_air,
            status=classify_post_status(row.pick("status")),
            source_notes=row.pick("notes"),
            source_row=row.row_number,
        )
        return RowBuild(candidates=[candidate])
