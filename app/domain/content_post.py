"""
app/domain/content_post.py

Canonical content calendar entry parsed from the marketing sheet.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ContentPostCandidate:
    sync_key: str
    scheduled_date: dt.date
    title: str | None
    pillar: str
    platform: str
    content_type: str | None
    caption: str | None
    media_url: str | None
    brief_url: str | None
    link_air: str | None
    status: str
    source_notes: str | None
    source_row: int | None = None

    def source_values(self) -> dict[str, Any]:
        return {
            "scheduled_date": self.scheduled_date,
            "title": self.title,
            "pillar": self.pillar,
            "platform": self.platform,
            "content_type": self.content_type,
            "caption": self.caption,
            "media_url": self.media_url,
            "brief_url": self.brief_url,
            "link_air": self.link_air,
            "status": self.status,
            "source_notes": self.source_notes,
        }
