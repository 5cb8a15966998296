"""
tests/test_content_post_builder.py

Pytest unit tests for turning the content calendar sheet into content_posts
candidates.
"""

from __future__ import annotations

import datetime as dt

import pytest

from app.builders.content_post_builder import ContentPostBuilder, build_content_sync_key, extract_url
from app.domain.feed_sync import ExistingRecord

TODAY = dt.date(2026, 8, 1)

HEADER = "Date,Pillar,Format,Platform,Title/Ideas,Caption,Link Brief,Link Photo/Video,Status,Notes,Link air"


@pytest.fixture()
def builder() -> ContentPostBuilder:
    return ContentPostBuilder()


def _sheet(*rows: str) -> str:
    return "\n".join(["CONTENT CALENDAR AUGUST,,,,,,,,,,", HEADER, *rows]) + "\n"


class TestContentPostBuilder:
    def test_full_row(self, builder: ContentPostBuilder) -> None:
        text = _sheet(
            '18/08/2026,Events & DJs,Reel,Instagram + TikTok,Saturday Night Lineup,Come through,'
            'https://docs.example.com/brief,"Link Photo:\nhttps://drive.example.com/abc",📅 Scheduled,Bring lights,'
        )

        outcome = builder.build(text, today=TODAY)

        assert len(outcome.candidates) == 1
        post = outcome.candidates[0]
        assert post.scheduled_date == dt.date(2026, 8, 18)
        assert post.title == "Saturday Night Lineup"
        assert post.pillar == "events_djs"
        assert post.platform == "all"
        assert post.content_type == "reel"
        assert post.status == "scheduled"
        assert post.media_url == "https://drive.example.com/abc"
        assert post.brief_url == "https://docs.example.com/brief"
        assert post.source_notes == "Bring lights"
        assert post.sync_key == "content:2026-08-18:saturday night lineup:all"

    def test_media_falls_back_to_link_air(self, builder: ContentPostBuilder) -> None:
        text = _sheet("2026-08-19,Drinks,Post,Instagram,Cocktail of the week,,,,✔ Published,,https://instagram.com/p/xyz")
        post = builder.build(text, today=TODAY).candidates[0]
        assert post.media_url == "https://instagram.com/p/xyz"
        assert post.link_air == "https://instagram.com/p/xyz"
        assert post.status == "published"

    def test_rows_without_title_or_caption_are_ignored(self, builder: ContentPostBuilder) -> None:
        text = _sheet(
            "2026-08-19,Drinks,Post,Instagram,,,,,,,",
            "2026-08-20,Drinks,Post,Instagram,,Caption only,,,,,",
        )
        outcome = builder.build(text, today=TODAY)
        assert [post.caption for post in outcome.candidates] == ["Caption only"]

    def test_sentinel_rows_are_ignored(self, builder: ContentPostBuilder) -> None:
        text = _sheet("____,____,____,,,,,,,,", "2026-08-20,Drinks,Post,Instagram,Title,,,,,,")
        outcome = builder.build(text, today=TODAY)
        assert len(outcome.candidates) == 1
        assert outcome.dropped_rows == 0

    def test_insert_payload_sets_default_post_time(self) -> None:
        builder = ContentPostBuilder(default_post_time=dt.time(19, 30))
        post = builder.build(_sheet("2026-08-20,Drinks,Post,Instagram,Title,,,,,,"), today=TODAY).candidates[0]

        payload = builder.insert_payload(post)

        assert payload["scheduled_time"] == dt.time(19, 30)
        assert payload["synced_from_source"] is True
        assert payload["sync_key"] == post.sync_key
        assert "assigned_to" not in payload

    def test_update_never_touches_operator_fields(self, builder: ContentPostBuilder) -> None:
        post = builder.build(_sheet("2026-08-20,Drinks,Post,Instagram,Title,,,,,,"), today=TODAY).candidates[0]
        update = builder.update_payload(post, ExistingRecord(id=7, sync_key=post.sync_key))

        assert not {"scheduled_time", "assigned_to", "notes"} & set(update.as_dict())
        assert update.as_dict()["title"] == "Title"


class TestHelpers:
    def test_extract_url(self) -> None:
        assert extract_url("see https://a.example/x?y=1 and more") == "https://a.example/x?y=1"
        assert extract_url("no link") is None
        assert extract_url(None) is None

    def test_sync_key_truncates_title(self) -> None:
        key = build_content_sync_key(dt.date(2026, 8, 1), "X" * 60, "tiktok")
        assert key == f"content:2026-08-01:{'x' * 40}:tiktok"
