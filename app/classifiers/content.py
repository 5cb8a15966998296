"""
app/classifiers/content.py

Keyword tables for the content calendar sheet.
"""

from __future__ import annotations

from app.classifiers.rules import Rule, RuleSet, any_of, contains_all, contains_any
from db.models.content_post import ContentPillar, ContentPlatform, ContentPostStatus, ContentType

PILLAR_RULES = RuleSet(
    [
        Rule(ContentPillar.HOLIDAYS, contains_any("pillar", ("vietnamese", "holiday"))),
        Rule(ContentPillar.ANNOUNCEMENTS, contains_any("pillar", ("announce", "promo"))),
        Rule(ContentPillar.REELS, contains_any("pillar", ("reel", "trend"))),
        Rule(ContentPillar.COMMUNITY, contains_any("pillar", ("community", "guest"))),
        Rule(ContentPillar.DRINKS, contains_any("pillar", ("drink", "shisha", "experience"))),
        Rule(ContentPillar.ATMOSPHERE, contains_any("pillar", ("atmosphere", "rooftop", "vibe"))),
        Rule(ContentPillar.EVENTS_DJS, contains_any("pillar", ("event", "dj"))),
    ],
    default=ContentPillar.EVENTS_DJS,
)

PLATFORM_RULES = RuleSet(
    [
        Rule(
            ContentPlatform.ALL,
            any_of(
                contains_all("platform", ("tiktok", "instagram")),
                contains_all("platform", ("tiktok", "facebook")),
                contains_all("platform", ("facebook", "instagram")),
            ),
            name="multi_platform",
        ),
        Rule(ContentPlatform.TIKTOK, contains_any("platform", ("tiktok",))),
        Rule(ContentPlatform.FACEBOOK, contains_any("platform", ("facebook",))),
        Rule(ContentPlatform.INSTAGRAM, contains_any("platform", ("instagram",))),
    ],
    default=ContentPlatform.ALL,
)

CONTENT_TYPE_RULES = RuleSet(
    [
        Rule(ContentType.REEL, contains_any("format", ("reel",))),
        Rule(ContentType.VIDEO, contains_any("format", ("video",))),
        Rule(ContentType.STORY, contains_any("format", ("story",))),
        Rule(ContentType.CAROUSEL, contains_any("format", ("carousel",))),
        Rule(ContentType.POST, contains_any("format", ("poster", "photo", "meme", "post"))),
    ],
    default=None,
)

POST_STATUS_RULES = RuleSet(
    [
        Rule(ContentPostStatus.PUBLISHED, contains_any("status", ("published", "✔"))),
        Rule(ContentPostStatus.SCHEDULED, contains_any("status", ("scheduled", "📅"))),
        Rule(ContentPostStatus.CANCELLED, contains_any("status", ("cancel", "❌"))),
        Rule(ContentPostStatus.DRAFT, contains_any("status", ("in progress", "📝"))),
    ],
    default=ContentPostStatus.DRAFT,
)


def classify_pillar(raw: str | None) -> str:
    return PILLAR_RULES.classify(pillar=raw)


def classify_platform(raw: str | None) -> str:
    return PLATFORM_RULES.classify(platform=raw)


def classify_content_type(raw: str | None) -> str | None:
    return CONTENT_TYPE_RULES.classify(format=raw)


def classify_post_status(raw: str | None) -> str:
    return POST_STATUS_RULES.classify(status=raw)
