"""
app/classifiers package marker.
"""

from app.classifiers.content import (
    classify_content_type,
    classify_pillar,
    classify_platform,
    classify_post_status,
)
from app.classifiers.dj import (
    EVENT_MULTIPLIERS,
    ParticipantRoster,
    classify_event_type,
    classify_participant_type,
    classify_payer,
    compute_amount,
    multiplier_for,
    participant_key,
)
from app.classifiers.rules import Rule, RuleSet

__all__ = [
    "EVENT_MULTIPLIERS",
    "ParticipantRoster",
    "Rule",
    "RuleSet",
    "classify_content_type",
    "classify_event_type",
    "classify_participant_type",
    "classify_payer",
    "classify_pillar",
    "classify_platform",
    "classify_post_status",
    "compute_amount",
    "multiplier_for",
    "participant_key",
]
