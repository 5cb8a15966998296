"""
app/classifiers/dj.py

Event-type, payer and participant classification for DJ bookings, plus the
fee arithmetic that depends on them.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from app.classifiers.rules import Rule, RuleSet, contains_any, fold_text
from db.models.dj_payment import DJEventType, DJType, PayerType

_DJ_PREFIX = re.compile(r"^dj[\s._\-]+")
_WHITESPACE = re.compile(r"\s+")

EVENT_TYPE_RULES = RuleSet(
    [
        Rule(DJEventType.TET, contains_any("event", ("tết", "tet", "mùng", "mung")), name="lunar_new_year"),
        Rule(DJEventType.NEW_YEAR, contains_any("event", ("new year", "nye")), name="new_year"),
        Rule(DJEventType.PARTNERSHIP, contains_any("layout", ("partner",)), name="partnership_layout"),
    ],
    default=DJEventType.DEFAULT,
)

EVENT_MULTIPLIERS: dict[str, Decimal] = {
    DJEventType.DEFAULT: Decimal("1.0"),
    DJEventType.TET: Decimal("1.5"),
    DJEventType.NEW_YEAR: Decimal("1.5"),
    DJEventType.PARTNERSHIP: Decimal("1.0"),
}


def classify_event_type(event_name: str | None, layout: str | None = None) -> str:
    return EVENT_TYPE_RULES.classify(event=event_name, layout=layout)


def multiplier_for(event_type: str) -> Decimal:
    return EVENT_MULTIPLIERS.get(event_type, EVENT_MULTIPLIERS[DJEventType.DEFAULT])


def participant_key(name: str | None) -> str:
    """
    Reduce a DJ cell name to its roster key: ``"DJ Charle$"`` -> ``"charles"``.
    """

    key = fold_text(name).replace("$", "s")
    key = _DJ_PREFIX.sub("", key)
    return _WHITESPACE.sub(" ", key).strip()


def _keys(names: Iterable[str]) -> frozenset[str]:
    return frozenset(participant_key(name) for name in names)


@dataclass(frozen=True)
class ParticipantRoster:
    """
    Named DJs with fixed treatment.

    Owners play for free, foreign DJs are paid personally by the owner, and
    anyone missing from `known_names` is reported back to the operator.
    """

    owner_names: frozenset[str]
    foreign_names: frozenset[str]
    known_names: frozenset[str]

    @classmethod
    def from_names(
        cls,
        *,
        owner_names: Iterable[str],
        foreign_names: Iterable[str],
        known_names: Iterable[str] = (),
    ) -> ParticipantRoster:
        owners = _keys(owner_names)
        foreigners = _keys(foreign_names)
        return cls(
            owner_names=owners,
            foreign_names=foreigners,
            known_names=_keys(known_names) | owners | foreigners,
        )

    def is_owner(self, name: str | None) -> bool:
        return participant_key(name) in self.owner_names

    def is_foreign(self, name: str | None) -> bool:
        return participant_key(name) in self.foreign_names

    def is_known(self, name: str | None) -> bool:
        return participant_key(name) in self.known_names

    def payer_rules(self) -> RuleSet:
        return RuleSet(
            [
                Rule(PayerType.COMPANY, lambda fields: self.is_owner(fields.get("participant")), name="owner"),
                Rule(
                    PayerType.OWNER_PERSONAL,
                    lambda fields: self.is_foreign(fields.get("participant")),
                    name="foreign_dj",
                ),
            ],
            default=PayerType.COMPANY,
        )

    def participant_type_rules(self) -> RuleSet:
        return RuleSet(
            [
                Rule(DJType.LOCAL, lambda fields: self.is_owner(fields.get("participant")), name="owner"),
                Rule(DJType.FOREIGNER, lambda fields: self.is_foreign(fields.get("participant")), name="foreign_dj"),
            ],
            default=DJType.LOCAL,
        )


def classify_payer(name: str | None, roster: ParticipantRoster) -> str:
    return roster.payer_rules().classify(participant=name)


def classify_participant_type(name: str | None, roster: ParticipantRoster) -> str:
    return roster.participant_type_rules().classify(participant=name)


def compute_amount(duration_minutes: int, base_rate: int, multiplier: Decimal) -> int:
    """
    Fee in whole VND: hours x rate x multiplier, rounded half away from zero once.
    """

    raw = Decimal(duration_minutes) * Decimal(base_rate) * multiplier / Decimal(60)
    return int(raw.quantize(Decimal(1), rounding=ROUND_HALF_UP))
