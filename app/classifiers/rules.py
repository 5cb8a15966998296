"""
app/classifiers/rules.py

Ordered keyword rules for mapping free text to a fixed category.

Rules are evaluated top to bottom; the first match wins and the rule set's
default covers everything else, so classification never raises.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

Predicate = Callable[[Mapping[str, str]], bool]


def fold_text(value: str | None) -> str:
    """
    Lowercase and NFC-normalize text so `Tết` typed on any keyboard compares equal.
    """

    return unicodedata.normalize("NFC", value or "").strip().lower()


def contains_any(field: str, keywords: Iterable[str]) -> Predicate:
    needles = tuple(fold_text(keyword) for keyword in keywords)

    def predicate(fields: Mapping[str, str]) -> bool:
        text = fields.get(field, "")
        return any(needle in text for needle in needles)

    return predicate


def contains_all(field: str, keywords: Iterable[str]) -> Predicate:
    needles = tuple(fold_text(keyword) for keyword in keywords)

    def predicate(fields: Mapping[str, str]) -> bool:
        text = fields.get(field, "")
        return all(needle in text for needle in needles)

    return predicate


def any_of(*predicates: Predicate) -> Predicate:
    def predicate(fields: Mapping[str, str]) -> bool:
        return any(check(fields) for check in predicates)

    return predicate


@dataclass(frozen=True)
class Rule:
    """
    One `(predicate, category)` pair.
    """

    category: Any
    predicate: Predicate
    name: str = ""


class RuleSet:
    """
    First-match-wins classifier with a mandatory default.
    """

    def __init__(self, rules: Sequence[Rule], *, default: Any) -> None:
        self._rules = tuple(rules)
        self._default = default

    def first_match(self, **fields: str | None) -> Rule | None:
        folded = {key: fold_text(value) for key, value in fields.items()}
        for rule in self._rules:
            if rule.predicate(folded):
                return rule
        return None

    def classify(self, **fields: str | None) -> Any:
        rule = self.first_match(**fields)
        return self._default if rule is None else rule.category
