"""
app/builders/base.py

Shared pipeline from source text to deduplicated feed candidates.
"""

from __future__ import annotations

import datetime as dt
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from app.domain.feed_sync import BuildOutcome, ExistingRecord, FeedCandidate
from app.domain.field_ownership import FieldOwnership, SourceOwnedUpdate
from app.domain.source_rows import NormalizedRow
from app.normalizers.row_normalizer import HeaderSpec, RowNormalizer
from app.parsing.tabular import parse_delimited_text

logger = logging.getLogger(__name__)


@dataclass
class RowBuild:
    """
    What one normalized row produced.
    """

    candidates: list[Any] = field(default_factory=list)
    skipped_slots: int = 0
    participants: list[str] = field(default_factory=list)


def deduplicate_by_key(candidates: Iterable[FeedCandidate]) -> list[Any]:
    """
    Collapse candidates sharing a sync key; later rows are corrections and win.
    """

    by_key: dict[str, Any] = {}
    for candidate in candidates:
        by_key.pop(candidate.sync_key, None)
        by_key[candidate.sync_key] = candidate
    return list(by_key.values())


class FeedRecordBuilder(ABC):
    """
    Parses one feed's document and knows how its candidates are persisted.
    """

    feed_name: str
    ownership: FieldOwnership

    def __init__(self, header_spec: HeaderSpec) -> None:
        self._normalizer = RowNormalizer(header_spec)

    def build(self, text: str, *, today: dt.date) -> BuildOutcome:
        """
        Parse, normalize and build candidates for a whole document.

        Raises `TabularFormatError` when the text is not delimited data; every
        other problem is confined to the row that caused it.
        """

        rows = parse_delimited_text(text)
        normalized = self._normalizer.normalize(rows)
        if not normalized.header_found:
            return BuildOutcome(header_found=False)

        candidates: list[Any] = []
        participants: list[str] = []
        dropped_rows = normalized.dropped_rows
        skipped_slots = 0

        for row in normalized.rows:
            try:
                row_build = self._build_row(row, today=today)
            except (ValueError, ArithmeticError) as exc:
                dropped_rows += 1
                logger.warning(
                    "Dropping unbuildable row feed=%s row=%s error=%s",
                    self.feed_name,
                    row.row_number,
                    exc,
                )
                continue
            candidates.extend(row_build.candidates)
            participants.extend(row_build.participants)
            skipped_slots += row_build.skipped_slots

        deduped = deduplicate_by_key(candidates)
        if len(deduped) < len(candidates):
            logger.info(
                "Collapsed duplicate source rows feed=%s before=%s after=%s",
                self.feed_name,
                len(candidates),
                len(deduped),
            )

        return BuildOutcome(
            candidates=deduped,
            header_found=True,
            dropped_rows=dropped_rows,
            skipped_slots=skipped_slots,
            unrecognized_entities=self._unrecognized(participants),
        )

    def update_payload(self, candidate: FeedCandidate, existing: ExistingRecord) -> SourceOwnedUpdate:
        return SourceOwnedUpdate.from_values(self.ownership, existing, candidate.source_values())

    @abstractmethod
    def insert_payload(self, candidate: FeedCandidate) -> dict[str, Any]:
        """
        Full column set for a row the store has never seen.
        """

    @abstractmethod
    def _build_row(self, row: NormalizedRow, *, today: dt.date) -> RowBuild:
        """
        Turn one dated row into zero or more candidates.
        """

    def _unrecognized(self, participants: list[str]) -> list[str]:
        return []
