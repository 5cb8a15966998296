"""
app/repositories/base.py

Datastore contract consumed by feed reconciliation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from app.domain.feed_sync import ExistingRecord, WriteOutcome
from app.domain.field_ownership import SourceOwnedUpdate


class FeedRecordRepository(ABC):
    """
    Key lookup, batch insert and restricted partial update for one table.

    Implementations report rejected records as failed `WriteOutcome`s and
    raise `DatastoreUnavailableError` only when the store cannot be used at all.
    """

    @abstractmethod
    def select_by_keys(self, keys: Sequence[str]) -> list[ExistingRecord]:
        """
        Existing rows whose sync key is one of `keys`.
        """

    @abstractmethod
    def insert_many(self, payloads: Sequence[Mapping[str, Any]]) -> list[WriteOutcome]:
        """
        Insert full rows, one outcome per payload in input order.
        """

    @abstractmethod
    def update_partial(self, update: SourceOwnedUpdate) -> WriteOutcome:
        """
        Apply a source-owned partial update to one existing row.
        """

    def update_many(self, updates: Sequence[SourceOwnedUpdate]) -> list[WriteOutcome]:
        return [self.update_partial(update) for update in updates]
