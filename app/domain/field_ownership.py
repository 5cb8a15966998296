"""
app/domain/field_ownership.py

Source-owned vs operator-owned columns, and the only way to build a sync update.

A sync may rewrite scheduling facts on every run, but workflow state such as
payment status belongs to whoever edits the row in the dashboard. Update
payloads are therefore built through `SourceOwnedUpdate`, which refuses any
column outside the feed's writable set for that particular row.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from app.domain.feed_sync import ExistingRecord


class ProtectedFieldError(KeyError):
    """
    Raised when an update tries to touch a column the feed does not own.
    """


@dataclass(frozen=True)
class FieldOwnership:
    """
    Disjoint column sets for one table.

    `recomputed_fields` are feed-derived values an operator can pin by setting
    the row's amount override. `identity_fields` are written on insert only;
    they are folded into the sync key, so a later run can only differ in casing.
    """

    table: str
    source_fields: frozenset[str]
    operator_fields: frozenset[str]
    recomputed_fields: frozenset[str] = frozenset()
    identity_fields: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        owners = (self.source_fields, self.operator_fields, self.recomputed_fields, self.identity_fields)
        overlaps: set[str] = set()
        for index, first in enumerate(owners):
            for second in owners[index + 1 :]:
                overlaps |= first & second
        if overlaps:
            raise ValueError(f"{self.table}: columns claimed by more than one owner: {sorted(overlaps)}")

    def writable_fields(self, existing: ExistingRecord) -> frozenset[str]:
        if existing.amount_override:
            return self.source_fields
        return self.source_fields | self.recomputed_fields


class SourceOwnedUpdate:
    """
    Restricted builder for the partial update of one existing row.
    """

    def __init__(self, ownership: FieldOwnership, existing: ExistingRecord) -> None:
        self._ownership = ownership
        self._existing = existing
        self._writable = ownership.writable_fields(existing)
        self._fields: dict[str, Any] = {}

    @classmethod
    def from_values(
        cls,
        ownership: FieldOwnership,
        existing: ExistingRecord,
        values: Mapping[str, Any],
    ) -> SourceOwnedUpdate:
        """
        Copy every writable value; identity and pinned recomputed values are left out.
        """

        update = cls(ownership, existing)
        for name, value in values.items():
            if name in ownership.identity_fields:
                continue
            if name in ownership.recomputed_fields and name not in update._writable:
                continue
            update.set(name, value)
        return update

    @property
    def record_id(self) -> Any:
        return self._existing.id

    @property
    def sync_key(self) -> str:
        return self._existing.sync_key

    def set(self, name: str, value: Any) -> SourceOwnedUpdate:
        if name not in self._writable:
            raise ProtectedFieldError(
                f"{self._ownership.table}.{name} is not writable by a sync for row {self._existing.id}."
            )
        self._fields[name] = value
        return self

    def as_dict(self) -> dict[str, Any]:
        return dict(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __len__(self) -> int:
        return len(self._fields)
