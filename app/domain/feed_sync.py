"""
app/domain/feed_sync.py

Domain models shared by every feed reconciliation run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


class FeedCandidate(Protocol):
    """
    Anything a record builder emits: a merge key plus source-owned values.
    """

    @property
    def sync_key(self) -> str: ...

    def source_values(self) -> dict[str, Any]: ...


@dataclass(frozen=True)
class ExistingRecord:
    """
    The slice of a persisted row the reconciliation needs to protect it.
    """

    id: Any
    sync_key: str
    amount_override: bool = False
    payment_status: str | None = None


@dataclass(frozen=True)
class WriteOutcome:
    """
    Result of writing one record.
    """

    sync_key: str
    ok: bool
    error: str | None = None


@dataclass(frozen=True)
class BuildOutcome:
    """
    Candidates built from one source document plus row-level accounting.
    """

    candidates: list[Any] = field(default_factory=list)
    header_found: bool = True
    dropped_rows: int = 0
    skipped_slots: int = 0
    unrecognized_entities: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return self.dropped_rows + self.skipped_slots


@dataclass
class SyncResult:
    """
    End-of-run reconciliation summary.
    """

    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    unrecognized_entities: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "inserted": self.inserted,
            "updated": self.updated,
            "skipped": self.skipped,
            "errors": list(self.errors),
            "unrecognized_entities": list(self.unrecognized_entities),
            "warnings": list(self.warnings),
        }
