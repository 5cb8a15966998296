"""
app/repositories/sqlalchemy_feed_repository.py

SQLAlchemy implementation of the feed record datastore contract.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import ExitStack, contextmanager
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.feed_sync import ExistingRecord, WriteOutcome
from app.domain.field_ownership import SourceOwnedUpdate
from app.repositories.base import FeedRecordRepository
from app.services.errors import DatastoreUnavailableError
from db.base import Base
from db.session import session_scope

logger = logging.getLogger(__name__)

_KEY_LOOKUP_CHUNK = 500


def _is_connectivity_error(exc: SQLAlchemyError) -> bool:
    return isinstance(exc, OperationalError) or (
        isinstance(exc, DBAPIError) and exc.connection_invalidated
    )


class SQLAlchemyFeedRepository(FeedRecordRepository):
    """
    Feed record persistence for one ORM model carrying `SourceSyncMixin`.

    Every write runs inside its own SAVEPOINT so a constraint violation only
    discards that record; each batch call commits once at the end.
    """

    def __init__(self, session: Session, model: type[Base]) -> None:
        self._session = session
        self._model = model

    def select_by_keys(self, keys: Sequence[str]) -> list[ExistingRecord]:
        unique_keys = list(dict.fromkeys(key for key in keys if key))
        if not unique_keys:
            return []

        records: list[ExistingRecord] = []
        try:
            for start in range(0, len(unique_keys), _KEY_LOOKUP_CHUNK):
                chunk = unique_keys[start : start + _KEY_LOOKUP_CHUNK]
                rows = self._session.scalars(
                    select(self._model).where(self._model.sync_key.in_(chunk))
                ).all()
                records.extend(self._to_existing(row) for row in rows)
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.exception("Failed to load existing records table=%s", self._model.__tablename__)
            raise DatastoreUnavailableError(
                f"{self._model.__tablename__}: could not read existing records."
            ) from exc
        return records

    def insert_many(self, payloads: Sequence[Mapping[str, Any]]) -> list[WriteOutcome]:
        outcomes: list[WriteOutcome] = []
        for payload in payloads:
            sync_key = str(payload.get("sync_key"))
            try:
                with self._session.begin_nested():
                    self._session.add(self._model(**payload))
                    self._session.flush()
                outcomes.append(WriteOutcome(sync_key=sync_key, ok=True))
            except SQLAlchemyError as exc:
                self._raise_if_unavailable(exc)
                outcomes.append(WriteOutcome(sync_key=sync_key, ok=False, error=self._describe(exc)))
        self._commit()
        return outcomes

    def update_partial(self, update_payload: SourceOwnedUpdate) -> WriteOutcome:
        outcome = self._apply_update(update_payload)
        self._commit()
        return outcome

    def update_many(self, updates: Sequence[SourceOwnedUpdate]) -> list[WriteOutcome]:
        outcomes = [self._apply_update(update_payload) for update_payload in updates]
        self._commit()
        return outcomes

    def _apply_update(self, update_payload: SourceOwnedUpdate) -> WriteOutcome:
        fields = update_payload.as_dict()
        if not fields:
            return WriteOutcome(sync_key=update_payload.sync_key, ok=True)

        try:
            with self._session.begin_nested():
                result = self._session.execute(
                    update(self._model)
                    .where(self._model.id == update_payload.record_id)
                    .values(**fields)
                    .execution_options(synchronize_session=False)
                )
        except SQLAlchemyError as exc:
            self._raise_if_unavailable(exc)
            return WriteOutcome(sync_key=update_payload.sync_key, ok=False, error=self._describe(exc))

        if result.rowcount == 0:
            return WriteOutcome(
                sync_key=update_payload.sync_key,
                ok=False,
                error="record no longer exists",
            )
        return WriteOutcome(sync_key=update_payload.sync_key, ok=True)

    def _commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.exception("Failed to commit feed batch table=%s", self._model.__tablename__)
            raise DatastoreUnavailableError(
                f"{self._model.__tablename__}: could not commit write batch."
            ) from exc

    def _raise_if_unavailable(self, exc: SQLAlchemyError) -> None:
        if _is_connectivity_error(exc):
            self._session.rollback()
            raise DatastoreUnavailableError(
                f"{self._model.__tablename__}: datastore connection lost during write."
            ) from exc

    @staticmethod
    def _describe(exc: SQLAlchemyError) -> str:
        original = getattr(exc, "orig", None)
        return str(original or exc).strip().splitlines()[0]

    @staticmethod
    def _to_existing(row: Any) -> ExistingRecord:
        return ExistingRecord(
            id=row.id,
            sync_key=row.sync_key,
            amount_override=bool(getattr(row, "amount_override", False)),
            payment_status=getattr(row, "payment_status", None),
        )


def sqlalchemy_repository_scope(model: type[Base]):
    """
    Factory for a context manager yielding a repository on a fresh session.

    Failing to obtain a session (no database URL, unusable engine) raises
    `DatastoreUnavailableError` like any other lost datastore.
    """

    @contextmanager
    def scope() -> Iterator[SQLAlchemyFeedRepository]:
        with ExitStack() as stack:
            try:
                session = stack.enter_context(session_scope())
            except (RuntimeError, SQLAlchemyError) as exc:
                logger.error("Database session unavailable table=%s error=%s", model.__tablename__, exc)
                raise DatastoreUnavailableError(f"{model.__tablename__}: {exc}") from exc
            yield SQLAlchemyFeedRepository(session, model)

    return scope
