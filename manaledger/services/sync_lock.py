"""Cross-process "sync in progress" lock backed by a single table row."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy import delete
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from manaledger.core.config import settings
from manaledger.core.db import get_session_factory
from manaledger.core.logging import get_logger
from manaledger.models.locks import SyncLock

log = get_logger("sync_lock")

SYNC_LOCK_NAME = "card_sync"


class SyncAlreadyRunningError(RuntimeError):
    """Another sync holds the lock."""


class DatabaseSyncLock:
    """Acquired with a conditional insert, so only one instance can win.

    A lock older than ``ttl_seconds`` belongs to a run that died without
    releasing it and is taken over.
    """

    def __init__(
        self,
        name: str = SYNC_LOCK_NAME,
        ttl_seconds: Optional[int] = None,
        session_factory: Optional[Callable[[], Session]] = None,
    ):
        self.name = name
        self.ttl_seconds = ttl_seconds or settings.SYNC_LOCK_TTL_SECONDS
        self._session_factory = session_factory

    def _session(self) -> Session:
        factory = self._session_factory or get_session_factory()
        return factory()

    def acquire(self, run_id: uuid.UUID) -> None:
        stale_before = datetime.now(timezone.utc) - timedelta(seconds=self.ttl_seconds)
        with self._session() as session:
            expired = session.execute(
                delete(SyncLock).where(SyncLock.name == self.name, SyncLock.acquired_at < stale_before)
            )
            if expired.rowcount:
                log.warning(f"Took over stale sync lock '{self.name}'")

            stmt = (
                insert(SyncLock)
                .values(name=self.name, run_id=run_id)
                .on_conflict_do_nothing(index_elements=[SyncLock.name])
                .returning(SyncLock.run_id)
            )
            won = session.execute(stmt).scalar_one_or_none()
            session.commit()

        if won is None:
            raise SyncAlreadyRunningError(f"Sync lock '{self.name}' is held by another run")
        log.info(f"Acquired sync lock '{self.name}' for run {run_id}")

    def release(self, run_id: uuid.UUID) -> None:
        with self._session() as session:
            session.execute(delete(SyncLock).where(SyncLock.name == self.name, SyncLock.run_id == run_id))
            session.commit()
        log.info(f"Released sync lock '{self.name}' for run {run_id}")

    def holder(self) -> Optional[uuid.UUID]:
        with self._session() as session:
            lock = session.get(SyncLock, self.name)
            return lock.run_id if lock else None
