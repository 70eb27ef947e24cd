"""API dependencies"""

from typing import Generator

from sqlalchemy.orm import Session

from manaledger.core.db import SessionLocal
from manaledger.services.run_status import DatabaseRunStatusStore, RunStatusStore
from manaledger.services.sync_lock import DatabaseSyncLock


def get_db() -> Generator[Session, None, None]:
    """Database session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_status_store() -> RunStatusStore:
    return DatabaseRunStatusStore()


def get_sync_lock() -> DatabaseSyncLock:
    return DatabaseSyncLock()
