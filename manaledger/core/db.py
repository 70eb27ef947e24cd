"""Lazy database engine and session factory."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from manaledger.core.config import settings
from manaledger.core.logging import get_logger

log = get_logger("db")

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker[Session]] = None


class StoreConfigError(RuntimeError):
    """Raised when the store is accessed without connection configuration."""


def get_engine() -> Engine:
    """Create the engine on first access; fail before any I/O if unconfigured."""
    global _engine
    if _engine is None:
        if not settings.DATABASE_URL:
            raise StoreConfigError("DATABASE_URL environment variable is required")
        _engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)
        log.info(f"Database engine created for {_engine.url.render_as_string(hide_password=True)}")
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)
    return _session_factory


def SessionLocal() -> Session:
    """Open a new session bound to the lazily-created engine."""
    return get_session_factory()()
