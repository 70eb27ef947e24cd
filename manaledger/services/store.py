"""Storage adapter: batch upsert, stored-procedure calls and table clearing."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Sequence

from sqlalchemy import Table, delete, text
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from manaledger.core.db import get_session_factory
from manaledger.core.logging import get_logger
from manaledger.models.base import Base
from manaledger.models.card import CardData

log = get_logger("store")

CLEAR_PROCEDURE = "clear_all_data"
CLEARABLE_TABLES = (CardData,)


class StoreError(RuntimeError):
    """A storage operation failed; the SQLAlchemy error is chained as __cause__."""


class CardStore:
    """Thin write surface over the relational store.

    Each call uses its own short-lived session and commits on success, so a
    failed batch never leaves earlier batches uncommitted.
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self._session_factory = session_factory

    def _session(self) -> Session:
        factory = self._session_factory or get_session_factory()
        return factory()

    def verify(self) -> None:
        """Force lazy engine creation; raises StoreConfigError when unconfigured."""
        if self._session_factory is None:
            get_session_factory()

    @staticmethod
    def _table(table_name: str) -> Table:
        try:
            return Base.metadata.tables[table_name]
        except KeyError:
            raise StoreError(f"Unknown table: {table_name}") from None

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------
    def upsert(
        self,
        table_name: str,
        rows: Sequence[Dict[str, Any]],
        on_conflict: str = "id",
        ignore_duplicates: bool = False,
    ) -> None:
        """INSERT ... ON CONFLICT keyed on ``on_conflict``."""
        if not rows:
            return

        table = self._table(table_name)
        stmt = insert(table).values(list(rows))
        if ignore_duplicates:
            stmt = stmt.on_conflict_do_nothing(index_elements=[on_conflict])
        else:
            updatable = [c.name for c in table.columns if c.name not in (on_conflict, "created_at")]
            set_ = {name: stmt.excluded[name] for name in updatable}
            if "updated_at" in table.columns:
                set_["updated_at"] = datetime.now(timezone.utc)
            stmt = stmt.on_conflict_do_update(index_elements=[on_conflict], set_=set_)

        with self._session() as session:
            try:
                session.execute(stmt)
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                raise StoreError(str(exc)) from exc

    def rpc(self, function_name: str) -> None:
        """Call a stored procedure that takes no arguments."""
        with self._session() as session:
            try:
                session.execute(text(f"SELECT {function_name}()"))
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                raise StoreError(str(exc)) from exc

    def clear_all(self) -> None:
        """Empty the card tables; TRUNCATE via procedure, DELETE as fallback."""
        log.info("Clearing existing card data...")
        try:
            self.rpc(CLEAR_PROCEDURE)
            log.info(f"Tables cleared via {CLEAR_PROCEDURE}()")
            return
        except StoreError as exc:
            log.warning(f"Stored procedure {CLEAR_PROCEDURE}() not available, using DELETE: {exc}")

        with self._session() as session:
            try:
                for model in CLEARABLE_TABLES:
                    result = session.execute(delete(model).where(model.id.is_not(None)))
                    log.info(f"Cleared {model.__tablename__} ({result.rowcount} rows)")
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                raise StoreError(f"Failed to clear card data: {exc}") from exc

