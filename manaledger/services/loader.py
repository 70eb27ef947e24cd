"""Chunked, fault-tolerant upsert of prepared rows."""

from __future__ import annotations

import asyncio
import math
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Sequence

from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from manaledger.core.config import settings
from manaledger.core.logging import get_logger
from manaledger.schemas.sync import ImportResult

log = get_logger("loader")

BatchProgressCallback = Callable[[int, int, int], None]


class UpsertStore(Protocol):
    def upsert(
        self,
        table_name: str,
        rows: Sequence[Dict[str, Any]],
        on_conflict: str = "id",
        ignore_duplicates: bool = False,
    ) -> None: ...


def is_timeout_error(exc: BaseException) -> bool:
    """Statement/pool timeouts are the only store errors worth retrying."""
    if isinstance(exc, PoolTimeoutError) or isinstance(exc.__cause__, PoolTimeoutError):
        return True
    return "timeout" in str(exc).lower()


class BatchLoader:
    """Upserts rows in fixed-size batches, one batch at a time.

    A failed batch is counted and skipped; it never aborts the load. Timeouts
    are retried with a linearly growing delay (``retry_base_delay * attempt``)
    up to ``max_retries`` attempts in total.
    """

    def __init__(
        self,
        store: UpsertStore,
        batch_size: Optional[int] = None,
        max_retries: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
        batch_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.store = store
        self.batch_size = batch_size or settings.IMPORT_BATCH_SIZE
        self.max_retries = max_retries or settings.IMPORT_MAX_RETRIES
        self.retry_base_delay = (
            settings.IMPORT_RETRY_BASE_DELAY_SECONDS if retry_base_delay is None else retry_base_delay
        )
        self.batch_delay = settings.IMPORT_BATCH_DELAY_SECONDS if batch_delay is None else batch_delay
        self._sleep = sleep

        if self.batch_size < 1:
            raise ValueError("batch_size must be positive")

    async def load(
        self,
        table_name: str,
        rows: Sequence[Dict[str, Any]],
        on_conflict: str = "id",
        ignore_duplicates: bool = False,
        on_progress: Optional[BatchProgressCallback] = None,
    ) -> ImportResult:
        total = len(rows)
        batch_count = math.ceil(total / self.batch_size)
        imported = 0
        errors = 0

        log.info(f"Importing {total} records into {table_name} ({batch_count} batches of {self.batch_size})...")

        for offset in range(0, total, self.batch_size):
            batch = rows[offset:offset + self.batch_size]
            batch_number = offset // self.batch_size + 1

            if await self._upsert_batch(table_name, batch, batch_number, on_conflict, ignore_duplicates):
                imported += len(batch)
            else:
                errors += 1

            log.info(f"Progress: {imported}/{total} ({imported / total * 100:.1f}%) | Errors: {errors}")
            if on_progress is not None:
                on_progress(imported, total, errors)

            if offset + self.batch_size < total:
                await self._sleep(self.batch_delay)

        log.info(f"Completed {table_name}: {imported} imported, {errors} failed batches")
        return ImportResult(imported=imported, errors=errors)

    async def _upsert_batch(
        self,
        table_name: str,
        batch: Sequence[Dict[str, Any]],
        batch_number: int,
        on_conflict: str,
        ignore_duplicates: bool,
    ) -> bool:
        """Return True once the batch is written, False when it has to be given up."""
        for attempt in range(1, self.max_retries + 1):
            try:
                self.store.upsert(
                    table_name,
                    batch,
                    on_conflict=on_conflict,
                    ignore_duplicates=ignore_duplicates,
                )
                return True
            except Exception as exc:  # noqa: BLE001
                if is_timeout_error(exc) and attempt < self.max_retries:
                    delay = self.retry_base_delay * attempt
                    log.warning(
                        f"Timeout in batch {batch_number}, retry {attempt}/{self.max_retries} in {delay:.1f}s"
                    )
                    await self._sleep(delay)
                    continue

                log.error(f"Batch {batch_number} failed after {attempt} attempt(s): {exc}")
                return False
        return False
