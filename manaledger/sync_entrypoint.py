"""Sync entrypoint - Standalone script for running the card sync.

Usage:
    python -m manaledger.sync_entrypoint              # Clear card data, then import
    python -m manaledger.sync_entrypoint --no-clear   # Upsert only, keep existing rows

Exit codes: 0 success, 1 fatal error, 2 completed with failed batches.
"""

import asyncio
import sys
import uuid

from manaledger.core.logging import get_logger
from manaledger.schemas.sync import SyncResult
from manaledger.services.run_status import InMemoryRunStatusStore
from manaledger.services.store import CardStore
from manaledger.services.sync_lock import DatabaseSyncLock
from manaledger.services.sync_service import SyncService

logger = get_logger("sync_entrypoint")


async def run_sync_job(clear_first: bool) -> SyncResult:
    """Run one sync while holding the cross-process sync lock."""
    store = CardStore()
    store.verify()

    lock = DatabaseSyncLock()
    run_id = uuid.uuid4()
    lock.acquire(run_id)
    try:
        status_store = InMemoryRunStatusStore()
        status_store.create_run(clear_first=clear_first, run_id=run_id)
        service = SyncService(store, status_store)
        return await service.run(run_id=run_id, clear_first=clear_first)
    finally:
        lock.release(run_id)


def main() -> int:
    """Main entry point for the sync CLI."""
    args = sys.argv[1:]
    unknown = [a for a in args if a not in ("--no-clear", "--clear", "-c")]
    if unknown:
        logger.error(f"Unknown arguments: {' '.join(unknown)}. Usage: [--no-clear]")
        return 1

    clear_first = "--no-clear" not in args
    if not clear_first:
        logger.info("Running sync without clearing (upsert mode)")

    try:
        result = asyncio.run(run_sync_job(clear_first))
    except Exception as exc:  # noqa: BLE001
        logger.error(f"Sync failed: {exc}")
        return 1

    logger.info(f"Sync completed: {result.model_dump(by_alias=True)}")
    return 2 if result.total_errors > 0 else 0


if __name__ == "__main__":
    sys.exit(main())
