# Services package
from manaledger.services.card_service import CardService
from manaledger.services.loader import BatchLoader
from manaledger.services.run_status import (
    DatabaseRunStatusStore,
    InMemoryRunStatusStore,
    RunStatusStore,
)
from manaledger.services.store import CardStore, StoreError
from manaledger.services.sync_lock import DatabaseSyncLock, SyncAlreadyRunningError
from manaledger.services.sync_service import SyncService

__all__ = [
    "CardService",
    "BatchLoader",
    "DatabaseRunStatusStore",
    "InMemoryRunStatusStore",
    "RunStatusStore",
    "CardStore",
    "StoreError",
    "DatabaseSyncLock",
    "SyncAlreadyRunningError",
    "SyncService",
]
