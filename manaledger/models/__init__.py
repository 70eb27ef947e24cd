from manaledger.models.base import Base
from manaledger.models.card import CardData
from manaledger.models.locks import SyncLock
from manaledger.models.runs import SyncRun

__all__ = [
    "Base",
    "CardData",
    "SyncLock",
    "SyncRun",
]
