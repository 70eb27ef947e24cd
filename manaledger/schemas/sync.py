"""Sync pipeline results and run status."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class SyncState(str, enum.Enum):
    IDLE = "idle"
    CLEARING = "clearing"
    FETCHING_CARDS = "fetching_cards"
    FETCHING_PRICES = "fetching_prices"
    MERGING = "merging"
    LOADING = "loading"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SyncState.COMPLETED, SyncState.FAILED)


class ImportResult(BaseModel):
    """Outcome of one table load: rows written and batches that failed."""

    imported: int = 0
    errors: int = 0


class SyncResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    results: Dict[str, ImportResult]
    duration: float
    total_errors: int = Field(alias="totalErrors")


class RunStatus(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    run_id: uuid.UUID
    state: SyncState
    progress: Optional[str] = None
    clear_first: bool = True
    imported: int = 0
    errors: int = 0
    duration: Optional[float] = None
    error_message: Optional[str] = None
    result: Optional[dict] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
