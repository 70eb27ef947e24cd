from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class SyncRequest(BaseModel):
    clear_first: bool = True


class SyncTriggerResponse(BaseModel):
    message: str
    run_id: str
    status: str
    clear_first: bool


class RunStatusOut(BaseModel):
    run_id: str
    state: str
    progress: Optional[str] = None
    clear_first: bool
    imported: int
    errors: int
    duration: Optional[float] = None
    error_message: Optional[str] = None
    result: Optional[dict] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None


class CardSearchResponse(BaseModel):
    request_id: str
    api_latency_ms: int
    total_count: int
    data: list[dict[str, Any]]


class HealthResponse(BaseModel):
    database: str
    last_sync_state: str | None
