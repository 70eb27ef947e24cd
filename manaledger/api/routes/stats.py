"""Stats routes - Sync run history for monitoring."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from manaledger.api.deps import get_status_store
from manaledger.api.routes.sync import to_status_out
from manaledger.schemas.api import RunStatusOut
from manaledger.schemas.sync import SyncState
from manaledger.services.run_status import RunStatusStore

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=list[RunStatusOut])
def get_sync_stats(
    state: Optional[SyncState] = Query(None, description="Filter by state (completed, failed, loading, ...)"),
    limit: int = Query(10, ge=1, le=50, description="Number of runs to return"),
    status_store: RunStatusStore = Depends(get_status_store),
):
    """
    Get recent sync runs.

    Shows imported rows, failed batches, duration, state and error messages.
    A completed run with errors > 0 is a degraded success: some batches were
    given up after retries.
    """
    return [to_status_out(run) for run in status_store.list_runs(state=state, limit=limit)]
