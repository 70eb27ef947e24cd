"""Sync routes - Trigger the card sync and poll its status."""

import uuid
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.responses import JSONResponse

from manaledger.api.deps import get_status_store, get_sync_lock
from manaledger.core.db import StoreConfigError
from manaledger.core.logging import get_logger
from manaledger.schemas.api import RunStatusOut, SyncRequest, SyncTriggerResponse
from manaledger.schemas.sync import RunStatus
from manaledger.services.run_status import RunStatusStore
from manaledger.services.store import CardStore
from manaledger.services.sync_lock import DatabaseSyncLock, SyncAlreadyRunningError
from manaledger.services.sync_service import SyncService

router = APIRouter(prefix="/sync", tags=["sync"])
log = get_logger("sync_routes")


def to_status_out(run: RunStatus) -> RunStatusOut:
    return RunStatusOut(
        run_id=str(run.run_id),
        state=run.state.value,
        progress=run.progress,
        clear_first=run.clear_first,
        imported=run.imported,
        errors=run.errors,
        duration=run.duration,
        error_message=run.error_message,
        result=run.result,
        started_at=run.started_at,
        ended_at=run.ended_at,
    )


async def run_sync_in_background(
    run_id: uuid.UUID,
    clear_first: bool,
    status_store: RunStatusStore,
    lock: DatabaseSyncLock,
) -> None:
    """Run one sync after the response is sent; always releases the lock."""
    try:
        service = SyncService(CardStore(), status_store)
        result = await service.run(run_id=run_id, clear_first=clear_first)
        log.info(f"Background sync {run_id} completed with {result.total_errors} failed batches")
    except Exception as exc:  # noqa: BLE001
        # Already recorded on the run as failed
        log.error(f"Background sync {run_id} failed: {exc}")
    finally:
        lock.release(run_id)


@router.post("", response_model=SyncTriggerResponse)
async def trigger_sync(
    background_tasks: BackgroundTasks,
    request: Optional[SyncRequest] = None,
    status_store: RunStatusStore = Depends(get_status_store),
    lock: DatabaseSyncLock = Depends(get_sync_lock),
):
    """
    Start a full card sync in the background (non-blocking).

    The sync:
    1. Clears card data (unless clear_first is false: upsert-only mode)
    2. Downloads the Scryfall unique-artwork bulk file
    3. Downloads the CardMarket price guide
    4. Merges prices onto cards
    5. Upserts the merged cards in batches

    Poll /sync/status or /sync/runs/{run_id} for progress. Returns 409 if a
    sync is already running.
    """
    clear_first = request.clear_first if request else True
    run_id = uuid.uuid4()
    try:
        lock.acquire(run_id)
    except SyncAlreadyRunningError:
        return JSONResponse(
            status_code=409,
            content={
                "message": "Sync already in progress",
                "status": "running",
                "run_id": str(lock.holder() or ""),
            },
        )
    except StoreConfigError as exc:
        raise HTTPException(status_code=503, detail=str(exc))

    try:
        status_store.create_run(clear_first=clear_first, run_id=run_id)
    except Exception:
        lock.release(run_id)
        raise

    log.info(f"Sync {run_id} triggered (clear_first={clear_first})")
    background_tasks.add_task(run_sync_in_background, run_id, clear_first, status_store, lock)

    return SyncTriggerResponse(
        message="Card sync started",
        run_id=str(run_id),
        status="running",
        clear_first=clear_first,
    )


@router.get("/status", response_model=RunStatusOut)
def get_sync_status(status_store: RunStatusStore = Depends(get_status_store)):
    """Status of the most recent sync run."""
    run = status_store.latest()
    if not run:
        raise HTTPException(status_code=404, detail="No sync has been run yet")
    return to_status_out(run)


@router.get("/runs/{run_id}", response_model=RunStatusOut)
def get_sync_run(run_id: uuid.UUID, status_store: RunStatusStore = Depends(get_status_store)):
    """Status of a single sync run."""
    run = status_store.get(run_id)
    if not run:
        raise HTTPException(status_code=404, detail=f"Sync run '{run_id}' not found")
    return to_status_out(run)
