"""Sync run status stores.

A run is created when a sync starts, updated on every state transition and
kept afterwards so the latest (and earlier) runs can be polled.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from manaledger.core.db import get_session_factory
from manaledger.models.runs import SyncRun
from manaledger.schemas.sync import RunStatus, SyncResult, SyncState


class RunStatusStore(ABC):
    @abstractmethod
    def create_run(self, clear_first: bool = True, run_id: Optional[uuid.UUID] = None) -> uuid.UUID:
        """Register a new run in the ``idle`` state."""

    @abstractmethod
    def transition(self, run_id: uuid.UUID, state: SyncState, progress: Optional[str] = None) -> None:
        """Move a run to ``state``."""

    @abstractmethod
    def update_progress(self, run_id: uuid.UUID, progress: str) -> None:
        """Replace the progress text without changing state."""

    @abstractmethod
    def complete(self, run_id: uuid.UUID, result: SyncResult) -> None:
        """Mark a run completed with its result (possibly with batch errors)."""

    @abstractmethod
    def fail(self, run_id: uuid.UUID, error: str, duration: float) -> None:
        """Mark a run failed with the original error message."""

    @abstractmethod
    def get(self, run_id: uuid.UUID) -> Optional[RunStatus]:
        ...

    @abstractmethod
    def list_runs(self, state: Optional[SyncState] = None, limit: int = 10) -> List[RunStatus]:
        """Most recent runs first."""

    def latest(self) -> Optional[RunStatus]:
        runs = self.list_runs(limit=1)
        return runs[0] if runs else None


def _totals(result: SyncResult) -> Dict[str, int]:
    return {
        "imported": sum(r.imported for r in result.results.values()),
        "errors": result.total_errors,
    }


class InMemoryRunStatusStore(RunStatusStore):
    """Process-local runs keyed by run id (CLI runs, tests)."""

    def __init__(self):
        self._runs: Dict[uuid.UUID, RunStatus] = {}

    def _update(self, run_id: uuid.UUID, **changes) -> None:
        self._runs[run_id] = self._runs[run_id].model_copy(update=changes)

    def create_run(self, clear_first: bool = True, run_id: Optional[uuid.UUID] = None) -> uuid.UUID:
        run_id = run_id or uuid.uuid4()
        self._runs[run_id] = RunStatus(
            run_id=run_id,
            state=SyncState.IDLE,
            clear_first=clear_first,
            started_at=datetime.now(timezone.utc),
        )
        return run_id

    def transition(self, run_id: uuid.UUID, state: SyncState, progress: Optional[str] = None) -> None:
        self._update(run_id, state=state, progress=progress)

    def update_progress(self, run_id: uuid.UUID, progress: str) -> None:
        self._update(run_id, progress=progress)

    def complete(self, run_id: uuid.UUID, result: SyncResult) -> None:
        self._update(
            run_id,
            state=SyncState.COMPLETED,
            progress="Completed",
            duration=result.duration,
            result=result.model_dump(mode="json", by_alias=True),
            ended_at=datetime.now(timezone.utc),
            **_totals(result),
        )

    def fail(self, run_id: uuid.UUID, error: str, duration: float) -> None:
        self._update(
            run_id,
            state=SyncState.FAILED,
            progress="Failed",
            error_message=error,
            duration=duration,
            ended_at=datetime.now(timezone.utc),
        )

    def get(self, run_id: uuid.UUID) -> Optional[RunStatus]:
        return self._runs.get(run_id)

    def list_runs(self, state: Optional[SyncState] = None, limit: int = 10) -> List[RunStatus]:
        runs = [r for r in self._runs.values() if state is None or r.state == state]
        runs.sort(key=lambda r: r.started_at, reverse=True)
        return runs[:limit]


class DatabaseRunStatusStore(RunStatusStore):
    """Runs persisted as ``sync_runs`` rows, visible to every API instance."""

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self._session_factory = session_factory

    def _session(self) -> Session:
        factory = self._session_factory or get_session_factory()
        return factory()

    def _update(self, run_id: uuid.UUID, **changes) -> None:
        with self._session() as session:
            run = session.get(SyncRun, run_id)
            if run is None:
                raise KeyError(f"Unknown sync run: {run_id}")
            for key, value in changes.items():
                setattr(run, key, value)
            session.commit()

    def create_run(self, clear_first: bool = True, run_id: Optional[uuid.UUID] = None) -> uuid.UUID:
        run_id = run_id or uuid.uuid4()
        with self._session() as session:
            session.add(
                SyncRun(
                    run_id=run_id,
                    state=SyncState.IDLE.value,
                    clear_first=clear_first,
                    imported=0,
                    errors=0,
                )
            )
            session.commit()
        return run_id

    def transition(self, run_id: uuid.UUID, state: SyncState, progress: Optional[str] = None) -> None:
        self._update(run_id, state=state.value, progress=progress)

    def update_progress(self, run_id: uuid.UUID, progress: str) -> None:
        self._update(run_id, progress=progress)

    def complete(self, run_id: uuid.UUID, result: SyncResult) -> None:
        self._update(
            run_id,
            state=SyncState.COMPLETED.value,
            progress="Completed",
            duration=result.duration,
            result=result.model_dump(mode="json", by_alias=True),
            ended_at=datetime.now(timezone.utc),
            **_totals(result),
        )

    def fail(self, run_id: uuid.UUID, error: str, duration: float) -> None:
        self._update(
            run_id,
            state=SyncState.FAILED.value,
            progress="Failed",
            error_message=error,
            duration=duration,
            ended_at=datetime.now(timezone.utc),
        )

    def get(self, run_id: uuid.UUID) -> Optional[RunStatus]:
        with self._session() as session:
            run = session.get(SyncRun, run_id)
            return RunStatus.model_validate(run) if run else None

    def list_runs(self, state: Optional[SyncState] = None, limit: int = 10) -> List[RunStatus]:
        stmt = select(SyncRun)
        if state:
            stmt = stmt.where(SyncRun.state == state.value)
        stmt = stmt.order_by(SyncRun.started_at.desc()).limit(limit)
        with self._session() as session:
            return [RunStatus.model_validate(run) for run in session.execute(stmt).scalars().all()]
