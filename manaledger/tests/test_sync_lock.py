"""Cross-process sync lock tests"""

import uuid

import pytest
from sqlalchemy.dialects import postgresql

from manaledger.models.locks import SyncLock
from manaledger.services.sync_lock import SYNC_LOCK_NAME, DatabaseSyncLock, SyncAlreadyRunningError
from manaledger.tests.fakes import FakeResult, FakeSessionFactory


def compiled(statement) -> str:
    return str(statement.compile(dialect=postgresql.dialect()))


class RecordingLog:
    def __init__(self):
        self.warnings = []

    def info(self, message):
        pass

    def warning(self, message):
        self.warnings.append(message)


class TestDatabaseSyncLock:
    def test_acquire_free_lock(self):
        run_id = uuid.uuid4()
        sessions = FakeSessionFactory(results={1: FakeResult(scalar=run_id)})

        DatabaseSyncLock(ttl_seconds=60, session_factory=sessions).acquire(run_id)

        expire, claim = sessions.statements
        assert expire.is_delete
        assert "sync_locks.acquired_at <" in compiled(expire)
        assert claim.is_insert
        assert "ON CONFLICT (name) DO NOTHING" in compiled(claim)
        assert "RETURNING sync_locks.run_id" in compiled(claim)
        assert sessions.commits == 1

    def test_held_lock_raises(self):
        sessions = FakeSessionFactory(results={1: FakeResult(scalar=None)})

        with pytest.raises(SyncAlreadyRunningError):
            DatabaseSyncLock(ttl_seconds=60, session_factory=sessions).acquire(uuid.uuid4())

    def test_stale_lock_taken_over(self, monkeypatch):
        log = RecordingLog()
        monkeypatch.setattr("manaledger.services.sync_lock.log", log)
        run_id = uuid.uuid4()
        sessions = FakeSessionFactory(results={0: FakeResult(rowcount=1), 1: FakeResult(scalar=run_id)})

        DatabaseSyncLock(ttl_seconds=60, session_factory=sessions).acquire(run_id)

        assert len(log.warnings) == 1
        assert "stale" in log.warnings[0]

    def test_release_only_own_lock(self):
        run_id = uuid.uuid4()
        sessions = FakeSessionFactory()

        DatabaseSyncLock(session_factory=sessions).release(run_id)

        sql = compiled(sessions.statements[0])
        assert sessions.statements[0].is_delete
        assert "sync_locks.name =" in sql
        assert "sync_locks.run_id =" in sql
        assert sessions.commits == 1

    def test_holder(self):
        run_id = uuid.uuid4()
        sessions = FakeSessionFactory()
        lock = DatabaseSyncLock(session_factory=sessions)
        assert lock.holder() is None

        sessions.objects[(SyncLock, SYNC_LOCK_NAME)] = SyncLock(name=SYNC_LOCK_NAME, run_id=run_id)
        assert lock.holder() == run_id
