"""Storage adapter tests"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError, ProgrammingError

from manaledger.services.store import CardStore, StoreError
from manaledger.tests.fakes import FakeResult, FakeSessionFactory

NOW = datetime(2026, 10, 17, tzinfo=timezone.utc)


def card_row(card_id: str = "a"):
    return {
        "id": card_id,
        "name": "Lightning Bolt",
        "cardmarket_id": 1,
        "data": {"id": card_id},
        "created_at": NOW,
        "updated_at": NOW,
    }


def compiled(statement) -> str:
    return str(statement.compile(dialect=postgresql.dialect()))


class TestUpsert:
    def test_update_on_conflict_keeps_created_at(self):
        sessions = FakeSessionFactory()
        CardStore(sessions).upsert("card_data", [card_row("a"), card_row("b")])

        sql = compiled(sessions.statements[0])
        assert "ON CONFLICT (id) DO UPDATE SET" in sql
        set_clause = sql.split("DO UPDATE SET", 1)[1]
        assert "name = excluded.name" in set_clause
        assert "data = excluded.data" in set_clause
        assert "updated_at =" in set_clause
        assert "created_at" not in set_clause
        assert sessions.commits == 1

    def test_ignore_duplicates_does_nothing_on_conflict(self):
        sessions = FakeSessionFactory()
        CardStore(sessions).upsert("card_data", [card_row()], ignore_duplicates=True)

        sql = compiled(sessions.statements[0])
        assert "ON CONFLICT (id) DO NOTHING" in sql
        assert "DO UPDATE" not in sql

    def test_empty_rows_skip_database(self):
        sessions = FakeSessionFactory()
        CardStore(sessions).upsert("card_data", [])
        assert sessions.sessions == 0

    def test_failure_rolls_back_and_chains(self):
        cause = OperationalError("INSERT", {}, Exception("canceling statement due to statement timeout"))
        sessions = FakeSessionFactory(errors={0: cause})

        with pytest.raises(StoreError, match="statement timeout") as exc_info:
            CardStore(sessions).upsert("card_data", [card_row()])

        assert exc_info.value.__cause__ is cause
        assert sessions.rollbacks == 1
        assert sessions.commits == 0

    def test_unknown_table(self):
        with pytest.raises(StoreError, match="Unknown table"):
            CardStore(FakeSessionFactory()).upsert("cards_v2", [card_row()])


class TestClearAll:
    def test_stored_procedure_fast_path(self):
        sessions = FakeSessionFactory()
        CardStore(sessions).clear_all()

        assert len(sessions.statements) == 1
        assert sessions.statements[0].text == "SELECT clear_all_data()"
        assert sessions.commits == 1

    def test_delete_fallback_when_procedure_missing(self):
        missing = ProgrammingError("SELECT clear_all_data()", {}, Exception("function clear_all_data() does not exist"))
        sessions = FakeSessionFactory(errors={0: missing}, results={1: FakeResult(rowcount=12)})

        CardStore(sessions).clear_all()

        assert len(sessions.statements) == 2
        fallback = sessions.statements[1]
        assert fallback.is_delete
        assert "DELETE FROM card_data WHERE card_data.id IS NOT NULL" in compiled(fallback)
        assert sessions.rollbacks == 1
        assert sessions.commits == 1

    def test_fallback_failure_is_fatal(self):
        missing = ProgrammingError("SELECT clear_all_data()", {}, Exception("function does not exist"))
        denied = ProgrammingError("DELETE", {}, Exception("permission denied for table card_data"))
        sessions = FakeSessionFactory(errors={0: missing, 1: denied})

        with pytest.raises(StoreError, match="Failed to clear card data"):
            CardStore(sessions).clear_all()
        assert sessions.commits == 0


class TestVerify:
    def test_injected_factory_needs_no_engine(self):
        CardStore(FakeSessionFactory()).verify()
