# =============================================================================
# tests/unit/test_local_database.py
# Unit Tests for LocalDatabase
# =============================================================================

import pytest
import pandas as pd

from salon_core.errors import LocalStoreError
from salon_core.offline import LocalDatabase

THINGS_SQL = """
    CREATE TABLE IF NOT EXISTS things (
        id TEXT PRIMARY KEY,
        business_id TEXT NOT NULL,
        name TEXT,
        updated_at TEXT,
        needs_sync INTEGER NOT NULL DEFAULT 1
    )
"""


@pytest.fixture
def db(local_db):
    local_db.register_table("things", THINGS_SQL)
    return local_db


class TestTransactions:
    """Test commit/rollback behaviour"""

    def test_rollback_on_error(self, db):
        """Nothing written inside a failed transaction survives"""
        with pytest.raises(ValueError):
            with db.transaction():
                db.upsert("things", {"id": "1", "business_id": "t", "name": "a"})
                raise ValueError("boom")

        assert db.fetch_one("things", "id = ?", ["1"]) is None

    def test_sqlite_error_becomes_local_store_error(self, db):
        """SQLite failures surface as LocalStoreError"""
        with pytest.raises(LocalStoreError) as exc_info:
            db.query("SELECT * FROM no_such_table")

        assert exc_info.value.code == "LOCAL_001"

    def test_nested_transactions_commit_once(self, db):
        """Inner transactions join the outer one"""
        with db.transaction():
            db.upsert("things", {"id": "1", "business_id": "t", "name": "a"})
            with db.transaction():
                db.upsert("things", {"id": "2", "business_id": "t", "name": "b"})

        assert db.count("things") == 2

    def test_memory_database(self):
        """':memory:' databases work without a directory"""
        db = LocalDatabase()
        db.register_table("things", THINGS_SQL)
        db.upsert("things", {"id": "1", "business_id": "t", "name": "a"})
        assert db.count("things") == 1
        db.close()


class TestListeners:
    """Test change notification"""

    def test_listener_called_after_commit(self, db):
        """One notification per committed transaction touching the table"""
        calls = []
        db.register_listener("things", calls.append)

        with db.transaction():
            db.upsert("things", {"id": "1", "business_id": "t", "name": "a"})
            db.upsert("things", {"id": "2", "business_id": "t", "name": "b"})

        assert calls == ["things"]

    def test_no_notification_on_rollback(self, db):
        """Rolled back writes are not announced"""
        calls = []
        db.register_listener("things", calls.append)

        with pytest.raises(ValueError):
            with db.transaction():
                db.upsert("things", {"id": "1", "business_id": "t", "name": "a"})
                raise ValueError("boom")

        assert calls == []

    def test_no_notification_when_nothing_changed(self, db):
        """An UPDATE matching no rows does not notify"""
        calls = []
        db.register_listener("things", calls.append)

        db.update_where("things", {"name": "x"}, "id = ?", ["missing"])

        assert calls == []

    def test_unregister_listener(self, db):
        calls = []
        db.register_listener("things", calls.append)
        db.unregister_listener("things", calls.append)

        db.upsert("things", {"id": "1", "business_id": "t", "name": "a"})

        assert calls == []
        assert db.listener_count("things") == 0

    def test_failing_listener_does_not_break_writes(self, db):
        """Listener exceptions are logged, not raised"""
        def broken(_table):
            raise RuntimeError("listener bug")

        db.register_listener("things", broken)
        db.upsert("things", {"id": "1", "business_id": "t", "name": "a"})

        assert db.count("things") == 1


class TestSyncBookkeeping:
    """Test dirty flags and tombstones"""

    def test_get_dirty_and_mark_synced(self, db):
        db.upsert("things", {"id": "1", "business_id": "t", "name": "a", "updated_at": "v1", "needs_sync": 1})
        db.upsert("things", {"id": "2", "business_id": "t", "name": "b", "updated_at": "v1", "needs_sync": 0})

        assert [r["id"] for r in db.get_dirty("things", "t")] == ["1"]

        db.mark_synced("things", "1", "v1")
        assert db.get_dirty("things", "t") == []

    def test_mark_synced_skips_newer_versions(self, db):
        """A row modified after the push stays dirty"""
        db.upsert("things", {"id": "1", "business_id": "t", "name": "a", "updated_at": "v2", "needs_sync": 1})

        db.mark_synced("things", "1", "v1")

        assert db.fetch_one("things", "id = ?", ["1"])["needs_sync"] == 1

    def test_tombstones(self, db):
        db.add_tombstone("things", "1", "t")
        db.add_tombstone("things", "2", "other")

        assert db.tombstoned_ids("things", "t") == {"1"}

        db.clear_tombstone("things", "1")
        assert db.get_tombstones("things", "t") == []

    def test_pending_count(self, db):
        db.upsert("things", {"id": "1", "business_id": "t", "name": "a", "needs_sync": 1})
        db.add_tombstone("things", "2", "t")
        db.add_tombstone("things", "3", "other")

        assert db.get_pending_count("t") == 2
        assert db.get_pending_count() == 3


class TestSettingsAndExport:
    """Test app settings and DataFrame export"""

    def test_settings_round_trip(self, db):
        db.set_setting("last_tenant", "t")
        db.set_setting("page", {"size": 10})

        assert db.get_setting("last_tenant") == "t"
        assert db.get_setting("page") == {"size": 10}
        assert db.get_setting("missing", default=5) == 5

    def test_to_dataframe(self, db):
        db.upsert_many("things", [
            {"id": "1", "business_id": "t", "name": "a"},
            {"id": "2", "business_id": "u", "name": "b"},
        ])

        df = db.to_dataframe("things", "business_id = ?", ["t"])

        assert isinstance(df, pd.DataFrame)
        assert list(df["id"]) == ["1"]
