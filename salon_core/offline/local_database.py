# =============================================================================
# salon_core/offline/local_database.py
# Local SQLite Database for Offline Operations
# =============================================================================
"""
LocalDatabase - SQLite-based local replica of the tenant's cloud collections.

Features:
- Schema creation for registered entity tables
- Generic row CRUD used by the repositories
- Dirty-flag and tombstone bookkeeping for the sync protocol
- Per-table change listeners (push-based query notification)
- DataFrame export (pandas)
- One shared connection serialized by a re-entrant lock
"""

from __future__ import annotations
import sqlite3
import threading
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, Union
from contextlib import contextmanager
import logging

import pandas as pd

from salon_core.errors import LocalStoreError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
ChangeListener = Callable[[str], None]


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 text."""
    return datetime.now(timezone.utc).isoformat()


class LocalDatabase:
    """
    Local SQLite database for offline data storage.

    Entity tables are registered by the repositories (see register_table);
    the bookkeeping tables below are always present.
    """

    MEMORY = ":memory:"

    SCHEMA = {
        "pending_deletes": """
            CREATE TABLE IF NOT EXISTS pending_deletes (
                table_name TEXT NOT NULL,
                record_id TEXT NOT NULL,
                business_id TEXT NOT NULL,
                deleted_at TEXT NOT NULL,
                PRIMARY KEY (table_name, record_id)
            )
        """,
        "app_settings": """
            CREATE TABLE IF NOT EXISTS app_settings (
                key TEXT PRIMARY KEY,
                value TEXT,
                updated_at TEXT
            )
        """,
    }

    def __init__(self, db_path: Union[str, Path] = MEMORY):
        """
        Initialize local database.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        self.db_path = db_path if db_path == self.MEMORY else Path(db_path)
        self._ensure_directory()
        self._lock = threading.RLock()
        self._depth = 0
        self._touched: Set[str] = set()
        self._listeners: Dict[str, List[ChangeListener]] = {}
        self._tables: Dict[str, str] = {}
        self._connection: Optional[sqlite3.Connection] = None
        self._initialized = False

    def _ensure_directory(self) -> None:
        """Ensure database directory exists."""
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get the shared database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
            )
            self._connection.row_factory = sqlite3.Row
        return self._connection

    @contextmanager
    def transaction(self):
        """
        Context manager for database transactions.

        Nested transactions join the outermost one. Listeners of every table
        written inside the transaction are notified after the commit, outside
        the lock.
        """
        touched: Set[str] = set()
        committed = False
        with self._lock:
            conn = self._get_connection()
            self._depth += 1
            outermost = self._depth == 1
            try:
                yield conn
                if outermost:
                    conn.commit()
                    committed = True
            except sqlite3.Error as e:
                if outermost:
                    conn.rollback()
                raise LocalStoreError(f"Local store failure: {e}") from e
            except Exception:
                if outermost:
                    conn.rollback()
                raise
            finally:
                self._depth -= 1
                if outermost:
                    touched, self._touched = self._touched, set()

        if committed and touched:
            self._notify(touched)

    def initialize(self) -> None:
        """Initialize bookkeeping schema."""
        if self._initialized:
            return

        with self.transaction() as conn:
            for table_name, schema in self.SCHEMA.items():
                conn.execute(schema)
                logger.debug(f"Created/verified table: {table_name}")

        self._initialized = True
        logger.info(f"Local database initialized at: {self.db_path}")

    def register_table(self, table: str, create_sql: str, index_sql: Sequence[str] = ()) -> None:
        """
        Create (if needed) an entity table and its indexes.

        Args:
            table: Table name
            create_sql: CREATE TABLE IF NOT EXISTS statement
            index_sql: CREATE INDEX IF NOT EXISTS statements
        """
        self.initialize()
        with self.transaction() as conn:
            conn.execute(create_sql)
            for statement in index_sql:
                conn.execute(statement)
        self._tables[table] = create_sql
        logger.debug(f"Registered entity table: {table}")

    @property
    def tables(self) -> List[str]:
        """Registered entity tables."""
        return list(self._tables)

    # =========================================================================
    # CHANGE LISTENERS
    # =========================================================================

    def register_listener(self, table: str, listener: ChangeListener) -> None:
        """Call `listener(table)` after every committed write to `table`."""
        with self._lock:
            listeners = self._listeners.setdefault(table, [])
            if listener not in listeners:
                listeners.append(listener)

    def unregister_listener(self, table: str, listener: ChangeListener) -> None:
        """Remove a registered listener."""
        with self._lock:
            listeners = self._listeners.get(table, [])
            if listener in listeners:
                listeners.remove(listener)

    def listener_count(self, table: str) -> int:
        return len(self._listeners.get(table, []))

    def _touch(self, table: str) -> None:
        self._touched.add(table)

    def _notify(self, tables: Iterable[str]) -> None:
        for table in tables:
            with self._lock:
                listeners = list(self._listeners.get(table, []))
            for listener in listeners:
                try:
                    listener(table)
                except Exception as e:
                    logger.error(f"Error in change listener for {table}: {e}")

    # =========================================================================
    # GENERIC ROW OPERATIONS
    # =========================================================================

    def upsert(self, table: str, row: Row) -> None:
        """Insert or fully replace a row keyed by its primary key."""
        self.upsert_many(table, [row])

    def upsert_many(self, table: str, rows: Sequence[Row]) -> int:
        """Insert or replace several rows in one transaction."""
        if not rows:
            return 0

        with self.transaction() as conn:
            for row in rows:
                columns = ", ".join(row.keys())
                placeholders = ", ".join(["?" for _ in row])
                conn.execute(
                    f"INSERT OR REPLACE INTO {table} ({columns}) VALUES ({placeholders})",
                    list(row.values())
                )
            self._touch(table)

        return len(rows)

    def update_where(
        self,
        table: str,
        values: Row,
        where: str,
        params: Optional[Sequence[Any]] = None,
    ) -> int:
        """
        Update matching rows with literal values.

        Returns:
            Number of rows changed
        """
        set_clause = ", ".join([f"{k} = ?" for k in values.keys()])
        return self.execute(
            f"UPDATE {table} SET {set_clause} WHERE {where}",
            list(values.values()) + list(params or []),
            table=table,
        )

    def delete_where(self, table: str, where: str, params: Optional[Sequence[Any]] = None) -> int:
        """Delete matching rows, returning the number removed."""
        return self.execute(f"DELETE FROM {table} WHERE {where}", params, table=table)

    def fetch_one(self, table: str, where: str, params: Optional[Sequence[Any]] = None) -> Optional[Row]:
        """Get a single row as a dict."""
        rows = self.query(f"SELECT * FROM {table} WHERE {where} LIMIT 1", params)
        return rows[0] if rows else None

    def fetch_all(
        self,
        table: str,
        where: Optional[str] = None,
        params: Optional[Sequence[Any]] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        """Get all rows from a table with optional filtering."""
        sql = f"SELECT * FROM {table}"

        if where:
            sql += f" WHERE {where}"

        if order_by:
            sql += f" ORDER BY {order_by}"

        if limit:
            sql += f" LIMIT {int(limit)}"

        return self.query(sql, params)

    def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Row]:
        """Execute a read query, returning dict rows."""
        with self.transaction() as conn:
            cursor = conn.execute(sql, list(params or []))
            return [dict(row) for row in cursor.fetchall()]

    def execute(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        table: Optional[str] = None,
    ) -> int:
        """
        Execute a write statement.

        Args:
            sql: Statement
            params: Bound parameters
            table: Table whose listeners should be notified

        Returns:
            Affected row count
        """
        with self.transaction() as conn:
            cursor = conn.execute(sql, list(params or []))
            if table and cursor.rowcount:
                self._touch(table)
            return cursor.rowcount

    def count(self, table: str, where: Optional[str] = None, params: Optional[Sequence[Any]] = None) -> int:
        sql = f"SELECT COUNT(*) AS count FROM {table}"
        if where:
            sql += f" WHERE {where}"
        result = self.query(sql, params)
        return result[0]["count"] if result else 0

    # =========================================================================
    # SYNC BOOKKEEPING
    # =========================================================================

    def get_dirty(self, table: str, business_id: str) -> List[Row]:
        """Rows of a tenant with a local mutation not yet confirmed remotely."""
        return self.fetch_all(
            table,
            "business_id = ? AND needs_sync = 1",
            [business_id],
        )

    def mark_synced(self, table: str, record_id: str, updated_at: Optional[str] = None) -> int:
        """
        Clear the dirty flag of a row.

        When `updated_at` is given the flag is only cleared if the row was not
        modified again since that version was pushed.
        """
        if updated_at is None:
            return self.execute(
                f"UPDATE {table} SET needs_sync = 0 WHERE id = ?",
                [record_id],
                table=table,
            )
        return self.execute(
            f"UPDATE {table} SET needs_sync = 0 WHERE id = ? AND updated_at = ?",
            [record_id, updated_at],
            table=table,
        )

    def get_pending_count(self, business_id: Optional[str] = None) -> int:
        """Dirty rows plus pending remote deletes across all entity tables."""
        total = 0
        for table in self._tables:
            if business_id is None:
                total += self.count(table, "needs_sync = 1")
            else:
                total += self.count(table, "needs_sync = 1 AND business_id = ?", [business_id])
        if business_id is None:
            total += self.count("pending_deletes")
        else:
            total += self.count("pending_deletes", "business_id = ?", [business_id])
        return total

    def add_tombstone(self, table: str, record_id: str, business_id: str) -> None:
        """Record a local hard delete that still has to reach the remote store."""
        self.execute(
            """
            INSERT OR REPLACE INTO pending_deletes (table_name, record_id, business_id, deleted_at)
            VALUES (?, ?, ?, ?)
            """,
            [table, record_id, business_id, utc_now_iso()],
            table="pending_deletes",
        )

    def get_tombstones(self, table: str, business_id: str) -> List[Row]:
        return self.fetch_all(
            "pending_deletes",
            "table_name = ? AND business_id = ?",
            [table, business_id],
            order_by="deleted_at ASC",
        )

    def tombstoned_ids(self, table: str, business_id: str) -> Set[str]:
        return {row["record_id"] for row in self.get_tombstones(table, business_id)}

    def clear_tombstone(self, table: str, record_id: str) -> None:
        self.delete_where(
            "pending_deletes",
            "table_name = ? AND record_id = ?",
            [table, record_id],
        )

    # =========================================================================
    # PANDAS INTEGRATION
    # =========================================================================

    def to_dataframe(
        self,
        table: str,
        where: Optional[str] = None,
        params: Optional[Sequence[Any]] = None
    ) -> pd.DataFrame:
        """
        Load a table into a pandas DataFrame.

        Args:
            table: Table name
            where: Optional WHERE clause
            params: Parameters for WHERE clause

        Returns:
            DataFrame with table data
        """
        sql = f"SELECT * FROM {table}"
        if where:
            sql += f" WHERE {where}"

        with self.transaction() as conn:
            return pd.read_sql_query(sql, conn, params=list(params or []))

    # =========================================================================
    # SETTINGS
    # =========================================================================

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get an app setting."""
        result = self.query(
            "SELECT value FROM app_settings WHERE key = ?",
            [key]
        )
        if result:
            try:
                return json.loads(result[0]["value"])
            except json.JSONDecodeError:
                return result[0]["value"]
        return default

    def set_setting(self, key: str, value: Any) -> None:
        """Set an app setting."""
        value_str = json.dumps(value) if not isinstance(value, str) else value
        self.execute(
            """
            INSERT OR REPLACE INTO app_settings (key, value, updated_at)
            VALUES (?, ?, ?)
            """,
            [key, value_str, utc_now_iso()]
        )

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
