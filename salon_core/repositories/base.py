# =============================================================================
# salon_core/repositories/base.py
# Dual-Store Repository: Local Replica First, Cloud When Online
# =============================================================================
"""
EntityRepository - generic offline-first repository.

Reads come only from the local SQLite replica. Writes land locally with
`needs_sync = 1`, then a best-effort push is attempted when online. sync()
pushes pending deletes and dirty rows, then pulls the tenant's remote
snapshot into the replica.

Concrete repositories provide a TableSpec and the four mapper functions
(entity <-> local row, entity <-> remote document).
"""

from __future__ import annotations
import logging
from abc import abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

import pandas as pd

from salon_core.auth.messages import get_message
from salon_core.errors import (
    AuthenticationError,
    EntityValidationError,
    NetworkUnavailableError,
    SalonCoreError,
    handle_error,
)
from salon_core.offline.live_query import LiveQuery
from salon_core.offline.sync_engine import SyncCoordinator, SyncState
from salon_core.repositories.mapping import from_iso, new_id, to_iso, utc_now
from salon_core.services.base_service import BaseService, OperationResult

E = TypeVar("E")

Row = Dict[str, Any]
Document = Dict[str, Any]


@dataclass(frozen=True)
class TableSpec:
    """Where an entity lives in both stores and how it is queried."""
    table: str                              # local SQLite table
    collection: str                         # remote collection
    create_sql: str
    index_sql: Tuple[str, ...] = ()
    searchable: Tuple[str, ...] = ()        # entity attributes matched by search()
    order_by: str = "created_at DESC"
    soft_delete: bool = False


def entity_index(table: str, *columns: str) -> Tuple[str, ...]:
    """CREATE INDEX statements for business_id plus the filter columns."""
    statements = [f"CREATE INDEX IF NOT EXISTS idx_{table}_business ON {table}(business_id)"]
    for column in columns:
        statements.append(f"CREATE INDEX IF NOT EXISTS idx_{table}_{column} ON {table}({column})")
    return tuple(statements)


class EntityRepository(BaseService, Generic[E]):
    """
    Offline-first repository for one entity type.

    Args:
        local_db: LocalDatabase replica
        remote_store: RemoteStore (None runs local-only)
        connection_manager: Online gate for every remote call
        tenant_context: Source of the current tenant id

    Usage:
        result = customers.add(Customer(first_name="Ada"))
        if result:
            customer = result.data
        customers.observe_all().subscribe(render)
    """

    spec: TableSpec

    def __init__(self, local_db, remote_store, connection_manager, tenant_context):
        super().__init__()
        self.local_db = local_db
        self.remote_store = remote_store
        self.connection_manager = connection_manager
        self.tenant_context = tenant_context
        self.sync_coordinator = SyncCoordinator(self.spec.collection)
        self.local_db.register_table(self.spec.table, self.spec.create_sql, self.spec.index_sql)

    # =========================================================================
    # MAPPERS
    # =========================================================================

    @abstractmethod
    def _to_row(self, entity: E) -> Row:
        """Entity -> local row (without needs_sync)."""

    @abstractmethod
    def _from_row(self, row: Row) -> E:
        """Local row -> entity."""

    @abstractmethod
    def _to_document(self, entity: E) -> Document:
        """Entity -> remote document."""

    @abstractmethod
    def _from_document(self, document: Document) -> E:
        """Remote document -> entity. Raises EntityValidationError."""

    def _prepare_new(self, entity: E) -> E:
        """Fill entity-specific defaults on add."""
        return entity

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def table(self) -> str:
        return self.spec.table

    @property
    def collection(self) -> str:
        return self.spec.collection

    @property
    def sync_state(self) -> SyncState:
        return self.sync_coordinator.state

    @property
    def _remote_available(self) -> bool:
        return self.remote_store is not None and self.connection_manager.is_online

    def _tenant_or_none(self) -> Optional[str]:
        try:
            return self.tenant_context.current_tenant_id()
        except AuthenticationError:
            return None

    def _scope(self, tenant_id: str) -> Tuple[str, List[Any]]:
        where = "business_id = ?"
        if self.spec.soft_delete:
            where += " AND is_deleted = 0"
        return where, [tenant_id]

    # =========================================================================
    # READ
    # =========================================================================

    def _select(
        self,
        where: Optional[str] = None,
        params: Sequence[Any] = (),
        order_by: Optional[str] = None,
    ) -> List[E]:
        tenant_id = self._tenant_or_none()
        if tenant_id is None:
            return []

        scope, scope_params = self._scope(tenant_id)
        if where:
            scope = f"{scope} AND {where}"
            scope_params.extend(params)

        rows = self.local_db.fetch_all(
            self.table,
            scope,
            scope_params,
            order_by=order_by or self.spec.order_by,
        )
        return [self._from_row(row) for row in rows]

    def _observe(
        self,
        name: str,
        where: Optional[str] = None,
        params: Sequence[Any] = (),
        order_by: Optional[str] = None,
    ) -> LiveQuery[List[E]]:
        params = list(params)
        return LiveQuery(
            self.local_db,
            self.table,
            lambda: self._select(where, params, order_by),
            name=f"{self.collection}.{name}",
            tenant_context=self.tenant_context,
        )

    def observe_all(self) -> LiveQuery[List[E]]:
        """Live list of the tenant's (non-deleted) records."""
        return self._observe("all")

    def observe_by_business(self, business_id: Optional[str] = None) -> LiveQuery[List[E]]:
        """Older call shape; `business_id` is ignored in favour of the session tenant."""
        return self.observe_all()

    def search(self, query: str) -> LiveQuery[List[E]]:
        """
        Live case-insensitive substring search over the searchable fields.

        A blank query behaves like observe_all().
        """
        needle = (query or "").strip().casefold()
        if not needle:
            return self.observe_all()

        fields = self.spec.searchable

        def matches(entity: E) -> bool:
            return any(needle in str(getattr(entity, f) or "").casefold() for f in fields)

        return LiveQuery(
            self.local_db,
            self.table,
            lambda: [e for e in self._select() if matches(e)],
            name=f"{self.collection}.search",
            tenant_context=self.tenant_context,
        )

    def get_by_id(self, record_id: str) -> Optional[E]:
        """The record, or None when missing, deleted, foreign or signed out."""
        tenant_id = self._tenant_or_none()
        if tenant_id is None or not record_id:
            return None

        scope, params = self._scope(tenant_id)
        row = self.local_db.fetch_one(self.table, f"id = ? AND {scope}", [record_id] + params)
        return self._from_row(row) if row else None

    def list_all(self) -> List[E]:
        """One-shot snapshot of observe_all()."""
        return self._select()

    def count(self) -> int:
        tenant_id = self._tenant_or_none()
        if tenant_id is None:
            return 0
        scope, params = self._scope(tenant_id)
        return self.local_db.count(self.table, scope, params)

    def pending_count(self) -> int:
        """Dirty rows plus deletes not yet confirmed remotely."""
        tenant_id = self._tenant_or_none()
        if tenant_id is None:
            return 0
        dirty = self.local_db.count(self.table, "business_id = ? AND needs_sync = 1", [tenant_id])
        return dirty + len(self.local_db.get_tombstones(self.table, tenant_id))

    def to_dataframe(self) -> pd.DataFrame:
        """Tenant records as a DataFrame (local columns, without needs_sync)."""
        tenant_id = self._tenant_or_none()
        if tenant_id is None:
            return pd.DataFrame()
        scope, params = self._scope(tenant_id)
        df = self.local_db.to_dataframe(self.table, scope, params)
        return df.drop(columns=["needs_sync"], errors="ignore")

    # =========================================================================
    # WRITE
    # =========================================================================

    def add(self, entity: E) -> OperationResult:
        """Insert locally (dirty) and push when online."""
        return self.safe_execute(f"Add {self.collection}", self._add, entity)

    def _add(self, entity: E) -> E:
        tenant_id = self.tenant_context.current_tenant_id()
        now = utc_now()
        entity = replace(
            entity,
            id=entity.id or new_id(),
            business_id=tenant_id,
            created_at=now,
            updated_at=now,
        )
        entity = self._prepare_new(entity)
        self._check_owner(entity.id)
        self._write_local(entity)
        self._push(entity, tenant_id)
        return entity

    def _check_owner(self, record_id: str) -> Optional[Row]:
        """The stored row for `record_id`; raises when another tenant owns it."""
        existing = self.local_db.fetch_one(self.table, "id = ?", [record_id])
        if existing is not None and not self.tenant_context.validate_access(existing["business_id"]):
            raise self.tenant_context.tenant_error(record_id, self.collection)
        return existing

    def update(self, entity: E) -> OperationResult:
        """Overwrite a record of the current tenant and push when online."""
        return self.safe_execute(f"Update {self.collection}", self._update, entity)

    def _update(self, entity: E) -> E:
        tenant_id = self.tenant_context.current_tenant_id()
        if entity.business_id != tenant_id:
            raise self.tenant_context.tenant_error(entity.id, self.collection)

        existing = self._check_owner(entity.id)

        created_at = entity.created_at
        if created_at is None:
            created_at = self._from_row(existing).created_at if existing else utc_now()

        entity = replace(entity, created_at=created_at, updated_at=utc_now())
        self._write_local(entity)
        self._push(entity, tenant_id)
        return entity

    def delete(self, record_id: str) -> OperationResult:
        """
        Hard-delete locally, leaving a tombstone until the remote delete
        is confirmed.
        """
        return self.safe_execute(f"Delete {self.collection}", self._delete, record_id)

    def _delete(self, record_id: str) -> str:
        tenant_id = self.tenant_context.current_tenant_id()
        row = self.local_db.fetch_one(
            self.table, "id = ? AND business_id = ?", [record_id, tenant_id]
        )
        if row is None:
            raise self.tenant_context.tenant_error(record_id, self.collection)

        with self.local_db.transaction():
            self.local_db.delete_where(self.table, "id = ?", [record_id])
            self.local_db.add_tombstone(self.table, record_id, tenant_id)

        self._push_delete(record_id)
        return record_id

    def _write_local(self, entity: E) -> None:
        row = self._to_row(entity)
        row["needs_sync"] = 1
        self.local_db.upsert(self.table, row)

    def _document_for(self, entity: E, tenant_id: str) -> Document:
        document = self._to_document(entity)
        document["lastModifiedBy"] = tenant_id
        return document

    def _push(self, entity: E, tenant_id: str) -> None:
        """Best-effort push; failures leave the row dirty for sync()."""
        if not self._remote_available:
            return
        try:
            self.remote_store.set_document(self.collection, self._document_for(entity, tenant_id))
            self.local_db.mark_synced(self.table, entity.id, to_iso(entity.updated_at))
        except Exception as e:
            self.logger.warning(f"Push of {self.collection}/{entity.id} failed, will retry on sync: {e}")

    def _push_delete(self, record_id: str) -> None:
        if not self._remote_available:
            return
        try:
            self.remote_store.delete_document(self.collection, record_id)
            self.local_db.clear_tombstone(self.table, record_id)
        except Exception as e:
            self.logger.warning(f"Remote delete of {self.collection}/{record_id} failed, will retry on sync: {e}")

    # =========================================================================
    # SYNC
    # =========================================================================

    def sync(self) -> OperationResult:
        """
        Push pending deletes and dirty rows, then pull the tenant snapshot.

        Returns:
            OperationResult whose metadata holds pushed, push_failed, deleted,
            pulled and removed counts
        """
        return self.sync_coordinator.run(self._sync_pass)

    def _sync_pass(self) -> OperationResult:
        try:
            if not self._remote_available:
                raise NetworkUnavailableError(get_message("offline", self.tenant_context.locale))
            tenant_id = self.tenant_context.current_tenant_id()

            counts = {"pushed": 0, "push_failed": 0, "deleted": 0, "pulled": 0, "removed": 0}
            with self.log_operation(f"Syncing {self.collection}"):
                self._push_tombstones(tenant_id, counts)
                self._push_dirty(tenant_id, counts)
                self._pull(tenant_id, counts)
                self.local_db.set_setting(self._last_sync_key(tenant_id), to_iso(utc_now()))

            self.logger.info(
                f"{self.collection}: pushed {counts['pushed']} "
                f"(failed {counts['push_failed']}), deleted {counts['deleted']}, "
                f"pulled {counts['pulled']}, removed {counts['removed']}"
            )
            return OperationResult.ok(metadata=counts)

        except SalonCoreError as e:
            handle_error(e, level=logging.WARNING)
            return OperationResult.from_exception(e)

    def _last_sync_key(self, tenant_id: str) -> str:
        return f"last_sync:{tenant_id}:{self.collection}"

    def last_synced_at(self) -> Optional[datetime]:
        """When the signed-in tenant last completed a sync of this collection."""
        tenant_id = self._tenant_or_none()
        if tenant_id is None:
            return None
        return from_iso(self.local_db.get_setting(self._last_sync_key(tenant_id)))

    def _push_tombstones(self, tenant_id: str, counts: Dict[str, int]) -> None:
        for tombstone in self.local_db.get_tombstones(self.table, tenant_id):
            record_id = tombstone["record_id"]
            try:
                self.remote_store.delete_document(self.collection, record_id)
                self.local_db.clear_tombstone(self.table, record_id)
                counts["deleted"] += 1
            except Exception as e:
                self.logger.warning(f"Remote delete of {self.collection}/{record_id} failed: {e}")
                counts["push_failed"] += 1

    def _push_dirty(self, tenant_id: str, counts: Dict[str, int]) -> None:
        for row in self.local_db.get_dirty(self.table, tenant_id):
            try:
                entity = self._from_row(row)
                self.remote_store.set_document(self.collection, self._document_for(entity, tenant_id))
                self.local_db.mark_synced(self.table, row["id"], row["updated_at"])
                counts["pushed"] += 1
            except Exception as e:
                self.logger.warning(f"Push of {self.collection}/{row['id']} failed: {e}")
                counts["push_failed"] += 1

    def _pull(self, tenant_id: str, counts: Dict[str, int]) -> None:
        documents = self.remote_store.query_by_tenant(self.collection, tenant_id)

        with self.local_db.transaction():
            skip = self.local_db.tombstoned_ids(self.table, tenant_id)
            skip |= {row["id"] for row in self.local_db.get_dirty(self.table, tenant_id)}

            remote_ids = set()
            rows: List[Row] = []
            for document in documents:
                if document.get("businessId") != tenant_id:
                    continue
                remote_ids.add(document.get("id"))
                try:
                    entity = self._from_document(document)
                except EntityValidationError as e:
                    self.logger.warning(f"Skipping unmappable {self.collection} document {document.get('id')}: {e}")
                    continue
                if entity.id in skip:
                    continue
                row = self._to_row(entity)
                row["needs_sync"] = 0
                rows.append(row)

            self.local_db.upsert_many(self.table, rows)

            clean = self.local_db.query(
                f"SELECT id FROM {self.table} WHERE business_id = ? AND needs_sync = 0",
                [tenant_id],
            )
            stale = [row["id"] for row in clean if row["id"] not in remote_ids]
            for record_id in stale:
                self.local_db.delete_where(self.table, "id = ?", [record_id])

        counts["pulled"] += len(rows)
        counts["removed"] += len(stale)
