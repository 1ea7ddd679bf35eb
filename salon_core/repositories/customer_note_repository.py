# =============================================================================
# salon_core/repositories/customer_note_repository.py
# Customer Notes
# =============================================================================

from __future__ import annotations
from typing import Any, Dict, List

from salon_core.models import CustomerNote
from salon_core.offline.live_query import LiveQuery
from salon_core.repositories.base import EntityRepository, TableSpec, entity_index
from salon_core.repositories.mapping import from_flag, from_iso, require, to_flag, to_iso

CUSTOMER_NOTES = TableSpec(
    table="customer_notes",
    collection="customer_notes",
    create_sql="""
        CREATE TABLE IF NOT EXISTS customer_notes (
            id TEXT PRIMARY KEY,
            business_id TEXT NOT NULL,
            customer_id TEXT NOT NULL DEFAULT '',
            customer_name TEXT NOT NULL DEFAULT '',
            customer_phone TEXT NOT NULL DEFAULT '',
            title TEXT NOT NULL DEFAULT '',
            content TEXT NOT NULL DEFAULT '',
            is_important INTEGER NOT NULL DEFAULT 0,
            created_at TEXT,
            updated_at TEXT,
            needs_sync INTEGER NOT NULL DEFAULT 1
        )
    """,
    index_sql=entity_index("customer_notes", "customer_id"),
    searchable=("customer_name", "customer_phone", "title", "content"),
)


def customer_note_to_row(note: CustomerNote) -> Dict[str, Any]:
    return {
        "id": note.id,
        "business_id": note.business_id,
        "customer_id": note.customer_id,
        "customer_name": note.customer_name,
        "customer_phone": note.customer_phone,
        "title": note.title,
        "content": note.content,
        "is_important": to_flag(note.is_important),
        "created_at": to_iso(note.created_at),
        "updated_at": to_iso(note.updated_at),
    }


def customer_note_from_row(row: Dict[str, Any]) -> CustomerNote:
    return CustomerNote(
        id=row["id"],
        business_id=row["business_id"],
        customer_id=row["customer_id"],
        customer_name=row["customer_name"],
        customer_phone=row["customer_phone"],
        title=row["title"],
        content=row["content"],
        is_important=from_flag(row["is_important"]),
        created_at=from_iso(row["created_at"], "created_at"),
        updated_at=from_iso(row["updated_at"], "updated_at"),
    )


def customer_note_to_document(note: CustomerNote) -> Dict[str, Any]:
    return {
        "id": note.id,
        "businessId": note.business_id,
        "customerId": note.customer_id,
        "customerName": note.customer_name,
        "customerPhone": note.customer_phone,
        "title": note.title,
        "content": note.content,
        "isImportant": note.is_important,
        "createdAt": to_iso(note.created_at),
        "updatedAt": to_iso(note.updated_at),
    }


def customer_note_from_document(document: Dict[str, Any]) -> CustomerNote:
    return CustomerNote(
        id=require(document, "id"),
        business_id=require(document, "businessId"),
        customer_id=document.get("customerId") or "",
        customer_name=document.get("customerName") or "",
        customer_phone=document.get("customerPhone") or "",
        title=document.get("title") or "",
        content=document.get("content") or "",
        is_important=bool(document.get("isImportant", False)),
        created_at=from_iso(document.get("createdAt"), "createdAt"),
        updated_at=from_iso(document.get("updatedAt"), "updatedAt"),
    )


class CustomerNoteRepository(EntityRepository[CustomerNote]):
    spec = CUSTOMER_NOTES

    def _to_row(self, entity: CustomerNote) -> Dict[str, Any]:
        return customer_note_to_row(entity)

    def _from_row(self, row: Dict[str, Any]) -> CustomerNote:
        return customer_note_from_row(row)

    def _to_document(self, entity: CustomerNote) -> Dict[str, Any]:
        return customer_note_to_document(entity)

    def _from_document(self, document: Dict[str, Any]) -> CustomerNote:
        return customer_note_from_document(document)

    def observe_by_customer(self, customer_id: str) -> LiveQuery[List[CustomerNote]]:
        """Notes of one customer, important ones first."""
        return self._observe(
            "by_customer",
            "customer_id = ?",
            [customer_id],
            order_by="is_important DESC, created_at DESC",
        )
