# =============================================================================
# salon_core/repositories/customer_repository.py
# Customers
# =============================================================================

from __future__ import annotations
from typing import Any, Dict

from salon_core.models import Customer, Gender
from salon_core.repositories.base import EntityRepository, TableSpec, entity_index
from salon_core.repositories.mapping import (
    enum_name,
    from_flag,
    from_iso,
    parse_enum,
    require,
    to_flag,
    to_iso,
)

CUSTOMERS = TableSpec(
    table="customers",
    collection="customers",
    create_sql="""
        CREATE TABLE IF NOT EXISTS customers (
            id TEXT PRIMARY KEY,
            business_id TEXT NOT NULL,
            first_name TEXT NOT NULL DEFAULT '',
            last_name TEXT NOT NULL DEFAULT '',
            phone_number TEXT NOT NULL DEFAULT '',
            email TEXT NOT NULL DEFAULT '',
            birth_date TEXT NOT NULL DEFAULT '',
            gender TEXT NOT NULL DEFAULT 'OTHER',
            file_number TEXT NOT NULL DEFAULT '',
            notes TEXT NOT NULL DEFAULT '',
            is_deleted INTEGER NOT NULL DEFAULT 0,
            created_at TEXT,
            updated_at TEXT,
            needs_sync INTEGER NOT NULL DEFAULT 1
        )
    """,
    index_sql=entity_index("customers", "phone_number"),
    searchable=("first_name", "last_name", "phone_number"),
    order_by="first_name ASC",
    soft_delete=True,
)


def customer_to_row(customer: Customer) -> Dict[str, Any]:
    return {
        "id": customer.id,
        "business_id": customer.business_id,
        "first_name": customer.first_name,
        "last_name": customer.last_name,
        "phone_number": customer.phone_number,
        "email": customer.email,
        "birth_date": customer.birth_date,
        "gender": enum_name(customer.gender),
        "file_number": customer.file_number,
        "notes": customer.notes,
        "is_deleted": to_flag(customer.is_deleted),
        "created_at": to_iso(customer.created_at),
        "updated_at": to_iso(customer.updated_at),
    }


def customer_from_row(row: Dict[str, Any]) -> Customer:
    return Customer(
        id=row["id"],
        business_id=row["business_id"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        phone_number=row["phone_number"],
        email=row["email"],
        birth_date=row["birth_date"],
        gender=parse_enum(Gender, row["gender"], "gender", Gender.OTHER),
        file_number=row["file_number"],
        notes=row["notes"],
        is_deleted=from_flag(row["is_deleted"]),
        created_at=from_iso(row["created_at"], "created_at"),
        updated_at=from_iso(row["updated_at"], "updated_at"),
    )


def customer_to_document(customer: Customer) -> Dict[str, Any]:
    return {
        "id": customer.id,
        "businessId": customer.business_id,
        "firstName": customer.first_name,
        "lastName": customer.last_name,
        "phoneNumber": customer.phone_number,
        "email": customer.email,
        "birthDate": customer.birth_date,
        "gender": enum_name(customer.gender),
        "fileNumber": customer.file_number,
        "notes": customer.notes,
        "isDeleted": customer.is_deleted,
        "createdAt": to_iso(customer.created_at),
        "updatedAt": to_iso(customer.updated_at),
    }


def customer_from_document(document: Dict[str, Any]) -> Customer:
    return Customer(
        id=require(document, "id"),
        business_id=require(document, "businessId"),
        first_name=document.get("firstName") or "",
        last_name=document.get("lastName") or "",
        phone_number=document.get("phoneNumber") or "",
        email=document.get("email") or "",
        birth_date=document.get("birthDate") or "",
        gender=parse_enum(Gender, document.get("gender"), "gender", Gender.OTHER),
        file_number=document.get("fileNumber") or "",
        notes=document.get("notes") or "",
        is_deleted=bool(document.get("isDeleted", False)),
        created_at=from_iso(document.get("createdAt"), "createdAt"),
        updated_at=from_iso(document.get("updatedAt"), "updatedAt"),
    )


class CustomerRepository(EntityRepository[Customer]):
    """Customers of the signed-in business, ordered by first name."""

    spec = CUSTOMERS

    def _to_row(self, entity: Customer) -> Dict[str, Any]:
        return customer_to_row(entity)

    def _from_row(self, row: Dict[str, Any]) -> Customer:
        return customer_from_row(row)

    def _to_document(self, entity: Customer) -> Dict[str, Any]:
        return customer_to_document(entity)

    def _from_document(self, document: Dict[str, Any]) -> Customer:
        return customer_from_document(document)

    def _prepare_new(self, entity: Customer) -> Customer:
        if not entity.file_number:
            entity.file_number = Customer.generate_file_number(entity.created_at.year)
        return entity

    def phone_number_exists(self, phone_number: str, exclude_id: str = "") -> bool:
        """
        Whether another (non-deleted) customer of this tenant has the number.

        Args:
            phone_number: Number to check
            exclude_id: Customer id to ignore (the one being edited)
        """
        tenant_id = self._tenant_or_none()
        if tenant_id is None or not phone_number:
            return False

        scope, params = self._scope(tenant_id)
        return self.local_db.count(
            self.table,
            f"{scope} AND phone_number = ? AND id != ?",
            params + [phone_number, exclude_id],
        ) > 0
