# =============================================================================
# salon_core/repositories/transaction_repository.py
# Income / Expense Ledger
# =============================================================================

from __future__ import annotations
from typing import Any, Dict, List

from salon_core.models import Transaction, TransactionCategory, TransactionType
from salon_core.offline.live_query import LiveQuery
from salon_core.repositories.base import EntityRepository, TableSpec, entity_index
from salon_core.repositories.mapping import (
    as_float,
    enum_name,
    from_iso,
    parse_enum,
    require,
    to_iso,
)

TRANSACTIONS = TableSpec(
    table="transactions",
    collection="transactions",
    create_sql="""
        CREATE TABLE IF NOT EXISTS transactions (
            id TEXT PRIMARY KEY,
            business_id TEXT NOT NULL,
            payment_id TEXT,
            appointment_id TEXT,
            customer_id TEXT,
            type TEXT NOT NULL,
            category TEXT NOT NULL,
            amount REAL NOT NULL DEFAULT 0,
            description TEXT NOT NULL DEFAULT '',
            reference TEXT NOT NULL DEFAULT '',
            created_at TEXT,
            updated_at TEXT,
            needs_sync INTEGER NOT NULL DEFAULT 1
        )
    """,
    index_sql=entity_index("transactions", "payment_id", "type"),
    searchable=("description", "reference"),
)


def transaction_to_row(transaction: Transaction) -> Dict[str, Any]:
    return {
        "id": transaction.id,
        "business_id": transaction.business_id,
        "payment_id": transaction.payment_id,
        "appointment_id": transaction.appointment_id,
        "customer_id": transaction.customer_id,
        "type": enum_name(transaction.type),
        "category": enum_name(transaction.category),
        "amount": transaction.amount,
        "description": transaction.description,
        "reference": transaction.reference,
        "created_at": to_iso(transaction.created_at),
        "updated_at": to_iso(transaction.updated_at),
    }


def transaction_from_row(row: Dict[str, Any]) -> Transaction:
    return Transaction(
        id=row["id"],
        business_id=row["business_id"],
        payment_id=row["payment_id"],
        appointment_id=row["appointment_id"],
        customer_id=row["customer_id"],
        type=parse_enum(TransactionType, row["type"], "type"),
        category=parse_enum(TransactionCategory, row["category"], "category"),
        amount=row["amount"],
        description=row["description"],
        reference=row["reference"],
        created_at=from_iso(row["created_at"], "created_at"),
        updated_at=from_iso(row["updated_at"], "updated_at"),
    )


def transaction_to_document(transaction: Transaction) -> Dict[str, Any]:
    return {
        "id": transaction.id,
        "businessId": transaction.business_id,
        "paymentId": transaction.payment_id,
        "appointmentId": transaction.appointment_id,
        "customerId": transaction.customer_id,
        "type": enum_name(transaction.type),
        "category": enum_name(transaction.category),
        "amount": transaction.amount,
        "description": transaction.description,
        "reference": transaction.reference,
        "createdAt": to_iso(transaction.created_at),
        "updatedAt": to_iso(transaction.updated_at),
    }


def transaction_from_document(document: Dict[str, Any]) -> Transaction:
    return Transaction(
        id=require(document, "id"),
        business_id=require(document, "businessId"),
        payment_id=document.get("paymentId") or None,
        appointment_id=document.get("appointmentId") or None,
        customer_id=document.get("customerId") or None,
        type=parse_enum(TransactionType, document.get("type"), "type"),
        category=parse_enum(TransactionCategory, document.get("category"), "category", TransactionCategory.OTHER),
        amount=as_float(document.get("amount"), "amount"),
        description=document.get("description") or "",
        reference=document.get("reference") or "",
        created_at=from_iso(document.get("createdAt"), "createdAt"),
        updated_at=from_iso(document.get("updatedAt"), "updatedAt"),
    )


class TransactionRepository(EntityRepository[Transaction]):
    spec = TRANSACTIONS

    def _to_row(self, entity: Transaction) -> Dict[str, Any]:
        return transaction_to_row(entity)

    def _from_row(self, row: Dict[str, Any]) -> Transaction:
        return transaction_from_row(row)

    def _to_document(self, entity: Transaction) -> Dict[str, Any]:
        return transaction_to_document(entity)

    def _from_document(self, document: Dict[str, Any]) -> Transaction:
        return transaction_from_document(document)

    def observe_by_payment(self, payment_id: str) -> LiveQuery[List[Transaction]]:
        return self._observe("by_payment", "payment_id = ?", [payment_id])

    def observe_by_type(self, transaction_type: TransactionType) -> LiveQuery[List[Transaction]]:
        return self._observe("by_type", "type = ?", [transaction_type.value])
