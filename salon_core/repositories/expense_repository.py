# =============================================================================
# salon_core/repositories/expense_repository.py
# Business Expenses
# =============================================================================

from __future__ import annotations
from typing import Any, Dict, List

from salon_core.models import Expense, ExpenseCategory
from salon_core.offline.live_query import LiveQuery
from salon_core.repositories.base import EntityRepository, TableSpec, entity_index
from salon_core.repositories.mapping import (
    as_float,
    enum_name,
    from_flag,
    from_iso,
    parse_enum,
    require,
    to_flag,
    to_iso,
)

EXPENSES = TableSpec(
    table="expenses",
    collection="expenses",
    create_sql="""
        CREATE TABLE IF NOT EXISTS expenses (
            id TEXT PRIMARY KEY,
            business_id TEXT NOT NULL,
            category TEXT NOT NULL,
            subcategory TEXT NOT NULL DEFAULT '',
            amount REAL NOT NULL DEFAULT 0,
            description TEXT NOT NULL DEFAULT '',
            expense_date TEXT NOT NULL DEFAULT '',
            notes TEXT NOT NULL DEFAULT '',
            is_deleted INTEGER NOT NULL DEFAULT 0,
            created_at TEXT,
            updated_at TEXT,
            needs_sync INTEGER NOT NULL DEFAULT 1
        )
    """,
    index_sql=entity_index("expenses", "category"),
    searchable=("description", "subcategory", "notes"),
    soft_delete=True,
)


def expense_to_row(expense: Expense) -> Dict[str, Any]:
    return {
        "id": expense.id,
        "business_id": expense.business_id,
        "category": enum_name(expense.category),
        "subcategory": expense.subcategory,
        "amount": expense.amount,
        "description": expense.description,
        "expense_date": expense.expense_date,
        "notes": expense.notes,
        "is_deleted": to_flag(expense.is_deleted),
        "created_at": to_iso(expense.created_at),
        "updated_at": to_iso(expense.updated_at),
    }


def expense_from_row(row: Dict[str, Any]) -> Expense:
    return Expense(
        id=row["id"],
        business_id=row["business_id"],
        category=parse_enum(ExpenseCategory, row["category"], "category"),
        subcategory=row["subcategory"],
        amount=row["amount"],
        description=row["description"],
        expense_date=row["expense_date"],
        notes=row["notes"],
        is_deleted=from_flag(row["is_deleted"]),
        created_at=from_iso(row["created_at"], "created_at"),
        updated_at=from_iso(row["updated_at"], "updated_at"),
    )


def expense_to_document(expense: Expense) -> Dict[str, Any]:
    return {
        "id": expense.id,
        "businessId": expense.business_id,
        "category": enum_name(expense.category),
        "subcategory": expense.subcategory,
        "amount": expense.amount,
        "description": expense.description,
        "expenseDate": expense.expense_date,
        "notes": expense.notes,
        "isDeleted": expense.is_deleted,
        "createdAt": to_iso(expense.created_at),
        "updatedAt": to_iso(expense.updated_at),
    }


def expense_from_document(document: Dict[str, Any]) -> Expense:
    return Expense(
        id=require(document, "id"),
        business_id=require(document, "businessId"),
        category=parse_enum(ExpenseCategory, document.get("category"), "category"),
        subcategory=document.get("subcategory") or "",
        amount=as_float(document.get("amount"), "amount"),
        description=document.get("description") or "",
        expense_date=document.get("expenseDate") or "",
        notes=document.get("notes") or "",
        is_deleted=bool(document.get("isDeleted", False)),
        created_at=from_iso(document.get("createdAt"), "createdAt"),
        updated_at=from_iso(document.get("updatedAt"), "updatedAt"),
    )


class ExpenseRepository(EntityRepository[Expense]):
    """Expenses of the signed-in business, newest first."""

    spec = EXPENSES

    def _to_row(self, entity: Expense) -> Dict[str, Any]:
        return expense_to_row(entity)

    def _from_row(self, row: Dict[str, Any]) -> Expense:
        return expense_from_row(row)

    def _to_document(self, entity: Expense) -> Dict[str, Any]:
        return expense_to_document(entity)

    def _from_document(self, document: Dict[str, Any]) -> Expense:
        return expense_from_document(document)

    def observe_by_category(self, category: ExpenseCategory) -> LiveQuery[List[Expense]]:
        return self._observe("by_category", "category = ?", [category.value])

    def total_amount(self) -> float:
        """Sum of all non-deleted expense amounts."""
        tenant_id = self._tenant_or_none()
        if tenant_id is None:
            return 0.0
        where, params = self._scope(tenant_id)
        result = self.local_db.query(
            f"SELECT COALESCE(SUM(amount), 0) AS total FROM {self.table} WHERE {where}",
            params,
        )
        return float(result[0]["total"])
