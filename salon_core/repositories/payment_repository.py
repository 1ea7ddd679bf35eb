# =============================================================================
# salon_core/repositories/payment_repository.py
# Payments for Appointments
# =============================================================================

from __future__ import annotations
from typing import Any, Dict, List

from salon_core.models import Payment, PaymentMethod, PaymentStatus
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

PAYMENTS = TableSpec(
    table="payments",
    collection="payments",
    create_sql="""
        CREATE TABLE IF NOT EXISTS payments (
            id TEXT PRIMARY KEY,
            business_id TEXT NOT NULL,
            appointment_id TEXT NOT NULL DEFAULT '',
            customer_id TEXT NOT NULL DEFAULT '',
            customer_name TEXT NOT NULL DEFAULT '',
            service_name TEXT NOT NULL DEFAULT '',
            amount REAL NOT NULL DEFAULT 0,
            payment_method TEXT NOT NULL DEFAULT 'CASH',
            status TEXT NOT NULL DEFAULT 'PENDING',
            notes TEXT NOT NULL DEFAULT '',
            created_at TEXT,
            updated_at TEXT,
            needs_sync INTEGER NOT NULL DEFAULT 1
        )
    """,
    index_sql=entity_index("payments", "appointment_id", "status"),
    searchable=("customer_name", "service_name"),
)


def payment_to_row(payment: Payment) -> Dict[str, Any]:
    return {
        "id": payment.id,
        "business_id": payment.business_id,
        "appointment_id": payment.appointment_id,
        "customer_id": payment.customer_id,
        "customer_name": payment.customer_name,
        "service_name": payment.service_name,
        "amount": payment.amount,
        "payment_method": enum_name(payment.payment_method),
        "status": enum_name(payment.status),
        "notes": payment.notes,
        "created_at": to_iso(payment.created_at),
        "updated_at": to_iso(payment.updated_at),
    }


def payment_from_row(row: Dict[str, Any]) -> Payment:
    return Payment(
        id=row["id"],
        business_id=row["business_id"],
        appointment_id=row["appointment_id"],
        customer_id=row["customer_id"],
        customer_name=row["customer_name"],
        service_name=row["service_name"],
        amount=row["amount"],
        payment_method=parse_enum(PaymentMethod, row["payment_method"], "payment_method"),
        status=parse_enum(PaymentStatus, row["status"], "status"),
        notes=row["notes"],
        created_at=from_iso(row["created_at"], "created_at"),
        updated_at=from_iso(row["updated_at"], "updated_at"),
    )


def payment_to_document(payment: Payment) -> Dict[str, Any]:
    return {
        "id": payment.id,
        "businessId": payment.business_id,
        "appointmentId": payment.appointment_id,
        "customerId": payment.customer_id,
        "customerName": payment.customer_name,
        "serviceName": payment.service_name,
        "amount": payment.amount,
        "paymentMethod": enum_name(payment.payment_method),
        "status": enum_name(payment.status),
        "notes": payment.notes,
        "createdAt": to_iso(payment.created_at),
        "updatedAt": to_iso(payment.updated_at),
    }


def payment_from_document(document: Dict[str, Any]) -> Payment:
    return Payment(
        id=require(document, "id"),
        business_id=require(document, "businessId"),
        appointment_id=document.get("appointmentId") or "",
        customer_id=document.get("customerId") or "",
        customer_name=document.get("customerName") or "",
        service_name=document.get("serviceName") or "",
        amount=as_float(document.get("amount"), "amount"),
        payment_method=parse_enum(PaymentMethod, document.get("paymentMethod"), "paymentMethod", PaymentMethod.CASH),
        status=parse_enum(PaymentStatus, document.get("status"), "status", PaymentStatus.PENDING),
        notes=document.get("notes") or "",
        created_at=from_iso(document.get("createdAt"), "createdAt"),
        updated_at=from_iso(document.get("updatedAt"), "updatedAt"),
    )


class PaymentRepository(EntityRepository[Payment]):
    spec = PAYMENTS

    def _to_row(self, entity: Payment) -> Dict[str, Any]:
        return payment_to_row(entity)

    def _from_row(self, row: Dict[str, Any]) -> Payment:
        return payment_from_row(row)

    def _to_document(self, entity: Payment) -> Dict[str, Any]:
        return payment_to_document(entity)

    def _from_document(self, document: Dict[str, Any]) -> Payment:
        return payment_from_document(document)

    def observe_by_appointment(self, appointment_id: str) -> LiveQuery[List[Payment]]:
        return self._observe("by_appointment", "appointment_id = ?", [appointment_id])

    def observe_by_status(self, status: PaymentStatus) -> LiveQuery[List[Payment]]:
        return self._observe("by_status", "status = ?", [status.value])
