# =============================================================================
# salon_core/repositories/appointment_repository.py
# Appointments
# =============================================================================

from __future__ import annotations
from dataclasses import replace
from typing import Any, Dict, List

from salon_core.models import Appointment, AppointmentStatus
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
from salon_core.services.base_service import OperationResult

APPOINTMENTS = TableSpec(
    table="appointments",
    collection="appointments",
    create_sql="""
        CREATE TABLE IF NOT EXISTS appointments (
            id TEXT PRIMARY KEY,
            business_id TEXT NOT NULL,
            customer_id TEXT NOT NULL DEFAULT '',
            customer_name TEXT NOT NULL DEFAULT '',
            customer_phone TEXT NOT NULL DEFAULT '',
            service_id TEXT,
            service_name TEXT NOT NULL DEFAULT '',
            service_price REAL NOT NULL DEFAULT 0,
            appointment_date TEXT NOT NULL DEFAULT '',
            appointment_time TEXT NOT NULL DEFAULT '',
            status TEXT NOT NULL DEFAULT 'SCHEDULED',
            notes TEXT NOT NULL DEFAULT '',
            is_deleted INTEGER NOT NULL DEFAULT 0,
            created_at TEXT,
            updated_at TEXT,
            needs_sync INTEGER NOT NULL DEFAULT 1
        )
    """,
    index_sql=entity_index("appointments", "status", "customer_id", "appointment_date"),
    searchable=("customer_name", "customer_phone", "service_name", "notes"),
    soft_delete=True,
)


def appointment_to_row(appointment: Appointment) -> Dict[str, Any]:
    return {
        "id": appointment.id,
        "business_id": appointment.business_id,
        "customer_id": appointment.customer_id,
        "customer_name": appointment.customer_name,
        "customer_phone": appointment.customer_phone,
        "service_id": appointment.service_id,
        "service_name": appointment.service_name,
        "service_price": appointment.service_price,
        "appointment_date": appointment.appointment_date,
        "appointment_time": appointment.appointment_time,
        "status": enum_name(appointment.status),
        "notes": appointment.notes,
        "is_deleted": to_flag(appointment.is_deleted),
        "created_at": to_iso(appointment.created_at),
        "updated_at": to_iso(appointment.updated_at),
    }


def appointment_from_row(row: Dict[str, Any]) -> Appointment:
    return Appointment(
        id=row["id"],
        business_id=row["business_id"],
        customer_id=row["customer_id"],
        customer_name=row["customer_name"],
        customer_phone=row["customer_phone"],
        service_id=row["service_id"],
        service_name=row["service_name"],
        service_price=row["service_price"],
        appointment_date=row["appointment_date"],
        appointment_time=row["appointment_time"],
        status=parse_enum(AppointmentStatus, row["status"], "status"),
        notes=row["notes"],
        is_deleted=from_flag(row["is_deleted"]),
        created_at=from_iso(row["created_at"], "created_at"),
        updated_at=from_iso(row["updated_at"], "updated_at"),
    )


def appointment_to_document(appointment: Appointment) -> Dict[str, Any]:
    return {
        "id": appointment.id,
        "businessId": appointment.business_id,
        "customerId": appointment.customer_id,
        "customerName": appointment.customer_name,
        "customerPhone": appointment.customer_phone,
        "serviceId": appointment.service_id,
        "serviceName": appointment.service_name,
        "servicePrice": appointment.service_price,
        "appointmentDate": appointment.appointment_date,
        "appointmentTime": appointment.appointment_time,
        "status": enum_name(appointment.status),
        "notes": appointment.notes,
        "isDeleted": appointment.is_deleted,
        "createdAt": to_iso(appointment.created_at),
        "updatedAt": to_iso(appointment.updated_at),
    }


def appointment_from_document(document: Dict[str, Any]) -> Appointment:
    return Appointment(
        id=require(document, "id"),
        business_id=require(document, "businessId"),
        customer_id=document.get("customerId") or "",
        customer_name=document.get("customerName") or "",
        customer_phone=document.get("customerPhone") or "",
        service_id=document.get("serviceId") or None,
        service_name=document.get("serviceName") or "",
        service_price=as_float(document.get("servicePrice"), "servicePrice"),
        appointment_date=document.get("appointmentDate") or "",
        appointment_time=document.get("appointmentTime") or "",
        status=parse_enum(AppointmentStatus, document.get("status"), "status", AppointmentStatus.SCHEDULED),
        notes=document.get("notes") or "",
        is_deleted=bool(document.get("isDeleted", False)),
        created_at=from_iso(document.get("createdAt"), "createdAt"),
        updated_at=from_iso(document.get("updatedAt"), "updatedAt"),
    )


class AppointmentRepository(EntityRepository[Appointment]):
    """Appointments of the signed-in business."""

    spec = APPOINTMENTS

    def _to_row(self, entity: Appointment) -> Dict[str, Any]:
        return appointment_to_row(entity)

    def _from_row(self, row: Dict[str, Any]) -> Appointment:
        return appointment_from_row(row)

    def _to_document(self, entity: Appointment) -> Dict[str, Any]:
        return appointment_to_document(entity)

    def _from_document(self, document: Dict[str, Any]) -> Appointment:
        return appointment_from_document(document)

    def observe_by_customer(self, customer_id: str) -> LiveQuery[List[Appointment]]:
        return self._observe("by_customer", "customer_id = ?", [customer_id])

    def observe_by_date(self, appointment_date: str) -> LiveQuery[List[Appointment]]:
        """Appointments on a dd/MM/yyyy day, earliest first."""
        return self._observe(
            "by_date",
            "appointment_date = ?",
            [appointment_date],
            order_by="appointment_time ASC",
        )

    def observe_by_status(self, status: AppointmentStatus) -> LiveQuery[List[Appointment]]:
        return self._observe("by_status", "status = ?", [status.value])

    def update_status(self, appointment_id: str, status: AppointmentStatus) -> OperationResult:
        """Change only the status of an appointment."""
        return self.safe_execute(
            "Update appointment status", self._update_status, appointment_id, status
        )

    def _update_status(self, appointment_id: str, status: AppointmentStatus) -> Appointment:
        self.tenant_context.current_tenant_id()
        appointment = self.get_by_id(appointment_id)
        if appointment is None:
            raise self.tenant_context.tenant_error(appointment_id, self.collection)
        return self._update(replace(appointment, status=status))
