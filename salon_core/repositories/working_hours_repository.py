# =============================================================================
# salon_core/repositories/working_hours_repository.py
# Weekly Opening Hours (one record per tenant)
# =============================================================================

from __future__ import annotations
from typing import Any, Dict

from salon_core.errors import EntityValidationError
from salon_core.models import DayHours, DayOfWeek, WorkingHours
from salon_core.repositories.base import EntityRepository, TableSpec, entity_index
from salon_core.repositories.mapping import dumps, from_iso, loads, require, to_iso
from salon_core.services.base_service import OperationResult

WORKING_HOURS = TableSpec(
    table="working_hours",
    collection="working_hours",
    create_sql="""
        CREATE TABLE IF NOT EXISTS working_hours (
            id TEXT PRIMARY KEY,
            business_id TEXT NOT NULL,
            days TEXT NOT NULL,
            created_at TEXT,
            updated_at TEXT,
            needs_sync INTEGER NOT NULL DEFAULT 1
        )
    """,
    index_sql=entity_index("working_hours"),
)


def _day_to_map(hours: DayHours) -> Dict[str, Any]:
    return {
        "isWorking": hours.is_working,
        "startTime": hours.start_time,
        "endTime": hours.end_time,
    }


def _day_from_map(data: Any, day: DayOfWeek) -> DayHours:
    if not isinstance(data, dict):
        return WorkingHours().get_day_hours(day)
    return DayHours(
        is_working=bool(data.get("isWorking", True)),
        start_time=data.get("startTime") or "09:00",
        end_time=data.get("endTime") or "19:00",
    )


def working_hours_to_row(hours: WorkingHours) -> Dict[str, Any]:
    return {
        "id": hours.id,
        "business_id": hours.business_id,
        "days": dumps({day.value: _day_to_map(h) for day, h in hours.days.items()}),
        "created_at": to_iso(hours.created_at),
        "updated_at": to_iso(hours.updated_at),
    }


def working_hours_from_row(row: Dict[str, Any]) -> WorkingHours:
    days = loads(row["days"], "days") or {}
    return WorkingHours(
        id=row["id"],
        business_id=row["business_id"],
        created_at=from_iso(row["created_at"], "created_at"),
        updated_at=from_iso(row["updated_at"], "updated_at"),
        **{day.value: _day_from_map(days.get(day.value), day) for day in DayOfWeek},
    )


def working_hours_to_document(hours: WorkingHours) -> Dict[str, Any]:
    document = {
        "id": hours.id,
        "businessId": hours.business_id,
        "createdAt": to_iso(hours.created_at),
        "updatedAt": to_iso(hours.updated_at),
    }
    for day, day_hours in hours.days.items():
        document[day.value] = _day_to_map(day_hours)
    return document


def working_hours_from_document(document: Dict[str, Any]) -> WorkingHours:
    return WorkingHours(
        id=require(document, "id"),
        business_id=require(document, "businessId"),
        created_at=from_iso(document.get("createdAt"), "createdAt"),
        updated_at=from_iso(document.get("updatedAt"), "updatedAt"),
        **{day.value: _day_from_map(document.get(day.value), day) for day in DayOfWeek},
    )


class WorkingHoursRepository(EntityRepository[WorkingHours]):
    """
    Opening hours of the signed-in business.

    The record id is the tenant id, so every device of a business creates
    and edits the same document.
    """

    spec = WORKING_HOURS

    def _to_row(self, entity: WorkingHours) -> Dict[str, Any]:
        return working_hours_to_row(entity)

    def _from_row(self, row: Dict[str, Any]) -> WorkingHours:
        return working_hours_from_row(row)

    def _to_document(self, entity: WorkingHours) -> Dict[str, Any]:
        return working_hours_to_document(entity)

    def _from_document(self, document: Dict[str, Any]) -> WorkingHours:
        return working_hours_from_document(document)

    def _prepare_new(self, entity: WorkingHours) -> WorkingHours:
        entity.id = entity.business_id
        return entity

    def get_or_create_default(self) -> OperationResult:
        """The tenant's hours, creating the default week if none exist."""
        return self.safe_execute("Load working hours", self._get_or_create_default)

    def _get_or_create_default(self) -> WorkingHours:
        tenant_id = self.tenant_context.current_tenant_id()
        existing = self.get_by_id(tenant_id)
        if existing is not None:
            return existing
        self.logger.info("No working hours yet, creating defaults")
        return self._add(WorkingHours(id=tenant_id))

    def update_day(self, day: DayOfWeek, day_hours: DayHours) -> OperationResult:
        """Replace the hours of one weekday."""
        return self.safe_execute("Update working day", self._update_day, day, day_hours)

    def _update_day(self, day: DayOfWeek, day_hours: DayHours) -> WorkingHours:
        if not day_hours.is_valid_time_range():
            raise EntityValidationError(
                f"End time must be after start time for {day.value}",
                field=day.value,
                expected="start_time < end_time",
                actual=f"{day_hours.start_time}-{day_hours.end_time}",
            )
        current = self._get_or_create_default()
        return self._update(current.with_day(day, day_hours))
