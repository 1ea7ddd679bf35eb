# =============================================================================
# salon_core/repositories/service_repository.py
# Salon Services and Bulk Price Updates
# =============================================================================

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from salon_core.errors import EntityValidationError
from salon_core.models import Service, ServiceCategory
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
    utc_now,
)
from salon_core.services.base_service import OperationResult

SERVICES = TableSpec(
    table="services",
    collection="services",
    create_sql="""
        CREATE TABLE IF NOT EXISTS services (
            id TEXT PRIMARY KEY,
            business_id TEXT NOT NULL,
            name TEXT NOT NULL DEFAULT '',
            price REAL NOT NULL DEFAULT 0,
            category TEXT NOT NULL,
            subcategory TEXT,
            description TEXT NOT NULL DEFAULT '',
            is_active INTEGER NOT NULL DEFAULT 1,
            is_deleted INTEGER NOT NULL DEFAULT 0,
            created_at TEXT,
            updated_at TEXT,
            needs_sync INTEGER NOT NULL DEFAULT 1
        )
    """,
    index_sql=entity_index("services", "category"),
    searchable=("name", "description"),
    order_by="name ASC",
    soft_delete=True,
)


class PriceUpdateType(Enum):
    """How bulk_update_prices changes each matched price."""
    PERCENTAGE_INCREASE = "PERCENTAGE_INCREASE"
    PERCENTAGE_DECREASE = "PERCENTAGE_DECREASE"
    FIXED_AMOUNT_ADD = "FIXED_AMOUNT_ADD"
    FIXED_AMOUNT_SUBTRACT = "FIXED_AMOUNT_SUBTRACT"
    SET_EXACT_PRICE = "SET_EXACT_PRICE"
    ROUND_PRICES = "ROUND_PRICES"


# SQL expression for the new price; ROUND rounds halves away from zero (525 -> 550)
PRICE_EXPRESSIONS = {
    PriceUpdateType.PERCENTAGE_INCREASE: "price * (1 + ? / 100.0)",
    PriceUpdateType.PERCENTAGE_DECREASE: "price * (1 - ? / 100.0)",
    PriceUpdateType.FIXED_AMOUNT_ADD: "price + ?",
    PriceUpdateType.FIXED_AMOUNT_SUBTRACT: "price - ?",
    PriceUpdateType.SET_EXACT_PRICE: "?",
    PriceUpdateType.ROUND_PRICES: "ROUND(price / 50.0) * 50.0",
}


def service_to_row(service: Service) -> Dict[str, Any]:
    return {
        "id": service.id,
        "business_id": service.business_id,
        "name": service.name,
        "price": service.price,
        "category": enum_name(service.category),
        "subcategory": service.subcategory,
        "description": service.description,
        "is_active": to_flag(service.is_active),
        "is_deleted": to_flag(service.is_deleted),
        "created_at": to_iso(service.created_at),
        "updated_at": to_iso(service.updated_at),
    }


def service_from_row(row: Dict[str, Any]) -> Service:
    return Service(
        id=row["id"],
        business_id=row["business_id"],
        name=row["name"],
        price=row["price"],
        category=parse_enum(ServiceCategory, row["category"], "category"),
        subcategory=row["subcategory"],
        description=row["description"],
        is_active=from_flag(row["is_active"]),
        is_deleted=from_flag(row["is_deleted"]),
        created_at=from_iso(row["created_at"], "created_at"),
        updated_at=from_iso(row["updated_at"], "updated_at"),
    )


def service_to_document(service: Service) -> Dict[str, Any]:
    return {
        "id": service.id,
        "businessId": service.business_id,
        "name": service.name,
        "price": service.price,
        "category": enum_name(service.category),
        "subcategory": service.subcategory,
        "description": service.description,
        "isActive": service.is_active,
        "isDeleted": service.is_deleted,
        "createdAt": to_iso(service.created_at),
        "updatedAt": to_iso(service.updated_at),
    }


def service_from_document(document: Dict[str, Any]) -> Service:
    return Service(
        id=require(document, "id"),
        business_id=require(document, "businessId"),
        name=document.get("name") or "",
        price=as_float(document.get("price"), "price"),
        category=parse_enum(ServiceCategory, document.get("category"), "category"),
        subcategory=document.get("subcategory") or None,
        description=document.get("description") or "",
        is_active=bool(document.get("isActive", True)),
        is_deleted=bool(document.get("isDeleted", False)),
        created_at=from_iso(document.get("createdAt"), "createdAt"),
        updated_at=from_iso(document.get("updatedAt"), "updatedAt"),
    )


class ServiceRepository(EntityRepository[Service]):
    """Services offered by the signed-in business, ordered by name."""

    spec = SERVICES

    def _to_row(self, entity: Service) -> Dict[str, Any]:
        return service_to_row(entity)

    def _from_row(self, row: Dict[str, Any]) -> Service:
        return service_from_row(row)

    def _to_document(self, entity: Service) -> Dict[str, Any]:
        return service_to_document(entity)

    def _from_document(self, document: Dict[str, Any]) -> Service:
        return service_from_document(document)

    def observe_by_category(self, category: ServiceCategory) -> LiveQuery[List[Service]]:
        return self._observe("by_category", "category = ?", [category.value])

    def observe_active(self) -> LiveQuery[List[Service]]:
        return self._observe("active", "is_active = 1")

    def service_name_exists(self, name: str, exclude_id: str = "") -> bool:
        """Case-insensitive check for another service with the same name."""
        needle = (name or "").strip().casefold()
        if not needle:
            return False
        return any(
            s.name.strip().casefold() == needle and s.id != exclude_id
            for s in self.list_all()
        )

    def bulk_update_prices(
        self,
        update_type: PriceUpdateType,
        value: float = 0.0,
        category: Optional[ServiceCategory] = None,
        service_ids: Iterable[str] = (),
    ) -> OperationResult:
        """
        Change many prices in one local statement, then sync when online.

        Filter precedence: `category`, else `service_ids`, else every
        non-deleted service of the tenant. Only matched rows get a new
        price, `needs_sync = 1` and a fresh `updated_at`.

        Args:
            update_type: Arithmetic to apply
            value: Percentage, amount or exact price (ignored for ROUND_PRICES)
            category: Restrict to one category
            service_ids: Restrict to these ids (when no category is given)

        Returns:
            OperationResult with the `updated` row count in metadata
        """
        return self.safe_execute(
            "Bulk price update",
            self._bulk_update_prices,
            update_type,
            value,
            category,
            list(service_ids),
        )

    def _bulk_update_prices(
        self,
        update_type: PriceUpdateType,
        value: float,
        category: Optional[ServiceCategory],
        service_ids: Sequence[str],
    ) -> OperationResult:
        tenant_id = self.tenant_context.current_tenant_id()
        if update_type not in PRICE_EXPRESSIONS:
            raise EntityValidationError(f"Unsupported price update: {update_type!r}", field="update_type")

        where, where_params = self._bulk_filter(tenant_id, category, service_ids)
        expression = PRICE_EXPRESSIONS[update_type]
        price_params: List[Any] = [] if update_type == PriceUpdateType.ROUND_PRICES else [float(value)]

        updated = self.local_db.execute(
            f"UPDATE {self.table} SET price = {expression}, updated_at = ?, needs_sync = 1 WHERE {where}",
            price_params + [to_iso(utc_now())] + where_params,
            table=self.table,
        )
        self.logger.info(f"Bulk price update {update_type.value} changed {updated} services")

        if self._remote_available:
            sync_result = self.sync()
            if not sync_result:
                self.logger.warning(f"Sync after bulk price update failed: {sync_result.error}")

        return OperationResult.ok(data=updated, metadata={"updated": updated})

    def _bulk_filter(
        self,
        tenant_id: str,
        category: Optional[ServiceCategory],
        service_ids: Sequence[str],
    ) -> Tuple[str, List[Any]]:
        where, params = self._scope(tenant_id)
        if category is not None:
            return f"{where} AND category = ?", params + [category.value]
        if service_ids:
            placeholders = ", ".join("?" for _ in service_ids)
            return f"{where} AND id IN ({placeholders})", params + list(service_ids)
        return where, params
