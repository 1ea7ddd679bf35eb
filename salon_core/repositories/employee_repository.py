# =============================================================================
# salon_core/repositories/employee_repository.py
# Staff Members
# =============================================================================

from __future__ import annotations
from typing import Any, Dict, List

from salon_core.models import Employee, EmployeePermission, Gender
from salon_core.offline.live_query import LiveQuery
from salon_core.repositories.base import EntityRepository, TableSpec, entity_index
from salon_core.repositories.mapping import (
    as_float,
    dumps,
    enum_name,
    from_flag,
    from_iso,
    loads,
    parse_enum,
    require,
    string_list,
    to_flag,
    to_iso,
)

EMPLOYEES = TableSpec(
    table="employees",
    collection="employees",
    create_sql="""
        CREATE TABLE IF NOT EXISTS employees (
            id TEXT PRIMARY KEY,
            business_id TEXT NOT NULL,
            first_name TEXT NOT NULL DEFAULT '',
            last_name TEXT NOT NULL DEFAULT '',
            gender TEXT NOT NULL DEFAULT 'OTHER',
            phone_number TEXT NOT NULL DEFAULT '',
            email TEXT NOT NULL DEFAULT '',
            address TEXT NOT NULL DEFAULT '',
            hire_date TEXT NOT NULL DEFAULT '',
            skills TEXT NOT NULL DEFAULT '[]',
            permissions TEXT NOT NULL DEFAULT '[]',
            notes TEXT NOT NULL DEFAULT '',
            salary REAL NOT NULL DEFAULT 0,
            is_active INTEGER NOT NULL DEFAULT 1,
            created_at TEXT,
            updated_at TEXT,
            needs_sync INTEGER NOT NULL DEFAULT 1
        )
    """,
    index_sql=entity_index("employees", "is_active"),
    searchable=("first_name", "last_name", "phone_number", "email"),
    order_by="first_name ASC",
)


def _permissions(values: Any) -> List[EmployeePermission]:
    return [parse_enum(EmployeePermission, v, "permissions") for v in (values or [])]


def employee_to_row(employee: Employee) -> Dict[str, Any]:
    return {
        "id": employee.id,
        "business_id": employee.business_id,
        "first_name": employee.first_name,
        "last_name": employee.last_name,
        "gender": enum_name(employee.gender),
        "phone_number": employee.phone_number,
        "email": employee.email,
        "address": employee.address,
        "hire_date": employee.hire_date,
        "skills": dumps(list(employee.skills)),
        "permissions": dumps([p.value for p in employee.permissions]),
        "notes": employee.notes,
        "salary": employee.salary,
        "is_active": to_flag(employee.is_active),
        "created_at": to_iso(employee.created_at),
        "updated_at": to_iso(employee.updated_at),
    }


def employee_from_row(row: Dict[str, Any]) -> Employee:
    return Employee(
        id=row["id"],
        business_id=row["business_id"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        gender=parse_enum(Gender, row["gender"], "gender", Gender.OTHER),
        phone_number=row["phone_number"],
        email=row["email"],
        address=row["address"],
        hire_date=row["hire_date"],
        skills=string_list(loads(row["skills"], "skills")),
        permissions=_permissions(loads(row["permissions"], "permissions")),
        notes=row["notes"],
        salary=row["salary"],
        is_active=from_flag(row["is_active"]),
        created_at=from_iso(row["created_at"], "created_at"),
        updated_at=from_iso(row["updated_at"], "updated_at"),
    )


def employee_to_document(employee: Employee) -> Dict[str, Any]:
    return {
        "id": employee.id,
        "businessId": employee.business_id,
        "firstName": employee.first_name,
        "lastName": employee.last_name,
        "gender": enum_name(employee.gender),
        "phoneNumber": employee.phone_number,
        "email": employee.email,
        "address": employee.address,
        "hireDate": employee.hire_date,
        "skills": list(employee.skills),
        "permissions": [p.value for p in employee.permissions],
        "notes": employee.notes,
        "salary": employee.salary,
        "isActive": employee.is_active,
        "createdAt": to_iso(employee.created_at),
        "updatedAt": to_iso(employee.updated_at),
    }


def employee_from_document(document: Dict[str, Any]) -> Employee:
    return Employee(
        id=require(document, "id"),
        business_id=require(document, "businessId"),
        first_name=document.get("firstName") or "",
        last_name=document.get("lastName") or "",
        gender=parse_enum(Gender, document.get("gender"), "gender", Gender.OTHER),
        phone_number=document.get("phoneNumber") or "",
        email=document.get("email") or "",
        address=document.get("address") or "",
        hire_date=document.get("hireDate") or "",
        skills=string_list(document.get("skills")),
        permissions=_permissions(document.get("permissions")),
        notes=document.get("notes") or "",
        salary=as_float(document.get("salary"), "salary"),
        is_active=bool(document.get("isActive", True)),
        created_at=from_iso(document.get("createdAt"), "createdAt"),
        updated_at=from_iso(document.get("updatedAt"), "updatedAt"),
    )


class EmployeeRepository(EntityRepository[Employee]):
    """Staff of the signed-in business, ordered by first name."""

    spec = EMPLOYEES

    def _to_row(self, entity: Employee) -> Dict[str, Any]:
        return employee_to_row(entity)

    def _from_row(self, row: Dict[str, Any]) -> Employee:
        return employee_from_row(row)

    def _to_document(self, entity: Employee) -> Dict[str, Any]:
        return employee_to_document(entity)

    def _from_document(self, document: Dict[str, Any]) -> Employee:
        return employee_from_document(document)

    def observe_active(self) -> LiveQuery[List[Employee]]:
        return self._observe("active", "is_active = 1")
