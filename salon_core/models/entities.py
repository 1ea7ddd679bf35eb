# =============================================================================
# salon_core/models/entities.py
# Business Entities of the Salon Application
# =============================================================================
"""
Plain dataclasses for every synchronized entity.

Common fields: `id` (UUID text, generated on add when empty), `business_id`
(the owning tenant, always overwritten on add), `created_at` / `updated_at`
(timezone-aware UTC datetimes stamped by the repositories). Dates entered by
users (birth date, appointment date, ...) stay as dd/MM/yyyy text.
"""

from __future__ import annotations
import random
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, List, Optional

from salon_core.models.enums import (
    AppointmentStatus,
    DayOfWeek,
    EmployeePermission,
    ExpenseCategory,
    Gender,
    PaymentMethod,
    PaymentStatus,
    ServiceCategory,
    TransactionCategory,
    TransactionType,
)


@dataclass
class Customer:
    """Salon customer"""
    id: str = ""
    business_id: str = ""
    first_name: str = ""
    last_name: str = ""
    phone_number: str = ""
    email: str = ""
    birth_date: str = ""  # dd/MM/yyyy
    gender: Gender = Gender.OTHER
    file_number: str = ""
    notes: str = ""
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @staticmethod
    def generate_file_number(year: Optional[int] = None) -> str:
        """File number in the form CUST-<year>-<4 digits>."""
        year = year or datetime.now(timezone.utc).year
        return f"CUST-{year}-{random.randint(1000, 9999)}"


@dataclass
class Appointment:
    """Booked service for a customer"""
    id: str = ""
    business_id: str = ""
    customer_id: str = ""
    customer_name: str = ""
    customer_phone: str = ""
    service_id: Optional[str] = None
    service_name: str = ""
    service_price: float = 0.0
    appointment_date: str = ""  # dd/MM/yyyy
    appointment_time: str = ""  # HH:mm
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: str = ""
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Service:
    """Priced service offered by the salon"""
    id: str = ""
    business_id: str = ""
    name: str = ""
    price: float = 0.0
    category: ServiceCategory = ServiceCategory.NAIL
    subcategory: Optional[str] = None
    description: str = ""
    is_active: bool = True
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Expense:
    """Business expense"""
    id: str = ""
    business_id: str = ""
    category: ExpenseCategory = ExpenseCategory.GENERAL_BUSINESS_EXPENSES
    subcategory: str = ""
    amount: float = 0.0
    description: str = ""
    expense_date: str = ""  # dd/MM/yyyy
    notes: str = ""
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class DayHours:
    """Opening hours of a single weekday"""
    is_working: bool = True
    start_time: str = "09:00"  # HH:mm
    end_time: str = "19:00"

    def is_valid_time_range(self) -> bool:
        if not self.is_working:
            return True
        try:
            start_h, start_m = (int(x) for x in self.start_time.split(":"))
            end_h, end_m = (int(x) for x in self.end_time.split(":"))
        except ValueError:
            return False
        return end_h * 60 + end_m > start_h * 60 + start_m


def _weekday_hours() -> DayHours:
    return DayHours(True, "09:00", "19:00")


@dataclass
class WorkingHours:
    """Weekly opening hours, one record per tenant"""
    id: str = ""
    business_id: str = ""
    monday: DayHours = field(default_factory=_weekday_hours)
    tuesday: DayHours = field(default_factory=_weekday_hours)
    wednesday: DayHours = field(default_factory=_weekday_hours)
    thursday: DayHours = field(default_factory=_weekday_hours)
    friday: DayHours = field(default_factory=_weekday_hours)
    saturday: DayHours = field(default_factory=lambda: DayHours(True, "10:00", "17:00"))
    sunday: DayHours = field(default_factory=lambda: DayHours(False, "09:00", "19:00"))
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def get_day_hours(self, day: DayOfWeek) -> DayHours:
        return getattr(self, day.value)

    def with_day(self, day: DayOfWeek, hours: DayHours) -> WorkingHours:
        """Copy with one day replaced."""
        return replace(self, **{day.value: hours})

    @property
    def days(self) -> Dict[DayOfWeek, DayHours]:
        return {day: self.get_day_hours(day) for day in DayOfWeek}

    def is_valid(self) -> bool:
        return all(hours.is_valid_time_range() for hours in self.days.values())


@dataclass
class CustomerNote:
    """Free-text note attached to a customer"""
    id: str = ""
    business_id: str = ""
    customer_id: str = ""
    customer_name: str = ""
    customer_phone: str = ""
    title: str = ""
    content: str = ""
    is_important: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Transaction:
    """Income or expense ledger entry"""
    id: str = ""
    business_id: str = ""
    payment_id: Optional[str] = None
    appointment_id: Optional[str] = None
    customer_id: Optional[str] = None
    type: TransactionType = TransactionType.INCOME
    category: TransactionCategory = TransactionCategory.SERVICE
    amount: float = 0.0
    description: str = ""
    reference: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Employee:
    """Staff member"""
    id: str = ""
    business_id: str = ""
    first_name: str = ""
    last_name: str = ""
    gender: Gender = Gender.OTHER
    phone_number: str = ""
    email: str = ""
    address: str = ""
    hire_date: str = ""  # dd/MM/yyyy
    skills: List[str] = field(default_factory=list)
    permissions: List[EmployeePermission] = field(default_factory=list)
    notes: str = ""
    salary: float = 0.0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def has_permission(self, permission: EmployeePermission) -> bool:
        return permission in self.permissions


@dataclass
class Payment:
    """Payment taken for an appointment"""
    id: str = ""
    business_id: str = ""
    appointment_id: str = ""
    customer_id: str = ""
    customer_name: str = ""
    service_name: str = ""
    amount: float = 0.0
    payment_method: PaymentMethod = PaymentMethod.CASH
    status: PaymentStatus = PaymentStatus.PENDING
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
