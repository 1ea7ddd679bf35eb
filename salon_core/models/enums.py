# =============================================================================
# salon_core/models/enums.py
# Enumerations Used by the Business Entities
# =============================================================================
"""
Enum values are stored by name in both stores (e.g. "SCHEDULED").
"""

from enum import Enum


class Gender(Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class AppointmentStatus(Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class ServiceCategory(Enum):
    NAIL = "NAIL"
    MASSAGE = "MASSAGE"
    SKIN_CARE = "SKIN_CARE"
    MAKEUP = "MAKEUP"
    EPILATION = "EPILATION"
    WELLNESS = "WELLNESS"
    EYEBROW_LASH = "EYEBROW_LASH"


class ExpenseCategory(Enum):
    FIXED_EXPENSES = "FIXED_EXPENSES"
    PERSONNEL_EXPENSES = "PERSONNEL_EXPENSES"
    CONSUMABLES_PRODUCTS = "CONSUMABLES_PRODUCTS"
    EQUIPMENT_EXPENSES = "EQUIPMENT_EXPENSES"
    ADVERTISING_EXPENSES = "ADVERTISING_EXPENSES"
    TAX_OFFICIAL_FEES = "TAX_OFFICIAL_FEES"
    GENERAL_BUSINESS_EXPENSES = "GENERAL_BUSINESS_EXPENSES"


class TransactionType(Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class TransactionCategory(Enum):
    SERVICE = "SERVICE"
    PRODUCT = "PRODUCT"
    SALARY = "SALARY"
    RENT = "RENT"
    UTILITIES = "UTILITIES"
    MARKETING = "MARKETING"
    OTHER = "OTHER"


class EmployeePermission(Enum):
    APPOINTMENT_MANAGEMENT = "APPOINTMENT_MANAGEMENT"
    CUSTOMER_MANAGEMENT = "CUSTOMER_MANAGEMENT"
    SERVICE_MANAGEMENT = "SERVICE_MANAGEMENT"
    PRICE_MANAGEMENT = "PRICE_MANAGEMENT"
    EMPLOYEE_MANAGEMENT = "EMPLOYEE_MANAGEMENT"
    FINANCIAL_REPORTS = "FINANCIAL_REPORTS"
    SYSTEM_SETTINGS = "SYSTEM_SETTINGS"


class PaymentMethod(Enum):
    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    BANK_TRANSFER = "BANK_TRANSFER"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class DayOfWeek(Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def is_weekend(self) -> bool:
        return self in (DayOfWeek.SATURDAY, DayOfWeek.SUNDAY)
