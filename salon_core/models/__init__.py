# =============================================================================
# salon_core/models/__init__.py
# Business Entities and Enumerations
# =============================================================================

from .enums import (
    Gender,
    AppointmentStatus,
    ServiceCategory,
    ExpenseCategory,
    TransactionType,
    TransactionCategory,
    EmployeePermission,
    PaymentMethod,
    PaymentStatus,
    DayOfWeek,
)
from .entities import (
    Customer,
    Appointment,
    Service,
    Expense,
    DayHours,
    WorkingHours,
    CustomerNote,
    Transaction,
    Employee,
    Payment,
)

__all__ = [
    # Enums
    "Gender",
    "AppointmentStatus",
    "ServiceCategory",
    "ExpenseCategory",
    "TransactionType",
    "TransactionCategory",
    "EmployeePermission",
    "PaymentMethod",
    "PaymentStatus",
    "DayOfWeek",
    # Entities
    "Customer",
    "Appointment",
    "Service",
    "Expense",
    "DayHours",
    "WorkingHours",
    "CustomerNote",
    "Transaction",
    "Employee",
    "Payment",
]
