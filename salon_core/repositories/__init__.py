# =============================================================================
# salon_core/repositories/__init__.py
# Offline-First Entity Repositories
# =============================================================================
"""
One repository per synchronized entity.

Every repository reads from the local replica, writes locally first and
pushes to the cloud store when online. See base.EntityRepository for the
shared contract.
"""

from .base import EntityRepository, TableSpec
from .customer_repository import CustomerRepository
from .appointment_repository import AppointmentRepository
from .service_repository import ServiceRepository, PriceUpdateType
from .expense_repository import ExpenseRepository
from .working_hours_repository import WorkingHoursRepository
from .customer_note_repository import CustomerNoteRepository
from .transaction_repository import TransactionRepository
from .employee_repository import EmployeeRepository
from .payment_repository import PaymentRepository

ALL_REPOSITORIES = (
    CustomerRepository,
    AppointmentRepository,
    ServiceRepository,
    ExpenseRepository,
    WorkingHoursRepository,
    CustomerNoteRepository,
    TransactionRepository,
    EmployeeRepository,
    PaymentRepository,
)

__all__ = [
    "EntityRepository",
    "TableSpec",
    "CustomerRepository",
    "AppointmentRepository",
    "ServiceRepository",
    "PriceUpdateType",
    "ExpenseRepository",
    "WorkingHoursRepository",
    "CustomerNoteRepository",
    "TransactionRepository",
    "EmployeeRepository",
    "PaymentRepository",
    "ALL_REPOSITORIES",
]
