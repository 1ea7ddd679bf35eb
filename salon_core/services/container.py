# =============================================================================
# salon_core/services/container.py
# Composition Root: One Shared Instance of Every Service
# =============================================================================
"""
create_services() wires the whole sync core once per process.

Usage:
    app = create_services(load_config())
    app.customers.observe_all().subscribe(print)
    app.sync_engine.sync_all()
    ...
    app.shutdown()
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional

from salon_core.auth import AccountService, SessionTenantContext, SupabaseTenantContext, TenantContext
from salon_core.config import SyncConfig
from salon_core.data import RemoteStore, SupabaseRemoteStore, get_supabase_client
from salon_core.logging import get_logger
from salon_core.offline import ConnectionManager, LocalDatabase, SyncEngine
from salon_core.repositories import (
    AppointmentRepository,
    CustomerNoteRepository,
    CustomerRepository,
    EmployeeRepository,
    EntityRepository,
    ExpenseRepository,
    PaymentRepository,
    ServiceRepository,
    TransactionRepository,
    WorkingHoursRepository,
)

logger = get_logger(__name__)


@dataclass
class SalonServices:
    """Every service of the sync core, built by create_services()."""
    config: SyncConfig
    local_db: LocalDatabase
    connection_manager: ConnectionManager
    remote_store: Optional[RemoteStore]
    tenant_context: TenantContext
    customers: CustomerRepository
    appointments: AppointmentRepository
    services: ServiceRepository
    expenses: ExpenseRepository
    working_hours: WorkingHoursRepository
    customer_notes: CustomerNoteRepository
    transactions: TransactionRepository
    employees: EmployeeRepository
    payments: PaymentRepository
    sync_engine: SyncEngine
    accounts: AccountService

    @property
    def repositories(self) -> List[EntityRepository]:
        return [
            self.customers,
            self.appointments,
            self.services,
            self.expenses,
            self.working_hours,
            self.customer_notes,
            self.transactions,
            self.employees,
            self.payments,
        ]

    def shutdown(self) -> None:
        """Stop background threads and close the local database."""
        self.sync_engine.stop()
        self.connection_manager.stop_monitoring()
        self.local_db.close()
        logger.info("Salon services shut down")


def create_services(
    config: Optional[SyncConfig] = None,
    *,
    local_db: Optional[LocalDatabase] = None,
    remote_store: Optional[RemoteStore] = None,
    connection_manager: Optional[ConnectionManager] = None,
    tenant_context: Optional[TenantContext] = None,
    start_sync_engine: bool = True,
) -> SalonServices:
    """
    Build the shared services.

    Anything passed explicitly is used as-is (tests pass fakes); everything
    else is created from `config`. With Supabase configured the remote store
    and tenant context use the Supabase client; without it the core runs
    local-only with a SessionTenantContext.

    Args:
        config: Settings (defaults to SyncConfig())
        local_db: Local replica
        remote_store: Cloud store
        connection_manager: Online gate (created and initialized if omitted)
        tenant_context: Session boundary
        start_sync_engine: Sync automatically when connectivity returns

    Returns:
        SalonServices
    """
    config = config or SyncConfig()

    if local_db is None:
        local_db = LocalDatabase(config.db_path)
    local_db.initialize()

    client = None
    if remote_store is None or tenant_context is None:
        client = get_supabase_client(config)

    if remote_store is None and client is not None:
        remote_store = SupabaseRemoteStore(client, page_size=config.page_size)

    if tenant_context is None:
        if client is not None:
            tenant_context = SupabaseTenantContext(client, locale=config.locale)
        else:
            tenant_context = SessionTenantContext(locale=config.locale)

    if connection_manager is None:
        connection_manager = ConnectionManager(
            supabase_url=config.supabase_url,
            supabase_key=config.supabase_key,
            connection_timeout=config.connection_timeout,
            check_interval_online=config.check_interval_online,
            check_interval_offline=config.check_interval_offline,
        )
        connection_manager.initialize(start_monitoring=config.start_monitoring)

    deps = (local_db, remote_store, connection_manager, tenant_context)
    customers = CustomerRepository(*deps)
    appointments = AppointmentRepository(*deps)
    services = ServiceRepository(*deps)
    expenses = ExpenseRepository(*deps)
    working_hours = WorkingHoursRepository(*deps)
    customer_notes = CustomerNoteRepository(*deps)
    transactions = TransactionRepository(*deps)
    employees = EmployeeRepository(*deps)
    payments = PaymentRepository(*deps)

    repositories = [
        customers, appointments, services, expenses, working_hours,
        customer_notes, transactions, employees, payments,
    ]

    sync_engine = SyncEngine(connection_manager, local_db)
    for repository in repositories:
        sync_engine.register(repository)
    if start_sync_engine:
        sync_engine.start()

    accounts = AccountService(
        tenant_context,
        remote_store,
        local_db,
        connection_manager,
        repositories=repositories,
        delete_batch_limit=config.delete_batch_limit,
    )

    logger.info(
        f"Services ready (remote: {'supabase' if client is not None else type(remote_store).__name__}, "
        f"status: {connection_manager.status.value})"
    )

    return SalonServices(
        config=config,
        local_db=local_db,
        connection_manager=connection_manager,
        remote_store=remote_store,
        tenant_context=tenant_context,
        customers=customers,
        appointments=appointments,
        services=services,
        expenses=expenses,
        working_hours=working_hours,
        customer_notes=customer_notes,
        transactions=transactions,
        employees=employees,
        payments=payments,
        sync_engine=sync_engine,
        accounts=accounts,
    )
