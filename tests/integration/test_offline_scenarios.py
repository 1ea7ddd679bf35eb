# =============================================================================
# tests/integration/test_offline_scenarios.py
# Integration Tests: Several Devices Sharing One Cloud Store
# =============================================================================
"""
Each "device" is a full set of services with its own SQLite file and
connection manager; all devices share the same in-memory cloud store.
"""

from dataclasses import replace

from fakes import TENANT_A, TENANT_B, make_connection

from salon_core.auth import SessionTenantContext
from salon_core.config import SyncConfig
from salon_core.models import Appointment, AppointmentStatus, Customer, Service
from salon_core.offline import LocalDatabase
from salon_core.repositories.service_repository import PriceUpdateType
from salon_core.services.container import create_services


def names(customers):
    return [c.first_name for c in customers]


class TestOfflineFirstFlow:
    """A customer created offline reaches every device of the business"""

    def test_offline_customer_reaches_second_device(self, make_device, remote, recorder):
        tablet = make_device("tablet", online=False)
        phone = make_device("phone")

        tablet.customers.observe_all().subscribe(recorder)
        ada = tablet.customers.add(Customer(first_name="Ada", phone_number="5551234")).data

        # Visible locally right away, nothing in the cloud yet
        assert names(recorder.last) == ["Ada"]
        assert remote.count("customers") == 0
        assert tablet.sync_engine.pending_count == 1

        tablet.connection_manager.force_online()
        tablet.sync_engine.sync_all()
        phone.sync_engine.sync_all()

        assert phone.customers.get_by_id(ada.id) == tablet.customers.get_by_id(ada.id)
        assert tablet.sync_engine.pending_count == 0

    def test_reconnect_triggers_background_sync(self, make_device, remote):
        tablet = make_device("tablet", online=False)
        tablet.sync_engine.start()

        ada = tablet.customers.add(Customer(first_name="Ada")).data
        tablet.appointments.add(Appointment(customer_id=ada.id, customer_name="Ada"))

        tablet.connection_manager.force_online()
        tablet.sync_engine.wait(timeout=10)

        assert remote.get("customers", ada.id) is not None
        assert remote.count("appointments") == 1

    def test_status_change_on_other_device(self, make_device):
        tablet = make_device("tablet")
        phone = make_device("phone")

        appointment = tablet.appointments.add(Appointment(customer_name="Ada")).data
        phone.sync_engine.sync_all()
        phone.appointments.update_status(appointment.id, AppointmentStatus.COMPLETED)
        tablet.appointments.sync()

        assert tablet.appointments.get_by_id(appointment.id).status == AppointmentStatus.COMPLETED


class TestConflicts:
    """Concurrent offline edits resolve to the last push"""

    def test_last_push_wins(self, make_device, remote):
        tablet = make_device("tablet")
        phone = make_device("phone")

        ada = tablet.customers.add(Customer(first_name="Ada")).data
        phone.customers.sync()

        tablet.connection_manager.force_offline()
        phone.connection_manager.force_offline()
        tablet.customers.update(replace(tablet.customers.get_by_id(ada.id), first_name="Tablet"))
        phone.customers.update(replace(phone.customers.get_by_id(ada.id), first_name="Phone"))

        tablet.connection_manager.force_online()
        tablet.customers.sync()
        assert remote.get("customers", ada.id)["firstName"] == "Tablet"

        phone.connection_manager.force_online()
        phone.customers.sync()
        assert remote.get("customers", ada.id)["firstName"] == "Phone"

        # The tablet keeps its own version until its next pull
        assert tablet.customers.get_by_id(ada.id).first_name == "Tablet"
        tablet.customers.sync()
        assert tablet.customers.get_by_id(ada.id).first_name == "Phone"

    def test_bulk_update_propagates(self, make_device):
        tablet = make_device("tablet")
        phone = make_device("phone")

        manicure = tablet.services.add(Service(name="Manicure", price=525)).data
        tablet.services.bulk_update_prices(PriceUpdateType.ROUND_PRICES)
        phone.services.sync()

        assert phone.services.get_by_id(manicure.id).price == 550.0


class TestDeletesAcrossDevices:
    """Deleted records stay deleted on every device"""

    def test_offline_delete_is_not_resurrected(self, make_device, remote):
        tablet = make_device("tablet")
        phone = make_device("phone")

        ada = tablet.customers.add(Customer(first_name="Ada")).data
        phone.customers.sync()

        tablet.connection_manager.force_offline()
        tablet.customers.delete(ada.id)

        # A pull while the delete is still pending must not bring Ada back
        tablet.connection_manager.force_online()
        remote.fail_deletes = True
        tablet.customers.sync()
        assert tablet.customers.get_by_id(ada.id) is None

        remote.fail_deletes = False
        tablet.customers.sync()
        phone.customers.sync()

        assert remote.get("customers", ada.id) is None
        assert phone.customers.get_by_id(ada.id) is None


class TestTenantSeparation:
    """Two businesses share the cloud store without seeing each other"""

    def test_tenants_do_not_mix(self, make_device, remote):
        salon_a = make_device("salon-a", tenant_id=TENANT_A)
        salon_b = make_device("salon-b", tenant_id=TENANT_B)

        salon_a.customers.add(Customer(first_name="Ada"))
        salon_b.customers.add(Customer(first_name="Bob"))
        salon_a.sync_engine.sync_all()
        salon_b.sync_engine.sync_all()

        assert names(salon_a.customers.list_all()) == ["Ada"]
        assert names(salon_b.customers.list_all()) == ["Bob"]
        assert remote.count("customers") == 2


class TestContainer:
    """Composition root wiring"""

    def test_local_only_without_supabase(self, tmp_path):
        services = create_services(
            SyncConfig(db_path=tmp_path / "solo.db", start_monitoring=False),
            connection_manager=make_connection(online=True),
            start_sync_engine=False,
        )
        try:
            assert services.remote_store is None
            assert isinstance(services.tenant_context, SessionTenantContext)
            assert len(services.repositories) == 9

            services.tenant_context.sign_in(TENANT_A)
            assert services.customers.add(Customer(first_name="Ada")).success
            assert services.customers.sync().error_code == "NET_001"
            assert services.sync_engine.pending_count == 1
        finally:
            services.shutdown()

    def test_data_survives_restart(self, tmp_path, remote):
        db_path = tmp_path / "restart.db"

        def boot():
            return create_services(
                SyncConfig(db_path=db_path, start_monitoring=False),
                local_db=LocalDatabase(db_path),
                remote_store=remote,
                connection_manager=make_connection(online=False),
                tenant_context=SessionTenantContext(TENANT_A),
                start_sync_engine=False,
            )

        first = boot()
        ada = first.customers.add(Customer(first_name="Ada")).data
        first.shutdown()

        second = boot()
        try:
            assert second.customers.get_by_id(ada.id) == ada
            assert second.customers.pending_count() == 1
        finally:
            second.shutdown()
