# =============================================================================
# tests/unit/test_account_service.py
# Unit Tests for Account Deletion
# =============================================================================

import pytest

from fakes import TENANT_A, TENANT_B

from salon_core.models import Customer, Service

OWNER_EMAIL = "owner-a@example.com"


@pytest.fixture
def seeded(app, remote):
    """Tenant A data on this device and in the cloud, plus tenant B cloud data"""
    remote.put("users", {"id": TENANT_A, "email": OWNER_EMAIL})
    remote.put("users", {"id": TENANT_B, "email": "owner-b@example.com"})
    remote.put("username_mappings", {"id": "owner-a", "username": "owner-a", "email": OWNER_EMAIL})
    remote.put("username_mappings", {"id": "owner-b", "username": "owner-b", "email": "owner-b@example.com"})
    remote.put("customers", {"id": "b-1", "businessId": TENANT_B, "firstName": "Bob"})

    for name in ("Ada", "Grace", "Hedy"):
        app.customers.add(Customer(first_name=name))
    app.services.add(Service(name="Manicure", price=300))
    return app


class TestDeleteAccount:
    """Test full-tenant deletion"""

    def test_removes_only_own_documents(self, seeded, remote, tenant):
        result = seeded.accounts.delete_account(OWNER_EMAIL)

        assert result.success
        assert result.data == TENANT_A
        assert remote.get("users", TENANT_A) is None
        assert remote.get("users", TENANT_B) is not None
        assert remote.get("username_mappings", "owner-a") is None
        assert remote.get("username_mappings", "owner-b") is not None
        assert list(remote.collections["customers"]) == ["b-1"]
        assert remote.count("services") == 0

    def test_reports_deleted_counts(self, seeded):
        result = seeded.accounts.delete_account(OWNER_EMAIL)

        deleted = result.metadata["deleted"]
        assert deleted["users"] == 1
        assert deleted["username_mappings"] == 1
        assert deleted["customers"] == 3
        assert deleted["services"] == 1
        assert deleted["payments"] == 0

    def test_revokes_credentials(self, seeded, tenant):
        seeded.accounts.delete_account(OWNER_EMAIL)

        assert tenant.revoked
        assert not tenant.is_authenticated

    def test_clears_local_rows_and_tombstones(self, seeded, connection, local_db):
        first = seeded.customers.list_all()[0]
        connection.force_offline()
        seeded.customers.delete(first.id)
        connection.force_online()

        result = seeded.accounts.delete_account(OWNER_EMAIL)

        assert result.metadata["local_removed"] == 3
        assert local_db.count("customers", "business_id = ?", [TENANT_A]) == 0
        assert local_db.count("services", "business_id = ?", [TENANT_A]) == 0
        assert local_db.get_pending_count(TENANT_A) == 0

    def test_batch_limit_respected(self, seeded, remote):
        seeded.accounts.delete_batch_limit = 2

        result = seeded.accounts.delete_account(OWNER_EMAIL)

        assert result.metadata["deleted"]["customers"] == 2
        assert ("delete_where", "customers", "businessId", TENANT_A, 2) in remote.calls
        assert ("delete_where", "username_mappings", "email", OWNER_EMAIL, 1) in remote.calls


    def test_reads_every_collection_before_deleting(self, seeded, remote):
        result = seeded.accounts.delete_account(OWNER_EMAIL)

        kinds = [c[0] for c in remote.calls]
        first_delete = min(i for i, kind in enumerate(kinds) if kind in ("delete", "delete_where"))
        reads = [i for i, kind in enumerate(kinds) if kind == "query"]
        assert len(reads) == 9
        assert max(reads) < first_delete
        assert result.metadata["planned"]["customers"] == 3

    def test_clears_sync_timestamps(self, seeded, local_db):
        seeded.customers.sync()
        assert seeded.customers.last_synced_at() is not None

        seeded.accounts.delete_account(OWNER_EMAIL)

        assert local_db.get_setting(f"last_sync:{TENANT_A}:customers") is None


class TestDeleteAccountFailures:
    """Test that nothing is revoked when the deletion cannot run"""

    def test_offline(self, seeded, connection, remote, tenant):
        connection.force_offline()

        result = seeded.accounts.delete_account(OWNER_EMAIL)

        assert result.error_code == "NET_001"
        assert remote.get("users", TENANT_A) is not None
        assert not tenant.revoked

    def test_unauthenticated(self, seeded, tenant):
        tenant.sign_out()

        result = seeded.accounts.delete_account(OWNER_EMAIL)

        assert result.error_code == "AUTH_001"

    def test_remote_failure_keeps_credentials(self, seeded, remote, tenant):
        remote.fail_deletes = True

        result = seeded.accounts.delete_account(OWNER_EMAIL)

        assert result.error_code == "REMOTE_001"
        assert not tenant.revoked
        assert seeded.customers.count() == 3

    def test_read_failure_deletes_nothing(self, seeded, remote, tenant):
        remote.fail_reads = True

        result = seeded.accounts.delete_account(OWNER_EMAIL)

        assert result.error_code == "REMOTE_001"
        assert remote.get("users", TENANT_A) is not None
        assert remote.get("username_mappings", "owner-a") is not None
        assert remote.count("customers") == 4
        assert not tenant.revoked
