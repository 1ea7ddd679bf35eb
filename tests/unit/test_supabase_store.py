# =============================================================================
# tests/unit/test_supabase_store.py
# Unit Tests for the Supabase-backed Remote Store and Tenant Context
# =============================================================================

from unittest.mock import MagicMock, call, patch

import pytest

from salon_core.auth import SupabaseTenantContext
from salon_core.config import SyncConfig
from salon_core.data import SupabaseRemoteStore, get_supabase_client
from salon_core.errors import AuthenticationError, ConfigurationError, RemoteStoreError


@pytest.fixture
def mock_client():
    """Create a mock Supabase client"""
    return MagicMock()


def response(data):
    return MagicMock(data=data)


class TestGetSupabaseClient:
    """Test client creation"""

    def test_no_credentials_runs_local_only(self):
        assert get_supabase_client(SyncConfig()) is None

    def test_client_created_from_config(self):
        config = SyncConfig(supabase_url="https://demo.supabase.co", supabase_key="anon")

        with patch("salon_core.data.supabase_client.create_client") as mock_create:
            client = get_supabase_client(config)

        mock_create.assert_called_once_with("https://demo.supabase.co", "anon")
        assert client is mock_create.return_value

    def test_creation_failure(self):
        config = SyncConfig(supabase_url="not a url", supabase_key="anon")

        with patch(
            "salon_core.data.supabase_client.create_client",
            side_effect=Exception("Invalid URL"),
        ):
            with pytest.raises(ConfigurationError):
                get_supabase_client(config)


class TestSupabaseRemoteStore:
    """Test document operations against the mocked PostgREST builder"""

    def test_set_document_upserts(self, mock_client):
        store = SupabaseRemoteStore(mock_client)
        document = {"id": "c1", "businessId": "t"}

        store.set_document("customers", document)

        mock_client.table.assert_called_with("customers")
        mock_client.table.return_value.upsert.assert_called_once_with(document)

    def test_delete_document(self, mock_client):
        store = SupabaseRemoteStore(mock_client)

        store.delete_document("customers", "c1")

        mock_client.table.return_value.delete.return_value.eq.assert_called_once_with("id", "c1")

    def test_query_by_tenant_paginates(self, mock_client):
        chain = mock_client.table.return_value.select.return_value.eq.return_value.order.return_value
        chain.range.return_value.execute.side_effect = [
            response([{"id": "a"}, {"id": "b"}]),
            response([{"id": "c"}]),
        ]
        store = SupabaseRemoteStore(mock_client, page_size=2)

        documents = store.query_by_tenant("customers", "tenant-a")

        assert [d["id"] for d in documents] == ["a", "b", "c"]
        mock_client.table.return_value.select.return_value.eq.assert_called_with("businessId", "tenant-a")
        assert chain.range.call_args_list == [call(0, 1), call(2, 3)]

    def test_query_stops_on_empty_page(self, mock_client):
        chain = mock_client.table.return_value.select.return_value.eq.return_value.order.return_value
        chain.range.return_value.execute.side_effect = [
            response([{"id": "a"}, {"id": "b"}]),
            response([]),
        ]
        store = SupabaseRemoteStore(mock_client, page_size=2)

        assert len(store.query_by_tenant("customers", "tenant-a")) == 2

    def test_delete_where_selects_then_deletes(self, mock_client):
        table = mock_client.table.return_value
        table.select.return_value.eq.return_value.limit.return_value.execute.return_value = response(
            [{"id": "a"}, {"id": "b"}]
        )
        store = SupabaseRemoteStore(mock_client)

        deleted = store.delete_by_tenant("customers", "tenant-a", 500)

        assert deleted == 2
        table.select.return_value.eq.assert_called_once_with("businessId", "tenant-a")
        table.select.return_value.eq.return_value.limit.assert_called_once_with(500)
        table.delete.return_value.in_.assert_called_once_with("id", ["a", "b"])

    def test_delete_where_nothing_matched(self, mock_client):
        table = mock_client.table.return_value
        table.select.return_value.eq.return_value.limit.return_value.execute.return_value = response([])
        store = SupabaseRemoteStore(mock_client)

        assert store.delete_where("username_mappings", "email", "x@example.com", 1) == 0
        table.delete.assert_not_called()

    @pytest.mark.parametrize(
        "operation",
        [
            lambda store: store.set_document("customers", {"id": "c1"}),
            lambda store: store.delete_document("customers", "c1"),
            lambda store: store.query_by_tenant("customers", "t"),
            lambda store: store.delete_where("customers", "businessId", "t", 10),
        ],
    )
    def test_errors_wrapped(self, mock_client, operation):
        mock_client.table.side_effect = Exception("connection reset")
        store = SupabaseRemoteStore(mock_client)

        with pytest.raises(RemoteStoreError) as exc_info:
            operation(store)

        assert exc_info.value.details["collection"] == "customers"


class TestSupabaseTenantContext:
    """Test tenant resolution from the auth session"""

    def test_session_user_is_tenant(self, mock_client):
        mock_client.auth.get_session.return_value = MagicMock(user=MagicMock(id="uid-1"))
        context = SupabaseTenantContext(mock_client)

        assert context.current_tenant_id() == "uid-1"
        assert context.validate_access("uid-1")
        assert not context.validate_access("uid-2")

    def test_no_session(self, mock_client):
        mock_client.auth.get_session.return_value = None
        context = SupabaseTenantContext(mock_client)

        assert not context.is_authenticated
        with pytest.raises(AuthenticationError):
            context.current_tenant_id()

    def test_session_lookup_failure(self, mock_client):
        mock_client.auth.get_session.side_effect = Exception("token expired")
        context = SupabaseTenantContext(mock_client)

        assert not context.is_authenticated

    def test_revoke_credentials(self, mock_client):
        mock_client.auth.get_session.return_value = MagicMock(user=MagicMock(id="uid-1"))
        context = SupabaseTenantContext(mock_client)

        context.revoke_credentials()

        mock_client.auth.admin.delete_user.assert_called_once_with("uid-1")
        mock_client.auth.sign_out.assert_called_once()

    def test_auth_state_change_notifies_listeners(self, mock_client):
        mock_client.auth.get_session.return_value = MagicMock(user=MagicMock(id="uid-2"))
        context = SupabaseTenantContext(mock_client)
        seen = []
        context.register_listener(seen.append)

        on_change = mock_client.auth.on_auth_state_change.call_args[0][0]
        on_change("SIGNED_IN", None)

        assert seen == ["uid-2"]
