# =============================================================================
# tests/unit/test_connection_manager.py
# Unit Tests for ConnectionManager
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest
import requests

from salon_core.offline import ConnectionManager, ConnectionStatus


def manager_with(internet=True, backend=True, **kwargs):
    return ConnectionManager(
        internet_probe=lambda: internet,
        backend_probe=lambda: backend,
        **kwargs,
    )


class TestConnectionCheck:
    """Test status derived from the probes"""

    @pytest.mark.parametrize(
        "internet,backend,expected",
        [
            (True, True, ConnectionStatus.ONLINE),
            (True, False, ConnectionStatus.DEGRADED),
            (False, True, ConnectionStatus.OFFLINE),
            (False, False, ConnectionStatus.OFFLINE),
        ],
    )
    def test_status_from_probes(self, internet, backend, expected):
        manager = manager_with(internet, backend)

        state = manager.check_connection()

        assert state.status == expected
        assert manager.is_online == (expected == ConnectionStatus.ONLINE)

    def test_initial_state_unknown(self):
        manager = manager_with()
        assert manager.status == ConnectionStatus.UNKNOWN
        assert not manager.is_online

    def test_initialize_without_monitoring(self):
        manager = manager_with()

        manager.initialize(start_monitoring=False)

        assert manager.is_online
        assert manager.state.last_online is not None

    def test_raising_probe_counts_as_down(self):
        def broken():
            raise OSError("no route to host")

        manager = ConnectionManager(internet_probe=broken, backend_probe=lambda: True)

        state = manager.check_connection()

        assert state.status == ConnectionStatus.OFFLINE
        assert state.error_message == "no route to host"
        assert state.consecutive_failures == 1


class TestCallbacks:
    """Test status change notification"""

    def test_callback_fires_only_on_change(self):
        up = {"value": True}
        manager = ConnectionManager(internet_probe=lambda: up["value"], backend_probe=lambda: True)
        seen = []
        manager.register_callback(lambda state: seen.append(state.status))

        manager.check_connection()
        manager.check_connection()
        up["value"] = False
        manager.check_connection()

        assert seen == [ConnectionStatus.ONLINE, ConnectionStatus.OFFLINE]

    def test_unregister_callback(self):
        manager = manager_with()
        seen = []
        manager.register_callback(seen.append)
        manager.unregister_callback(seen.append)

        manager.check_connection()

        assert seen == []

    def test_failing_callback_does_not_break_check(self):
        manager = manager_with()
        manager.register_callback(MagicMock(side_effect=RuntimeError("bad ui")))

        assert manager.check_connection().status == ConnectionStatus.ONLINE


class TestOverrides:
    """Test forced modes"""

    def test_force_offline_wins_over_probes(self):
        manager = manager_with()
        manager.force_offline()

        assert manager.check_connection().status == ConnectionStatus.OFFLINE
        assert manager.is_offline

    def test_force_online_notifies(self):
        manager = manager_with(internet=False)
        manager.force_offline()
        seen = []
        manager.register_callback(lambda state: seen.append(state.status))

        manager.force_online()
        manager.force_online()

        assert seen == [ConnectionStatus.ONLINE]

    def test_clear_override_reprobes(self):
        manager = manager_with(internet=False)
        manager.force_online()

        state = manager.clear_override()

        assert state.status == ConnectionStatus.OFFLINE


class TestSupabaseProbe:
    """Test the HTTP health probe"""

    def test_no_url_counts_as_available(self):
        manager = ConnectionManager(internet_probe=lambda: True)
        assert manager._check_supabase() is True

    @pytest.mark.parametrize("status_code,expected", [(200, True), (401, True), (503, False)])
    def test_health_status_codes(self, status_code, expected):
        manager = ConnectionManager(supabase_url="https://demo.supabase.co/", supabase_key="anon")

        with patch("salon_core.offline.connection_manager.requests.get") as mock_get:
            mock_get.return_value = MagicMock(status_code=status_code)
            assert manager._check_supabase() is expected

        mock_get.assert_called_once_with(
            "https://demo.supabase.co/auth/v1/health",
            headers={"apikey": "anon"},
            timeout=5.0,
        )

    def test_request_exception(self):
        manager = ConnectionManager(supabase_url="https://demo.supabase.co")

        with patch(
            "salon_core.offline.connection_manager.requests.get",
            side_effect=requests.ConnectionError("refused"),
        ):
            assert manager._check_supabase() is False

        assert "refused" in manager.state.error_message


class TestStatusDisplay:
    def test_display_fields(self):
        manager = manager_with(internet=True, backend=False)
        manager.check_connection()

        display = manager.get_status_display()

        assert display["status"] == "degraded"
        assert display["is_online"] is False
        assert display["internet"] is True
        assert display["supabase"] is False
        assert display["last_check"] is not None
        assert display["failures"] == 1
