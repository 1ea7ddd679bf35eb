# =============================================================================
# salon_core/offline/connection_manager.py
# Connection Status Detection and Management
# =============================================================================
"""
ConnectionManager - Detects and monitors internet/Supabase connectivity.

Features:
- Connection detection (internet probe + backend health probe)
- Periodic health checks on a daemon thread
- Event callbacks for status changes
- Manual overrides for tests and user preference

`is_online` is the gate every repository consults before a remote call.
"""

from __future__ import annotations
import socket
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple
import logging

import requests

logger = logging.getLogger(__name__)

Probe = Callable[[], bool]


class ConnectionStatus(Enum):
    """Connection status states."""
    ONLINE = "online"           # Full connectivity (Internet + Supabase)
    OFFLINE = "offline"         # No connectivity
    DEGRADED = "degraded"       # Internet OK but Supabase unavailable
    CHECKING = "checking"       # Currently checking status
    UNKNOWN = "unknown"         # Initial state


@dataclass
class ConnectionState:
    """Current connection state with metadata."""
    status: ConnectionStatus = ConnectionStatus.UNKNOWN
    internet_available: bool = False
    supabase_available: bool = False
    last_check: Optional[datetime] = None
    last_online: Optional[datetime] = None
    consecutive_failures: int = 0
    error_message: Optional[str] = None


class ConnectionManager:
    """
    Connection status monitor, one shared instance per process.

    Usage:
        manager = ConnectionManager(supabase_url=config.supabase_url)
        manager.initialize()
        if manager.is_online:
            # Use cloud services
        else:
            # Use local store only
    """

    INTERNET_HOSTS: Sequence[Tuple[str, int]] = (
        ("8.8.8.8", 53),          # Google DNS
        ("1.1.1.1", 53),          # Cloudflare DNS
        ("208.67.222.222", 53),   # OpenDNS
    )

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        connection_timeout: float = 5.0,
        check_interval_online: float = 30.0,
        check_interval_offline: float = 10.0,
        internet_probe: Optional[Probe] = None,
        backend_probe: Optional[Probe] = None,
    ):
        self.supabase_url = supabase_url
        self.supabase_key = supabase_key
        self.connection_timeout = connection_timeout
        self.check_interval_online = check_interval_online
        self.check_interval_offline = check_interval_offline
        self._internet_probe = internet_probe or self._check_internet
        self._backend_probe = backend_probe or self._check_supabase

        self._state = ConnectionState()
        self._state_lock = threading.Lock()
        self._callbacks: List[Callable[[ConnectionState], None]] = []
        self._monitor_thread: Optional[threading.Thread] = None
        self._stop_monitoring = threading.Event()
        self._override: Optional[ConnectionStatus] = None
        self._initialized = False

    @property
    def state(self) -> ConnectionState:
        """Get current connection state."""
        return self._state

    @property
    def status(self) -> ConnectionStatus:
        """Get current status."""
        return self._state.status

    @property
    def is_online(self) -> bool:
        """Check if we have full connectivity."""
        return self._state.status == ConnectionStatus.ONLINE

    @property
    def is_offline(self) -> bool:
        """Check if we're completely offline."""
        return self._state.status == ConnectionStatus.OFFLINE

    @property
    def has_internet(self) -> bool:
        """Check if internet is available (even if Supabase isn't)."""
        return self._state.internet_available

    @property
    def has_supabase(self) -> bool:
        """Check if Supabase is available."""
        return self._state.supabase_available

    def initialize(self, start_monitoring: bool = True) -> None:
        """
        Initialize the connection manager.

        Args:
            start_monitoring: Whether to start background monitoring
        """
        if self._initialized:
            return

        self.check_connection()

        if start_monitoring:
            self.start_monitoring()

        self._initialized = True
        logger.info(f"ConnectionManager initialized. Status: {self._state.status.value}")

    def check_connection(self) -> ConnectionState:
        """
        Perform a connection check and update state.

        A manual override (force_offline/force_online) wins over probes until
        clear_override() is called.

        Returns:
            Updated ConnectionState
        """
        if self._override is not None:
            return self._state

        with self._state_lock:
            old_status = self._state.status
            self._state.last_check = datetime.now()

            internet_ok = self._safe_probe(self._internet_probe)
            supabase_ok = internet_ok and self._safe_probe(self._backend_probe)

            if internet_ok and supabase_ok:
                new_status = ConnectionStatus.ONLINE
            elif internet_ok:
                new_status = ConnectionStatus.DEGRADED
            else:
                new_status = ConnectionStatus.OFFLINE

            self._apply(new_status, internet_ok, supabase_ok)
            changed = old_status != new_status

        if changed:
            logger.info(f"Connection status changed: {old_status.value} -> {new_status.value}")
            self._notify_callbacks()

        return self._state

    def _apply(self, status: ConnectionStatus, internet_ok: bool, supabase_ok: bool) -> None:
        self._state.status = status
        self._state.internet_available = internet_ok
        self._state.supabase_available = supabase_ok
        if status == ConnectionStatus.ONLINE:
            self._state.last_online = datetime.now()
            self._state.consecutive_failures = 0
            self._state.error_message = None
        else:
            self._state.consecutive_failures += 1

    def _safe_probe(self, probe: Probe) -> bool:
        try:
            return bool(probe())
        except Exception as e:
            self._state.error_message = str(e)
            logger.debug(f"Connectivity probe failed: {e}")
            return False

    def _check_internet(self) -> bool:
        """
        Check internet connectivity by attempting to reach well-known hosts.

        Returns:
            True if internet is available
        """
        for host, port in self.INTERNET_HOSTS:
            try:
                with socket.create_connection((host, port), timeout=self.connection_timeout):
                    return True
            except OSError:
                continue

        return False

    def _check_supabase(self) -> bool:
        """
        Check Supabase connectivity through its auth health endpoint.

        Returns:
            True if Supabase is reachable, or when no Supabase is configured
            (local-only mode)
        """
        if not self.supabase_url:
            return True

        headers = {"apikey": self.supabase_key} if self.supabase_key else {}
        try:
            response = requests.get(
                f"{self.supabase_url.rstrip('/')}/auth/v1/health",
                headers=headers,
                timeout=self.connection_timeout,
            )
            return response.status_code < 500
        except requests.RequestException as e:
            self._state.error_message = str(e)
            logger.debug(f"Supabase check failed: {e}")
            return False

    def start_monitoring(self) -> None:
        """Start background connection monitoring."""
        if self._monitor_thread is not None and self._monitor_thread.is_alive():
            return

        self._stop_monitoring.clear()
        self._monitor_thread = threading.Thread(
            target=self._monitoring_loop,
            daemon=True,
            name="ConnectionMonitor"
        )
        self._monitor_thread.start()
        logger.debug("Connection monitoring started")

    def stop_monitoring(self) -> None:
        """Stop background connection monitoring."""
        self._stop_monitoring.set()
        if self._monitor_thread:
            self._monitor_thread.join(timeout=5)
        logger.debug("Connection monitoring stopped")

    def _monitoring_loop(self) -> None:
        """Background monitoring loop."""
        while not self._stop_monitoring.is_set():
            interval = (
                self.check_interval_online
                if self.is_online
                else self.check_interval_offline
            )

            if self._stop_monitoring.wait(timeout=interval):
                break

            try:
                self.check_connection()
            except Exception as e:
                logger.error(f"Error in connection check: {e}")

    def register_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        """
        Register a callback for connection status changes.

        Args:
            callback: Function called with ConnectionState when status changes
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        """Remove a registered callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        """Notify all registered callbacks of status change."""
        for callback in list(self._callbacks):
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Error in connection callback: {e}")

    def _force(self, status: ConnectionStatus) -> None:
        online = status == ConnectionStatus.ONLINE
        with self._state_lock:
            self._override = status
            old_status = self._state.status
            self._apply(status, online, online)
        if old_status != status:
            self._notify_callbacks()
        logger.info(f"Forced {status.value} mode")

    def force_offline(self) -> None:
        """Force offline mode (for testing or user preference)."""
        self._force(ConnectionStatus.OFFLINE)

    def force_online(self) -> None:
        """Force online mode (for testing or a known-good backend)."""
        self._force(ConnectionStatus.ONLINE)

    def clear_override(self) -> ConnectionState:
        """Drop a forced mode and re-probe."""
        self._override = None
        return self.check_connection()

    def force_check(self) -> ConnectionState:
        """Force an immediate connection check."""
        return self.check_connection()

    def get_status_display(self) -> dict:
        """Get status information for UI display."""
        return {
            "status": self._state.status.value,
            "is_online": self.is_online,
            "internet": self._state.internet_available,
            "supabase": self._state.supabase_available,
            "last_check": self._state.last_check.isoformat() if self._state.last_check else None,
            "last_online": self._state.last_online.isoformat() if self._state.last_online else None,
            "failures": self._state.consecutive_failures,
            "error": self._state.error_message,
        }
