# =============================================================================
# salon_core/offline/sync_engine.py
# Synchronization State and Connectivity-Triggered Sync
# =============================================================================
"""
Sync coordination between the local replica and the cloud store.

- SyncCoordinator: per-repository state machine (IDLE <-> SYNCING) with
  SyncState bookkeeping and change callbacks.
- SyncEngine: syncs every registered repository, on demand (sync_all) and
  whenever the connection manager reports that connectivity came back.

The sync protocol itself (push tombstones, push dirty rows, pull) lives in
the repositories; this module only runs it and records the outcome.
"""

from __future__ import annotations
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
import logging

from salon_core.errors import error_boundary, safe_execute
from salon_core.offline.connection_manager import ConnectionState, ConnectionStatus
from salon_core.services.base_service import OperationResult

logger = logging.getLogger(__name__)


class SyncStatus(Enum):
    """Sync coordinator status. There is no failed terminal state."""
    IDLE = "idle"
    SYNCING = "syncing"


@dataclass
class SyncState:
    """Current sync state of one repository."""
    status: SyncStatus = SyncStatus.IDLE
    last_sync: Optional[datetime] = None
    last_sync_success: Optional[datetime] = None
    last_error: Optional[str] = None
    last_result: Dict[str, int] = field(default_factory=dict)
    total_synced: int = 0
    in_flight: int = 0

    @property
    def is_syncing(self) -> bool:
        return self.status == SyncStatus.SYNCING


class SyncCoordinator:
    """
    Tracks sync passes for one collection.

    Overlapping passes are allowed; the state stays SYNCING until the last
    in-flight pass finishes.
    """

    def __init__(self, name: str):
        self.name = name
        self._state = SyncState()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[SyncState], None]] = []

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def status(self) -> SyncStatus:
        return self._state.status

    def run(self, sync_pass: Callable[[], OperationResult]) -> OperationResult:
        """
        Run one sync pass and record its outcome.

        Args:
            sync_pass: Callable performing the pass and returning a result

        Returns:
            The pass result (a failed result if the pass raised)
        """
        with self._lock:
            self._state.in_flight += 1
            self._state.status = SyncStatus.SYNCING
            self._state.last_sync = datetime.now(timezone.utc)
        self._notify_callbacks()

        try:
            result = sync_pass()
        except Exception as e:
            logger.error(f"[{self.name}] sync pass raised: {e}")
            result = OperationResult.from_exception(e)

        with self._lock:
            self._state.in_flight -= 1
            if self._state.in_flight == 0:
                self._state.status = SyncStatus.IDLE
            if result.success:
                self._state.last_sync_success = datetime.now(timezone.utc)
                self._state.last_error = None
                counts = result.metadata or {}
                self._state.last_result = {k: v for k, v in counts.items() if isinstance(v, int)}
                self._state.total_synced += counts.get("pushed", 0) + counts.get("deleted", 0)
            else:
                self._state.last_error = result.error
        self._notify_callbacks()

        return result

    def register_callback(self, callback: Callable[[SyncState], None]) -> None:
        """Register a callback for sync state changes."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[SyncState], None]) -> None:
        """Remove a registered callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        for callback in list(self._callbacks):
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Error in sync callback: {e}")

    def get_status_display(self) -> Dict[str, Any]:
        """Get sync status for display."""
        return {
            "collection": self.name,
            "status": self._state.status.value,
            "last_sync": self._state.last_sync.isoformat() if self._state.last_sync else None,
            "last_success": self._state.last_sync_success.isoformat() if self._state.last_sync_success else None,
            "last_error": self._state.last_error,
            "last_result": dict(self._state.last_result),
            "total_synced": self._state.total_synced,
        }


class SyncEngine:
    """
    Syncs every registered repository.

    Usage:
        engine = SyncEngine(connection_manager)
        engine.register(customers)
        engine.start()       # sync whenever connectivity comes back
        engine.sync_all()    # or sync right now
    """

    def __init__(self, connection_manager, local_db=None):
        self._connection_manager = connection_manager
        self._local_db = local_db
        self._repositories: Dict[str, Any] = {}
        self._worker: Optional[threading.Thread] = None
        self._started = False

    def register(self, repository) -> None:
        """Add a repository (anything with `collection` and `sync()`)."""
        self._repositories[repository.collection] = repository

    @property
    def repositories(self) -> Dict[str, Any]:
        return dict(self._repositories)

    @property
    def is_syncing(self) -> bool:
        return any(repo.sync_state.is_syncing for repo in self._repositories.values())

    @property
    def pending_count(self) -> int:
        """Dirty rows plus pending deletes across all tables (0 when unreadable)."""
        if self._local_db is None:
            return 0
        return safe_execute(
            self._local_db.get_pending_count,
            default=0,
            error_message="Could not count pending changes",
        )

    def sync_all(self) -> Dict[str, OperationResult]:
        """
        Run sync() on every registered repository.

        Returns:
            Mapping of collection name to its sync result
        """
        results: Dict[str, OperationResult] = {}
        for name, repository in self._repositories.items():
            results[name] = repository.sync()

        succeeded = sum(1 for r in results.values() if r.success)
        logger.info(f"Sync pass finished: {succeeded}/{len(results)} collections synced")
        return results

    def start(self) -> None:
        """Sync automatically whenever connectivity is restored."""
        if self._started:
            return
        self._connection_manager.register_callback(self._on_connection_change)
        self._started = True
        logger.info("Sync engine started")

    def stop(self) -> None:
        """Stop reacting to connectivity changes and wait for a running pass."""
        self._connection_manager.unregister_callback(self._on_connection_change)
        self._started = False
        self.wait(timeout=10)
        logger.info("Sync engine stopped")

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the connectivity-triggered pass (if any) finishes."""
        worker = self._worker
        if worker is not None:
            worker.join(timeout=timeout)

    def _on_connection_change(self, state: ConnectionState) -> None:
        """Handle connection status changes."""
        if state.status != ConnectionStatus.ONLINE:
            return

        logger.info("Connection restored, triggering sync")
        self._worker = threading.Thread(
            target=self._background_sync,
            daemon=True,
            name="SyncEngine"
        )
        self._worker.start()

    @error_boundary(default_return={})
    def _background_sync(self) -> Dict[str, OperationResult]:
        return self.sync_all()

    def get_status_display(self) -> Dict[str, Any]:
        """Get sync status for every collection."""
        return {
            "is_syncing": self.is_syncing,
            "pending_count": self.pending_count,
            "collections": {
                name: repo.sync_coordinator.get_status_display()
                for name, repo in self._repositories.items()
            },
        }
