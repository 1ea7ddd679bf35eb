# =============================================================================
# salon_core/offline/__init__.py
# Offline-First Building Blocks for the Salon Sync Core
# =============================================================================
"""
Offline-First Architecture Module

Every read is served by the local SQLite replica; writes land locally first
and reach the cloud store through best-effort pushes and sync passes.

Architecture:
------------
    Repository (one per entity)
        │
        ├── LocalDatabase ──► LiveQuery (push-based results)
        │
        ├── RemoteStore (Supabase) ◄── gated by ConnectionManager.is_online
        │
        └── SyncCoordinator ◄── SyncEngine (sync_all / connectivity restored)

Usage:
------
from salon_core.offline import ConnectionManager, LocalDatabase

db = LocalDatabase("local_data/salon.db")
db.initialize()
manager = ConnectionManager(supabase_url=url, supabase_key=key)
manager.initialize()
"""

from salon_core.offline.connection_manager import (
    ConnectionManager,
    ConnectionState,
    ConnectionStatus,
)

from salon_core.offline.local_database import (
    LocalDatabase,
    utc_now_iso,
)

from salon_core.offline.live_query import (
    LiveQuery,
    Subscription,
)

from salon_core.offline.sync_engine import (
    SyncCoordinator,
    SyncEngine,
    SyncState,
    SyncStatus,
)

__all__ = [
    # Connection Management
    "ConnectionManager",
    "ConnectionState",
    "ConnectionStatus",
    # Local Database
    "LocalDatabase",
    "utc_now_iso",
    # Reactive Queries
    "LiveQuery",
    "Subscription",
    # Sync
    "SyncCoordinator",
    "SyncEngine",
    "SyncState",
    "SyncStatus",
]
