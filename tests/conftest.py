# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import pytest
from typing import List

from fakes import TENANT_A, InMemoryRemoteStore, make_connection

from salon_core.auth import SessionTenantContext
from salon_core.config import SyncConfig
from salon_core.offline import LocalDatabase
from salon_core.services.container import create_services


# =============================================================================
# INFRASTRUCTURE FIXTURES
# =============================================================================

@pytest.fixture
def local_db(tmp_path):
    """Fresh SQLite replica in a temp directory"""
    db = LocalDatabase(tmp_path / "salon.db")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def remote():
    """Shared in-memory cloud store"""
    return InMemoryRemoteStore()


@pytest.fixture
def connection():
    """Connection manager forced online (no network probes)"""
    return make_connection(online=True)


@pytest.fixture
def tenant():
    """Signed-in session for tenant A"""
    return SessionTenantContext(TENANT_A, email="owner-a@example.com")


# =============================================================================
# APPLICATION FIXTURES
# =============================================================================

@pytest.fixture
def app(tmp_path, local_db, remote, connection, tenant):
    """Fully wired services for tenant A on one device"""
    services = create_services(
        SyncConfig(db_path=tmp_path / "salon.db", start_monitoring=False),
        local_db=local_db,
        remote_store=remote,
        connection_manager=connection,
        tenant_context=tenant,
        start_sync_engine=False,
    )
    yield services
    services.sync_engine.stop()


@pytest.fixture
def make_device(tmp_path, remote):
    """
    Factory for extra devices sharing the same cloud store.

    Usage:
        device = make_device("phone", tenant_id="tenant-a")
    """
    created = []

    def _make(name: str, tenant_id: str = TENANT_A, online: bool = True):
        db = LocalDatabase(tmp_path / f"{name}.db")
        services = create_services(
            SyncConfig(db_path=tmp_path / f"{name}.db", start_monitoring=False),
            local_db=db,
            remote_store=remote,
            connection_manager=make_connection(online),
            tenant_context=SessionTenantContext(tenant_id),
            start_sync_engine=False,
        )
        created.append(services)
        return services

    yield _make

    for services in created:
        services.sync_engine.stop()
        services.local_db.close()


class Recorder:
    """Collects LiveQuery emissions"""

    def __init__(self):
        self.values: List = []

    def __call__(self, value):
        self.values.append(value)

    @property
    def last(self):
        return self.values[-1]


@pytest.fixture
def recorder():
    return Recorder()
