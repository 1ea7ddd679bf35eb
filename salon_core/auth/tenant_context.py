# =============================================================================
# salon_core/auth/tenant_context.py
# Session Boundary: Which Tenant Is Signed In
# =============================================================================
"""
TenantContext - resolves the authenticated tenant id.

In this multi-tenant model the signed-in account's user id IS the business
(tenant) id. Repositories call current_tenant_id() on every read and write
and never accept a tenant id from their callers. Listeners registered with
register_listener() are called with the new tenant id (or None) after every
sign-in and sign-out.
"""

from __future__ import annotations
import threading
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from salon_core.auth.messages import DEFAULT_LOCALE, get_message
from salon_core.errors import AuthenticationError, TenantMismatchError
from salon_core.logging import get_logger

logger = get_logger(__name__)


class TenantContext(ABC):
    """Base class for tenant resolution."""

    def __init__(self, locale: str = DEFAULT_LOCALE):
        self.locale = locale
        self._listeners: List[Callable[[Optional[str]], None]] = []

    @abstractmethod
    def _tenant_id(self) -> Optional[str]:
        """Current tenant id, or None when nobody is signed in."""

    @abstractmethod
    def revoke_credentials(self) -> None:
        """Delete the signed-in credential and end the session."""

    def current_tenant_id(self) -> str:
        """
        Get the authenticated tenant id.

        Raises:
            AuthenticationError: when no session is active
        """
        tenant_id = self._tenant_id()
        if not tenant_id:
            raise AuthenticationError(get_message("auth_required", self.locale))
        return tenant_id

    @property
    def is_authenticated(self) -> bool:
        return bool(self._tenant_id())

    def validate_access(self, business_id: str) -> bool:
        """True when `business_id` is the signed-in tenant."""
        tenant_id = self._tenant_id()
        return tenant_id is not None and tenant_id == business_id

    def register_listener(self, callback: Callable[[Optional[str]], None]) -> None:
        """Register a callback for tenant changes."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unregister_listener(self, callback: Callable[[Optional[str]], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify_changed(self) -> None:
        tenant_id = self._tenant_id()
        for callback in list(self._listeners):
            try:
                callback(tenant_id)
            except Exception as e:
                logger.error(f"Error in tenant change callback: {e}")

    def tenant_error(
        self,
        record_id: Optional[str] = None,
        collection: Optional[str] = None,
    ) -> TenantMismatchError:
        """Build the localized error for a cross-tenant access."""
        return TenantMismatchError(
            get_message("tenant_denied", self.locale),
            record_id=record_id,
            collection=collection,
        )


class SessionTenantContext(TenantContext):
    """
    Tenant context driven by explicit sign-in/sign-out calls.

    Usage:
        context = SessionTenantContext()
        context.sign_in("tenant-uid", email="owner@example.com")
        context.current_tenant_id()  # "tenant-uid"
    """

    def __init__(self, tenant_id: Optional[str] = None, email: Optional[str] = None, locale: str = DEFAULT_LOCALE):
        super().__init__(locale)
        self._lock = threading.Lock()
        self._tenant = tenant_id
        self.email = email
        self.revoked = False

    def _tenant_id(self) -> Optional[str]:
        return self._tenant

    def sign_in(self, tenant_id: str, email: Optional[str] = None) -> None:
        with self._lock:
            self._tenant = tenant_id
            self.email = email
            self.revoked = False
        logger.info(f"Signed in tenant {tenant_id}")
        self._notify_changed()

    def sign_out(self) -> None:
        with self._lock:
            self._tenant = None
            self.email = None
        logger.info("Signed out")
        self._notify_changed()

    def revoke_credentials(self) -> None:
        self.revoked = True
        self.sign_out()


class SupabaseTenantContext(TenantContext):
    """
    Tenant context backed by the Supabase Auth session of a client.

    Args:
        client: Supabase client (from get_supabase_client)
    """

    def __init__(self, client, locale: str = DEFAULT_LOCALE):
        super().__init__(locale)
        self.client = client
        self.client.auth.on_auth_state_change(self._on_auth_state_change)

    def _on_auth_state_change(self, event, session) -> None:
        logger.debug(f"Supabase auth event: {event}")
        self._notify_changed()

    def _tenant_id(self) -> Optional[str]:
        try:
            session = self.client.auth.get_session()
        except Exception as e:
            logger.debug(f"Could not read Supabase session: {e}")
            return None

        if session is None or getattr(session, "user", None) is None:
            return None
        return session.user.id

    def revoke_credentials(self) -> None:
        """
        Delete the Supabase Auth user, then sign out.

        Requires a client created with a key allowed to use the admin API.
        """
        user_id = self.current_tenant_id()
        self.client.auth.admin.delete_user(user_id)
        self.client.auth.sign_out()
        logger.info(f"Deleted auth user {user_id}")
