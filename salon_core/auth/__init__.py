# =============================================================================
# salon_core/auth/__init__.py
# Session Boundary and Account Administration
# =============================================================================
"""
Tenant resolution and account administration.

The signed-in user's id is the business (tenant) id; every repository asks
the TenantContext for it and never trusts a caller-supplied one.
"""

from .messages import get_message, MESSAGES, DEFAULT_LOCALE
from .tenant_context import (
    TenantContext,
    SessionTenantContext,
    SupabaseTenantContext,
)
from .account_service import AccountService

__all__ = [
    "get_message",
    "MESSAGES",
    "DEFAULT_LOCALE",
    "TenantContext",
    "SessionTenantContext",
    "SupabaseTenantContext",
    "AccountService",
]
