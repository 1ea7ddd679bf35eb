# =============================================================================
# salon_core/data/__init__.py
# Cloud Document Store Access
# =============================================================================

from .remote_store import RemoteStore, Document, TENANT_FIELD, DEFAULT_PAGE_SIZE
from .supabase_client import get_supabase_client, SupabaseRemoteStore

__all__ = [
    "RemoteStore",
    "Document",
    "TENANT_FIELD",
    "DEFAULT_PAGE_SIZE",
    "get_supabase_client",
    "SupabaseRemoteStore",
]
