# =============================================================================
# salon_core/data/supabase_client.py
# Supabase Client Configuration for the Salon Sync Core
# Document operations against Supabase tables
# =============================================================================

from __future__ import annotations
from typing import Any, List, Optional

from supabase import Client, create_client

from salon_core.config import SyncConfig
from salon_core.data.remote_store import (
    DEFAULT_PAGE_SIZE,
    TENANT_FIELD,
    Document,
    RemoteStore,
)
from salon_core.errors import ConfigurationError, RemoteStoreError
from salon_core.logging import get_logger

logger = get_logger(__name__)


def get_supabase_client(config: SyncConfig) -> Optional[Client]:
    """
    Create a Supabase client from the configuration.

    Expects in the config file:
        [supabase]
        url = "https://your-project.supabase.co"
        key = "your-anon-key"

    Returns:
        Supabase client instance, or None when running local-only
    """
    if not config.has_supabase:
        logger.warning("Supabase credentials not configured; running local-only")
        return None

    try:
        return create_client(config.supabase_url, config.supabase_key)
    except Exception as e:
        raise ConfigurationError(
            f"Failed to initialize Supabase client: {e}",
            config_key="supabase",
        ) from e


class SupabaseRemoteStore(RemoteStore):
    """
    RemoteStore backed by Supabase (PostgREST) tables.

    Each collection is a table whose columns are the document's camelCase
    field names, with `id` as primary key.
    """

    def __init__(self, client: Client, page_size: int = DEFAULT_PAGE_SIZE):
        """
        Args:
            client: Supabase client
            page_size: Rows per request when paging (Supabase caps at 1000)
        """
        self.client = client
        self.page_size = page_size

    def set_document(self, collection: str, document: Document) -> None:
        try:
            self.client.table(collection).upsert(document).execute()
        except Exception as e:
            raise RemoteStoreError(
                f"Error upserting document: {e}",
                collection=collection,
                document_id=document.get("id"),
            ) from e

    def delete_document(self, collection: str, document_id: str) -> None:
        try:
            self.client.table(collection).delete().eq("id", document_id).execute()
        except Exception as e:
            raise RemoteStoreError(
                f"Error deleting document: {e}",
                collection=collection,
                document_id=document_id,
            ) from e

    def query_by_tenant(self, collection: str, tenant_id: str) -> List[Document]:
        """
        Fetch ALL documents of a tenant (handles the Supabase 1000 row limit).

        Uses pagination ordered by id so pages do not overlap.
        """
        try:
            all_data: List[Document] = []
            offset = 0

            while True:
                response = (
                    self.client.table(collection)
                    .select("*")
                    .eq(TENANT_FIELD, tenant_id)
                    .order("id")
                    .range(offset, offset + self.page_size - 1)
                    .execute()
                )

                if response.data:
                    all_data.extend(response.data)
                    # If we got fewer than page_size, we've reached the end
                    if len(response.data) < self.page_size:
                        break
                    offset += self.page_size
                else:
                    break

            return all_data

        except Exception as e:
            raise RemoteStoreError(
                f"Error fetching data from {collection}: {e}",
                collection=collection,
            ) from e

    def delete_by_tenant(self, collection: str, tenant_id: str, limit: int) -> int:
        return self.delete_where(collection, TENANT_FIELD, tenant_id, limit)

    def delete_where(self, collection: str, field: str, value: Any, limit: int) -> int:
        """Select at most `limit` matching ids, then delete them in one request."""
        try:
            response = (
                self.client.table(collection)
                .select("id")
                .eq(field, value)
                .limit(limit)
                .execute()
            )
            ids = [row["id"] for row in (response.data or [])]
            if not ids:
                return 0

            self.client.table(collection).delete().in_("id", ids).execute()
            logger.debug(f"Deleted {len(ids)} documents from {collection} where {field} matched")
            return len(ids)

        except Exception as e:
            raise RemoteStoreError(
                f"Error deleting from {collection}: {e}",
                collection=collection,
            ) from e
