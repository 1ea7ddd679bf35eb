# =============================================================================
# salon_core/data/remote_store.py
# Remote Document Store Contract
# =============================================================================
"""
RemoteStore - the operations the repositories need from the cloud store.

Documents are plain dicts keyed by camelCase field names. Every collection
document carries `id` and `businessId`; the tenant filter is the only
server-side constraint ever applied by a pull.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List

Document = Dict[str, Any]

TENANT_FIELD = "businessId"
DEFAULT_PAGE_SIZE = 1000


class RemoteStore(ABC):
    """Abstract cloud document store. Implementations raise RemoteStoreError."""

    @abstractmethod
    def set_document(self, collection: str, document: Document) -> None:
        """Create or fully overwrite the document with `document['id']`."""

    @abstractmethod
    def delete_document(self, collection: str, document_id: str) -> None:
        """Delete a document by id. Deleting a missing document succeeds."""

    @abstractmethod
    def query_by_tenant(self, collection: str, tenant_id: str) -> List[Document]:
        """Every document of `collection` whose businessId equals `tenant_id`."""

    @abstractmethod
    def delete_by_tenant(self, collection: str, tenant_id: str, limit: int) -> int:
        """
        Delete up to `limit` documents owned by `tenant_id`.

        Returns:
            Number of documents deleted
        """

    @abstractmethod
    def delete_where(self, collection: str, field: str, value: Any, limit: int) -> int:
        """Delete up to `limit` documents whose `field` equals `value`."""
