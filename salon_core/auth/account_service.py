# =============================================================================
# salon_core/auth/account_service.py
# Account Administration: Full-Tenant Deletion
# =============================================================================
"""
AccountService - deletes an account and every record its business owns.

Usage:
    result = services.accounts.delete_account("owner@example.com")
    if not result:
        print(result.error)
"""

from __future__ import annotations
from typing import Dict, Iterable

from salon_core.auth.messages import get_message
from salon_core.errors import ErrorContext, NetworkUnavailableError
from salon_core.services.base_service import BaseService, OperationResult

USERS_COLLECTION = "users"
USERNAME_MAPPINGS_COLLECTION = "username_mappings"


class AccountService(BaseService):
    """
    Full-tenant deletion across the cloud store and the local replica.

    Supabase has no write batch spanning several tables, so the deletion
    runs in two phases: every entity collection is read first, and nothing
    is deleted unless all reads succeed. A failure during the delete phase
    can leave some collections already emptied; the credential is kept in
    that case and calling delete_account() again finishes the job.

    Args:
        tenant_context: Session boundary (also revokes the credential)
        remote_store: Cloud document store
        local_db: Local replica
        connection_manager: Online gate
        repositories: Entity repositories whose collections/tables are wiped
        delete_batch_limit: Max documents deleted per collection
    """

    def __init__(
        self,
        tenant_context,
        remote_store,
        local_db,
        connection_manager,
        repositories: Iterable = (),
        delete_batch_limit: int = 500,
    ):
        super().__init__()
        self.tenant_context = tenant_context
        self.remote_store = remote_store
        self.local_db = local_db
        self.connection_manager = connection_manager
        self.repositories = list(repositories)
        self.delete_batch_limit = delete_batch_limit

    def delete_account(self, email: str) -> OperationResult:
        """
        Delete the signed-in account and its business data.

        Steps: read every entity collection, then delete the users document,
        the username mapping for `email`, up to `delete_batch_limit`
        documents per entity collection, the auth credential, and finally
        the tenant's local rows.

        Returns:
            OperationResult with per-collection deleted counts in metadata
        """
        with ErrorContext("Deleting account") as ctx:
            tenant_id = self.tenant_context.current_tenant_id()
            if self.remote_store is None or not self.connection_manager.is_online:
                raise NetworkUnavailableError(get_message("offline", self.tenant_context.locale))

            with self.log_operation(f"Deleting account {tenant_id}"):
                planned = self._plan_remote(tenant_id)
                deleted = self._delete_remote(tenant_id, email)
                self.tenant_context.revoke_credentials()
                removed = self._clear_local(tenant_id)

            return OperationResult.ok(
                data=tenant_id,
                metadata={"deleted": deleted, "planned": planned, "local_removed": removed},
            )

        return OperationResult.fail(
            ctx.error["message"],
            error_code=ctx.error["code"],
            metadata=ctx.error["details"],
        )

    def _plan_remote(self, tenant_id: str) -> Dict[str, int]:
        """Read phase: documents per collection that the delete phase will remove."""
        planned: Dict[str, int] = {}
        for repository in self.repositories:
            documents = self.remote_store.query_by_tenant(repository.collection, tenant_id)
            planned[repository.collection] = min(len(documents), self.delete_batch_limit)
        return planned

    def _delete_remote(self, tenant_id: str, email: str) -> Dict[str, int]:
        deleted: Dict[str, int] = {}

        self.remote_store.delete_document(USERS_COLLECTION, tenant_id)
        deleted[USERS_COLLECTION] = 1

        deleted[USERNAME_MAPPINGS_COLLECTION] = self.remote_store.delete_where(
            USERNAME_MAPPINGS_COLLECTION, "email", email, 1
        )

        for repository in self.repositories:
            deleted[repository.collection] = self.remote_store.delete_by_tenant(
                repository.collection, tenant_id, self.delete_batch_limit
            )
            self.logger.info(f"Deleted {deleted[repository.collection]} documents from {repository.collection}")

        return deleted

    def _clear_local(self, tenant_id: str) -> int:
        removed = 0
        with self.local_db.transaction():
            for repository in self.repositories:
                removed += self.local_db.delete_where(repository.table, "business_id = ?", [tenant_id])
            self.local_db.delete_where("pending_deletes", "business_id = ?", [tenant_id])
            self.local_db.delete_where("app_settings", "key LIKE ?", [f"last_sync:{tenant_id}:%"])
        return removed
