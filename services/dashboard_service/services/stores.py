"""Store (tenant) settings operations."""

from typing import Any, Optional

from libs.auth.permissions import STORE_POLICY, Action
from libs.auth.resolver import AuthorizationResolver
from libs.common.logging import get_logger
from libs.db.documents import SERVER_TIMESTAMP, DocumentStore, DocumentStoreError
from services.dashboard_service.models import STORES
from services.dashboard_service.services.results import (
    ActionResult,
    ResultCode,
    handles_store_errors,
)

logger = get_logger(__name__)

# Never writable through the settings endpoints
PROTECTED_STORE_FIELDS = frozenset({"id", "owner_id", "created_at"})


class StoreService:
    def __init__(self, store: DocumentStore, resolver: AuthorizationResolver):
        self.store = store
        self.resolver = resolver

    @handles_store_errors("Failed to load store")
    async def get_store(self, store_id: str, principal_id: Optional[str]) -> ActionResult:
        auth = await self.resolver.require_permission(
            store_id, principal_id, Action.READ, "store", STORE_POLICY
        )
        if not auth.allowed:
            return ActionResult.denied(auth)
        doc = await self.store.get(STORES, store_id)
        if doc is None:
            return ActionResult.not_found("Store not found")
        return ActionResult.ok(data=doc.to_dict(), id=doc.id)

    @handles_store_errors("Internal server error")
    async def update_store(
        self, store_id: str, principal_id: Optional[str], changes: dict[str, Any]
    ) -> ActionResult:
        auth = await self.resolver.require_permission(
            store_id, principal_id, Action.UPDATE, "store", STORE_POLICY
        )
        if not auth.allowed:
            return ActionResult.denied(auth)

        update = {k: v for k, v in changes.items() if k not in PROTECTED_STORE_FIELDS}
        update["updated_at"] = SERVER_TIMESTAMP
        update["updated_by"] = principal_id
        try:
            await self.store.update(STORES, store_id, update)
        except DocumentStoreError:
            logger.exception("Error updating store %s", store_id)
            return ActionResult.fail(ResultCode.ERROR, "Internal server error")

        logger.info("Store %s updated by %s", store_id, principal_id)
        return ActionResult.ok(message="Store updated successfully")

    @handles_store_errors("Internal server error")
    async def delete_store(self, store_id: str, principal_id: Optional[str]) -> ActionResult:
        auth = await self.resolver.require_permission(
            store_id, principal_id, Action.DELETE, "store", STORE_POLICY
        )
        if not auth.allowed:
            return ActionResult.denied(auth)
        try:
            await self.store.delete(STORES, store_id)
        except DocumentStoreError:
            logger.exception("Error deleting store %s", store_id)
            return ActionResult.fail(ResultCode.ERROR, "Internal server error")

        logger.info("Store %s deleted by %s", store_id, principal_id)
        return ActionResult.ok(message="Store deleted successfully")

    @handles_store_errors("Failed to load permissions")
    async def get_permissions(self, store_id: str, principal_id: Optional[str]) -> ActionResult:
        """The caller's role and dashboard permissions in the store."""
        if not principal_id:
            return ActionResult.fail(ResultCode.UNAUTHORIZED, "Unauthorized")
        if await self.store.get(STORES, store_id) is None:
            return ActionResult.not_found("Store not found")
        snapshot = await self.resolver.permissions_for(store_id, principal_id)
        return ActionResult.ok(data=snapshot.to_dict())
