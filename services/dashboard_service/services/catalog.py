"""Product catalog operations."""

from typing import Any, Optional

from pydantic import ValidationError

from libs.auth.permissions import PRODUCT_POLICY, Action
from libs.auth.resolver import AuthorizationResolver
from libs.common.logging import get_logger
from libs.db.documents import SERVER_TIMESTAMP, DocumentStore, DocumentStoreError
from services.dashboard_service.models import PRODUCTS, Product, store_collection
from services.dashboard_service.services.results import (
    ActionResult,
    ResultCode,
    handles_store_errors,
)

logger = get_logger(__name__)

PROTECTED_PRODUCT_FIELDS = frozenset({"id", "store_id", "created_at", "created_by"})


class CatalogService:
    def __init__(self, store: DocumentStore, resolver: AuthorizationResolver):
        self.store = store
        self.resolver = resolver

    async def _authorize(self, store_id: str, principal_id: Optional[str], action: Action):
        return await self.resolver.require_permission(
            store_id, principal_id, action, "product", PRODUCT_POLICY
        )

    @handles_store_errors("Failed to load products")
    async def list_products(self, store_id: str, principal_id: Optional[str]) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.READ)
        if not auth.allowed:
            return ActionResult.denied(auth)
        docs = await self.store.query(store_collection(store_id, PRODUCTS))
        docs.sort(key=lambda d: d.create_time, reverse=True)
        return ActionResult.ok(data=[d.to_dict() for d in docs])

    @handles_store_errors("Failed to load product")
    async def get_product(
        self, store_id: str, principal_id: Optional[str], product_id: str
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.READ)
        if not auth.allowed:
            return ActionResult.denied(auth)
        doc = await self.store.get(store_collection(store_id, PRODUCTS), product_id)
        if doc is None:
            return ActionResult.not_found("Product not found")
        return ActionResult.ok(data=doc.to_dict(), id=doc.id)

    @handles_store_errors("Internal server error")
    async def create_product(
        self, store_id: str, principal_id: Optional[str], data: dict[str, Any]
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.CREATE)
        if not auth.allowed:
            return ActionResult.denied(auth)
        try:
            product = Product.model_validate(
                {k: v for k, v in data.items() if k not in PROTECTED_PRODUCT_FIELDS}
            )
        except ValidationError:
            return ActionResult.rejected("Invalid product data")

        record = product.to_document()
        record.update(
            store_id=store_id,
            created_by=principal_id,
            updated_by=principal_id,
            created_at=SERVER_TIMESTAMP,
            updated_at=SERVER_TIMESTAMP,
        )
        try:
            product_id = await self.store.add(store_collection(store_id, PRODUCTS), record)
        except DocumentStoreError:
            logger.exception("Error creating product in store %s", store_id)
            return ActionResult.fail(ResultCode.ERROR, "Internal server error")

        logger.info("Created product %s in store %s", product_id, store_id)
        return ActionResult.ok(
            id=product_id, message="Product created successfully", product_id=product_id
        )

    @handles_store_errors("Internal server error")
    async def update_product(
        self,
        store_id: str,
        principal_id: Optional[str],
        product_id: str,
        changes: dict[str, Any],
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.UPDATE)
        if not auth.allowed:
            return ActionResult.denied(auth)

        products = store_collection(store_id, PRODUCTS)
        update = {k: v for k, v in changes.items() if k not in PROTECTED_PRODUCT_FIELDS}
        update["updated_at"] = SERVER_TIMESTAMP
        update["updated_by"] = principal_id
        try:
            if await self.store.get(products, product_id) is None:
                return ActionResult.not_found("Product not found")
            await self.store.update(products, product_id, update)
        except DocumentStoreError:
            logger.exception("Error updating product %s in store %s", product_id, store_id)
            return ActionResult.fail(ResultCode.ERROR, "Internal server error")
        return ActionResult.ok(message="Product updated successfully")

    @handles_store_errors("Internal server error")
    async def delete_product(
        self, store_id: str, principal_id: Optional[str], product_id: str
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.DELETE)
        if not auth.allowed:
            return ActionResult.denied(auth)

        products = store_collection(store_id, PRODUCTS)
        try:
            if await self.store.get(products, product_id) is None:
                return ActionResult.not_found("Product not found")
            await self.store.delete(products, product_id)
        except DocumentStoreError:
            logger.exception("Error deleting product %s in store %s", product_id, store_id)
            return ActionResult.fail(ResultCode.ERROR, "Internal server error")

        logger.info("Deleted product %s from store %s", product_id, store_id)
        return ActionResult.ok(message="Product deleted successfully")
