"""SEO settings documents for stores and products."""

from typing import Any, Optional

from pydantic import ValidationError

from libs.auth.permissions import SEO_POLICY, Action
from libs.auth.resolver import AuthorizationResolver
from libs.common.logging import get_logger
from libs.db.documents import SERVER_TIMESTAMP, DocumentStore
from services.dashboard_service.models import (
    PRODUCTS,
    ROBOTS_DOC,
    SEO_DOC,
    SETTINGS,
    SITEMAP_DOC,
    DocumentModel,
    RobotsTxtConfig,
    SeoSettings,
    SitemapConfig,
    store_collection,
)
from services.dashboard_service.services.results import ActionResult, handles_store_errors

logger = get_logger(__name__)


def settings_collection(store_id: str) -> str:
    return store_collection(store_id, SETTINGS)


def product_settings_collection(store_id: str, product_id: str) -> str:
    return f"{store_collection(store_id, PRODUCTS)}/{product_id}/{SETTINGS}"


class SeoService:
    def __init__(self, store: DocumentStore, resolver: AuthorizationResolver):
        self.store = store
        self.resolver = resolver

    async def _read(
        self,
        store_id: str,
        principal_id: Optional[str],
        collection: str,
        doc_id: str,
        model: type[DocumentModel],
    ) -> ActionResult:
        auth = await self.resolver.require_permission(
            store_id, principal_id, Action.READ, "seo", SEO_POLICY
        )
        if not auth.allowed:
            return ActionResult.denied(auth)
        doc = await self.store.get(collection, doc_id)
        # Unsaved settings read as defaults
        current = model.from_document(doc) if doc else model()
        return ActionResult.ok(data=current.model_dump(mode="json", exclude={"id"}))

    async def _write(
        self,
        store_id: str,
        principal_id: Optional[str],
        collection: str,
        doc_id: str,
        model: type[DocumentModel],
        changes: dict[str, Any],
        **scope: Any,
    ) -> ActionResult:
        auth = await self.resolver.require_permission(
            store_id, principal_id, Action.UPDATE, "seo", SEO_POLICY
        )
        if not auth.allowed:
            return ActionResult.denied(auth)
        if scope.get("product_id") and not await self.store.get(
            store_collection(store_id, PRODUCTS), scope["product_id"]
        ):
            return ActionResult.not_found("Product not found")

        update = {k: v for k, v in changes.items() if k != "id"}
        try:
            model.model_validate(update)
        except ValidationError:
            return ActionResult.rejected("Invalid SEO settings")
        update.update(scope)
        update["updated_at"] = SERVER_TIMESTAMP
        await self.store.set(collection, doc_id, update, merge=True)
        logger.info("Updated %s/%s for store %s", collection, doc_id, store_id)
        return ActionResult.ok()

    @handles_store_errors("Error loading SEO settings")
    async def get_store_seo(self, store_id: str, principal_id: Optional[str]) -> ActionResult:
        return await self._read(
            store_id, principal_id, settings_collection(store_id), SEO_DOC, SeoSettings
        )

    @handles_store_errors("Error updating SEO settings")
    async def update_store_seo(
        self, store_id: str, principal_id: Optional[str], changes: dict[str, Any]
    ) -> ActionResult:
        return await self._write(
            store_id,
            principal_id,
            settings_collection(store_id),
            SEO_DOC,
            SeoSettings,
            changes,
            store_id=store_id,
        )

    @handles_store_errors("Error loading SEO settings")
    async def get_product_seo(
        self, store_id: str, principal_id: Optional[str], product_id: str
    ) -> ActionResult:
        return await self._read(
            store_id,
            principal_id,
            product_settings_collection(store_id, product_id),
            SEO_DOC,
            SeoSettings,
        )

    @handles_store_errors("Error updating SEO settings")
    async def update_product_seo(
        self,
        store_id: str,
        principal_id: Optional[str],
        product_id: str,
        changes: dict[str, Any],
    ) -> ActionResult:
        return await self._write(
            store_id,
            principal_id,
            product_settings_collection(store_id, product_id),
            SEO_DOC,
            SeoSettings,
            changes,
            store_id=store_id,
            product_id=product_id,
        )

    @handles_store_errors("Error loading sitemap configuration")
    async def get_sitemap_config(self, store_id: str, principal_id: Optional[str]) -> ActionResult:
        return await self._read(
            store_id, principal_id, settings_collection(store_id), SITEMAP_DOC, SitemapConfig
        )

    @handles_store_errors("Error updating sitemap configuration")
    async def update_sitemap_config(
        self, store_id: str, principal_id: Optional[str], changes: dict[str, Any]
    ) -> ActionResult:
        return await self._write(
            store_id,
            principal_id,
            settings_collection(store_id),
            SITEMAP_DOC,
            SitemapConfig,
            changes,
            store_id=store_id,
        )

    @handles_store_errors("Error loading robots.txt configuration")
    async def get_robots_config(self, store_id: str, principal_id: Optional[str]) -> ActionResult:
        return await self._read(
            store_id, principal_id, settings_collection(store_id), ROBOTS_DOC, RobotsTxtConfig
        )

    @handles_store_errors("Error updating robots.txt configuration")
    async def update_robots_config(
        self, store_id: str, principal_id: Optional[str], changes: dict[str, Any]
    ) -> ActionResult:
        return await self._write(
            store_id,
            principal_id,
            settings_collection(store_id),
            ROBOTS_DOC,
            RobotsTxtConfig,
            changes,
            store_id=store_id,
        )
