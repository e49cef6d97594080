"""Tracking integrations and social media widgets."""

from typing import Any, Optional

from pydantic import ValidationError

from libs.auth.permissions import INTEGRATIONS_POLICY, Action
from libs.auth.resolver import AuthorizationResolver
from libs.common.config import Settings, get_settings
from libs.common.logging import get_logger
from libs.db.documents import SERVER_TIMESTAMP, DocumentStore, Transaction, where
from services.dashboard_service.models import (
    TRACKING,
    WIDGETS,
    SocialMediaWidget,
    TrackingIntegration,
    store_collection,
)
from services.dashboard_service.services.embeds import generate_embed_code
from services.dashboard_service.services.results import ActionResult, handles_store_errors

logger = get_logger(__name__)

# Changing any of these regenerates a widget's embed code
_EMBED_FIELDS = ("type", "url", "width", "height", "autoplay", "loop")


class IntegrationsService:
    def __init__(
        self,
        store: DocumentStore,
        resolver: AuthorizationResolver,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.resolver = resolver
        self.settings = settings or get_settings()

    async def _authorize(self, store_id: str, principal_id: Optional[str], action: Action):
        return await self.resolver.require_permission(
            store_id, principal_id, action, "integrations", INTEGRATIONS_POLICY
        )

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    @handles_store_errors("Error loading tracking integrations")
    async def list_tracking(self, store_id: str, principal_id: Optional[str]) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.READ)
        if not auth.allowed:
            return ActionResult.denied(auth)
        docs = await self.store.query(store_collection(store_id, TRACKING))
        return ActionResult.ok(data=[d.to_dict() for d in docs])

    @handles_store_errors("Error creating tracking integration")
    async def create_tracking(
        self, store_id: str, principal_id: Optional[str], data: dict[str, Any]
    ) -> ActionResult:
        """
        Add a tracking integration. A store has at most one integration per
        type, so creating a type that already exists updates it instead.
        """
        auth = await self._authorize(store_id, principal_id, Action.CREATE)
        if not auth.allowed:
            return ActionResult.denied(auth)
        try:
            integration = TrackingIntegration.model_validate({**data, "store_id": store_id})
        except ValidationError:
            return ActionResult.rejected("Invalid tracking integration")

        collection = store_collection(store_id, TRACKING)
        # Deterministic id keeps concurrent creates of one type on one document
        integration_id = integration.type

        async def upsert(txn: Transaction) -> ActionResult:
            legacy = await txn.query(collection, [where("type", "==", integration.type)], limit=1)
            existing = await txn.get(collection, integration_id)
            target = existing or (legacy[0] if legacy else None)
            record = integration.to_document()
            if target is not None:
                txn.update(collection, target.id, {**record, "updated_at": SERVER_TIMESTAMP})
                return ActionResult.ok(id=target.id)
            record.update(created_at=SERVER_TIMESTAMP, updated_at=SERVER_TIMESTAMP)
            txn.create(collection, integration_id, record)
            return ActionResult.ok(id=integration_id)

        result = await self.store.run_transaction(upsert)
        logger.info("Saved %s tracking integration for store %s", integration.type, store_id)
        return result

    @handles_store_errors("Error updating tracking integration")
    async def update_tracking(
        self,
        store_id: str,
        principal_id: Optional[str],
        integration_id: str,
        changes: dict[str, Any],
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.UPDATE)
        if not auth.allowed:
            return ActionResult.denied(auth)
        collection = store_collection(store_id, TRACKING)
        if await self.store.get(collection, integration_id) is None:
            return ActionResult.not_found("Integration not found")
        # The type is part of the identity
        update = {k: v for k, v in changes.items() if k not in {"id", "type", "store_id", "created_at"}}
        update["updated_at"] = SERVER_TIMESTAMP
        await self.store.update(collection, integration_id, update)
        return ActionResult.ok()

    async def toggle_tracking(
        self, store_id: str, principal_id: Optional[str], integration_id: str, enabled: bool
    ) -> ActionResult:
        return await self.update_tracking(
            store_id, principal_id, integration_id, {"enabled": bool(enabled)}
        )

    @handles_store_errors("Error deleting tracking integration")
    async def delete_tracking(
        self, store_id: str, principal_id: Optional[str], integration_id: str
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.DELETE)
        if not auth.allowed:
            return ActionResult.denied(auth)
        await self.store.delete(store_collection(store_id, TRACKING), integration_id)
        return ActionResult.ok()

    # ------------------------------------------------------------------
    # Social media widgets
    # ------------------------------------------------------------------

    def _embed(self, widget: SocialMediaWidget) -> str:
        return generate_embed_code(
            widget.type,
            widget.url,
            app_url=self.settings.APP_URL,
            width=widget.width,
            height=widget.height,
            autoplay=widget.autoplay,
            loop=widget.loop,
        )

    @handles_store_errors("Error loading widgets")
    async def list_widgets(self, store_id: str, principal_id: Optional[str]) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.READ)
        if not auth.allowed:
            return ActionResult.denied(auth)
        docs = await self.store.query(
            store_collection(store_id, WIDGETS), order_by="created_at", descending=True
        )
        return ActionResult.ok(data=[d.to_dict() for d in docs])

    @handles_store_errors("Error creating widget")
    async def create_widget(
        self, store_id: str, principal_id: Optional[str], data: dict[str, Any]
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.CREATE)
        if not auth.allowed:
            return ActionResult.denied(auth)
        try:
            widget = SocialMediaWidget.model_validate(data)
        except ValidationError:
            return ActionResult.rejected("Invalid widget")
        if not widget.embed_code:
            widget.embed_code = self._embed(widget)
        record = widget.to_document()
        record.update(created_at=SERVER_TIMESTAMP, updated_at=SERVER_TIMESTAMP)
        widget_id = await self.store.add(store_collection(store_id, WIDGETS), record)
        return ActionResult.ok(id=widget_id)

    @handles_store_errors("Error updating widget")
    async def update_widget(
        self,
        store_id: str,
        principal_id: Optional[str],
        widget_id: str,
        changes: dict[str, Any],
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.UPDATE)
        if not auth.allowed:
            return ActionResult.denied(auth)
        collection = store_collection(store_id, WIDGETS)
        doc = await self.store.get(collection, widget_id)
        if doc is None:
            return ActionResult.not_found("Widget not found")

        update = {k: v for k, v in changes.items() if k not in {"id", "created_at"}}
        if "embed_code" not in update and any(k in update for k in _EMBED_FIELDS):
            try:
                merged = SocialMediaWidget.model_validate({**doc.data, **update})
            except ValidationError:
                return ActionResult.rejected("Invalid widget")
            update["embed_code"] = self._embed(merged)
        update["updated_at"] = SERVER_TIMESTAMP
        await self.store.update(collection, widget_id, update)
        return ActionResult.ok()

    @handles_store_errors("Error deleting widget")
    async def delete_widget(
        self, store_id: str, principal_id: Optional[str], widget_id: str
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.DELETE)
        if not auth.allowed:
            return ActionResult.denied(auth)
        await self.store.delete(store_collection(store_id, WIDGETS), widget_id)
        return ActionResult.ok()
