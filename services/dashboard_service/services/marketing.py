"""Marketing: subscribers, subscriber lists, email templates, campaigns and coupons.

Every mutating operation is checked against the marketing permission table
before it touches the document store. Campaign delivery is handled by the
email provider integration, not here; this module only manages state.
"""

import uuid
from datetime import datetime
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from libs.auth.permissions import MARKETING_POLICY, Action
from libs.auth.resolver import AuthorizationResolver
from libs.common.datetime_utils import Clock, ensure_aware, utc_now
from libs.common.logging import get_logger
from libs.db.documents import (
    SERVER_TIMESTAMP,
    DocumentStore,
    DocumentStoreError,
    Increment,
    Transaction,
    where,
)
from services.dashboard_service.models import (
    COUPON_CODES,
    COUPONS,
    EMAIL_CAMPAIGNS,
    EMAIL_TEMPLATES,
    LIST_MEMBERS,
    SUBSCRIBER_LISTS,
    SUBSCRIBERS,
    CampaignStats,
    CampaignStatus,
    Coupon,
    CouponStatus,
    CouponType,
    CouponUsage,
    EmailCampaign,
    EmailTemplate,
    SubscriberStatus,
    TemplateStatus,
    canonical_code,
    store_collection,
)
from services.dashboard_service.services.coupons import (
    RECORDING_FAILED,
    CouponEngine,
    CouponValidationResult,
    RedemptionResult,
)
from services.dashboard_service.services.results import (
    ActionResult,
    handles_store_errors,
)

logger = get_logger(__name__)

COUPON_CODE_EXISTS = "Coupon code already exists"

# Fields callers may never set directly
_COUPON_READ_ONLY = frozenset({"id", "used_count", "created_at", "created_by"})
_CAMPAIGN_READ_ONLY = frozenset({"id", "status", "stats", "sent_at", "created_at", "created_by"})


def _writable(changes: dict[str, Any], read_only: Iterable[str]) -> dict[str, Any]:
    blocked = set(read_only)
    return {k: v for k, v in changes.items() if k not in blocked}


def _coupon_rule_error(coupon: Coupon) -> Optional[str]:
    if coupon.value < 0:
        return "Coupon value cannot be negative"
    if coupon.type == CouponType.PERCENTAGE and coupon.value > 100:
        return "Percentage value must be between 0 and 100"
    if coupon.end_date is not None and coupon.end_date < coupon.start_date:
        return "End date must be after start date"
    if coupon.usage_limit is not None and coupon.usage_limit < 0:
        return "Usage limit cannot be negative"
    return None


class MarketingService:
    def __init__(
        self,
        store: DocumentStore,
        resolver: AuthorizationResolver,
        clock: Clock = utc_now,
        engine: Optional[CouponEngine] = None,
    ):
        self.store = store
        self.resolver = resolver
        self.clock = clock
        self.engine = engine or CouponEngine(store, clock)

    async def _authorize(self, store_id: str, principal_id: Optional[str], action: Action):
        return await self.resolver.require_permission(
            store_id, principal_id, action, "marketing", MARKETING_POLICY
        )

    # ==================================================================
    # Subscribers
    # ==================================================================

    @handles_store_errors("Error loading subscribers")
    async def list_subscribers(
        self,
        store_id: str,
        principal_id: Optional[str],
        status: Optional[str] = None,
        tag: Optional[str] = None,
        limit: int = 100,
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.READ)
        if not auth.allowed:
            return ActionResult.denied(auth)

        filters = []
        if status:
            filters.append(where("status", "==", status))
        if tag:
            filters.append(where("tags", "array_contains", tag))
        docs = await self.store.query(
            store_collection(store_id, SUBSCRIBERS),
            filters,
            order_by="subscribed_at",
            descending=True,
            limit=limit,
        )
        return ActionResult.ok(data=[d.to_dict() for d in docs])

    @handles_store_errors("Error creating subscriber")
    async def create_subscriber(
        self, store_id: str, principal_id: Optional[str], data: dict[str, Any]
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.CREATE)
        if not auth.allowed:
            return ActionResult.denied(auth)

        subscribers = store_collection(store_id, SUBSCRIBERS)
        email = data["email"].strip().lower()
        existing = await self.store.query(subscribers, [where("email", "==", email)], limit=1)
        if existing:
            subscriber = existing[0]
            if subscriber.get("status") == SubscriberStatus.UNSUBSCRIBED.value:
                await self.store.update(
                    subscribers,
                    subscriber.id,
                    {
                        "status": SubscriberStatus.SUBSCRIBED.value,
                        "unsubscribed_at": None,
                        "updated_at": SERVER_TIMESTAMP,
                    },
                )
                return ActionResult.ok(id=subscriber.id, message="Subscriber re-subscribed")
            return ActionResult.conflict("Email is already subscribed")

        subscriber_id = await self.store.add(
            subscribers,
            {
                "email": email,
                "first_name": data.get("first_name"),
                "last_name": data.get("last_name"),
                "source": data.get("source") or "manual",
                "tags": list(data.get("tags") or []),
                "status": SubscriberStatus.SUBSCRIBED.value,
                "subscribed_at": SERVER_TIMESTAMP,
            },
        )
        logger.info("Added subscriber %s to store %s", subscriber_id, store_id)
        return ActionResult.ok(id=subscriber_id)

    @handles_store_errors("Error updating subscriber")
    async def update_subscriber(
        self,
        store_id: str,
        principal_id: Optional[str],
        subscriber_id: str,
        changes: dict[str, Any],
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.UPDATE)
        if not auth.allowed:
            return ActionResult.denied(auth)

        subscribers = store_collection(store_id, SUBSCRIBERS)
        if await self.store.get(subscribers, subscriber_id) is None:
            return ActionResult.not_found("Subscriber not found")
        update = _writable(changes, {"id", "subscribed_at"})
        if update.get("email"):
            update["email"] = update["email"].strip().lower()
        update["updated_at"] = SERVER_TIMESTAMP
        await self.store.update(subscribers, subscriber_id, update)
        return ActionResult.ok()

    @handles_store_errors("Error unsubscribing")
    async def unsubscribe(self, store_id: str, email: str) -> ActionResult:
        """Public unsubscribe link; no principal required."""
        subscribers = store_collection(store_id, SUBSCRIBERS)
        docs = await self.store.query(
            subscribers, [where("email", "==", email.strip().lower())], limit=1
        )
        if not docs:
            return ActionResult.not_found("Subscriber not found")
        await self.store.update(
            subscribers,
            docs[0].id,
            {
                "status": SubscriberStatus.UNSUBSCRIBED.value,
                "unsubscribed_at": SERVER_TIMESTAMP,
            },
        )
        logger.info("Subscriber %s unsubscribed from store %s", docs[0].id, store_id)
        return ActionResult.ok()

    # ==================================================================
    # Subscriber lists
    # ==================================================================

    @handles_store_errors("Error loading subscriber lists")
    async def list_subscriber_lists(
        self, store_id: str, principal_id: Optional[str]
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.READ)
        if not auth.allowed:
            return ActionResult.denied(auth)
        docs = await self.store.query(
            store_collection(store_id, SUBSCRIBER_LISTS), order_by="created_at", descending=True
        )
        return ActionResult.ok(data=[d.to_dict() for d in docs])

    @handles_store_errors("Error creating subscriber list")
    async def create_subscriber_list(
        self, store_id: str, principal_id: Optional[str], data: dict[str, Any]
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.CREATE)
        if not auth.allowed:
            return ActionResult.denied(auth)
        list_id = await self.store.add(
            store_collection(store_id, SUBSCRIBER_LISTS),
            {
                "name": data["name"],
                "description": data.get("description"),
                "subscriber_count": 0,
                "created_at": SERVER_TIMESTAMP,
                "updated_at": SERVER_TIMESTAMP,
            },
        )
        return ActionResult.ok(id=list_id)

    @handles_store_errors("Error updating subscriber list")
    async def update_subscriber_list(
        self,
        store_id: str,
        principal_id: Optional[str],
        list_id: str,
        changes: dict[str, Any],
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.UPDATE)
        if not auth.allowed:
            return ActionResult.denied(auth)
        lists = store_collection(store_id, SUBSCRIBER_LISTS)
        if await self.store.get(lists, list_id) is None:
            return ActionResult.not_found("Subscriber list not found")
        update = _writable(changes, {"id", "subscriber_count", "created_at"})
        update["updated_at"] = SERVER_TIMESTAMP
        await self.store.update(lists, list_id, update)
        return ActionResult.ok()

    @handles_store_errors("Error adding subscriber to list")
    async def add_subscriber_to_list(
        self, store_id: str, principal_id: Optional[str], list_id: str, subscriber_id: str
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.UPDATE)
        if not auth.allowed:
            return ActionResult.denied(auth)

        lists = store_collection(store_id, SUBSCRIBER_LISTS)
        members = f"{lists}/{list_id}/{LIST_MEMBERS}"

        async def add(txn: Transaction) -> ActionResult:
            if await txn.get(lists, list_id) is None:
                return ActionResult.not_found("Subscriber list not found")
            if await txn.get(store_collection(store_id, SUBSCRIBERS), subscriber_id) is None:
                return ActionResult.not_found("Subscriber not found")
            if await txn.get(members, subscriber_id) is not None:
                return ActionResult.conflict("Subscriber is already in this list")
            txn.create(members, subscriber_id, {"subscriber_id": subscriber_id, "added_at": SERVER_TIMESTAMP})
            txn.update(lists, list_id, {"subscriber_count": Increment(1), "updated_at": SERVER_TIMESTAMP})
            return ActionResult.ok(id=subscriber_id)

        return await self.store.run_transaction(add)

    @handles_store_errors("Error removing subscriber from list")
    async def remove_subscriber_from_list(
        self, store_id: str, principal_id: Optional[str], list_id: str, subscriber_id: str
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.UPDATE)
        if not auth.allowed:
            return ActionResult.denied(auth)

        lists = store_collection(store_id, SUBSCRIBER_LISTS)
        members = f"{lists}/{list_id}/{LIST_MEMBERS}"

        async def remove(txn: Transaction) -> ActionResult:
            if await txn.get(lists, list_id) is None:
                return ActionResult.not_found("Subscriber list not found")
            if await txn.get(members, subscriber_id) is None:
                return ActionResult.not_found("Subscriber is not in this list")
            txn.delete(members, subscriber_id)
            txn.update(lists, list_id, {"subscriber_count": Increment(-1), "updated_at": SERVER_TIMESTAMP})
            return ActionResult.ok()

        return await self.store.run_transaction(remove)

    # ==================================================================
    # Email templates
    # ==================================================================

    @handles_store_errors("Error loading email templates")
    async def list_email_templates(
        self, store_id: str, principal_id: Optional[str], category: Optional[str] = None
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.READ)
        if not auth.allowed:
            return ActionResult.denied(auth)
        filters = [where("category", "==", category)] if category else []
        docs = await self.store.query(
            store_collection(store_id, EMAIL_TEMPLATES),
            filters,
            order_by="updated_at",
            descending=True,
        )
        return ActionResult.ok(data=[d.to_dict() for d in docs])

    @handles_store_errors("Error loading email template")
    async def get_email_template(
        self, store_id: str, principal_id: Optional[str], template_id: str
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.READ)
        if not auth.allowed:
            return ActionResult.denied(auth)
        doc = await self.store.get(store_collection(store_id, EMAIL_TEMPLATES), template_id)
        if doc is None:
            return ActionResult.not_found("Template not found")
        return ActionResult.ok(data=doc.to_dict(), id=doc.id)

    @handles_store_errors("Error creating email template")
    async def create_email_template(
        self, store_id: str, principal_id: Optional[str], data: dict[str, Any]
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.CREATE)
        if not auth.allowed:
            return ActionResult.denied(auth)
        template = EmailTemplate.model_validate(
            {**data, "status": TemplateStatus.DRAFT, "created_by": principal_id}
        )
        record = template.to_document()
        record.update(created_at=SERVER_TIMESTAMP, updated_at=SERVER_TIMESTAMP)
        template_id = await self.store.add(store_collection(store_id, EMAIL_TEMPLATES), record)
        return ActionResult.ok(id=template_id)

    @handles_store_errors("Error updating email template")
    async def update_email_template(
        self,
        store_id: str,
        principal_id: Optional[str],
        template_id: str,
        changes: dict[str, Any],
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.UPDATE)
        if not auth.allowed:
            return ActionResult.denied(auth)
        templates = store_collection(store_id, EMAIL_TEMPLATES)
        if await self.store.get(templates, template_id) is None:
            return ActionResult.not_found("Template not found")
        update = _writable(changes, {"id", "created_at", "created_by"})
        update["updated_at"] = SERVER_TIMESTAMP
        await self.store.update(templates, template_id, update)
        return ActionResult.ok()

    # ==================================================================
    # Email campaigns
    # ==================================================================

    @handles_store_errors("Error loading email campaigns")
    async def list_email_campaigns(
        self, store_id: str, principal_id: Optional[str], status: Optional[str] = None
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.READ)
        if not auth.allowed:
            return ActionResult.denied(auth)
        filters = [where("status", "==", status)] if status else []
        docs = await self.store.query(
            store_collection(store_id, EMAIL_CAMPAIGNS),
            filters,
            order_by="created_at",
            descending=True,
        )
        return ActionResult.ok(data=[d.to_dict() for d in docs])

    @handles_store_errors("Error loading email campaign")
    async def get_email_campaign(
        self, store_id: str, principal_id: Optional[str], campaign_id: str
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.READ)
        if not auth.allowed:
            return ActionResult.denied(auth)
        doc = await self.store.get(store_collection(store_id, EMAIL_CAMPAIGNS), campaign_id)
        if doc is None:
            return ActionResult.not_found("Campaign not found")
        return ActionResult.ok(data=doc.to_dict(), id=doc.id)

    @handles_store_errors("Error creating email campaign")
    async def create_email_campaign(
        self, store_id: str, principal_id: Optional[str], data: dict[str, Any]
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.CREATE)
        if not auth.allowed:
            return ActionResult.denied(auth)

        template_id = data.get("template_id")
        if await self.store.get(store_collection(store_id, EMAIL_TEMPLATES), template_id) is None:
            return ActionResult.not_found("Template not found")

        campaign = EmailCampaign.model_validate(
            {
                **_writable(data, _CAMPAIGN_READ_ONLY),
                "status": CampaignStatus.DRAFT,
                "stats": CampaignStats(),
                "created_by": principal_id,
            }
        )
        record = campaign.to_document()
        record.update(created_at=SERVER_TIMESTAMP, updated_at=SERVER_TIMESTAMP)
        campaign_id = await self.store.add(store_collection(store_id, EMAIL_CAMPAIGNS), record)
        logger.info("Created campaign %s in store %s", campaign_id, store_id)
        return ActionResult.ok(id=campaign_id)

    @handles_store_errors("Error updating email campaign")
    async def update_email_campaign(
        self,
        store_id: str,
        principal_id: Optional[str],
        campaign_id: str,
        changes: dict[str, Any],
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.UPDATE)
        if not auth.allowed:
            return ActionResult.denied(auth)
        campaigns = store_collection(store_id, EMAIL_CAMPAIGNS)
        if await self.store.get(campaigns, campaign_id) is None:
            return ActionResult.not_found("Campaign not found")
        update = _writable(changes, _CAMPAIGN_READ_ONLY)
        update["updated_at"] = SERVER_TIMESTAMP
        await self.store.update(campaigns, campaign_id, update)
        return ActionResult.ok()

    @handles_store_errors("Error scheduling campaign")
    async def schedule_campaign(
        self,
        store_id: str,
        principal_id: Optional[str],
        campaign_id: str,
        scheduled_at: datetime,
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.UPDATE)
        if not auth.allowed:
            return ActionResult.denied(auth)

        campaigns = store_collection(store_id, EMAIL_CAMPAIGNS)
        scheduled_at = ensure_aware(scheduled_at)

        async def schedule(txn: Transaction) -> ActionResult:
            doc = await txn.get(campaigns, campaign_id)
            if doc is None:
                return ActionResult.not_found("Campaign not found")
            if doc.get("status") != CampaignStatus.DRAFT.value:
                return ActionResult.rejected("Only draft campaigns can be scheduled")
            if scheduled_at <= self.clock():
                return ActionResult.rejected("Scheduled time must be in the future")
            txn.update(
                campaigns,
                campaign_id,
                {
                    "status": CampaignStatus.SCHEDULED.value,
                    "scheduled_at": scheduled_at,
                    "updated_at": SERVER_TIMESTAMP,
                },
            )
            return ActionResult.ok(id=campaign_id)

        return await self.store.run_transaction(schedule)

    @handles_store_errors("Error cancelling campaign")
    async def cancel_campaign(
        self, store_id: str, principal_id: Optional[str], campaign_id: str
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.UPDATE)
        if not auth.allowed:
            return ActionResult.denied(auth)

        campaigns = store_collection(store_id, EMAIL_CAMPAIGNS)
        cancellable = {CampaignStatus.DRAFT.value, CampaignStatus.SCHEDULED.value}

        async def cancel(txn: Transaction) -> ActionResult:
            doc = await txn.get(campaigns, campaign_id)
            if doc is None:
                return ActionResult.not_found("Campaign not found")
            if doc.get("status") not in cancellable:
                return ActionResult.rejected("Only draft or scheduled campaigns can be cancelled")
            txn.update(
                campaigns,
                campaign_id,
                {"status": CampaignStatus.CANCELLED.value, "updated_at": SERVER_TIMESTAMP},
            )
            return ActionResult.ok(id=campaign_id)

        return await self.store.run_transaction(cancel)

    # ==================================================================
    # Coupons
    # ==================================================================

    @handles_store_errors("Error loading coupons")
    async def list_coupons(
        self, store_id: str, principal_id: Optional[str], status: Optional[str] = None
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.READ)
        if not auth.allowed:
            return ActionResult.denied(auth)
        filters = [where("status", "==", status)] if status else []
        docs = await self.store.query(
            store_collection(store_id, COUPONS), filters, order_by="created_at", descending=True
        )
        return ActionResult.ok(data=[d.to_dict() for d in docs])

    @handles_store_errors("Error loading coupon")
    async def get_coupon(
        self, store_id: str, principal_id: Optional[str], coupon_id: str
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.READ)
        if not auth.allowed:
            return ActionResult.denied(auth)
        doc = await self.store.get(store_collection(store_id, COUPONS), coupon_id)
        if doc is None:
            return ActionResult.not_found("Coupon not found")
        return ActionResult.ok(data=doc.to_dict(), id=doc.id)

    async def _code_taken(
        self, txn: Transaction, store_id: str, code: str, coupon_id: str
    ) -> bool:
        """True when an active coupon other than ``coupon_id`` holds ``code``."""
        reservation = await txn.get(store_collection(store_id, COUPON_CODES), code)
        if reservation is not None and reservation.get("coupon_id") != coupon_id:
            holder = await txn.get(store_collection(store_id, COUPONS), reservation.get("coupon_id"))
            if holder is not None and holder.get("status") == CouponStatus.ACTIVE.value:
                return True
        # Coupons created before reservations existed
        active = await txn.query(
            store_collection(store_id, COUPONS),
            [where("code", "==", code), where("status", "==", CouponStatus.ACTIVE.value)],
        )
        return any(doc.id != coupon_id for doc in active)

    @staticmethod
    def _reserve(txn: Transaction, store_id: str, code: str, coupon_id: str) -> None:
        txn.set(
            store_collection(store_id, COUPON_CODES),
            code,
            {"coupon_id": coupon_id, "reserved_at": SERVER_TIMESTAMP},
        )

    async def _release(self, txn: Transaction, store_id: str, code: str, coupon_id: str) -> None:
        reservation = await txn.get(store_collection(store_id, COUPON_CODES), code)
        if reservation is not None and reservation.get("coupon_id") == coupon_id:
            txn.delete(store_collection(store_id, COUPON_CODES), code)

    @handles_store_errors("Error creating coupon")
    async def create_coupon(
        self, store_id: str, principal_id: Optional[str], data: dict[str, Any]
    ) -> ActionResult:
        """
        Create an active coupon.

        The code is claimed through a reservation document in the same
        transaction as the coupon write, so two concurrent creates of one
        code cannot both succeed.
        """
        auth = await self._authorize(store_id, principal_id, Action.CREATE)
        if not auth.allowed:
            return ActionResult.denied(auth)
        try:
            coupon = Coupon.model_validate(
                {
                    **_writable(data, _COUPON_READ_ONLY),
                    "status": CouponStatus.ACTIVE,
                    "used_count": 0,
                    "created_by": principal_id,
                }
            )
        except ValidationError:
            return ActionResult.rejected("Invalid coupon data")
        rule_error = _coupon_rule_error(coupon)
        if rule_error:
            return ActionResult.rejected(rule_error)

        coupon_id = uuid.uuid4().hex

        async def create(txn: Transaction) -> ActionResult:
            if await self._code_taken(txn, store_id, coupon.code, coupon_id):
                return ActionResult.conflict(COUPON_CODE_EXISTS)
            record = coupon.to_document()
            record.update(created_at=SERVER_TIMESTAMP, updated_at=SERVER_TIMESTAMP)
            txn.create(store_collection(store_id, COUPONS), coupon_id, record)
            self._reserve(txn, store_id, coupon.code, coupon_id)
            return ActionResult.ok(id=coupon_id)

        result = await self.store.run_transaction(create)
        if result.success:
            logger.info("Created coupon %s (%s) in store %s", coupon_id, coupon.code, store_id)
        return result

    @handles_store_errors("Error updating coupon")
    async def update_coupon(
        self,
        store_id: str,
        principal_id: Optional[str],
        coupon_id: str,
        changes: dict[str, Any],
    ) -> ActionResult:
        auth = await self._authorize(store_id, principal_id, Action.UPDATE)
        if not auth.allowed:
            return ActionResult.denied(auth)

        coupons = store_collection(store_id, COUPONS)
        update = _writable(changes, _COUPON_READ_ONLY)
        if update.get("code"):
            update["code"] = canonical_code(update["code"])

        async def apply(txn: Transaction) -> ActionResult:
            doc = await txn.get(coupons, coupon_id)
            if doc is None:
                return ActionResult.not_found("Coupon not found")
            current = Coupon.from_document(doc)
            try:
                merged = Coupon.model_validate({**current.model_dump(), **update})
            except ValidationError:
                return ActionResult.rejected("Invalid coupon data")
            rule_error = _coupon_rule_error(merged)
            if rule_error:
                return ActionResult.rejected(rule_error)

            code_changed = merged.code != current.code
            becomes_active = merged.is_active and (code_changed or not current.is_active)
            if becomes_active:
                if await self._code_taken(txn, store_id, merged.code, coupon_id):
                    return ActionResult.conflict(COUPON_CODE_EXISTS)
            if current.is_active and (code_changed or not merged.is_active):
                await self._release(txn, store_id, current.code, coupon_id)
            if becomes_active:
                self._reserve(txn, store_id, merged.code, coupon_id)

            dumped = merged.model_dump()
            changed = {key: dumped[key] for key in update if key in dumped}
            txn.update(coupons, coupon_id, {**changed, "updated_at": SERVER_TIMESTAMP})
            return ActionResult.ok(id=coupon_id)

        return await self.store.run_transaction(apply)

    async def set_coupon_status(
        self,
        store_id: str,
        principal_id: Optional[str],
        coupon_id: str,
        status: CouponStatus,
    ) -> ActionResult:
        return await self.update_coupon(
            store_id, principal_id, coupon_id, {"status": CouponStatus(status).value}
        )

    async def validate_coupon(
        self,
        store_id: str,
        principal_id: Optional[str],
        code: str,
        cart_total: float,
        product_ids: Optional[list[str]] = None,
    ) -> CouponValidationResult:
        """Checkout entry point; the signed-in customer is the principal."""
        if not principal_id:
            return CouponValidationResult(valid=False, error="Unauthorized")
        return await self.engine.validate_coupon(
            store_id, code, principal_id, cart_total, product_ids
        )

    async def redeem_coupon(
        self,
        store_id: str,
        principal_id: Optional[str],
        customer_id: str,
        coupon_id: str,
        order_id: str,
        discount_amount: float,
        order_total: float,
        coupon_code: Optional[str] = None,
    ) -> RedemptionResult:
        """
        Record a redemption once an order has completed.

        This is the order-completion step, not a shopper action: the caller
        must be able to update marketing data in the store, and names the
        customer the order belongs to.
        """
        try:
            auth = await self._authorize(store_id, principal_id, Action.UPDATE)
        except DocumentStoreError:
            logger.exception("Error authorizing redemption in store %s", store_id)
            return RedemptionResult(success=False, error=RECORDING_FAILED)
        if not auth.allowed:
            return RedemptionResult(
                success=False, error=auth.error, status_code=auth.status_code
            )
        usage = CouponUsage(
            coupon_id=coupon_id,
            coupon_code=canonical_code(coupon_code) if coupon_code else None,
            order_id=order_id,
            customer_id=customer_id,
            discount_amount=discount_amount,
            order_total=order_total,
        )
        return await self.engine.record_coupon_usage(store_id, usage)
