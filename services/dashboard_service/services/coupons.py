"""Coupon validation and redemption.

Validation runs a fixed sequence of gates and stops at the first failure, so
a coupon that breaks several rules always reports the same error.
Redemption is the enforcement point: inside one document-store transaction
it re-checks status, dates, the usage limit, one-time use and whether the
order was already redeemed, then writes the usage record and bumps
``used_count``. Usage ids are deterministic (per customer for one-time
coupons, per order otherwise), so concurrent duplicates collide on the write.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from libs.common.currency import format_usd, round_money
from libs.common.datetime_utils import Clock, utc_now
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
    COUPON_USAGES,
    COUPONS,
    USERS,
    Coupon,
    CouponType,
    CouponUsage,
    canonical_code,
    store_collection,
)

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------
COUPON_NOT_FOUND = "Coupon not found"
COUPON_NOT_ACTIVE = "Coupon is not active"
COUPON_NOT_STARTED = "Coupon is not valid yet"
COUPON_EXPIRED = "Coupon has expired"
USAGE_LIMIT_REACHED = "Coupon usage limit has been reached"
INVALID_CUSTOMER = "Invalid customer"
CUSTOMER_NOT_ELIGIBLE = "Coupon not available for this customer"
ALREADY_USED = "Coupon has already been used by this customer"
PRODUCTS_NOT_ELIGIBLE = "Coupon is not valid for these products"
PRODUCTS_EXCLUDED = "Coupon is not valid for some products in your cart"
VALIDATION_FAILED = "Error validating coupon"
RECORDING_FAILED = "Error recording coupon usage"
ORDER_ALREADY_REDEEMED = "Coupon has already been applied to this order"


def minimum_purchase_message(amount: float) -> str:
    return f"Minimum purchase amount of {format_usd(amount)} required"


def one_time_usage_id(coupon_id: str, customer_id: str) -> str:
    """Usage id for one-time coupons; concurrent redemptions collide on it."""
    return f"{coupon_id}_{customer_id}"


def order_usage_id(coupon_id: str, order_id: str) -> str:
    """Usage id for reusable coupons; one redemption per order."""
    return f"{coupon_id}_order_{order_id}"


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class CouponValidationResult:
    valid: bool
    coupon: Optional[Coupon] = None
    error: Optional[str] = None
    discount_amount: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"valid": self.valid}
        if self.coupon is not None:
            body["coupon"] = self.coupon.model_dump(mode="json")
        if self.error is not None:
            body["error"] = self.error
        if self.discount_amount is not None:
            body["discount_amount"] = self.discount_amount
        return body


@dataclass
class RedemptionResult:
    success: bool
    usage_id: Optional[str] = None
    error: Optional[str] = None
    # Non-200 only when the caller was not allowed to record usage at all
    status_code: int = 200

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": self.success}
        if self.usage_id is not None:
            body["usage_id"] = self.usage_id
        if self.error is not None:
            body["error"] = self.error
        return body


def _reject(error: str) -> CouponValidationResult:
    return CouponValidationResult(valid=False, error=error)


def compute_discount(coupon: Coupon, cart_total: float) -> float:
    """
    Discount for a cart that passed every gate, rounded half-up to cents.

    Percentage discounts are capped by ``max_discount``; fixed discounts never
    exceed the cart; free shipping is applied by the caller and discounts 0.
    """
    total = Decimal(str(cart_total))
    if coupon.type == CouponType.PERCENTAGE:
        discount = total * Decimal(str(coupon.value)) / Decimal(100)
        if coupon.max_discount and discount > Decimal(str(coupon.max_discount)):
            discount = Decimal(str(coupon.max_discount))
    elif coupon.type == CouponType.FIXED:
        discount = min(Decimal(str(coupon.value)), total)
    else:
        discount = Decimal(0)
    return round_money(discount)


class CouponEngine:
    def __init__(self, store: DocumentStore, clock: Clock = utc_now):
        self.store = store
        self.clock = clock

    async def find_by_code(self, store_id: str, code: str) -> Optional[Coupon]:
        """
        Look a coupon up by code, case-insensitively.

        An active coupon wins; otherwise the most recently created coupon with
        the code is returned so callers can report why it cannot be used.
        """
        docs = await self.store.query(
            store_collection(store_id, COUPONS),
            [where("code", "==", canonical_code(code))],
        )
        if not docs:
            return None
        active = [d for d in docs if d.get("status") == "active"]
        chosen = max(active or docs, key=lambda d: d.create_time)
        return Coupon.from_document(chosen)

    async def validate_coupon(
        self,
        store_id: str,
        code: str,
        customer_id: str,
        cart_total: float,
        product_ids: Optional[Iterable[str]] = None,
    ) -> CouponValidationResult:
        try:
            return await self._validate(store_id, code, customer_id, cart_total, product_ids)
        except (DocumentStoreError, ValidationError):
            logger.exception("Error validating coupon %r for store %s", code, store_id)
            return _reject(VALIDATION_FAILED)

    async def _validate(
        self,
        store_id: str,
        code: str,
        customer_id: str,
        cart_total: float,
        product_ids: Optional[Iterable[str]],
    ) -> CouponValidationResult:
        coupon = await self.find_by_code(store_id, code)
        if coupon is None:
            return _reject(COUPON_NOT_FOUND)

        availability_error = self._availability_error(coupon)
        if availability_error:
            return _reject(availability_error)

        if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
            return _reject(USAGE_LIMIT_REACHED)

        if coupon.min_purchase and cart_total < coupon.min_purchase:
            return _reject(minimum_purchase_message(coupon.min_purchase))

        if coupon.customer_emails:
            user = await self.store.get(USERS, customer_id)
            if user is None:
                return _reject(INVALID_CUSTOMER)
            email = (user.get("email") or "").strip().lower()
            allowed = {e.strip().lower() for e in coupon.customer_emails}
            if email not in allowed:
                return _reject(CUSTOMER_NOT_ELIGIBLE)

        if coupon.one_time_use and await self._used_by(store_id, coupon.id, customer_id):
            return _reject(ALREADY_USED)

        cart_products = list(product_ids or [])
        if cart_products and coupon.products:
            if not any(pid in coupon.products for pid in cart_products):
                return _reject(PRODUCTS_NOT_ELIGIBLE)
        if cart_products and coupon.excluded_products:
            if any(pid in coupon.excluded_products for pid in cart_products):
                return _reject(PRODUCTS_EXCLUDED)

        return CouponValidationResult(
            valid=True,
            coupon=coupon,
            discount_amount=compute_discount(coupon, cart_total),
        )

    def _availability_error(self, coupon: Coupon) -> Optional[str]:
        """Status and date-window gates, shared by validation and redemption."""
        if not coupon.is_active:
            return COUPON_NOT_ACTIVE
        now = self.clock()
        if now < coupon.start_date:
            return COUPON_NOT_STARTED
        if coupon.end_date is not None and now > coupon.end_date:
            return COUPON_EXPIRED
        return None

    async def _used_by(self, store_id: str, coupon_id: str, customer_id: str) -> bool:
        usages = await self.store.query(
            store_collection(store_id, COUPON_USAGES),
            [where("coupon_id", "==", coupon_id), where("customer_id", "==", customer_id)],
            limit=1,
        )
        return bool(usages)

    # ------------------------------------------------------------------
    # Redemption
    # ------------------------------------------------------------------

    async def record_coupon_usage(self, store_id: str, usage: CouponUsage) -> RedemptionResult:
        """
        Record a redemption after order completion.

        The usage insert and the ``used_count`` increment commit together or
        not at all; the transaction is retried when a concurrent redemption
        touches the same coupon, and the retry sees the updated count.
        """
        coupons = store_collection(store_id, COUPONS)
        usages = store_collection(store_id, COUPON_USAGES)

        async def redeem(txn: Transaction) -> RedemptionResult:
            coupon_doc = await txn.get(coupons, usage.coupon_id)
            if coupon_doc is None:
                return RedemptionResult(False, error=COUPON_NOT_FOUND)
            coupon = Coupon.from_document(coupon_doc)

            availability_error = self._availability_error(coupon)
            if availability_error:
                return RedemptionResult(False, error=availability_error)

            if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
                return RedemptionResult(False, error=USAGE_LIMIT_REACHED)

            if coupon.one_time_use:
                usage_id = one_time_usage_id(coupon.id, usage.customer_id)
                if await txn.get(usages, usage_id) is not None:
                    return RedemptionResult(False, error=ALREADY_USED)
                earlier = await txn.query(
                    usages,
                    [
                        where("coupon_id", "==", coupon.id),
                        where("customer_id", "==", usage.customer_id),
                    ],
                    limit=1,
                )
                if earlier:
                    return RedemptionResult(False, error=ALREADY_USED)
            else:
                usage_id = order_usage_id(coupon.id, usage.order_id)
                if await txn.get(usages, usage_id) is not None:
                    return RedemptionResult(False, error=ORDER_ALREADY_REDEEMED)

            same_order = await txn.query(
                usages,
                [where("coupon_id", "==", coupon.id), where("order_id", "==", usage.order_id)],
                limit=1,
            )
            if same_order:
                return RedemptionResult(False, error=ORDER_ALREADY_REDEEMED)

            record = usage.to_document()
            record["coupon_code"] = coupon.code
            record["used_at"] = SERVER_TIMESTAMP
            txn.create(usages, usage_id, record)
            txn.update(
                coupons,
                coupon.id,
                {"used_count": Increment(1), "updated_at": SERVER_TIMESTAMP},
            )
            return RedemptionResult(True, usage_id=usage_id)

        try:
            result = await self.store.run_transaction(redeem)
        except (DocumentStoreError, ValidationError):
            logger.exception(
                "Error recording usage of coupon %s for store %s", usage.coupon_id, store_id
            )
            return RedemptionResult(False, error=RECORDING_FAILED)

        if result.success:
            logger.info(
                "Recorded usage %s of coupon %s (order %s, store %s)",
                result.usage_id,
                usage.coupon_id,
                usage.order_id,
                store_id,
            )
        return result
