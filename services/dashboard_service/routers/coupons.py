"""Coupon management and checkout endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from libs.common.rate_limit import coupon_limit
from services.dashboard_service.dependencies import get_marketing_service, get_principal_id
from services.dashboard_service.models import CouponStatus
from services.dashboard_service.routers._helpers import changes_of, unwrap
from services.dashboard_service.schemas import (
    ActionResponse,
    CouponCreate,
    CouponRedeemRequest,
    CouponRedeemResponse,
    CouponUpdate,
    CouponValidateRequest,
    CouponValidateResponse,
)
from services.dashboard_service.services.marketing import MarketingService

router = APIRouter(prefix="/api/stores/{store_id}/marketing/coupons", tags=["coupons"])


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


@router.post("/validate", response_model=CouponValidateResponse)
@coupon_limit
async def validate_coupon(
    request: Request,
    store_id: str,
    payload: CouponValidateRequest,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    """
    Check a code against the cart. Rejections come back as
    ``{"valid": false, "error": ...}`` with a 200, never as HTTP errors.
    """
    result = await service.validate_coupon(
        store_id, principal_id, payload.code, payload.cart_total, payload.product_ids
    )
    return result.to_dict()


@router.post("/redeem", response_model=CouponRedeemResponse)
async def redeem_coupon(
    store_id: str,
    payload: CouponRedeemRequest,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    """
    Record a redemption once the order has completed. Called by the order
    flow on behalf of the customer, so it needs update access to marketing.
    """
    result = await service.redeem_coupon(
        store_id,
        principal_id,
        payload.customer_id,
        payload.coupon_id,
        payload.order_id,
        payload.discount_amount,
        payload.order_total,
        coupon_code=payload.coupon_code,
    )
    if result.status_code != status.HTTP_200_OK:
        raise HTTPException(status_code=result.status_code, detail=result.error)
    return result.to_dict()


# ---------------------------------------------------------------------------
# Management
# ---------------------------------------------------------------------------


@router.get("", response_model=ActionResponse)
async def list_coupons(
    store_id: str,
    status_filter: Optional[CouponStatus] = Query(default=None, alias="status"),
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(
        await service.list_coupons(
            store_id, principal_id, status=status_filter.value if status_filter else None
        )
    )


@router.post("", response_model=ActionResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    store_id: str,
    payload: CouponCreate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(await service.create_coupon(store_id, principal_id, payload.model_dump()))


@router.get("/{coupon_id}", response_model=ActionResponse)
async def get_coupon(
    store_id: str,
    coupon_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(await service.get_coupon(store_id, principal_id, coupon_id))


@router.patch("/{coupon_id}", response_model=ActionResponse)
async def update_coupon(
    store_id: str,
    coupon_id: str,
    payload: CouponUpdate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(
        await service.update_coupon(store_id, principal_id, coupon_id, changes_of(payload))
    )
