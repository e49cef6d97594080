from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field

from services.dashboard_service.models import (
    CouponStatus,
    CouponType,
    SubscriberStatus,
    TemplateCategory,
    TemplateStatus,
)

# ---------------------------------------------------------------------------
# Subscribers and lists
# ---------------------------------------------------------------------------


class SubscriberCreate(BaseModel):
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    source: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    custom_fields: Optional[dict[str, Any]] = None


class SubscriberUpdate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    status: Optional[SubscriberStatus] = None
    tags: Optional[list[str]] = None
    custom_fields: Optional[dict[str, Any]] = None


class UnsubscribeRequest(BaseModel):
    email: EmailStr


class SubscriberListCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None


class SubscriberListUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None


class ListMemberAdd(BaseModel):
    subscriber_id: str


# ---------------------------------------------------------------------------
# Templates and campaigns
# ---------------------------------------------------------------------------


class EmailTemplateCreate(BaseModel):
    name: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    content: str
    preview_text: Optional[str] = None
    category: TemplateCategory = TemplateCategory.OTHER


class EmailTemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    subject: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    preview_text: Optional[str] = None
    category: Optional[TemplateCategory] = None
    status: Optional[TemplateStatus] = None


class EmailCampaignCreate(BaseModel):
    name: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    template_id: str
    list_ids: list[str] = Field(default_factory=list)


class EmailCampaignUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    subject: Optional[str] = Field(default=None, min_length=1)
    template_id: Optional[str] = None
    list_ids: Optional[list[str]] = None


class CampaignSchedule(BaseModel):
    scheduled_at: datetime


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------


class CouponCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    type: CouponType
    value: float = Field(..., ge=0)
    min_purchase: Optional[float] = Field(default=None, ge=0)
    max_discount: Optional[float] = Field(default=None, ge=0)
    start_date: datetime
    end_date: Optional[datetime] = None
    usage_limit: Optional[int] = Field(default=None, ge=0)
    products: list[str] = Field(default_factory=list)
    excluded_products: list[str] = Field(default_factory=list)
    customer_emails: list[str] = Field(default_factory=list)
    one_time_use: bool = False


class CouponUpdate(BaseModel):
    code: Optional[str] = Field(default=None, min_length=1, max_length=64)
    type: Optional[CouponType] = None
    value: Optional[float] = Field(default=None, ge=0)
    min_purchase: Optional[float] = Field(default=None, ge=0)
    max_discount: Optional[float] = Field(default=None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    usage_limit: Optional[int] = Field(default=None, ge=0)
    products: Optional[list[str]] = None
    excluded_products: Optional[list[str]] = None
    customer_emails: Optional[list[str]] = None
    one_time_use: Optional[bool] = None
    status: Optional[CouponStatus] = None


class CouponValidateRequest(BaseModel):
    code: str = Field(..., min_length=1)
    cart_total: float = Field(..., ge=0)
    product_ids: list[str] = Field(default_factory=list)


class CouponValidateResponse(BaseModel):
    valid: bool
    coupon: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    discount_amount: Optional[float] = None


class CouponRedeemRequest(BaseModel):
    coupon_id: str
    customer_id: str
    order_id: str
    discount_amount: float = Field(..., ge=0)
    order_total: float = Field(..., ge=0)
    coupon_code: Optional[str] = None


class CouponRedeemResponse(BaseModel):
    success: bool
    usage_id: Optional[str] = None
    error: Optional[str] = None
