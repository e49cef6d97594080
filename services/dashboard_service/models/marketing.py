"""Marketing documents: subscribers, lists, templates, campaigns, coupons."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from services.dashboard_service.models.base import DocumentModel
from services.dashboard_service.models.enums import (
    CampaignStatus,
    CouponStatus,
    CouponType,
    SubscriberStatus,
    TemplateCategory,
    TemplateStatus,
)

# Subcollections of stores/{store_id}
SUBSCRIBERS = "subscribers"
SUBSCRIBER_LISTS = "subscriber_lists"
LIST_MEMBERS = "members"
EMAIL_TEMPLATES = "email_templates"
EMAIL_CAMPAIGNS = "email_campaigns"
COUPONS = "coupons"
COUPON_CODES = "coupon_codes"
COUPON_USAGES = "coupon_usages"


def store_collection(store_id: str, name: str) -> str:
    return f"stores/{store_id}/{name}"


def canonical_code(code: str) -> str:
    """Coupon codes compare case-insensitively; the stored form is upper case."""
    return code.strip().upper()


class Subscriber(DocumentModel):
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    source: Optional[str] = None
    subscribed_at: Optional[datetime] = None
    unsubscribed_at: Optional[datetime] = None
    status: SubscriberStatus = SubscriberStatus.SUBSCRIBED
    tags: list[str] = Field(default_factory=list)
    custom_fields: Optional[dict[str, Any]] = None


class SubscriberList(DocumentModel):
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    subscriber_count: int = 0


class EmailTemplate(DocumentModel):
    name: str
    subject: str
    content: str
    preview_text: Optional[str] = None
    category: TemplateCategory = TemplateCategory.OTHER
    status: TemplateStatus = TemplateStatus.DRAFT
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CampaignStats(BaseModel):
    sent: int = 0
    delivered: int = 0
    opened: int = 0
    clicked: int = 0
    unsubscribed: int = 0
    bounced: int = 0
    complaints: int = 0


class EmailCampaign(DocumentModel):
    name: str
    subject: str
    template_id: str
    list_ids: list[str] = Field(default_factory=list)
    status: CampaignStatus = CampaignStatus.DRAFT
    scheduled_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    stats: CampaignStats = Field(default_factory=CampaignStats)


class Coupon(DocumentModel):
    code: str
    type: CouponType
    value: float
    min_purchase: Optional[float] = None
    max_discount: Optional[float] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    usage_limit: Optional[int] = None
    used_count: int = 0
    products: list[str] = Field(default_factory=list)
    excluded_products: list[str] = Field(default_factory=list)
    customer_emails: list[str] = Field(default_factory=list)
    one_time_use: bool = False
    status: CouponStatus = CouponStatus.ACTIVE
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("code")
    @classmethod
    def _canonical(cls, v: str) -> str:
        return canonical_code(v)

    @field_validator("products", "excluded_products", "customer_emails", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return v or []

    @property
    def is_active(self) -> bool:
        return self.status == CouponStatus.ACTIVE


class CouponUsage(DocumentModel):
    """Append-only redemption record."""

    coupon_id: str
    coupon_code: Optional[str] = None
    order_id: str
    customer_id: str
    used_at: Optional[datetime] = None
    discount_amount: float
    order_total: float
