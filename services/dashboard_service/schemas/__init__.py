"""Dashboard Service schemas package."""

from services.dashboard_service.schemas.catalog import ProductCreate, ProductUpdate
from services.dashboard_service.schemas.common import ActionResponse, DataResponse
from services.dashboard_service.schemas.marketing import (
    CampaignSchedule,
    CouponCreate,
    CouponRedeemRequest,
    CouponRedeemResponse,
    CouponUpdate,
    CouponValidateRequest,
    CouponValidateResponse,
    EmailCampaignCreate,
    EmailCampaignUpdate,
    EmailTemplateCreate,
    EmailTemplateUpdate,
    ListMemberAdd,
    SubscriberCreate,
    SubscriberListCreate,
    SubscriberListUpdate,
    SubscriberUpdate,
    UnsubscribeRequest,
)
from services.dashboard_service.schemas.settings import (
    RobotsTxtConfigUpdate,
    SeoSettingsUpdate,
    SitemapConfigUpdate,
    TrackingCreate,
    TrackingToggle,
    TrackingUpdate,
    WidgetCreate,
    WidgetUpdate,
)
from services.dashboard_service.schemas.team import (
    InvitationCreate,
    InvitationCreateResponse,
    PermissionsResponse,
    RoleUpdate,
    StoreUpdate,
    UserStoresResponse,
)

__all__ = [
    "ActionResponse",
    "CampaignSchedule",
    "CouponCreate",
    "CouponRedeemRequest",
    "CouponRedeemResponse",
    "CouponUpdate",
    "CouponValidateRequest",
    "CouponValidateResponse",
    "DataResponse",
    "EmailCampaignCreate",
    "EmailCampaignUpdate",
    "EmailTemplateCreate",
    "EmailTemplateUpdate",
    "InvitationCreate",
    "InvitationCreateResponse",
    "ListMemberAdd",
    "PermissionsResponse",
    "ProductCreate",
    "ProductUpdate",
    "RobotsTxtConfigUpdate",
    "RoleUpdate",
    "SeoSettingsUpdate",
    "SitemapConfigUpdate",
    "StoreUpdate",
    "SubscriberCreate",
    "SubscriberListCreate",
    "SubscriberListUpdate",
    "SubscriberUpdate",
    "TrackingCreate",
    "TrackingToggle",
    "TrackingUpdate",
    "UnsubscribeRequest",
    "UserStoresResponse",
    "WidgetCreate",
    "WidgetUpdate",
]
