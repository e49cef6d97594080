"""Dashboard service document models package."""

from services.dashboard_service.models.base import DocumentModel
from services.dashboard_service.models.catalog import PRODUCTS, Product
from services.dashboard_service.models.enums import (
    CampaignStatus,
    CouponStatus,
    CouponType,
    EmailDeliveryStatus,
    InvitationStatus,
    SubscriberStatus,
    TemplateCategory,
    TemplateStatus,
    TrackingType,
    WidgetType,
)
from services.dashboard_service.models.marketing import (
    COUPON_CODES,
    COUPON_USAGES,
    COUPONS,
    EMAIL_CAMPAIGNS,
    EMAIL_TEMPLATES,
    LIST_MEMBERS,
    SUBSCRIBER_LISTS,
    SUBSCRIBERS,
    CampaignStats,
    Coupon,
    CouponUsage,
    EmailCampaign,
    EmailTemplate,
    Subscriber,
    SubscriberList,
    canonical_code,
    store_collection,
)
from services.dashboard_service.models.settings import (
    ROBOTS_DOC,
    SEO_DOC,
    SETTINGS,
    SITEMAP_DOC,
    TRACKING,
    WIDGETS,
    RobotsTxtConfig,
    SeoSettings,
    SitemapConfig,
    SitemapEntry,
    SocialMediaWidget,
    TrackingIntegration,
)
from services.dashboard_service.models.team import (
    INVITATIONS,
    PENDING_INVITES,
    STORES,
    TEAM,
    USERS,
    Store,
    TeamInvitation,
    TeamMember,
    UserProfile,
    invite_key,
    pending_invites_path,
    team_path,
)

__all__ = [
    "COUPONS",
    "COUPON_CODES",
    "COUPON_USAGES",
    "EMAIL_CAMPAIGNS",
    "EMAIL_TEMPLATES",
    "INVITATIONS",
    "LIST_MEMBERS",
    "PENDING_INVITES",
    "PRODUCTS",
    "ROBOTS_DOC",
    "SEO_DOC",
    "SETTINGS",
    "SITEMAP_DOC",
    "STORES",
    "SUBSCRIBERS",
    "SUBSCRIBER_LISTS",
    "TEAM",
    "TRACKING",
    "USERS",
    "WIDGETS",
    "CampaignStats",
    "CampaignStatus",
    "Coupon",
    "CouponStatus",
    "CouponType",
    "CouponUsage",
    "DocumentModel",
    "EmailCampaign",
    "EmailDeliveryStatus",
    "EmailTemplate",
    "InvitationStatus",
    "Product",
    "RobotsTxtConfig",
    "SeoSettings",
    "SitemapConfig",
    "SitemapEntry",
    "SocialMediaWidget",
    "Store",
    "Subscriber",
    "SubscriberList",
    "SubscriberStatus",
    "TeamInvitation",
    "TeamMember",
    "TemplateCategory",
    "TemplateStatus",
    "TrackingIntegration",
    "TrackingType",
    "UserProfile",
    "WidgetType",
    "canonical_code",
    "invite_key",
    "pending_invites_path",
    "store_collection",
    "team_path",
]
