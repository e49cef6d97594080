"""Enum definitions for dashboard documents."""

import enum


class InvitationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class EmailDeliveryStatus(str, enum.Enum):
    SENT = "sent"
    FAILED = "failed"


class CouponType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    FREE_SHIPPING = "free_shipping"


class CouponStatus(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    DISABLED = "disabled"


class SubscriberStatus(str, enum.Enum):
    SUBSCRIBED = "subscribed"
    UNSUBSCRIBED = "unsubscribed"
    BOUNCED = "bounced"


class TemplateCategory(str, enum.Enum):
    NEWSLETTER = "newsletter"
    PROMOTION = "promotion"
    ANNOUNCEMENT = "announcement"
    WELCOME = "welcome"
    OTHER = "other"


class TemplateStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class CampaignStatus(str, enum.Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    SENDING = "sending"
    SENT = "sent"
    CANCELLED = "cancelled"


class TrackingType(str, enum.Enum):
    GOOGLE_ANALYTICS = "google_analytics"
    FACEBOOK_PIXEL = "facebook_pixel"
    GOOGLE_TAG_MANAGER = "google_tag_manager"
    HOTJAR = "hotjar"
    TIKTOK_PIXEL = "tiktok_pixel"


class WidgetType(str, enum.Enum):
    YOUTUBE = "youtube"
    TWITCH = "twitch"
    SPOTIFY = "spotify"
    INSTAGRAM = "instagram"
    TWITTER = "twitter"
    TIKTOK = "tiktok"
