"""SEO settings and integration documents."""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import Field

from services.dashboard_service.models.base import DocumentModel
from services.dashboard_service.models.enums import TrackingType, WidgetType

SETTINGS = "settings"
SEO_DOC = "seo"
SITEMAP_DOC = "sitemap"
ROBOTS_DOC = "robots_txt"
TRACKING = "tracking"
WIDGETS = "widgets"


class SeoSettings(DocumentModel):
    title: str = ""
    description: str = ""
    keywords: list[str] = Field(default_factory=list)
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    og_type: Optional[str] = None
    twitter_card: Optional[str] = None
    twitter_title: Optional[str] = None
    twitter_description: Optional[str] = None
    twitter_image: Optional[str] = None
    twitter_creator: Optional[str] = None
    canonical_url: Optional[str] = None
    noindex: bool = False
    nofollow: bool = False
    structured_data: Optional[dict[str, Any]] = None
    store_id: Optional[str] = None
    product_id: Optional[str] = None
    updated_at: Optional[datetime] = None


class SitemapEntry(DocumentModel):
    url: str
    last_modified: Optional[datetime] = None
    change_frequency: Optional[str] = None
    priority: Optional[float] = None


class SitemapConfig(DocumentModel):
    store_id: Optional[str] = None
    base_url: str = ""
    include_products: bool = True
    include_pages: bool = True
    include_blog: bool = False
    exclude_urls: list[str] = Field(default_factory=list)
    additional_urls: list[SitemapEntry] = Field(default_factory=list)
    last_generated: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RobotsTxtConfig(DocumentModel):
    store_id: Optional[str] = None
    allow_all: bool = True
    disallow_paths: list[str] = Field(default_factory=list)
    custom_rules: list[str] = Field(default_factory=list)
    sitemap_url: Optional[str] = None
    updated_at: Optional[datetime] = None


class TrackingIntegration(DocumentModel):
    store_id: Optional[str] = None
    type: TrackingType
    tracking_id: str
    enabled: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SocialMediaWidget(DocumentModel):
    type: WidgetType
    url: str
    embed_code: Optional[str] = None
    title: Optional[str] = None
    width: Optional[Union[int, str]] = None
    height: Optional[Union[int, str]] = None
    autoplay: bool = False
    loop: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
