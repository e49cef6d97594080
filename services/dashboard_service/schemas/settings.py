from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from services.dashboard_service.models import SitemapEntry, TrackingType, WidgetType


class SeoSettingsUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[list[str]] = None
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
    noindex: Optional[bool] = None
    nofollow: Optional[bool] = None
    structured_data: Optional[dict[str, Any]] = None


class SitemapConfigUpdate(BaseModel):
    base_url: Optional[str] = None
    include_products: Optional[bool] = None
    include_pages: Optional[bool] = None
    include_blog: Optional[bool] = None
    exclude_urls: Optional[list[str]] = None
    additional_urls: Optional[list[SitemapEntry]] = None


class RobotsTxtConfigUpdate(BaseModel):
    allow_all: Optional[bool] = None
    disallow_paths: Optional[list[str]] = None
    custom_rules: Optional[list[str]] = None
    sitemap_url: Optional[str] = None


class TrackingCreate(BaseModel):
    type: TrackingType
    tracking_id: str = Field(..., min_length=1)
    enabled: bool = True


class TrackingUpdate(BaseModel):
    tracking_id: Optional[str] = Field(default=None, min_length=1)
    enabled: Optional[bool] = None


class TrackingToggle(BaseModel):
    enabled: bool


class WidgetCreate(BaseModel):
    type: WidgetType
    url: str = Field(..., min_length=1)
    embed_code: Optional[str] = None
    title: Optional[str] = None
    width: Optional[Union[int, str]] = None
    height: Optional[Union[int, str]] = None
    autoplay: bool = False
    loop: bool = False


class WidgetUpdate(BaseModel):
    type: Optional[WidgetType] = None
    url: Optional[str] = Field(default=None, min_length=1)
    embed_code: Optional[str] = None
    title: Optional[str] = None
    width: Optional[Union[int, str]] = None
    height: Optional[Union[int, str]] = None
    autoplay: Optional[bool] = None
    loop: Optional[bool] = None
