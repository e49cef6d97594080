"""SEO settings endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends

from services.dashboard_service.dependencies import get_principal_id, get_seo_service
from services.dashboard_service.routers._helpers import changes_of, unwrap
from services.dashboard_service.schemas import (
    ActionResponse,
    RobotsTxtConfigUpdate,
    SeoSettingsUpdate,
    SitemapConfigUpdate,
)
from services.dashboard_service.services.seo import SeoService

router = APIRouter(prefix="/api/stores/{store_id}/seo", tags=["seo"])


@router.get("/store", response_model=ActionResponse)
async def get_store_seo(
    store_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: SeoService = Depends(get_seo_service),
):
    return unwrap(await service.get_store_seo(store_id, principal_id))


@router.put("/store", response_model=ActionResponse)
async def update_store_seo(
    store_id: str,
    payload: SeoSettingsUpdate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: SeoService = Depends(get_seo_service),
):
    return unwrap(await service.update_store_seo(store_id, principal_id, changes_of(payload)))


@router.get("/products/{product_id}", response_model=ActionResponse)
async def get_product_seo(
    store_id: str,
    product_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: SeoService = Depends(get_seo_service),
):
    return unwrap(await service.get_product_seo(store_id, principal_id, product_id))


@router.put("/products/{product_id}", response_model=ActionResponse)
async def update_product_seo(
    store_id: str,
    product_id: str,
    payload: SeoSettingsUpdate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: SeoService = Depends(get_seo_service),
):
    return unwrap(
        await service.update_product_seo(store_id, principal_id, product_id, changes_of(payload))
    )


@router.get("/sitemap", response_model=ActionResponse)
async def get_sitemap_config(
    store_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: SeoService = Depends(get_seo_service),
):
    return unwrap(await service.get_sitemap_config(store_id, principal_id))


@router.put("/sitemap", response_model=ActionResponse)
async def update_sitemap_config(
    store_id: str,
    payload: SitemapConfigUpdate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: SeoService = Depends(get_seo_service),
):
    return unwrap(
        await service.update_sitemap_config(store_id, principal_id, changes_of(payload))
    )


@router.get("/robots", response_model=ActionResponse)
async def get_robots_config(
    store_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: SeoService = Depends(get_seo_service),
):
    return unwrap(await service.get_robots_config(store_id, principal_id))


@router.put("/robots", response_model=ActionResponse)
async def update_robots_config(
    store_id: str,
    payload: RobotsTxtConfigUpdate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: SeoService = Depends(get_seo_service),
):
    return unwrap(await service.update_robots_config(store_id, principal_id, changes_of(payload)))
