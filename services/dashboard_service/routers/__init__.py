"""Routers package."""

from services.dashboard_service.routers.coupons import router as coupons_router
from services.dashboard_service.routers.integrations import router as integrations_router
from services.dashboard_service.routers.marketing import router as marketing_router
from services.dashboard_service.routers.products import router as products_router
from services.dashboard_service.routers.seo import router as seo_router
from services.dashboard_service.routers.stores import router as stores_router
from services.dashboard_service.routers.team import invitations_router
from services.dashboard_service.routers.team import router as team_router

__all__ = [
    "coupons_router",
    "integrations_router",
    "invitations_router",
    "marketing_router",
    "products_router",
    "seo_router",
    "stores_router",
    "team_router",
]
