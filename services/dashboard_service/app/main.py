"""FastAPI application for the Storefront Dashboard Service."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.dashboard_service.routers import (
    coupons_router,
    integrations_router,
    invitations_router,
    marketing_router,
    products_router,
    seo_router,
    stores_router,
    team_router,
)


def create_app() -> FastAPI:
    """Create and configure the Dashboard Service FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title=f"{settings.APP_NAME} Dashboard Service",
        version="0.1.0",
        description="Multi-tenant storefront dashboard: teams, catalog, marketing and coupons.",
    )

    # Add rate limiter state to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.APP_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "dashboard"}

    app.include_router(stores_router)
    app.include_router(products_router)
    app.include_router(team_router)
    app.include_router(invitations_router)
    # Coupons first so /marketing/coupons/* never falls through to marketing routes
    app.include_router(coupons_router)
    app.include_router(marketing_router)
    app.include_router(seo_router)
    app.include_router(integrations_router)

    return app


app = create_app()
