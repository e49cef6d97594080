"""FastAPI dependency providers for the dashboard service.

Tests swap the document store, clock and mailer through
``app.dependency_overrides``; everything else is built from them.
"""

from typing import Optional

from fastapi import Depends

from libs.auth.dependencies import get_optional_user
from libs.auth.models import AuthUser
from libs.auth.resolver import AuthorizationResolver
from libs.common.datetime_utils import Clock, utc_now
from libs.common.emails.team import send_invitation_email
from libs.db.documents import DocumentStore
from libs.db.session import get_document_store
from services.dashboard_service.services.catalog import CatalogService
from services.dashboard_service.services.coupons import CouponEngine
from services.dashboard_service.services.integrations import IntegrationsService
from services.dashboard_service.services.marketing import MarketingService
from services.dashboard_service.services.seo import SeoService
from services.dashboard_service.services.stores import StoreService
from services.dashboard_service.services.team import InvitationMailer, TeamService


def get_clock() -> Clock:
    return utc_now


def get_mailer() -> InvitationMailer:
    return send_invitation_email


def get_principal_id(user: Optional[AuthUser] = Depends(get_optional_user)) -> Optional[str]:
    """Id of the signed-in user, or None; services report "Unauthorized" themselves."""
    return user.user_id if user else None


def get_resolver(store: DocumentStore = Depends(get_document_store)) -> AuthorizationResolver:
    return AuthorizationResolver(store)


def get_store_service(
    store: DocumentStore = Depends(get_document_store),
    resolver: AuthorizationResolver = Depends(get_resolver),
) -> StoreService:
    return StoreService(store, resolver)


def get_catalog_service(
    store: DocumentStore = Depends(get_document_store),
    resolver: AuthorizationResolver = Depends(get_resolver),
) -> CatalogService:
    return CatalogService(store, resolver)


def get_team_service(
    store: DocumentStore = Depends(get_document_store),
    resolver: AuthorizationResolver = Depends(get_resolver),
    mailer: InvitationMailer = Depends(get_mailer),
    clock: Clock = Depends(get_clock),
) -> TeamService:
    return TeamService(store, resolver, mailer=mailer, clock=clock)


def get_coupon_engine(
    store: DocumentStore = Depends(get_document_store),
    clock: Clock = Depends(get_clock),
) -> CouponEngine:
    return CouponEngine(store, clock)


def get_marketing_service(
    store: DocumentStore = Depends(get_document_store),
    resolver: AuthorizationResolver = Depends(get_resolver),
    engine: CouponEngine = Depends(get_coupon_engine),
    clock: Clock = Depends(get_clock),
) -> MarketingService:
    return MarketingService(store, resolver, clock=clock, engine=engine)


def get_seo_service(
    store: DocumentStore = Depends(get_document_store),
    resolver: AuthorizationResolver = Depends(get_resolver),
) -> SeoService:
    return SeoService(store, resolver)


def get_integrations_service(
    store: DocumentStore = Depends(get_document_store),
    resolver: AuthorizationResolver = Depends(get_resolver),
) -> IntegrationsService:
    return IntegrationsService(store, resolver)
