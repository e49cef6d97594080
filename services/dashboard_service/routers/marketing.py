"""Marketing endpoints: subscribers, lists, templates and campaigns."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from services.dashboard_service.dependencies import get_marketing_service, get_principal_id
from services.dashboard_service.models import CampaignStatus, SubscriberStatus, TemplateCategory
from services.dashboard_service.routers._helpers import changes_of, unwrap
from services.dashboard_service.schemas import (
    ActionResponse,
    CampaignSchedule,
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
from services.dashboard_service.services.marketing import MarketingService

router = APIRouter(prefix="/api/stores/{store_id}/marketing", tags=["marketing"])


# ---------------------------------------------------------------------------
# Subscribers
# ---------------------------------------------------------------------------


@router.get("/subscribers", response_model=ActionResponse)
async def list_subscribers(
    store_id: str,
    status_filter: Optional[SubscriberStatus] = Query(default=None, alias="status"),
    tag: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=1000),
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(
        await service.list_subscribers(
            store_id,
            principal_id,
            status=status_filter.value if status_filter else None,
            tag=tag,
            limit=limit,
        )
    )


@router.post("/subscribers", response_model=ActionResponse, status_code=status.HTTP_201_CREATED)
async def create_subscriber(
    store_id: str,
    payload: SubscriberCreate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(await service.create_subscriber(store_id, principal_id, payload.model_dump()))


@router.patch("/subscribers/{subscriber_id}", response_model=ActionResponse)
async def update_subscriber(
    store_id: str,
    subscriber_id: str,
    payload: SubscriberUpdate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(
        await service.update_subscriber(
            store_id, principal_id, subscriber_id, changes_of(payload)
        )
    )


@router.post("/unsubscribe", response_model=ActionResponse)
async def unsubscribe(
    store_id: str,
    payload: UnsubscribeRequest,
    service: MarketingService = Depends(get_marketing_service),
):
    """Public unsubscribe link target."""
    return unwrap(await service.unsubscribe(store_id, payload.email))


# ---------------------------------------------------------------------------
# Subscriber lists
# ---------------------------------------------------------------------------


@router.get("/lists", response_model=ActionResponse)
async def list_subscriber_lists(
    store_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(await service.list_subscriber_lists(store_id, principal_id))


@router.post("/lists", response_model=ActionResponse, status_code=status.HTTP_201_CREATED)
async def create_subscriber_list(
    store_id: str,
    payload: SubscriberListCreate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(
        await service.create_subscriber_list(store_id, principal_id, payload.model_dump())
    )


@router.patch("/lists/{list_id}", response_model=ActionResponse)
async def update_subscriber_list(
    store_id: str,
    list_id: str,
    payload: SubscriberListUpdate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(
        await service.update_subscriber_list(store_id, principal_id, list_id, changes_of(payload))
    )


@router.post("/lists/{list_id}/members", response_model=ActionResponse)
async def add_list_member(
    store_id: str,
    list_id: str,
    payload: ListMemberAdd,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(
        await service.add_subscriber_to_list(
            store_id, principal_id, list_id, payload.subscriber_id
        )
    )


@router.delete("/lists/{list_id}/members/{subscriber_id}", response_model=ActionResponse)
async def remove_list_member(
    store_id: str,
    list_id: str,
    subscriber_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(
        await service.remove_subscriber_from_list(store_id, principal_id, list_id, subscriber_id)
    )


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


@router.get("/templates", response_model=ActionResponse)
async def list_templates(
    store_id: str,
    category: Optional[TemplateCategory] = None,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(
        await service.list_email_templates(
            store_id, principal_id, category=category.value if category else None
        )
    )


@router.post("/templates", response_model=ActionResponse, status_code=status.HTTP_201_CREATED)
async def create_template(
    store_id: str,
    payload: EmailTemplateCreate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(await service.create_email_template(store_id, principal_id, payload.model_dump()))


@router.get("/templates/{template_id}", response_model=ActionResponse)
async def get_template(
    store_id: str,
    template_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(await service.get_email_template(store_id, principal_id, template_id))


@router.patch("/templates/{template_id}", response_model=ActionResponse)
async def update_template(
    store_id: str,
    template_id: str,
    payload: EmailTemplateUpdate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(
        await service.update_email_template(
            store_id, principal_id, template_id, changes_of(payload)
        )
    )


# ---------------------------------------------------------------------------
# Campaigns
# ---------------------------------------------------------------------------


@router.get("/campaigns", response_model=ActionResponse)
async def list_campaigns(
    store_id: str,
    status_filter: Optional[CampaignStatus] = Query(default=None, alias="status"),
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(
        await service.list_email_campaigns(
            store_id, principal_id, status=status_filter.value if status_filter else None
        )
    )


@router.post("/campaigns", response_model=ActionResponse, status_code=status.HTTP_201_CREATED)
async def create_campaign(
    store_id: str,
    payload: EmailCampaignCreate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(await service.create_email_campaign(store_id, principal_id, payload.model_dump()))


@router.get("/campaigns/{campaign_id}", response_model=ActionResponse)
async def get_campaign(
    store_id: str,
    campaign_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(await service.get_email_campaign(store_id, principal_id, campaign_id))


@router.patch("/campaigns/{campaign_id}", response_model=ActionResponse)
async def update_campaign(
    store_id: str,
    campaign_id: str,
    payload: EmailCampaignUpdate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(
        await service.update_email_campaign(
            store_id, principal_id, campaign_id, changes_of(payload)
        )
    )


@router.post("/campaigns/{campaign_id}/schedule", response_model=ActionResponse)
async def schedule_campaign(
    store_id: str,
    campaign_id: str,
    payload: CampaignSchedule,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(
        await service.schedule_campaign(store_id, principal_id, campaign_id, payload.scheduled_at)
    )


@router.post("/campaigns/{campaign_id}/cancel", response_model=ActionResponse)
async def cancel_campaign(
    store_id: str,
    campaign_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: MarketingService = Depends(get_marketing_service),
):
    return unwrap(await service.cancel_campaign(store_id, principal_id, campaign_id))
