"""Tracking integration and social widget endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from services.dashboard_service.dependencies import get_integrations_service, get_principal_id
from services.dashboard_service.routers._helpers import changes_of, unwrap
from services.dashboard_service.schemas import (
    ActionResponse,
    TrackingCreate,
    TrackingToggle,
    TrackingUpdate,
    WidgetCreate,
    WidgetUpdate,
)
from services.dashboard_service.services.integrations import IntegrationsService

router = APIRouter(prefix="/api/stores/{store_id}/integrations", tags=["integrations"])


# ---------------------------------------------------------------------------
# Tracking
# ---------------------------------------------------------------------------


@router.get("/tracking", response_model=ActionResponse)
async def list_tracking(
    store_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: IntegrationsService = Depends(get_integrations_service),
):
    return unwrap(await service.list_tracking(store_id, principal_id))


@router.post("/tracking", response_model=ActionResponse, status_code=status.HTTP_201_CREATED)
async def create_tracking(
    store_id: str,
    payload: TrackingCreate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: IntegrationsService = Depends(get_integrations_service),
):
    return unwrap(await service.create_tracking(store_id, principal_id, payload.model_dump()))


@router.patch("/tracking/{integration_id}", response_model=ActionResponse)
async def update_tracking(
    store_id: str,
    integration_id: str,
    payload: TrackingUpdate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: IntegrationsService = Depends(get_integrations_service),
):
    return unwrap(
        await service.update_tracking(store_id, principal_id, integration_id, changes_of(payload))
    )


@router.post("/tracking/{integration_id}/toggle", response_model=ActionResponse)
async def toggle_tracking(
    store_id: str,
    integration_id: str,
    payload: TrackingToggle,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: IntegrationsService = Depends(get_integrations_service),
):
    return unwrap(
        await service.toggle_tracking(store_id, principal_id, integration_id, payload.enabled)
    )


@router.delete("/tracking/{integration_id}", response_model=ActionResponse)
async def delete_tracking(
    store_id: str,
    integration_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: IntegrationsService = Depends(get_integrations_service),
):
    return unwrap(await service.delete_tracking(store_id, principal_id, integration_id))


# ---------------------------------------------------------------------------
# Widgets
# ---------------------------------------------------------------------------


@router.get("/widgets", response_model=ActionResponse)
async def list_widgets(
    store_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: IntegrationsService = Depends(get_integrations_service),
):
    return unwrap(await service.list_widgets(store_id, principal_id))


@router.post("/widgets", response_model=ActionResponse, status_code=status.HTTP_201_CREATED)
async def create_widget(
    store_id: str,
    payload: WidgetCreate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: IntegrationsService = Depends(get_integrations_service),
):
    return unwrap(await service.create_widget(store_id, principal_id, payload.model_dump()))


@router.patch("/widgets/{widget_id}", response_model=ActionResponse)
async def update_widget(
    store_id: str,
    widget_id: str,
    payload: WidgetUpdate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: IntegrationsService = Depends(get_integrations_service),
):
    return unwrap(
        await service.update_widget(store_id, principal_id, widget_id, changes_of(payload))
    )


@router.delete("/widgets/{widget_id}", response_model=ActionResponse)
async def delete_widget(
    store_id: str,
    widget_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: IntegrationsService = Depends(get_integrations_service),
):
    return unwrap(await service.delete_widget(store_id, principal_id, widget_id))
