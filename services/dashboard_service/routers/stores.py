"""Store settings, permissions and the signed-in user's stores."""

from typing import Optional

from fastapi import APIRouter, Depends

from services.dashboard_service.dependencies import (
    get_principal_id,
    get_store_service,
    get_team_service,
)
from services.dashboard_service.routers._helpers import changes_of, unwrap
from services.dashboard_service.schemas import (
    ActionResponse,
    PermissionsResponse,
    StoreUpdate,
    UserStoresResponse,
)
from services.dashboard_service.services.stores import StoreService
from services.dashboard_service.services.team import TeamService

router = APIRouter(prefix="/api", tags=["stores"])


@router.get("/stores/{store_id}", response_model=ActionResponse)
async def get_store(
    store_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: StoreService = Depends(get_store_service),
):
    return unwrap(await service.get_store(store_id, principal_id))


@router.put("/stores/{store_id}", response_model=ActionResponse)
@router.patch("/stores/{store_id}", response_model=ActionResponse)
async def update_store(
    store_id: str,
    payload: StoreUpdate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: StoreService = Depends(get_store_service),
):
    return unwrap(await service.update_store(store_id, principal_id, changes_of(payload)))


@router.delete("/stores/{store_id}", response_model=ActionResponse)
async def delete_store(
    store_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: StoreService = Depends(get_store_service),
):
    """Delete the store document. Only the owner may do this."""
    return unwrap(await service.delete_store(store_id, principal_id))


@router.get("/stores/{store_id}/permissions", response_model=PermissionsResponse)
async def get_permissions(
    store_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: StoreService = Depends(get_store_service),
):
    """The caller's role in the store and the permissions it grants."""
    return unwrap(await service.get_permissions(store_id, principal_id))["data"]


@router.get("/me/stores", response_model=UserStoresResponse)
async def get_my_stores(
    principal_id: Optional[str] = Depends(get_principal_id),
    service: TeamService = Depends(get_team_service),
):
    result = unwrap(await service.get_user_stores(principal_id))
    return UserStoresResponse(store_ids=result["data"])
