"""Product catalog endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from services.dashboard_service.dependencies import get_catalog_service, get_principal_id
from services.dashboard_service.routers._helpers import changes_of, unwrap
from services.dashboard_service.schemas import ActionResponse, ProductCreate, ProductUpdate
from services.dashboard_service.services.catalog import CatalogService

router = APIRouter(prefix="/api/stores/{store_id}/products", tags=["products"])


@router.get("", response_model=ActionResponse)
async def list_products(
    store_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: CatalogService = Depends(get_catalog_service),
):
    return unwrap(await service.list_products(store_id, principal_id))


@router.post("", response_model=ActionResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    store_id: str,
    payload: ProductCreate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: CatalogService = Depends(get_catalog_service),
):
    return unwrap(await service.create_product(store_id, principal_id, payload.model_dump()))


@router.get("/{product_id}", response_model=ActionResponse)
async def get_product(
    store_id: str,
    product_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: CatalogService = Depends(get_catalog_service),
):
    return unwrap(await service.get_product(store_id, principal_id, product_id))


@router.put("/{product_id}", response_model=ActionResponse)
@router.patch("/{product_id}", response_model=ActionResponse)
async def update_product(
    store_id: str,
    product_id: str,
    payload: ProductUpdate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: CatalogService = Depends(get_catalog_service),
):
    return unwrap(
        await service.update_product(store_id, principal_id, product_id, changes_of(payload))
    )


@router.delete("/{product_id}", response_model=ActionResponse)
async def delete_product(
    store_id: str,
    product_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: CatalogService = Depends(get_catalog_service),
):
    return unwrap(await service.delete_product(store_id, principal_id, product_id))
