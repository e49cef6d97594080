"""Unit tests for store settings and catalog services."""

import pytest
import pytest_asyncio

from libs.auth.permissions import Role
from libs.auth.resolver import AuthorizationResolver
from services.dashboard_service.services.catalog import CatalogService
from services.dashboard_service.services.results import ResultCode
from services.dashboard_service.services.stores import StoreService
from tests.factories import FailingStore, seed_member, seed_store

OWNER = "owner1"


@pytest.fixture
def stores(store, resolver) -> StoreService:
    return StoreService(store, resolver)


@pytest.fixture
def catalog(store, resolver) -> CatalogService:
    return CatalogService(store, resolver)


@pytest_asyncio.fixture
async def tenant(store):
    return await seed_store(store, id="store1", name="Acme", owner_id=OWNER)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_store_reads_follow_membership(store, stores, tenant):
    viewer = await seed_member(store, tenant.id, Role.VIEWER)

    loaded = await stores.get_store(tenant.id, viewer.user_id)
    assert loaded.success
    assert loaded.data["name"] == "Acme"

    stranger = await stores.get_store(tenant.id, "stranger")
    assert stranger.code == ResultCode.FORBIDDEN

    missing = await stores.get_permissions("nope", OWNER)
    assert missing.code == ResultCode.NOT_FOUND


@pytest.mark.asyncio
@pytest.mark.unit
async def test_store_service_reports_store_failures():
    failing = FailingStore()
    stores = StoreService(failing, AuthorizationResolver(failing))

    loaded = await stores.get_store("store1", OWNER)
    assert loaded.code == ResultCode.ERROR
    assert loaded.error == "Failed to load store"

    updated = await stores.update_store("store1", OWNER, {"name": "New"})
    assert updated.code == ResultCode.ERROR

    deleted = await stores.delete_store("store1", OWNER)
    assert deleted.code == ResultCode.ERROR

    permissions = await stores.get_permissions("store1", OWNER)
    assert permissions.error == "Failed to load permissions"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_catalog_service_reports_store_failures():
    failing = FailingStore()
    catalog = CatalogService(failing, AuthorizationResolver(failing))

    listed = await catalog.list_products("store1", OWNER)
    assert listed.code == ResultCode.ERROR
    assert listed.error == "Failed to load products"

    product = await catalog.get_product("store1", OWNER, "p1")
    assert product.error == "Failed to load product"

    created = await catalog.create_product("store1", OWNER, {"name": "Mug", "price": 12})
    assert created.code == ResultCode.ERROR

    removed = await catalog.delete_product("store1", OWNER, "p1")
    assert removed.code == ResultCode.ERROR
    assert "get" in failing.calls
