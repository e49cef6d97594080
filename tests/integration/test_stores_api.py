"""Integration tests for store, permission and product endpoints."""

import pytest

from libs.auth.permissions import Role
from libs.db.session import get_document_store
from services.dashboard_service.app.main import app
from services.dashboard_service.models import STORES
from tests.factories import FailingStore, auth_headers, seed_member, seed_store

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "dashboard"}


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_store_requires_authentication(client, store):
    tenant = await seed_store(store)

    response = await client.get(f"/api/stores/{tenant.id}")
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized"

    bad_token = await client.get(
        f"/api/stores/{tenant.id}", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert bad_token.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_owner_reads_store(client, store):
    tenant = await seed_store(store, name="Acme", owner_id="u1")

    response = await client.get(f"/api/stores/{tenant.id}", headers=auth_headers("u1"))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["name"] == "Acme"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_store_and_non_member(client, store):
    tenant = await seed_store(store, owner_id="u1")

    missing = await client.get("/api/stores/nope", headers=auth_headers("u1"))
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Store not found"

    stranger = await client.get(f"/api/stores/{tenant.id}", headers=auth_headers("u3"))
    assert stranger.status_code == 403
    assert stranger.json()["detail"] == "Not a team member"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_editor_updates_store_but_cannot_take_ownership(client, store):
    tenant = await seed_store(store, owner_id="u1")
    editor = await seed_member(store, tenant.id, Role.EDITOR)

    response = await client.patch(
        f"/api/stores/{tenant.id}",
        json={"name": "Renamed", "owner_id": editor.user_id},
        headers=auth_headers(editor.user_id),
    )

    assert response.status_code == 200
    doc = await store.get(STORES, tenant.id)
    assert doc.get("name") == "Renamed"
    assert doc.get("owner_id") == "u1"
    assert doc.get("updated_by") == editor.user_id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_only_owner_deletes_store(client, store):
    tenant = await seed_store(store, owner_id="u1")
    viewer = await seed_member(store, tenant.id, Role.VIEWER)
    editor = await seed_member(store, tenant.id, Role.EDITOR)

    for member in (viewer, editor):
        denied = await client.delete(f"/api/stores/{tenant.id}", headers=auth_headers(member.user_id))
        assert denied.status_code == 403
        assert denied.json()["detail"] == "Insufficient permissions"

    deleted = await client.delete(f"/api/stores/{tenant.id}", headers=auth_headers("u1"))
    assert deleted.status_code == 200
    assert await store.get(STORES, tenant.id) is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_permissions_endpoint(client, store):
    tenant = await seed_store(store, owner_id="u1")
    editor = await seed_member(store, tenant.id, Role.EDITOR)

    owner = await client.get(f"/api/stores/{tenant.id}/permissions", headers=auth_headers("u1"))
    assert owner.json()["is_owner"] is True
    assert owner.json()["permissions"] == ["manage:all"]

    response = await client.get(
        f"/api/stores/{tenant.id}/permissions", headers=auth_headers(editor.user_id)
    )
    body = response.json()
    assert body["role"] == "editor"
    assert "update:product" in body["permissions"]
    assert "delete:marketing" not in body["permissions"]

    stranger = await client.get(
        f"/api/stores/{tenant.id}/permissions", headers=auth_headers("u3")
    )
    assert stranger.status_code == 200
    assert stranger.json()["role"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_my_stores(client, store):
    owned = await seed_store(store, owner_id="u1")
    other = await seed_store(store, owner_id="u2")
    await seed_member(store, other.id, Role.VIEWER, user_id="u1")

    response = await client.get("/api/me/stores", headers=auth_headers("u1"))

    assert response.status_code == 200
    assert response.json()["store_ids"] == sorted([owned.id, other.id])
    assert (await client.get("/api/me/stores")).status_code == 401


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_product_crud_by_editor(client, store):
    tenant = await seed_store(store, owner_id="u1")
    editor = await seed_member(store, tenant.id, Role.EDITOR)
    headers = auth_headers(editor.user_id)
    base = f"/api/stores/{tenant.id}/products"

    created = await client.post(base, json={"name": "Mug", "price": 12.5}, headers=headers)
    assert created.status_code == 201
    product_id = created.json()["id"]

    updated = await client.patch(f"{base}/{product_id}", json={"price": 10}, headers=headers)
    assert updated.status_code == 200

    fetched = await client.get(f"{base}/{product_id}", headers=headers)
    assert fetched.json()["data"]["price"] == 10
    assert fetched.json()["data"]["store_id"] == tenant.id

    listed = await client.get(base, headers=headers)
    assert [p["id"] for p in listed.json()["data"]] == [product_id]

    deleted = await client.delete(f"{base}/{product_id}", headers=headers)
    assert deleted.status_code == 200
    missing = await client.get(f"{base}/{product_id}", headers=headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_viewer_cannot_create_products(client, store):
    tenant = await seed_store(store, owner_id="u1")
    viewer = await seed_member(store, tenant.id, Role.VIEWER)

    response = await client.post(
        f"/api/stores/{tenant.id}/products",
        json={"name": "Mug"},
        headers=auth_headers(viewer.user_id),
    )

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_request_id_header(client):
    response = await client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_store_failure_returns_server_error(client):
    app.dependency_overrides[get_document_store] = lambda: FailingStore()

    response = await client.get("/api/stores/store1", headers=auth_headers("u1"))
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to load store"

    products = await client.get("/api/stores/store1/products", headers=auth_headers("u1"))
    assert products.status_code == 500
    assert products.json()["detail"] == "Failed to load products"
