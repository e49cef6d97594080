"""Integration tests for SEO settings, tracking integrations and widgets."""

import pytest

from libs.auth.permissions import Role
from services.dashboard_service.models import PRODUCTS, TRACKING, WIDGETS, store_collection
from tests.factories import auth_headers, seed_member, seed_store

OWNER = "owner1"


# ---------------------------------------------------------------------------
# SEO
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_store_seo_defaults_and_merge(client, store):
    tenant = await seed_store(store, owner_id=OWNER)
    editor = await seed_member(store, tenant.id, Role.EDITOR)
    url = f"/api/stores/{tenant.id}/seo/store"

    defaults = await client.get(url, headers=auth_headers(OWNER))
    assert defaults.status_code == 200
    assert defaults.json()["data"]["title"] == ""
    assert defaults.json()["data"]["noindex"] is False

    await client.put(url, json={"title": "Acme"}, headers=auth_headers(editor.user_id))
    await client.put(
        url, json={"description": "Everything"}, headers=auth_headers(editor.user_id)
    )

    data = (await client.get(url, headers=auth_headers(OWNER))).json()["data"]
    assert data["title"] == "Acme"
    assert data["description"] == "Everything"
    assert data["store_id"] == tenant.id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_viewer_cannot_change_seo(client, store):
    tenant = await seed_store(store, owner_id=OWNER)
    viewer = await seed_member(store, tenant.id, Role.VIEWER)
    url = f"/api/stores/{tenant.id}/seo/store"

    assert (await client.get(url, headers=auth_headers(viewer.user_id))).status_code == 200
    denied = await client.put(url, json={"title": "x"}, headers=auth_headers(viewer.user_id))
    assert denied.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_product_seo_requires_product(client, store):
    tenant = await seed_store(store, owner_id=OWNER)
    await store.set(store_collection(tenant.id, PRODUCTS), "p1", {"name": "Mug"})
    headers = auth_headers(OWNER)

    missing = await client.put(
        f"/api/stores/{tenant.id}/seo/products/nope", json={"title": "x"}, headers=headers
    )
    assert missing.status_code == 404

    saved = await client.put(
        f"/api/stores/{tenant.id}/seo/products/p1", json={"title": "Mug"}, headers=headers
    )
    assert saved.status_code == 200
    data = (
        await client.get(f"/api/stores/{tenant.id}/seo/products/p1", headers=headers)
    ).json()["data"]
    assert data["title"] == "Mug"
    assert data["product_id"] == "p1"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_sitemap_and_robots(client, store):
    tenant = await seed_store(store, owner_id=OWNER)
    headers = auth_headers(OWNER)
    base = f"/api/stores/{tenant.id}/seo"

    await client.put(
        f"{base}/sitemap",
        json={"base_url": "https://shop.example.com", "exclude_urls": ["/admin"]},
        headers=headers,
    )
    sitemap = (await client.get(f"{base}/sitemap", headers=headers)).json()["data"]
    assert sitemap["base_url"] == "https://shop.example.com"
    assert sitemap["exclude_urls"] == ["/admin"]
    assert sitemap["include_products"] is True

    await client.put(
        f"{base}/robots", json={"allow_all": False, "disallow_paths": ["/cart"]}, headers=headers
    )
    robots = (await client.get(f"{base}/robots", headers=headers)).json()["data"]
    assert robots["allow_all"] is False
    assert robots["disallow_paths"] == ["/cart"]


# ---------------------------------------------------------------------------
# Integrations
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_one_tracking_integration_per_type(client, store):
    tenant = await seed_store(store, owner_id=OWNER)
    headers = auth_headers(OWNER)
    url = f"/api/stores/{tenant.id}/integrations/tracking"

    first = await client.post(
        url, json={"type": "google_analytics", "tracking_id": "G-1"}, headers=headers
    )
    second = await client.post(
        url, json={"type": "google_analytics", "tracking_id": "G-2"}, headers=headers
    )
    assert first.status_code == 201
    assert second.json()["id"] == first.json()["id"]

    docs = await store.query(store_collection(tenant.id, TRACKING))
    assert [d.get("tracking_id") for d in docs] == ["G-2"]

    toggled = await client.post(
        f"{url}/{first.json()['id']}/toggle", json={"enabled": False}, headers=headers
    )
    assert toggled.status_code == 200
    listed = (await client.get(url, headers=headers)).json()["data"]
    assert listed[0]["enabled"] is False

    missing = await client.patch(f"{url}/nope", json={"enabled": True}, headers=headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_widget_embed_code_follows_url(client, store):
    tenant = await seed_store(store, owner_id=OWNER)
    headers = auth_headers(OWNER)
    url = f"/api/stores/{tenant.id}/integrations/widgets"

    created = await client.post(
        url,
        json={"type": "youtube", "url": "https://youtu.be/dQw4w9WgXcQ", "title": "Promo"},
        headers=headers,
    )
    assert created.status_code == 201
    widget_id = created.json()["id"]
    widgets = store_collection(tenant.id, WIDGETS)
    assert "embed/dQw4w9WgXcQ" in (await store.get(widgets, widget_id)).get("embed_code")

    await client.patch(
        f"{url}/{widget_id}",
        json={"url": "https://www.youtube.com/watch?v=9bZkp7q19f0"},
        headers=headers,
    )
    assert "embed/9bZkp7q19f0" in (await store.get(widgets, widget_id)).get("embed_code")

    await client.patch(f"{url}/{widget_id}", json={"embed_code": "<custom/>"}, headers=headers)
    assert (await store.get(widgets, widget_id)).get("embed_code") == "<custom/>"

    deleted = await client.delete(f"{url}/{widget_id}", headers=headers)
    assert deleted.status_code == 200
    assert (await client.get(url, headers=headers)).json()["data"] == []
