"""Unit tests for the authorization resolver against the in-memory store."""

import pytest

from libs.auth.permissions import MARKETING_POLICY, Role
from libs.auth.resolver import (
    INSUFFICIENT_PERMISSIONS,
    NOT_A_MEMBER,
    STORE_NOT_FOUND,
    UNAUTHORIZED,
    TenantNotFoundError,
)
from tests.factories import seed_member, seed_store


@pytest.mark.asyncio
@pytest.mark.unit
async def test_owner_without_membership_resolves_to_owner(store, resolver):
    tenant = await seed_store(store, owner_id="u1")

    assert await resolver.resolve_role(tenant.id, "u1") == Role.OWNER
    assert await resolver.can(tenant.id, "u1", "delete", "anything")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_no_owner_match_and_no_membership_denies_everything(store, resolver):
    tenant = await seed_store(store, owner_id="u1")

    assert await resolver.resolve_role(tenant.id, "stranger") is None
    for action in ("read", "create", "update", "delete", "manage"):
        result = await resolver.require_permission(tenant.id, "stranger", action, "product")
        assert not result.allowed
        assert result.error == NOT_A_MEMBER
        assert result.status_code == 403


@pytest.mark.asyncio
@pytest.mark.unit
async def test_stored_owner_role_on_non_owner_is_treated_as_editor(store, resolver):
    tenant = await seed_store(store, owner_id="u1")
    await seed_member(store, tenant.id, Role.OWNER, user_id="u2")

    assert await resolver.resolve_role(tenant.id, "u2") == Role.EDITOR
    assert not await resolver.can(tenant.id, "u2", "delete", "marketing")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unknown_stored_role_has_no_access(store, resolver):
    tenant = await seed_store(store, owner_id="u1")
    await store.set(f"stores/{tenant.id}/team", "u2", {"role": "superuser"})

    assert await resolver.resolve_role(tenant.id, "u2") is None
    assert not await resolver.can(tenant.id, "u2", "read", "product")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_missing_principal_and_missing_store(store, resolver):
    tenant = await seed_store(store, owner_id="u1")

    unauthenticated = await resolver.require_permission(tenant.id, None, "read", "product")
    assert unauthenticated.error == UNAUTHORIZED
    assert unauthenticated.status_code == 401

    missing = await resolver.require_permission("no-such-store", "u1", "read", "product")
    assert missing.error == STORE_NOT_FOUND
    assert missing.status_code == 404

    with pytest.raises(TenantNotFoundError):
        await resolver.resolve_role("no-such-store", "u1")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_editor_and_viewer_scenario(store, resolver):
    """store1 owned by u1, u2 is an editor, u3 is unknown."""
    tenant = await seed_store(store, id="store1", owner_id="u1")
    await seed_member(store, tenant.id, Role.EDITOR, user_id="u2")
    await seed_member(store, tenant.id, Role.VIEWER, user_id="u4")

    assert await resolver.can("store1", "u2", "update", "product")
    assert not await resolver.can("store1", "u2", "delete", "marketing")
    assert not await resolver.can("store1", "u3-unknown", "read", "product")

    # The marketing module's own table does grant editors delete
    assert await resolver.can("store1", "u2", "delete", "marketing", MARKETING_POLICY)

    viewer = await resolver.require_permission("store1", "u4", "update", "product")
    assert not viewer.allowed
    assert viewer.role == Role.VIEWER
    assert viewer.error == INSUFFICIENT_PERMISSIONS


@pytest.mark.asyncio
@pytest.mark.unit
async def test_role_change_is_seen_on_the_next_check(store, resolver):
    tenant = await seed_store(store, owner_id="u1")
    await seed_member(store, tenant.id, Role.VIEWER, user_id="u2")
    assert not await resolver.can(tenant.id, "u2", "update", "product")

    await store.update(f"stores/{tenant.id}/team", "u2", {"role": "editor"})

    assert await resolver.can(tenant.id, "u2", "update", "product")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_require_role_uses_custom_error(store, resolver):
    tenant = await seed_store(store, owner_id="u1")
    await seed_member(store, tenant.id, Role.EDITOR, user_id="u2")

    result = await resolver.require_role(
        tenant.id, "u2", Role.OWNER, error="Only owners can invite team members"
    )
    assert not result.allowed
    assert result.error == "Only owners can invite team members"
    assert result.status_code == 403
    assert (await resolver.require_role(tenant.id, "u1", Role.OWNER)).allowed


@pytest.mark.asyncio
@pytest.mark.unit
async def test_permission_snapshot(store, resolver):
    tenant = await seed_store(store, owner_id="u1")
    await seed_member(store, tenant.id, Role.VIEWER, user_id="u2")

    snapshot = await resolver.permissions_for(tenant.id, "u2")
    assert snapshot.is_viewer and not snapshot.is_owner
    assert "read:product" in snapshot.permissions
    assert snapshot.can("read", "analytics")
    assert not snapshot.can("update", "product")

    anonymous = await resolver.permissions_for(tenant.id, None)
    assert anonymous.to_dict()["role"] is None
    assert anonymous.permissions == []
