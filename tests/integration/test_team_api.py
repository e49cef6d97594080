"""Integration tests for team and invitation endpoints."""

import pytest

from libs.auth.permissions import Role
from services.dashboard_service.models import INVITATIONS, team_path
from tests.factories import auth_headers, seed_invitation, seed_member, seed_store

OWNER = "owner1"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invite_and_accept_flow(client, store, mailer):
    tenant = await seed_store(store, name="Acme", owner_id=OWNER)

    invited = await client.post(
        f"/api/stores/{tenant.id}/team/invitations",
        json={"email": "new.member@example.com", "role": "editor", "inviter_name": "Olive"},
        headers=auth_headers(OWNER),
    )
    assert invited.status_code == 201
    body = invited.json()
    assert body["email_sent"] is True
    invitation_id = body["invitation_id"]
    assert mailer.sent[0]["inviter_name"] == "Olive"

    public = await client.get(f"/api/invitations/{invitation_id}")
    assert public.status_code == 200
    assert public.json()["data"]["team_name"] == "Acme"
    assert public.json()["data"]["is_expired"] is False

    accepted = await client.post(
        f"/api/invitations/{invitation_id}/accept", headers=auth_headers("u9")
    )
    assert accepted.status_code == 200
    assert accepted.json()["data"] == {"store_id": tenant.id}

    team = await client.get(f"/api/stores/{tenant.id}/team", headers=auth_headers("u9"))
    assert team.status_code == 200
    assert [m["user_id"] for m in team.json()["data"]["members"]] == ["u9"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invitation_email_failure_still_creates_invitation(client, store, mailer):
    tenant = await seed_store(store, owner_id=OWNER)
    mailer.succeed = False

    response = await client.post(
        f"/api/stores/{tenant.id}/team/invitations",
        json={"email": "x@example.com", "role": "viewer"},
        headers=auth_headers(OWNER),
    )

    assert response.status_code == 201
    assert response.json()["email_sent"] is False
    invitation = await store.get(INVITATIONS, response.json()["invitation_id"])
    assert invitation.get("email_status") == "failed"

    mailer.succeed = True
    resent = await client.post(
        f"/api/invitations/{invitation.id}/resend", headers=auth_headers(OWNER)
    )
    assert resent.status_code == 200
    assert resent.json()["data"] == {"email_sent": True}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invite_errors(client, store):
    tenant = await seed_store(store, owner_id=OWNER)
    editor = await seed_member(store, tenant.id, Role.EDITOR, email="ed@example.com")
    url = f"/api/stores/{tenant.id}/team/invitations"

    by_editor = await client.post(
        url, json={"email": "x@example.com", "role": "viewer"}, headers=auth_headers(editor.user_id)
    )
    assert by_editor.status_code == 403

    owner_role = await client.post(
        url, json={"email": "x@example.com", "role": "owner"}, headers=auth_headers(OWNER)
    )
    assert owner_role.status_code == 400

    existing = await client.post(
        url, json={"email": "ed@example.com", "role": "viewer"}, headers=auth_headers(OWNER)
    )
    assert existing.status_code == 409

    bad_email = await client.post(
        url, json={"email": "not-an-email", "role": "viewer"}, headers=auth_headers(OWNER)
    )
    assert bad_email.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_expired_invitation(client, store, clock):
    tenant = await seed_store(store, owner_id=OWNER)
    invitation = await seed_invitation(store, tenant.id, OWNER, now=clock())
    clock.advance(days=8)

    response = await client.post(
        f"/api/invitations/{invitation.id}/accept", headers=auth_headers("u9")
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invitation has expired"
    assert await store.get(team_path(tenant.id), "u9") is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_role_update_and_removal(client, store):
    tenant = await seed_store(store, owner_id=OWNER)
    member = await seed_member(store, tenant.id, Role.VIEWER)
    url = f"/api/stores/{tenant.id}/team/{member.user_id}"

    updated = await client.patch(url, json={"role": "editor"}, headers=auth_headers(OWNER))
    assert updated.status_code == 200
    assert (await store.get(team_path(tenant.id), member.user_id)).get("role") == "editor"

    self_promote = await client.patch(
        url, json={"role": "editor"}, headers=auth_headers(member.user_id)
    )
    assert self_promote.status_code == 403

    owner = await client.delete(f"/api/stores/{tenant.id}/team/{OWNER}", headers=auth_headers(OWNER))
    assert owner.status_code == 400

    removed = await client.delete(url, headers=auth_headers(OWNER))
    assert removed.status_code == 200
    assert await store.get(team_path(tenant.id), member.user_id) is None
