"""Team membership and invitation endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from services.dashboard_service.dependencies import get_principal_id, get_team_service
from services.dashboard_service.routers._helpers import unwrap
from services.dashboard_service.schemas import (
    ActionResponse,
    InvitationCreate,
    InvitationCreateResponse,
    RoleUpdate,
)
from services.dashboard_service.services.team import TeamService

router = APIRouter(prefix="/api/stores/{store_id}/team", tags=["team"])
invitations_router = APIRouter(prefix="/api/invitations", tags=["team"])


@router.get("", response_model=ActionResponse)
async def list_team(
    store_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: TeamService = Depends(get_team_service),
):
    return unwrap(await service.list_members(store_id, principal_id))


@router.post(
    "/invitations",
    response_model=InvitationCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def invite_member(
    store_id: str,
    payload: InvitationCreate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: TeamService = Depends(get_team_service),
):
    """
    Invite someone to the store. The invitation is created even when the
    email cannot be delivered; ``email_sent`` reports the delivery outcome.
    """
    return unwrap(
        await service.invite_member(
            store_id,
            principal_id,
            payload.email,
            payload.role,
            team_name=payload.team_name,
            inviter_name=payload.inviter_name,
        )
    )


@router.patch("/{member_id}", response_model=ActionResponse)
async def update_member_role(
    store_id: str,
    member_id: str,
    payload: RoleUpdate,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: TeamService = Depends(get_team_service),
):
    return unwrap(await service.update_member_role(store_id, principal_id, member_id, payload.role))


@router.delete("/{member_id}", response_model=ActionResponse)
async def remove_member(
    store_id: str,
    member_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: TeamService = Depends(get_team_service),
):
    return unwrap(await service.remove_member(store_id, principal_id, member_id))


# ---------------------------------------------------------------------------
# Invitations (addressed by invitation id)
# ---------------------------------------------------------------------------


@invitations_router.get("/{invitation_id}", response_model=ActionResponse)
async def get_invitation(
    invitation_id: str,
    service: TeamService = Depends(get_team_service),
):
    """Public: the invitation page is shown before the invitee signs in."""
    return unwrap(await service.get_invitation(invitation_id))


@invitations_router.post("/{invitation_id}/accept", response_model=ActionResponse)
async def accept_invitation(
    invitation_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: TeamService = Depends(get_team_service),
):
    result = unwrap(await service.accept_invitation(invitation_id, principal_id))
    return {**result, "data": {"store_id": result.get("store_id")}}


@invitations_router.post("/{invitation_id}/decline", response_model=ActionResponse)
async def decline_invitation(
    invitation_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: TeamService = Depends(get_team_service),
):
    return unwrap(await service.decline_invitation(invitation_id, principal_id))


@invitations_router.post("/{invitation_id}/resend", response_model=ActionResponse)
async def resend_invitation(
    invitation_id: str,
    principal_id: Optional[str] = Depends(get_principal_id),
    service: TeamService = Depends(get_team_service),
):
    result = unwrap(await service.resend_invitation(invitation_id, principal_id))
    return {**result, "data": {"email_sent": result.get("email_sent")}}
