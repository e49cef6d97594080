"""Store, team membership and invitation documents."""

import hashlib
from datetime import datetime
from typing import Optional

from libs.auth.permissions import Role
from services.dashboard_service.models.base import DocumentModel
from services.dashboard_service.models.enums import (
    EmailDeliveryStatus,
    InvitationStatus,
)

# Collection layout
STORES = "stores"
TEAM = "team"
USERS = "users"
INVITATIONS = "invitations"
# One document per (store, email) while an invitation is pending
PENDING_INVITES = "pending_invites"


def team_path(store_id: str) -> str:
    return f"{STORES}/{store_id}/{TEAM}"


def pending_invites_path(store_id: str) -> str:
    return f"{STORES}/{store_id}/{PENDING_INVITES}"


def invite_key(email: str) -> str:
    """Document id for an invited address; emails may contain path characters."""
    return hashlib.sha256(email.strip().lower().encode("utf-8")).hexdigest()


class Store(DocumentModel):
    """A tenant. The owner never needs a team membership document."""

    name: Optional[str] = None
    owner_id: str
    email: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None


class UserProfile(DocumentModel):
    """Account profile stored under ``users/{uid}``."""

    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None


class TeamMember(DocumentModel):
    """Membership keyed by (store id, user id); the document id is the user id."""

    user_id: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    role: Role
    invited_at: Optional[datetime] = None
    joined_at: Optional[datetime] = None
    invited_by: Optional[str] = None


class TeamInvitation(DocumentModel):
    email: str
    role: Role
    store_id: str
    team_name: Optional[str] = None
    invited_by: str
    inviter_name: Optional[str] = None
    invited_at: datetime
    expires_at: datetime
    status: InvitationStatus = InvitationStatus.PENDING
    email_status: Optional[EmailDeliveryStatus] = None
    accepted_at: Optional[datetime] = None
    accepted_by: Optional[str] = None
    declined_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        """Expiry is derived from ``expires_at``; it is never written back."""
        return self.status == InvitationStatus.PENDING and now > self.expires_at

    def effective_status(self, now: datetime) -> str:
        if self.is_expired(now):
            return "expired"
        return self.status
