"""Team memberships and invitations."""

import uuid
from datetime import timedelta
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from libs.auth.permissions import ASSIGNABLE_ROLES, TEAM_POLICY, Action, Role
from libs.auth.resolver import AuthorizationResolver
from libs.common.config import Settings, get_settings
from libs.common.datetime_utils import Clock, utc_now
from libs.common.emails.team import send_invitation_email
from libs.common.logging import get_logger
from libs.db.documents import (
    SERVER_TIMESTAMP,
    DocumentStore,
    DocumentStoreError,
    Transaction,
    where,
)
from services.dashboard_service.models import (
    INVITATIONS,
    STORES,
    TEAM,
    USERS,
    EmailDeliveryStatus,
    InvitationStatus,
    Store,
    TeamInvitation,
    TeamMember,
    invite_key,
    pending_invites_path,
    team_path,
)
from services.dashboard_service.services.results import (
    ActionResult,
    ResultCode,
    handles_store_errors,
)

logger = get_logger(__name__)

InvitationMailer = Callable[[str, str, str, str, str], Awaitable[bool]]


class TeamService:
    def __init__(
        self,
        store: DocumentStore,
        resolver: AuthorizationResolver,
        mailer: InvitationMailer = send_invitation_email,
        settings: Optional[Settings] = None,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.resolver = resolver
        self.mailer = mailer
        self.settings = settings or get_settings()
        self.clock = clock

    def invite_url(self, invitation_id: str) -> str:
        return f"{self.settings.APP_URL.rstrip('/')}/invitation/{invitation_id}"

    async def _load_store(self, store_id: str) -> Optional[Store]:
        doc = await self.store.get(STORES, store_id)
        return Store.from_document(doc) if doc else None

    async def _load_invitation(self, invitation_id: str) -> Optional[TeamInvitation]:
        doc = await self.store.get(INVITATIONS, invitation_id)
        return TeamInvitation.from_document(doc) if doc else None

    async def _deliver(self, invitation: TeamInvitation) -> bool:
        """Send the invitation email and record the outcome on the invitation."""
        try:
            sent = await self.mailer(
                invitation.email,
                self.invite_url(invitation.id),
                invitation.team_name or "the team",
                invitation.inviter_name or "A team member",
                invitation.role,
            )
        except Exception:
            logger.exception("Invitation mailer raised for invitation %s", invitation.id)
            sent = False

        status = EmailDeliveryStatus.SENT if sent else EmailDeliveryStatus.FAILED
        if not sent:
            logger.warning(
                "Invitation email to %s failed for invitation %s; resend is available",
                invitation.email,
                invitation.id,
            )
        await self.store.update(
            INVITATIONS,
            invitation.id,
            {"email_status": status.value, "email_attempted_at": SERVER_TIMESTAMP},
        )
        return sent

    @staticmethod
    async def _pending_invitation(
        txn: Transaction, store_id: str, email: str, now
    ) -> Optional[TeamInvitation]:
        """The live invitation holding the (store, email) reservation, if any."""
        reservation = await txn.get(pending_invites_path(store_id), invite_key(email))
        if reservation is None:
            return None
        doc = await txn.get(INVITATIONS, reservation.get("invitation_id"))
        if doc is None:
            return None
        invitation = TeamInvitation.from_document(doc)
        if invitation.status != InvitationStatus.PENDING or invitation.is_expired(now):
            return None
        return invitation

    @staticmethod
    async def _release_reservation(txn: Transaction, invitation: TeamInvitation) -> None:
        collection = pending_invites_path(invitation.store_id)
        key = invite_key(invitation.email)
        reservation = await txn.get(collection, key)
        if reservation is not None and reservation.get("invitation_id") == invitation.id:
            txn.delete(collection, key)

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    @handles_store_errors("Failed to load team members")
    async def list_members(self, store_id: str, principal_id: Optional[str]) -> ActionResult:
        auth = await self.resolver.require_permission(
            store_id, principal_id, Action.READ, "team", TEAM_POLICY
        )
        if not auth.allowed:
            return ActionResult.denied(auth)
        try:
            store = await self._load_store(store_id)
            docs = await self.store.query(team_path(store_id))
            docs.sort(key=lambda d: d.create_time)
            members = [TeamMember.from_document(d).model_dump(mode="json") for d in docs]
        except (DocumentStoreError, ValidationError):
            logger.exception("Error listing team of store %s", store_id)
            return ActionResult.fail(ResultCode.ERROR, "Failed to load team members")
        return ActionResult.ok(
            data={"owner_id": store.owner_id if store else None, "members": members}
        )

    @handles_store_errors("Failed to send invitation")
    async def invite_member(
        self,
        store_id: str,
        principal_id: Optional[str],
        email: str,
        role: str,
        team_name: Optional[str] = None,
        inviter_name: Optional[str] = None,
    ) -> ActionResult:
        auth = await self.resolver.require_role(
            store_id, principal_id, Role.OWNER, error="Only owners can invite team members"
        )
        if not auth.allowed:
            return ActionResult.denied(auth)

        invited_role = Role.parse(role)
        if invited_role == Role.OWNER:
            return ActionResult.rejected("Owner role cannot be invited")
        if invited_role not in ASSIGNABLE_ROLES:
            return ActionResult.rejected("Invalid role")

        email = email.strip().lower()
        now = self.clock()
        invitations_filter = [
            where("email", "==", email),
            where("store_id", "==", store_id),
            where("status", "==", InvitationStatus.PENDING.value),
        ]

        async def create(txn: Transaction) -> ActionResult:
            members = await txn.query(team_path(store_id), [where("email", "==", email)], limit=1)
            if members:
                return ActionResult.conflict("User is already a team member")

            if await self._pending_invitation(txn, store_id, email, now) is not None:
                return ActionResult.conflict("User has already been invited")
            # Invitations created before reservations existed
            pending = await txn.query(INVITATIONS, invitations_filter)
            for doc in pending:
                if not TeamInvitation.from_document(doc).is_expired(now):
                    return ActionResult.conflict("User has already been invited")

            tenant = await txn.get(STORES, store_id)
            invitation_id = uuid.uuid4().hex
            invitation = TeamInvitation(
                id=invitation_id,
                email=email,
                role=invited_role,
                store_id=store_id,
                team_name=team_name or (tenant.get("name") if tenant else None),
                invited_by=principal_id,
                inviter_name=inviter_name or "A team member",
                invited_at=now,
                expires_at=now + timedelta(days=self.settings.INVITATION_TTL_DAYS),
            )
            txn.create(INVITATIONS, invitation_id, invitation.to_document())
            txn.set(
                pending_invites_path(store_id),
                invite_key(email),
                {"invitation_id": invitation_id, "email": email, "reserved_at": SERVER_TIMESTAMP},
            )
            return ActionResult.ok(id=invitation_id, data=invitation)

        try:
            result = await self.store.run_transaction(create)
        except (DocumentStoreError, ValidationError):
            logger.exception("Error inviting %s to store %s", email, store_id)
            return ActionResult.fail(ResultCode.ERROR, "Failed to send invitation")
        if not result.success:
            return result

        invitation: TeamInvitation = result.data
        logger.info(
            "Invited %s to store %s as %s (invitation %s)",
            email,
            store_id,
            invitation.role,
            invitation.id,
        )
        # Delivery is best-effort: the invitation stands and can be resent
        try:
            email_sent = await self._deliver(invitation)
        except DocumentStoreError:
            logger.exception("Could not record email status for invitation %s", invitation.id)
            email_sent = False
        return ActionResult.ok(
            id=invitation.id,
            invitation_id=invitation.id,
            email_sent=email_sent,
        )

    @handles_store_errors("Failed to update role")
    async def update_member_role(
        self,
        store_id: str,
        principal_id: Optional[str],
        member_id: str,
        role: str,
    ) -> ActionResult:
        auth = await self.resolver.require_role(
            store_id, principal_id, Role.OWNER, error="Only owners can update roles"
        )
        if not auth.allowed:
            return ActionResult.denied(auth)
        try:
            store = await self._load_store(store_id)
            if store is not None and store.owner_id == member_id:
                return ActionResult.rejected("Cannot change the role of the store owner")

            new_role = Role.parse(role)
            if new_role not in ASSIGNABLE_ROLES:
                return ActionResult.rejected("Invalid role")

            member = await self.store.get(team_path(store_id), member_id)
            if member is None:
                return ActionResult.not_found("Team member not found")

            await self.store.update(
                team_path(store_id),
                member_id,
                {"role": new_role.value, "updated_at": SERVER_TIMESTAMP, "updated_by": principal_id},
            )
        except DocumentStoreError:
            logger.exception("Error updating role of %s in store %s", member_id, store_id)
            return ActionResult.fail(ResultCode.ERROR, "Failed to update role")

        logger.info("Changed role of %s in store %s to %s", member_id, store_id, new_role.value)
        return ActionResult.ok()

    @handles_store_errors("Failed to remove team member")
    async def remove_member(
        self, store_id: str, principal_id: Optional[str], member_id: str
    ) -> ActionResult:
        auth = await self.resolver.require_role(
            store_id, principal_id, Role.OWNER, error="Only owners can remove team members"
        )
        if not auth.allowed:
            return ActionResult.denied(auth)
        try:
            store = await self._load_store(store_id)
            if store is not None and store.owner_id == member_id:
                return ActionResult.rejected("Cannot remove the store owner")

            member = await self.store.get(team_path(store_id), member_id)
            if member is None:
                return ActionResult.not_found("Team member not found")

            await self.store.delete(team_path(store_id), member_id)
        except DocumentStoreError:
            logger.exception("Error removing %s from store %s", member_id, store_id)
            return ActionResult.fail(ResultCode.ERROR, "Failed to remove team member")

        logger.info("Removed %s from store %s", member_id, store_id)
        return ActionResult.ok()

    @handles_store_errors("Failed to load stores")
    async def get_user_stores(self, user_id: Optional[str]) -> ActionResult:
        """Ids of stores the user owns or belongs to."""
        if not user_id:
            return ActionResult.fail(ResultCode.UNAUTHORIZED, "Unauthorized")
        owned = await self.store.query(STORES, [where("owner_id", "==", user_id)])
        memberships = await self.store.query_group(TEAM, [where("user_id", "==", user_id)])
        store_ids = {doc.id for doc in owned}
        store_ids.update(doc.parent_id for doc in memberships if doc.parent_id)
        return ActionResult.ok(data=sorted(store_ids))

    # ------------------------------------------------------------------
    # Invitations
    # ------------------------------------------------------------------

    async def get_invitation(self, invitation_id: str) -> ActionResult:
        """Invitation with its derived expiry; reading never writes."""
        try:
            invitation = await self._load_invitation(invitation_id)
        except (DocumentStoreError, ValidationError):
            logger.exception("Error loading invitation %s", invitation_id)
            return ActionResult.fail(ResultCode.ERROR, "Failed to load invitation")
        if invitation is None:
            return ActionResult.not_found("Invitation not found")

        now = self.clock()
        data = invitation.model_dump(mode="json")
        data["is_expired"] = invitation.is_expired(now)
        data["effective_status"] = invitation.effective_status(now)
        return ActionResult.ok(data=data, id=invitation.id)

    async def accept_invitation(
        self, invitation_id: str, principal_id: Optional[str]
    ) -> ActionResult:
        """
        Join the store named by the invitation.

        The membership write and the invitation status change commit in one
        transaction, so an invitation can never be accepted twice or be
        marked accepted without the membership existing. An existing member
        or the owner cannot accept, so a stale invitation never changes a role.
        """
        if not principal_id:
            return ActionResult.fail(ResultCode.UNAUTHORIZED, "Unauthorized")
        now = self.clock()

        async def accept(txn: Transaction) -> ActionResult:
            doc = await txn.get(INVITATIONS, invitation_id)
            if doc is None:
                return ActionResult.not_found("Invitation not found")
            invitation = TeamInvitation.from_document(doc)

            if invitation.status != InvitationStatus.PENDING:
                return ActionResult.rejected("Invitation has already been processed")
            if invitation.is_expired(now):
                return ActionResult.rejected("Invitation has expired")

            tenant = await txn.get(STORES, invitation.store_id)
            if tenant is None:
                return ActionResult.not_found("Store not found")
            if tenant.get("owner_id") == principal_id:
                return ActionResult.rejected("You already own this store")
            if await txn.get(team_path(invitation.store_id), principal_id) is not None:
                return ActionResult.rejected("You are already a team member")

            user = await txn.get(USERS, principal_id)
            member = TeamMember(
                user_id=principal_id,
                email=invitation.email,
                display_name=user.get("display_name") if user else None,
                photo_url=user.get("photo_url") if user else None,
                role=invitation.role,
                invited_at=invitation.invited_at,
                invited_by=invitation.invited_by,
            )
            txn.set(
                team_path(invitation.store_id),
                principal_id,
                {**member.to_document(), "joined_at": SERVER_TIMESTAMP},
            )
            txn.update(
                INVITATIONS,
                invitation_id,
                {
                    "status": InvitationStatus.ACCEPTED.value,
                    "accepted_at": SERVER_TIMESTAMP,
                    "accepted_by": principal_id,
                },
            )
            await self._release_reservation(txn, invitation)
            return ActionResult.ok(id=invitation_id, store_id=invitation.store_id)

        try:
            result = await self.store.run_transaction(accept)
        except (DocumentStoreError, ValidationError):
            logger.exception("Error accepting invitation %s", invitation_id)
            return ActionResult.fail(ResultCode.ERROR, "Failed to accept invitation")

        if result.success:
            logger.info(
                "User %s accepted invitation %s to store %s",
                principal_id,
                invitation_id,
                result.extra["store_id"],
            )
        return result

    async def decline_invitation(
        self, invitation_id: str, principal_id: Optional[str]
    ) -> ActionResult:
        if not principal_id:
            return ActionResult.fail(ResultCode.UNAUTHORIZED, "Unauthorized")
        now = self.clock()

        async def decline(txn: Transaction) -> ActionResult:
            doc = await txn.get(INVITATIONS, invitation_id)
            if doc is None:
                return ActionResult.not_found("Invitation not found")
            invitation = TeamInvitation.from_document(doc)
            if invitation.status != InvitationStatus.PENDING:
                return ActionResult.rejected("Invitation has already been processed")
            if invitation.is_expired(now):
                return ActionResult.rejected("Invitation has expired")
            txn.update(
                INVITATIONS,
                invitation_id,
                {"status": InvitationStatus.DECLINED.value, "declined_at": SERVER_TIMESTAMP},
            )
            await self._release_reservation(txn, invitation)
            return ActionResult.ok(id=invitation_id)

        try:
            return await self.store.run_transaction(decline)
        except (DocumentStoreError, ValidationError):
            logger.exception("Error declining invitation %s", invitation_id)
            return ActionResult.fail(ResultCode.ERROR, "Failed to decline invitation")

    @handles_store_errors("Failed to resend invitation")
    async def resend_invitation(
        self, invitation_id: str, principal_id: Optional[str]
    ) -> ActionResult:
        try:
            invitation = await self._load_invitation(invitation_id)
        except (DocumentStoreError, ValidationError):
            logger.exception("Error loading invitation %s", invitation_id)
            return ActionResult.fail(ResultCode.ERROR, "Failed to resend invitation")
        if invitation is None:
            return ActionResult.not_found("Invitation not found")

        auth = await self.resolver.require_role(
            invitation.store_id,
            principal_id,
            Role.OWNER,
            error="Only owners can resend invitations",
        )
        if not auth.allowed:
            return ActionResult.denied(auth)

        if invitation.status != InvitationStatus.PENDING:
            return ActionResult.rejected("Invitation has already been processed")
        if invitation.is_expired(self.clock()):
            return ActionResult.rejected("Invitation has expired")

        try:
            email_sent = await self._deliver(invitation)
        except DocumentStoreError:
            logger.exception("Could not record email status for invitation %s", invitation_id)
            return ActionResult.fail(ResultCode.ERROR, "Failed to resend invitation")
        return ActionResult.ok(id=invitation_id, email_sent=email_sent)
