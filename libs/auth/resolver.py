"""Authorization resolver.

Answers "which role does this principal hold in this store" and "may this
principal perform action A on subject S". Every dashboard operation goes
through one resolver instance; nothing is cached between calls because a
role can change mid-session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from libs.auth.permissions import (
    DASHBOARD_POLICY,
    Action,
    PermissionPolicy,
    Role,
)
from libs.common.logging import get_logger
from libs.db.documents import DocumentStore

logger = get_logger(__name__)

STORES = "stores"
TEAM = "team"

UNAUTHORIZED = "Unauthorized"
STORE_NOT_FOUND = "Store not found"
NOT_A_MEMBER = "Not a team member"
INSUFFICIENT_PERMISSIONS = "Insufficient permissions"

_ERROR_STATUS = {
    UNAUTHORIZED: 401,
    STORE_NOT_FOUND: 404,
}


class TenantNotFoundError(LookupError):
    def __init__(self, store_id: str):
        super().__init__(f"Store not found: {store_id}")
        self.store_id = store_id


def team_collection(store_id: str) -> str:
    return f"{STORES}/{store_id}/{TEAM}"


@dataclass(frozen=True)
class AuthorizationResult:
    allowed: bool
    role: Optional[Role] = None
    error: Optional[str] = None

    @property
    def status_code(self) -> int:
        """HTTP status for a denied result: 401, 404 or 403."""
        if self.allowed:
            return 200
        return _ERROR_STATUS.get(self.error, 403)


@dataclass(frozen=True)
class PermissionSnapshot:
    """What a principal may do in a store, for rendering the dashboard."""

    role: Optional[Role]
    policy: PermissionPolicy = field(repr=False)

    @property
    def is_owner(self) -> bool:
        return self.role == Role.OWNER

    @property
    def is_editor(self) -> bool:
        return self.role == Role.EDITOR

    @property
    def is_viewer(self) -> bool:
        return self.role == Role.VIEWER

    @property
    def permissions(self) -> list[str]:
        if self.role is None:
            return []
        return sorted(str(p) for p in self.policy.permissions(self.role))

    def can(self, action: Union[Action, str], subject: str) -> bool:
        return self.role is not None and self.policy.allows(self.role, action, subject)

    def to_dict(self) -> dict:
        return {
            "role": self.role.value if self.role else None,
            "is_owner": self.is_owner,
            "is_editor": self.is_editor,
            "is_viewer": self.is_viewer,
            "permissions": self.permissions,
        }


class AuthorizationResolver:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def resolve_role(self, store_id: str, principal_id: str) -> Optional[Role]:
        """
        Return the principal's role in the store, or None when they have none.

        Raises TenantNotFoundError when the store does not exist. The owner
        is recognised from the store document alone; the team collection is
        only consulted for everybody else.
        """
        tenant = await self.store.get(STORES, store_id)
        if tenant is None:
            raise TenantNotFoundError(store_id)

        if principal_id and tenant.get("owner_id") == principal_id:
            return Role.OWNER

        membership = await self.store.get(team_collection(store_id), principal_id)
        if membership is None:
            return None

        stored = membership.get("role")
        role = Role.parse(stored)
        if role is None:
            logger.warning(
                "Unknown role %r on membership %s of store %s", stored, principal_id, store_id
            )
            return None
        if role == Role.OWNER:
            # Ownership comes only from the store document
            return Role.EDITOR
        return role

    async def require_permission(
        self,
        store_id: str,
        principal_id: Optional[str],
        action: Union[Action, str],
        subject: str,
        policy: PermissionPolicy = DASHBOARD_POLICY,
    ) -> AuthorizationResult:
        if not principal_id:
            return AuthorizationResult(False, error=UNAUTHORIZED)
        try:
            role = await self.resolve_role(store_id, principal_id)
        except TenantNotFoundError:
            return AuthorizationResult(False, error=STORE_NOT_FOUND)
        if role is None:
            return AuthorizationResult(False, error=NOT_A_MEMBER)
        if not policy.allows(role, action, subject):
            return AuthorizationResult(False, role=role, error=INSUFFICIENT_PERMISSIONS)
        return AuthorizationResult(True, role=role)

    async def can(
        self,
        store_id: str,
        principal_id: Optional[str],
        action: Union[Action, str],
        subject: str,
        policy: PermissionPolicy = DASHBOARD_POLICY,
    ) -> bool:
        result = await self.require_permission(store_id, principal_id, action, subject, policy)
        return result.allowed

    async def require_role(
        self,
        store_id: str,
        principal_id: Optional[str],
        minimum: Role,
        error: str = INSUFFICIENT_PERMISSIONS,
    ) -> AuthorizationResult:
        """Allow when the principal holds ``minimum`` or a higher role."""
        if not principal_id:
            return AuthorizationResult(False, error=UNAUTHORIZED)
        try:
            role = await self.resolve_role(store_id, principal_id)
        except TenantNotFoundError:
            return AuthorizationResult(False, error=STORE_NOT_FOUND)
        if role is None:
            return AuthorizationResult(False, error=NOT_A_MEMBER)
        if not role.at_least(minimum):
            return AuthorizationResult(False, role=role, error=error)
        return AuthorizationResult(True, role=role)

    async def permissions_for(
        self,
        store_id: str,
        principal_id: Optional[str],
        policy: PermissionPolicy = DASHBOARD_POLICY,
    ) -> PermissionSnapshot:
        role = None
        if principal_id:
            try:
                role = await self.resolve_role(store_id, principal_id)
            except TenantNotFoundError:
                role = None
        return PermissionSnapshot(role=role, policy=policy)

