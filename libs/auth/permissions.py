"""Role and permission model shared by every dashboard entry point.

Roles form a closed set (owner > editor > viewer). Each module of the
dashboard owns a ``PermissionPolicy`` mapping every role to the permissions
it grants; a policy that leaves a role out cannot be constructed.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Union

ALL = "all"


class Role(str, enum.Enum):
    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def at_least(self, other: "Role") -> bool:
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: object) -> Optional["Role"]:
        """Return the matching role, or None for anything unrecognised."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


_ROLE_RANK = {Role.VIEWER: 1, Role.EDITOR: 2, Role.OWNER: 3}

# Roles that can be handed out through invitations or role updates
ASSIGNABLE_ROLES = frozenset({Role.EDITOR, Role.VIEWER})


class Action(str, enum.Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"

    @classmethod
    def parse(cls, value: object) -> Optional["Action"]:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


CRUD = (Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE)


@dataclass(frozen=True)
class Permission:
    action: Action
    subject: str

    @classmethod
    def parse(cls, value: str) -> "Permission":
        """Parse ``"create:marketing"``."""
        action, _, subject = value.partition(":")
        parsed = Action.parse(action)
        if parsed is None or not subject:
            raise ValueError(f"Invalid permission: {value!r}")
        return cls(parsed, subject)

    def __str__(self) -> str:
        return f"{self.action.value}:{self.subject}"


def _grants(*pairs: tuple[Action, str]) -> frozenset[Permission]:
    return frozenset(Permission(action, subject) for action, subject in pairs)


class PermissionPolicy:
    """Fixed role -> permission table for one dashboard module."""

    def __init__(self, name: str, grants: Mapping[Role, Iterable[Permission]]):
        missing = [role.value for role in Role if role not in grants]
        if missing:
            raise ValueError(f"Policy {name!r} does not cover roles: {', '.join(missing)}")
        self.name = name
        self._grants: dict[Role, frozenset[Permission]] = {
            role: frozenset(grants[role]) for role in Role
        }

    def __repr__(self) -> str:
        return f"PermissionPolicy({self.name!r})"

    def permissions(self, role: Role) -> frozenset[Permission]:
        return self._grants[role]

    def allows(self, role: Role, action: Union[Action, str], subject: str) -> bool:
        """
        True iff the role holds (manage, all), (manage, subject),
        (action, all) or (action, subject). Nothing else is implied.
        """
        parsed = Action.parse(action)
        if parsed is None:
            return False
        granted = self._grants[role]
        return (
            Permission(Action.MANAGE, ALL) in granted
            or Permission(Action.MANAGE, subject) in granted
            or Permission(parsed, ALL) in granted
            or Permission(parsed, subject) in granted
        )


def module_policy(subject: str, editor_actions: Iterable[Action] = CRUD) -> PermissionPolicy:
    """Owner manages everything, editors get ``editor_actions`` on the subject, viewers read it."""
    return PermissionPolicy(
        subject,
        {
            Role.OWNER: _grants((Action.MANAGE, ALL)),
            Role.EDITOR: _grants(*((action, subject) for action in editor_actions)),
            Role.VIEWER: _grants((Action.READ, subject)),
        },
    )


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------

DASHBOARD_POLICY = PermissionPolicy(
    "dashboard",
    {
        Role.OWNER: _grants((Action.MANAGE, ALL)),
        Role.EDITOR: _grants(
            # Content
            (Action.READ, "content"),
            (Action.CREATE, "content"),
            (Action.UPDATE, "content"),
            (Action.DELETE, "content"),
            # Products and inventory
            (Action.READ, "product"),
            (Action.CREATE, "product"),
            (Action.UPDATE, "product"),
            (Action.DELETE, "product"),
            # Orders
            (Action.READ, "order"),
            (Action.UPDATE, "order"),
            # Appointments
            (Action.READ, "appointment"),
            (Action.CREATE, "appointment"),
            (Action.UPDATE, "appointment"),
            # Analytics
            (Action.READ, "analytics"),
            # Limited settings
            (Action.READ, "settings"),
            (Action.UPDATE, "settings.appearance"),
        ),
        Role.VIEWER: _grants(
            (Action.READ, "content"),
            (Action.READ, "product"),
            (Action.READ, "order"),
            (Action.READ, "appointment"),
            (Action.READ, "analytics"),
            (Action.READ, "settings"),
        ),
    },
)

PRODUCT_POLICY = module_policy("product")
MARKETING_POLICY = module_policy("marketing")
INTEGRATIONS_POLICY = module_policy("integrations")
# SEO settings are merged in place, never deleted
SEO_POLICY = module_policy("seo", editor_actions=(Action.CREATE, Action.READ, Action.UPDATE))

# Only the owner may delete a store
STORE_POLICY = module_policy("store", editor_actions=(Action.READ, Action.UPDATE))

TEAM_POLICY = PermissionPolicy(
    "team",
    {
        Role.OWNER: _grants((Action.MANAGE, ALL)),
        Role.EDITOR: _grants((Action.READ, "team")),
        Role.VIEWER: _grants((Action.READ, "team")),
    },
)
