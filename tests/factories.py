"""
Document factories for creating valid test data.

Every factory produces a valid document model. Override any field via kwargs,
then write it with ``insert``:

Usage:
    coupon = CouponFactory.create(code="SAVE10", usage_limit=1)
    await insert(store, store_collection(store_id, COUPONS), coupon)
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt

from libs.auth.permissions import Role
from libs.common.config import get_settings
from libs.db.documents import DocumentStore, DocumentStoreError
from services.dashboard_service.models import (
    COUPONS,
    INVITATIONS,
    STORES,
    USERS,
    Coupon,
    CouponStatus,
    CouponType,
    DocumentModel,
    EmailTemplate,
    InvitationStatus,
    Store,
    TeamInvitation,
    TeamMember,
    UserProfile,
    store_collection,
    team_path,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex[:8]}@test.com"


async def insert(store: DocumentStore, collection: str, model: DocumentModel) -> str:
    """Write a factory-built model under its id (generated when missing)."""
    doc_id = model.id or _id()
    await store.set(collection, doc_id, model.to_document())
    return doc_id


# ---------------------------------------------------------------------------
# Stores and teams
# ---------------------------------------------------------------------------


class StoreFactory:
    @staticmethod
    def create(**overrides) -> Store:
        defaults = {
            "id": _id(),
            "name": "Test Store",
            "owner_id": f"owner-{uuid.uuid4().hex[:8]}",
            "email": _unique_email(),
            "created_at": _now(),
        }
        defaults.update(overrides)
        return Store(**defaults)


class UserFactory:
    @staticmethod
    def create(**overrides) -> UserProfile:
        defaults = {
            "id": f"user-{uuid.uuid4().hex[:8]}",
            "email": _unique_email(),
            "display_name": "Test User",
        }
        defaults.update(overrides)
        return UserProfile(**defaults)


class TeamMemberFactory:
    @staticmethod
    def create(user_id: str, role: Role = Role.EDITOR, **overrides) -> TeamMember:
        defaults = {
            "id": user_id,
            "user_id": user_id,
            "email": _unique_email(),
            "role": role,
            "joined_at": _now(),
        }
        defaults.update(overrides)
        return TeamMember(**defaults)


class InvitationFactory:
    @staticmethod
    def create(store_id: str, invited_by: str, **overrides) -> TeamInvitation:
        now = overrides.pop("now", None) or _now()
        defaults = {
            "id": _id(),
            "email": _unique_email(),
            "role": Role.VIEWER,
            "store_id": store_id,
            "team_name": "Test Store",
            "invited_by": invited_by,
            "inviter_name": "Owner",
            "invited_at": now,
            "expires_at": now + timedelta(days=7),
            "status": InvitationStatus.PENDING,
        }
        defaults.update(overrides)
        return TeamInvitation(**defaults)


async def seed_store(store: DocumentStore, **overrides) -> Store:
    tenant = StoreFactory.create(**overrides)
    await insert(store, STORES, tenant)
    return tenant


async def seed_member(
    store: DocumentStore, store_id: str, role: Role = Role.EDITOR, **overrides
) -> TeamMember:
    user_id = overrides.pop("user_id", None) or f"user-{uuid.uuid4().hex[:8]}"
    member = TeamMemberFactory.create(user_id, role, **overrides)
    await insert(store, team_path(store_id), member)
    return member


async def seed_user(store: DocumentStore, **overrides) -> UserProfile:
    user = UserFactory.create(**overrides)
    await insert(store, USERS, user)
    return user


async def seed_invitation(
    store: DocumentStore, store_id: str, invited_by: str, **overrides
) -> TeamInvitation:
    invitation = InvitationFactory.create(store_id, invited_by, **overrides)
    await insert(store, INVITATIONS, invitation)
    return invitation


# ---------------------------------------------------------------------------
# Marketing
# ---------------------------------------------------------------------------


class CouponFactory:
    @staticmethod
    def create(**overrides) -> Coupon:
        defaults = {
            "id": _id(),
            "code": f"CODE{uuid.uuid4().hex[:6].upper()}",
            "type": CouponType.PERCENTAGE,
            "value": 10,
            "start_date": datetime(2026, 1, 1, tzinfo=timezone.utc),
            "end_date": datetime(2026, 12, 31, tzinfo=timezone.utc),
            "status": CouponStatus.ACTIVE,
            "used_count": 0,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return Coupon(**defaults)


class EmailTemplateFactory:
    @staticmethod
    def create(**overrides) -> EmailTemplate:
        defaults = {
            "id": _id(),
            "name": "Spring newsletter",
            "subject": "Spring is here",
            "content": "<p>Hello</p>",
        }
        defaults.update(overrides)
        return EmailTemplate(**defaults)


async def seed_coupon(store: DocumentStore, store_id: str, **overrides) -> Coupon:
    coupon = CouponFactory.create(**overrides)
    await insert(store, store_collection(store_id, COUPONS), coupon)
    return coupon


# ---------------------------------------------------------------------------
# Clock, mailer and auth doubles
# ---------------------------------------------------------------------------

FROZEN_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, now: datetime = FROZEN_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingMailer:
    """Invitation mailer double; set ``succeed`` to False to simulate an outage."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent: list[dict] = []

    async def __call__(
        self, to_email: str, invite_url: str, team_name: str, inviter_name: str, role: str
    ) -> bool:
        self.sent.append(
            {
                "to_email": to_email,
                "invite_url": invite_url,
                "team_name": team_name,
                "inviter_name": inviter_name,
                "role": role,
            }
        )
        return self.succeed


def make_token(user_id: str, email: Optional[str] = None, expires_in: int = 3600) -> str:
    """Sign a bearer token the way the auth provider does."""
    settings = get_settings()
    payload = {
        "sub": user_id,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)


def auth_headers(user_id: str, email: Optional[str] = None) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, email)}"}


class FailingStore:
    """Document store double whose every call fails like an unreachable backend."""

    def __init__(self, message: str = "backend unavailable"):
        self.message = message
        self.calls: list[str] = []

    def _fail(self, operation: str):
        self.calls.append(operation)
        raise DocumentStoreError(self.message)

    async def get(self, collection, doc_id):
        self._fail("get")

    async def query(self, collection, filters=(), order_by=None, descending=False, limit=None):
        self._fail("query")

    async def query_group(self, collection_id, filters=()):
        self._fail("query_group")

    async def set(self, collection, doc_id, data, merge=False):
        self._fail("set")

    async def update(self, collection, doc_id, data):
        self._fail("update")

    async def add(self, collection, data):
        self._fail("add")

    async def delete(self, collection, doc_id):
        self._fail("delete")

    async def run_transaction(self, fn, max_attempts=None):
        self._fail("run_transaction")
