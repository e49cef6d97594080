"""Unit tests for the role/permission tables."""

import itertools

import pytest

from libs.auth.permissions import (
    ALL,
    DASHBOARD_POLICY,
    MARKETING_POLICY,
    PRODUCT_POLICY,
    SEO_POLICY,
    STORE_POLICY,
    TEAM_POLICY,
    Action,
    Permission,
    PermissionPolicy,
    Role,
)

POLICIES = [DASHBOARD_POLICY, PRODUCT_POLICY, MARKETING_POLICY, SEO_POLICY, STORE_POLICY, TEAM_POLICY]
SUBJECTS = ["content", "product", "order", "marketing", "seo", "store", "team", "settings", "nope"]


def _expected(granted, action: Action, subject: str) -> bool:
    return any(
        p.action in (Action.MANAGE, action) and p.subject in (ALL, subject) for p in granted
    )


@pytest.mark.unit
@pytest.mark.parametrize("policy", POLICIES, ids=lambda p: p.name)
def test_allows_matches_exactly_the_four_permission_forms(policy):
    """Every (role, action, subject) is allowed iff a grant matches one of the four forms."""
    for role, action, subject in itertools.product(Role, Action, SUBJECTS):
        granted = policy.permissions(role)
        assert policy.allows(role, action, subject) == _expected(granted, action, subject), (
            policy.name,
            role,
            action,
            subject,
        )


@pytest.mark.unit
def test_owner_manages_everything_in_every_policy():
    for policy in POLICIES:
        for action, subject in itertools.product(Action, SUBJECTS):
            assert policy.allows(Role.OWNER, action, subject)


@pytest.mark.unit
def test_manage_on_subject_does_not_imply_other_subjects():
    policy = PermissionPolicy(
        "custom",
        {
            Role.OWNER: {Permission(Action.MANAGE, ALL)},
            Role.EDITOR: {Permission(Action.MANAGE, "product")},
            Role.VIEWER: set(),
        },
    )
    assert policy.allows(Role.EDITOR, Action.DELETE, "product")
    assert not policy.allows(Role.EDITOR, Action.READ, "marketing")
    assert not policy.allows(Role.VIEWER, Action.READ, "product")


@pytest.mark.unit
def test_policy_must_cover_every_role():
    with pytest.raises(ValueError, match="viewer"):
        PermissionPolicy(
            "broken",
            {Role.OWNER: set(), Role.EDITOR: set()},
        )


@pytest.mark.unit
def test_unknown_action_is_denied():
    assert not DASHBOARD_POLICY.allows(Role.OWNER, "publish", "content")


@pytest.mark.unit
def test_editor_dashboard_grants():
    assert DASHBOARD_POLICY.allows(Role.EDITOR, "update", "product")
    assert DASHBOARD_POLICY.allows(Role.EDITOR, "update", "settings.appearance")
    assert not DASHBOARD_POLICY.allows(Role.EDITOR, "update", "settings")
    assert not DASHBOARD_POLICY.allows(Role.EDITOR, "delete", "marketing")
    assert not DASHBOARD_POLICY.allows(Role.EDITOR, "delete", "order")


@pytest.mark.unit
def test_module_tables():
    assert MARKETING_POLICY.allows(Role.EDITOR, "delete", "marketing")
    assert not MARKETING_POLICY.allows(Role.VIEWER, "create", "marketing")
    assert SEO_POLICY.allows(Role.EDITOR, "update", "seo")
    assert not SEO_POLICY.allows(Role.EDITOR, "delete", "seo")
    assert STORE_POLICY.allows(Role.EDITOR, "update", "store")
    assert not STORE_POLICY.allows(Role.EDITOR, "delete", "store")
    assert TEAM_POLICY.allows(Role.VIEWER, "read", "team")
    assert not TEAM_POLICY.allows(Role.EDITOR, "update", "team")


@pytest.mark.unit
def test_role_parse_and_ordering():
    assert Role.parse(" Editor ") == Role.EDITOR
    assert Role.parse("admin") is None
    assert Role.parse(None) is None
    assert Role.OWNER.at_least(Role.EDITOR)
    assert not Role.VIEWER.at_least(Role.EDITOR)


@pytest.mark.unit
def test_permission_string_round_trip():
    permission = Permission.parse("create:marketing")
    assert permission == Permission(Action.CREATE, "marketing")
    assert str(permission) == "create:marketing"
    with pytest.raises(ValueError):
        Permission.parse("fly:marketing")
