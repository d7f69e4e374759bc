"""Tests for the permission evaluator (pure, no DB dependency).

Verifies:
1. Tenancy is checked before anything else
2. Department membership is required
3. Role thresholds per action
4. Authorship only helps DELETE_OWN
"""

import pytest

from app.services.permissions import (
    Action,
    Caller,
    DEFAULT_THRESHOLDS,
    DenyReason,
    ResourceScope,
    Role,
    delete_action_for,
    evaluate,
    thresholds_from_settings,
)

ORG = "org-1"
DEPT = "dept-1"
AUTHOR = "user-author"

RESOURCE = ResourceScope(organization_id=ORG, department_id=DEPT, author_id=AUTHOR)


def caller(role=None, user_id="user-1", org=ORG, dept=DEPT):
    roles = {dept: role} if role is not None else {}
    return Caller(id=user_id, organization_id=org, roles=roles)


class TestTenancy:
    """Cross-tenant callers are denied whatever their role."""

    @pytest.mark.parametrize("action", list(Action))
    @pytest.mark.parametrize("role", list(Role))
    def test_other_tenant_always_denied(self, action, role):
        decision = evaluate(caller(role, org="org-2"), RESOURCE, action)
        assert not decision.allowed
        assert decision.reason is DenyReason.CROSS_TENANT

    def test_no_organization_is_cross_tenant(self):
        decision = evaluate(caller(Role.MANAGER, org=None), RESOURCE, Action.READ)
        assert decision.reason is DenyReason.CROSS_TENANT

    def test_tenancy_checked_before_authorship(self):
        """Even the author loses access once outside the tenant."""
        decision = evaluate(caller(Role.MANAGER, user_id=AUTHOR, org="org-2"), RESOURCE, Action.DELETE_OWN)
        assert decision.reason is DenyReason.CROSS_TENANT


class TestScope:
    def test_membership_in_another_department_denied(self):
        decision = evaluate(caller(Role.MANAGER, dept="dept-2"), RESOURCE, Action.READ)
        assert not decision.allowed
        assert decision.reason is DenyReason.NO_MEMBERSHIP

    def test_author_without_membership_denied(self):
        decision = evaluate(caller(None, user_id=AUTHOR), RESOURCE, Action.DELETE_OWN)
        assert decision.reason is DenyReason.NO_MEMBERSHIP


class TestThresholds:
    """The allow/deny matrix for non-authors."""

    MATRIX = {
        Action.READ: (True, True, True),
        Action.CREATE: (False, True, True),
        Action.COMMENT: (False, True, True),
        Action.DELETE_OWN: (False, False, True),
        Action.DELETE_ANY: (False, False, True),
        Action.ARCHIVE: (False, False, True),
        Action.UNARCHIVE: (False, False, True),
    }

    @pytest.mark.parametrize("action", list(Action))
    def test_matrix(self, action):
        expected = self.MATRIX[action]
        for role, allowed in zip((Role.VIEWER, Role.MEMBER, Role.MANAGER), expected):
            assert evaluate(caller(role), RESOURCE, action).allowed is allowed, (action, role)

    def test_viewer_can_never_create_or_delete(self):
        viewer = caller(Role.VIEWER)
        for action in (Action.CREATE, Action.COMMENT, Action.DELETE_ANY, Action.ARCHIVE):
            decision = evaluate(viewer, RESOURCE, action)
            assert not decision.allowed
            assert decision.reason is DenyReason.INSUFFICIENT_ROLE

    def test_configurable_archive_threshold(self):
        thresholds = thresholds_from_settings("member", "MANAGER")
        assert evaluate(caller(Role.MEMBER), RESOURCE, Action.ARCHIVE, thresholds).allowed
        assert not evaluate(caller(Role.MEMBER), RESOURCE, Action.UNARCHIVE, thresholds).allowed

    def test_default_thresholds_are_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_THRESHOLDS[Action.READ] = Role.MANAGER

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            thresholds_from_settings("owner", "MANAGER")


class TestAuthorship:
    def test_author_may_delete_own_at_any_role(self):
        for role in Role:
            assert evaluate(caller(role, user_id=AUTHOR), RESOURCE, Action.DELETE_OWN).allowed

    def test_non_author_member_gets_not_author(self):
        decision = evaluate(caller(Role.MEMBER), RESOURCE, Action.DELETE_OWN)
        assert not decision.allowed
        assert decision.reason is DenyReason.NOT_AUTHOR

    def test_authorship_does_not_unlock_other_actions(self):
        assert not evaluate(caller(Role.VIEWER, user_id=AUTHOR), RESOURCE, Action.ARCHIVE).allowed

    def test_delete_action_selection(self):
        assert delete_action_for(caller(Role.MEMBER, user_id=AUTHOR), RESOURCE) is Action.DELETE_OWN
        assert delete_action_for(caller(Role.MEMBER), RESOURCE) is Action.DELETE_ANY
        anonymous_author = ResourceScope(organization_id=ORG, department_id=DEPT)
        assert delete_action_for(caller(Role.MEMBER), anonymous_author) is Action.DELETE_ANY


class TestPurity:
    def test_same_inputs_same_decision(self):
        c = caller(Role.MEMBER)
        assert evaluate(c, RESOURCE, Action.COMMENT) == evaluate(c, RESOURCE, Action.COMMENT)

    def test_role_parse(self):
        assert Role.parse(" manager ") is Role.MANAGER
        assert Role.VIEWER < Role.MEMBER < Role.MANAGER
