"""
Access policy tests.

decide() is pure, so these run without an app or database.
"""

import pytest

from garments_tracker.policy import (
    Action,
    Actor,
    decide,
    MUTATING_ACTIONS,
    DENY_NO_USER,
    DENY_SUSPENDED,
    DENY_FORBIDDEN,
)


def _actor(role="user", status="active", email="a@x.com", **extra):
    return Actor(email=email, role=role, status=status, **extra)


class TestNoUser:

    @pytest.mark.parametrize("action", list(Action))
    def test_missing_actor_denied_for_every_action(self, action):
        decision = decide(None, action, resource_owner_email="a@x.com", target_email="a@x.com")
        assert not decision.allowed
        assert decision.code == DENY_NO_USER


class TestSuspension:

    @pytest.mark.parametrize("action", sorted(MUTATING_ACTIONS, key=lambda a: a.value))
    def test_suspended_admin_denied_every_mutation(self, action):
        actor = _actor(role="admin", status="suspended", suspend_reason="Fraud", suspend_feedback="Call us")
        decision = decide(actor, action, resource_owner_email=actor.email)
        assert not decision.allowed
        assert decision.code == DENY_SUSPENDED
        assert decision.details == {"suspendReason": "Fraud", "suspendFeedback": "Call us"}

    def test_suspended_user_may_still_view_own_orders(self):
        actor = _actor(status="suspended")
        assert decide(actor, Action.VIEW_OWN_ORDERS).allowed
        assert decide(actor, Action.VIEW_ORDERS, target_email="A@X.com").allowed

    def test_suspension_checked_before_role(self):
        decision = decide(_actor(status="suspended"), Action.CREATE_PRODUCT)
        assert decision.code == DENY_SUSPENDED


class TestRoles:

    @pytest.mark.parametrize("action", [
        Action.CREATE_PRODUCT,
        Action.UPDATE_PRODUCT,
        Action.DELETE_PRODUCT,
        Action.UPDATE_ORDER_STATUS,
        Action.APPEND_TRACKING,
        Action.UPDATE_PAYMENT_STATUS,
    ])
    def test_staff_actions(self, action):
        assert decide(_actor(role="user"), action).code == DENY_FORBIDDEN
        assert decide(_actor(role="manager"), action).allowed
        assert decide(_actor(role="admin"), action).allowed

    def test_manage_accounts_is_admin_only(self):
        assert decide(_actor(role="manager"), Action.MANAGE_ACCOUNTS).code == DENY_FORBIDDEN
        assert decide(_actor(role="admin"), Action.MANAGE_ACCOUNTS).allowed

    @pytest.mark.parametrize("action", [
        Action.UPDATE_ORDER_GENERIC,
        Action.DELETE_ORDER,
        Action.CREATE_CHECKOUT_SESSION,
    ])
    def test_plain_mutations_open_to_active_users(self, action):
        assert decide(_actor(), action).allowed


class TestOrderOwnership:

    def test_create_order_requires_matching_email(self):
        actor = _actor(email="buyer@x.com")
        assert decide(actor, Action.CREATE_ORDER, resource_owner_email="BUYER@x.com ").allowed

        decision = decide(actor, Action.CREATE_ORDER, resource_owner_email="victim@x.com")
        assert decision.code == DENY_FORBIDDEN

    def test_create_order_email_rule_applies_to_staff(self):
        decision = decide(_actor(role="admin"), Action.CREATE_ORDER, resource_owner_email="other@x.com")
        assert decision.code == DENY_FORBIDDEN

    def test_create_order_without_owner_denied(self):
        assert decide(_actor(), Action.CREATE_ORDER).code == DENY_FORBIDDEN

    @pytest.mark.parametrize("owner", [["buyer@x.com"], 42, {"email": "buyer@x.com"}])
    def test_create_order_non_text_owner_denied(self, owner):
        decision = decide(_actor(email="buyer@x.com"), Action.CREATE_ORDER, resource_owner_email=owner)
        assert decision.code == DENY_FORBIDDEN

    def test_user_cannot_view_other_orders(self):
        decision = decide(_actor(email="a@x.com"), Action.VIEW_ORDERS, target_email="b@x.com")
        assert decision.code == DENY_FORBIDDEN

    def test_user_cannot_view_all_orders(self):
        assert decide(_actor(), Action.VIEW_ORDERS).code == DENY_FORBIDDEN

    def test_staff_view_any_orders(self):
        assert decide(_actor(role="manager"), Action.VIEW_ORDERS, target_email="b@x.com").allowed
        assert decide(_actor(role="admin"), Action.VIEW_ORDERS).allowed
