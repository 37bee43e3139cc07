# Overview: Pure access-policy decision function (no I/O, no Flask context).

"""
Access Policy

WHY: One decision point for every mutating handler, so the rules cannot
drift between endpoints.

Rules are evaluated in order; the first match wins:
1. No actor (identity resolved but no account row) -> NO_USER
2. Suspended actor attempting a mutation -> SUSPENDED (carries reason/feedback)
3. Staff-only actions need manager/admin; admin-only actions need admin -> FORBIDDEN
4. CreateOrder: the order's email must be the actor's own (case-insensitive) -> FORBIDDEN
5. ViewOrders: staff may query anything; users only their own email -> FORBIDDEN
6. Allow
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .actions import Action, MUTATING_ACTIONS, STAFF_ACTIONS, ADMIN_ACTIONS, STAFF_ROLES

DENY_NO_USER = "NO_USER"
DENY_SUSPENDED = "SUSPENDED"
DENY_FORBIDDEN = "FORBIDDEN"


@dataclass(frozen=True)
class Actor:
    email: str
    role: str
    status: str
    suspend_reason: Optional[str] = None
    suspend_feedback: Optional[str] = None

    @classmethod
    def from_account(cls, account) -> "Actor":
        return cls(
            email=account.email,
            role=account.role,
            status=account.status,
            suspend_reason=account.suspend_reason,
            suspend_feedback=account.suspend_feedback,
        )

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


@dataclass(frozen=True)
class Decision:
    allowed: bool
    code: Optional[str] = None
    message: Optional[str] = None
    details: dict = field(default_factory=dict)

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, code: str, message: str, **details) -> "Decision":
        return cls(allowed=False, code=code, message=message, details=details)


def _same_email(a: Optional[str], b: Optional[str]) -> bool:
    if not isinstance(a, str) or not isinstance(b, str) or not a or not b:
        return False
    return a.strip().lower() == b.strip().lower()


def decide(
    actor: Optional[Actor],
    action: Action,
    *,
    resource_owner_email: Optional[str] = None,
    target_email: Optional[str] = None,
) -> Decision:
    """
    Decide whether actor may perform action.

    Args:
        actor: The authenticated account, or None when no account exists
        action: What is being attempted
        resource_owner_email: For CreateOrder, the email on the order body
        target_email: For ViewOrders, the email filter being queried

    Returns:
        Decision.allow() or a Decision carrying NO_USER / SUSPENDED / FORBIDDEN
    """
    if actor is None:
        return Decision.deny(DENY_NO_USER, "User not found")

    if actor.status == "suspended" and action in MUTATING_ACTIONS:
        return Decision.deny(
            DENY_SUSPENDED,
            "Your account is suspended",
            suspendReason=actor.suspend_reason,
            suspendFeedback=actor.suspend_feedback,
        )

    if action in STAFF_ACTIONS and not actor.is_staff:
        return Decision.deny(DENY_FORBIDDEN, "Only managers and admins can perform this action")

    if action in ADMIN_ACTIONS and actor.role != "admin":
        return Decision.deny(DENY_FORBIDDEN, "Only admins can perform this action")

    if action == Action.CREATE_ORDER and not _same_email(resource_owner_email, actor.email):
        return Decision.deny(DENY_FORBIDDEN, "Order email must match the signed-in user")

    if action == Action.VIEW_ORDERS and not actor.is_staff and not _same_email(target_email, actor.email):
        return Decision.deny(DENY_FORBIDDEN, "You can only view your own orders")

    return Decision.allow()
