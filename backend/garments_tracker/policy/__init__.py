# Overview: Access policy package.
# Re-exports the action vocabulary and the decision function.

from .actions import (
    Action,
    MUTATING_ACTIONS,
    STAFF_ACTIONS,
    ADMIN_ACTIONS,
    STAFF_ROLES,
)
from .engine import (
    Actor,
    Decision,
    decide,
    DENY_NO_USER,
    DENY_SUSPENDED,
    DENY_FORBIDDEN,
)

__all__ = [
    "Action",
    "MUTATING_ACTIONS",
    "STAFF_ACTIONS",
    "ADMIN_ACTIONS",
    "STAFF_ROLES",
    "Actor",
    "Decision",
    "decide",
    "DENY_NO_USER",
    "DENY_SUSPENDED",
    "DENY_FORBIDDEN",
]
