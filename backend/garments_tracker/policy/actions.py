# Overview: Action vocabulary for the access policy, grouped by what each action requires.

from enum import Enum


class Action(str, Enum):
    """Everything a caller can ask the tracker to do that the policy gates."""
    CREATE_PRODUCT = "CreateProduct"
    UPDATE_PRODUCT = "UpdateProduct"
    DELETE_PRODUCT = "DeleteProduct"

    CREATE_ORDER = "CreateOrder"
    VIEW_ORDERS = "ViewOrders"
    VIEW_OWN_ORDERS = "ViewOwnOrders"
    UPDATE_ORDER_GENERIC = "UpdateOrderGeneric"
    UPDATE_ORDER_STATUS = "UpdateOrderStatus"
    APPEND_TRACKING = "AppendTracking"
    UPDATE_PAYMENT_STATUS = "UpdatePaymentStatus"
    DELETE_ORDER = "DeleteOrder"

    CREATE_CHECKOUT_SESSION = "CreateCheckoutSession"
    MANAGE_ACCOUNTS = "ManageAccounts"


STAFF_ROLES = frozenset({"manager", "admin"})

# Reads are the only actions a suspended account may still perform.
MUTATING_ACTIONS = frozenset(
    a for a in Action if a not in (Action.VIEW_ORDERS, Action.VIEW_OWN_ORDERS)
)

# Require role in STAFF_ROLES
STAFF_ACTIONS = frozenset({
    Action.CREATE_PRODUCT,
    Action.UPDATE_PRODUCT,
    Action.DELETE_PRODUCT,
    Action.UPDATE_ORDER_STATUS,
    Action.APPEND_TRACKING,
    Action.UPDATE_PAYMENT_STATUS,
})

# Require role == admin
ADMIN_ACTIONS = frozenset({
    Action.MANAGE_ACCOUNTS,
})
