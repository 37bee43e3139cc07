# Overview: Service-layer operations for orders; encapsulates business logic and database work.

"""
Order Ledger

WHY: Orders are the center of the tracker: buyers place them, staff approve
or reject them, production posts tracking events against them, and the
payment reconciler marks them paid.

DESIGN PRINCIPLES:
- Fail fast on ids: a malformed id raises InvalidIdError before any query
- Reads are lenient: get/list return None/[] when nothing matches
- Mutations are strict: an unknown id raises OrderNotFoundError
- Every mutation stamps updated_at
- Tracking history is append-only (sequence 1..N, never rewritten)
- Status and payment status are independent axes

Authorization is NOT checked here; routes run the access policy first.
"""

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..errors import ValidationError, ConflictError, InternalError, OrderNotFoundError
from ..models import Order, OrderTrackingUpdate
from ..models.orders import (
    ORDER_STATUS_PENDING,
    ORDER_STATUS_APPROVED,
    ORDER_STATUS_REJECTED,
    VALID_ORDER_STATUSES,
    PAYMENT_STATUS_UNPAID,
    PAYMENT_STATUS_PAID,
    VALID_PAYMENT_STATUSES,
)
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_order,
    normalize_email,
    parse_record_id,
)
from ..time_utils import utcnow, parse_iso_datetime
from .concurrency import lock_for_update, run_with_retry
from .identifier_service import generate_tracking_id

TRACKING_ID_ATTEMPTS = 5

_ORDER_ALIASES = {
    "productId": "product_id",
    "productTitle": "product_title",
    "lineItems": "line_items",
    "totalPriceCents": "total_price_cents",
    "buyerName": "buyer_name",
    "deliveryAddress": "delivery_address",
    "paymentOption": "payment_option",
}

# Buyer-editable fields. status/paymentStatus/transactionId/tracking have
# dedicated operations and are rejected here.
_EDITABLE_ORDER_FIELDS = {
    "product_title",
    "line_items",
    "quantity",
    "total_price_cents",
    "buyer_name",
    "phone",
    "delivery_address",
    "notes",
    "payment_option",
}

ORDER_CREATE_POLICY = ModelValidationPolicy(
    writable_fields=_EDITABLE_ORDER_FIELDS | {"email", "product_id"},
    required_on_create={"email", "line_items"},
    aliases=_ORDER_ALIASES,
)

ORDER_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=_EDITABLE_ORDER_FIELDS,
    aliases=_ORDER_ALIASES,
)

TRACKING_POLICY = ModelValidationPolicy(
    writable_fields={"event", "location", "note", "timestamp"},
    required_on_create={"event"},
)

# Stamped by the server; silently dropped from a new-order body.
_SERVER_STAMPED_FIELDS = {
    "id", "_id", "trackingId", "status", "paymentStatus", "transactionId",
    "paidAt", "approvedAt", "trackingUpdates", "createdAt", "updatedAt",
}

# Approval workflow: only pending orders are decided.
ALLOWED_STATUS_TRANSITIONS = {
    ORDER_STATUS_PENDING: {ORDER_STATUS_APPROVED, ORDER_STATUS_REJECTED},
}


def _load_for_update(order_id: int) -> Order:
    order = lock_for_update(db.session.query(Order).filter(Order.id == order_id)).first()
    if order is None:
        raise OrderNotFoundError()
    return order


# =============================================================================
# CREATION
# =============================================================================

def prepare_order(payload: dict) -> dict:
    """
    Validate a new-order body and return the cleaned patch.

    Split from create_order so the route can run the access policy on the
    body before it is validated or written.

    Raises:
        ValidationError: missing email/lineItems, unknown or malformed fields
    """
    if isinstance(payload, dict):
        payload = {k: v for k, v in payload.items() if k not in _SERVER_STAMPED_FIELDS}
    patch = validate_payload(model=Order, payload=payload, policy=ORDER_CREATE_POLICY, partial=False)
    enforce_rules_order(patch)
    patch["email"] = normalize_email(patch.get("email"))
    return patch


def _allocate_tracking_id() -> str:
    for _ in range(TRACKING_ID_ATTEMPTS):
        candidate = generate_tracking_id()
        taken = db.session.query(Order.id).filter(Order.tracking_id == candidate).first()
        if taken is None:
            return candidate
    raise InternalError("Could not allocate a tracking id")


def create_order(patch: dict) -> Order:
    """
    Insert an order from a patch produced by prepare_order.

    The order always starts pending/unpaid regardless of the request body.
    """
    if not patch.get("email") or not patch.get("line_items"):
        raise ValidationError("Missing required fields: email, lineItems")

    now = utcnow()
    order = Order(
        tracking_id=_allocate_tracking_id(),
        status=ORDER_STATUS_PENDING,
        payment_status=PAYMENT_STATUS_UNPAID,
        created_at=now,
        updated_at=now,
        **patch,
    )
    db.session.add(order)
    db.session.commit()
    return order


# =============================================================================
# READS
# =============================================================================

def get_order(order_id) -> Order | None:
    """Lookup by id. Malformed id raises InvalidIdError; unknown id returns None."""
    order_id = parse_record_id(order_id)
    return db.session.get(Order, order_id)


def get_order_by_tracking_id(tracking_id: str) -> Order | None:
    if not tracking_id or not tracking_id.strip():
        return None
    return db.session.query(Order).filter(Order.tracking_id == tracking_id.strip().upper()).first()


def list_orders(email: str | None = None, status: str | None = None) -> list[Order]:
    """Orders matching the optional filters, newest first."""
    query = db.session.query(Order)
    if email:
        query = query.filter(Order.email == email.strip().lower())
    if status:
        query = query.filter(Order.status == status)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


# =============================================================================
# MUTATIONS
# =============================================================================

def update_order_fields(order_id, payload: dict) -> Order:
    """
    Patch buyer-editable fields.

    Raises:
        InvalidIdError, ValidationError, OrderNotFoundError
    """
    order_id = parse_record_id(order_id)
    patch = validate_payload(model=Order, payload=payload, policy=ORDER_UPDATE_POLICY, partial=True)
    if not patch:
        raise ValidationError("No fields to update")
    enforce_rules_order(patch)

    def _op():
        order = _load_for_update(order_id)
        for key, value in patch.items():
            setattr(order, key, value)
        order.updated_at = utcnow()
        db.session.commit()
        return order

    return run_with_retry(_op)


def set_order_status(order_id, status: str, approved_at: str | None = None) -> Order:
    """
    Move an order through the approval workflow.

    approved_at (ISO-8601) is recorded when approving; it defaults to now.

    Raises:
        InvalidIdError, ValidationError, OrderNotFoundError
        ConflictError: transition not allowed from the current status
    """
    order_id = parse_record_id(order_id)
    if status not in VALID_ORDER_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(VALID_ORDER_STATUSES)}")
    try:
        approved_at_dt = parse_iso_datetime(approved_at) if approved_at else None
    except (TypeError, ValueError):
        raise ValidationError("approvedAt must be an ISO-8601 datetime")

    def _op():
        order = _load_for_update(order_id)
        allowed = ALLOWED_STATUS_TRANSITIONS.get(order.status, set())
        if status not in allowed:
            raise ConflictError(f"Cannot change order status from {order.status} to {status}")

        now = utcnow()
        order.status = status
        if status == ORDER_STATUS_APPROVED:
            order.approved_at = approved_at_dt or now
        order.updated_at = now
        db.session.commit()
        return order

    return run_with_retry(_op)


def append_tracking(order_id, payload: dict, recorded_by: str | None = None) -> OrderTrackingUpdate:
    """
    Append one event to the order's tracking history.

    Body: {"event": "...", "location"?: "...", "note"?: "...", "timestamp"?: ISO-8601}

    Raises:
        InvalidIdError, ValidationError, OrderNotFoundError
    """
    order_id = parse_record_id(order_id)
    patch = validate_payload(model=OrderTrackingUpdate, payload=payload, policy=TRACKING_POLICY, partial=False)

    def _op():
        order = _load_for_update(order_id)
        last = (
            db.session.query(func.max(OrderTrackingUpdate.sequence))
            .filter(OrderTrackingUpdate.order_id == order.id)
            .scalar()
        )
        now = utcnow()
        update = OrderTrackingUpdate(
            order_id=order.id,
            sequence=(last or 0) + 1,
            event=patch["event"],
            location=patch.get("location"),
            note=patch.get("note"),
            recorded_by=recorded_by,
            timestamp=patch.get("timestamp") or now,
        )
        db.session.add(update)
        order.updated_at = now
        db.session.commit()
        return update

    return run_with_retry(_op)


def set_payment_status(order_id, payment_status: str, transaction_id: str | None = None) -> Order:
    """
    Manual payment-status override (staff).

    paid stamps paid_at; unpaid clears paid_at and transaction_id.
    Reconciled payments go through payment_service.reconcile instead.
    """
    order_id = parse_record_id(order_id)
    if payment_status not in VALID_PAYMENT_STATUSES:
        raise ValidationError(f"paymentStatus must be one of {', '.join(VALID_PAYMENT_STATUSES)}")
    if transaction_id is not None and not isinstance(transaction_id, str):
        raise ValidationError("transactionId must be a string")

    def _op():
        order = _load_for_update(order_id)
        now = utcnow()
        order.payment_status = payment_status
        if payment_status == PAYMENT_STATUS_PAID:
            order.transaction_id = transaction_id or order.transaction_id
            order.paid_at = now
        else:
            order.transaction_id = None
            order.paid_at = None
        order.updated_at = now
        db.session.commit()
        return order

    return run_with_retry(_op)


def delete_order(order_id) -> None:
    """Delete an order and its tracking history. Payment records are kept."""
    order_id = parse_record_id(order_id)

    def _op():
        order = _load_for_update(order_id)
        db.session.delete(order)
        db.session.commit()

    run_with_retry(_op)
