# Overview: Flask API routes for orders operations; parses input and returns JSON responses.

# backend/garments_tracker/routes/orders.py
"""
Order routes.

DESIGN:
- Every protected handler authenticates (@require_auth), then runs the
  access policy through authorize() before touching the ledger
- Reads are lenient: unknown ids/tracking ids return {} and filters that
  match nothing return []
- Mutations on an unknown id return a zero-affected result instead of 404
- Malformed ids are rejected with 400 INVALID_ID

SECURITY:
- POST /orders: body.email must be the caller's own email
- GET /orders, /orders/<email>: users see only their own orders; staff see all
- Status, tracking and payment-status changes are staff-only
- GET /orders/id/<id> is a public lookup
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..errors import NotFoundError
from ..decorators import require_auth, authorize
from ..validation import json_object
from ..policy import Action
from ..services import order_service

orders_bp = Blueprint("orders", __name__, url_prefix="/orders")

_NOT_MATCHED = {"matchedCount": 0, "modifiedCount": 0}


def _view_action(target_email: str | None) -> Action:
    if target_email and target_email.strip().lower() == g.decoded_email:
        return Action.VIEW_OWN_ORDERS
    return Action.VIEW_ORDERS


# =============================================================================
# CREATION
# =============================================================================

@orders_bp.post("")
@require_auth
def create_order_route():
    """
    Place an order.

    Request body:
    {
        "email": "a@x.com",                       (must match the caller)
        "lineItems": [{"size": "M", "qty": 40}],  (non-empty)
        "productId": 3,                            (optional)
        "productTitle": "Denim Jacket",            (optional)
        "quantity": 40,                            (optional)
        "totalPriceCents": 199900,                 (optional)
        "buyerName": "...", "phone": "...", "deliveryAddress": "...",
        "notes": "...", "paymentOption": "stripe"  (optional)
    }

    Returns:
        201: order placed (status=pending, paymentStatus=unpaid)
        400: invalid input
        401: missing/invalid token
        403: NO_USER | SUSPENDED | FORBIDDEN (email mismatch)
    """
    payload = json_object(request.get_json(silent=True))
    owner = payload.get("email")
    authorize(Action.CREATE_ORDER, resource_owner_email=owner if isinstance(owner, str) else None)

    patch = order_service.prepare_order(payload)

    order = order_service.create_order(patch)
    current_app.logger.info("Order %s (%s) placed by %s", order.id, order.tracking_id, g.decoded_email)

    return {
        "message": "Order placed successfully",
        "orderId": order.id,
        "trackingId": order.tracking_id,
        "order": order.to_dict(),
    }, 201


# =============================================================================
# QUERIES
# =============================================================================

@orders_bp.get("")
@require_auth
def list_orders_route():
    """
    List orders.

    Query params:
    - email: owner email (required for plain users, must be their own)
    - status: pending | approved | rejected
    """
    email = request.args.get("email")
    authorize(_view_action(email), target_email=email)

    orders = order_service.list_orders(email=email, status=request.args.get("status"))
    return jsonify([o.to_dict() for o in orders])


@orders_bp.get("/<email>")
@require_auth
def list_orders_by_email_route(email: str):
    authorize(_view_action(email), target_email=email)

    orders = order_service.list_orders(email=email)
    return jsonify([o.to_dict() for o in orders])


@orders_bp.get("/id/<order_id>")
def get_order_route(order_id: str):
    order = order_service.get_order(order_id)
    return order.to_dict() if order is not None else {}


@orders_bp.get("/track/<tracking_id>")
@require_auth
def get_order_by_tracking_route(tracking_id: str):
    order = order_service.get_order_by_tracking_id(tracking_id)
    if order is None:
        authorize(Action.VIEW_OWN_ORDERS)
        return {}

    authorize(_view_action(order.email), target_email=order.email)
    return order.to_dict()


# =============================================================================
# MUTATIONS
# =============================================================================

@orders_bp.patch("/<order_id>")
@require_auth
def update_order_route(order_id: str):
    """Patch buyer-editable fields (lineItems, quantity, buyerName, ...)."""
    authorize(Action.UPDATE_ORDER_GENERIC)

    try:
        order = order_service.update_order_fields(order_id, json_object(request.get_json(silent=True)))
    except NotFoundError:
        return _NOT_MATCHED, 200

    return {"matchedCount": 1, "modifiedCount": 1, "order": order.to_dict()}, 200


@orders_bp.patch("/<order_id>/status")
@require_auth
def update_order_status_route(order_id: str):
    """
    Approve or reject a pending order.

    Request body:
    {
        "status": "approved",                   (approved | rejected)
        "approvedAt": "2026-10-18T09:30:00Z"    (optional, defaults to now)
    }

    Returns:
        200: updated order
        409: order is no longer pending
    """
    authorize(Action.UPDATE_ORDER_STATUS)

    data = json_object(request.get_json(silent=True))

    try:
        order = order_service.set_order_status(order_id, data.get("status"), data.get("approvedAt"))
    except NotFoundError:
        return _NOT_MATCHED, 200

    current_app.logger.info("Order %s set to %s by %s", order.id, order.status, g.decoded_email)
    return {"matchedCount": 1, "modifiedCount": 1, "order": order.to_dict()}, 200


@orders_bp.patch("/<order_id>/tracking")
@require_auth
def append_tracking_route(order_id: str):
    """
    Append a fulfillment event.

    Request body:
    {
        "event": "cutting_completed",
        "location": "Floor 2",               (optional)
        "note": "Batch A",                   (optional)
        "timestamp": "2026-10-18T09:30:00Z"  (optional, defaults to now)
    }
    """
    authorize(Action.APPEND_TRACKING)

    try:
        update = order_service.append_tracking(
            order_id, json_object(request.get_json(silent=True)), recorded_by=g.decoded_email
        )
    except NotFoundError:
        return _NOT_MATCHED, 200

    return {"matchedCount": 1, "modifiedCount": 1, "trackingUpdate": update.to_dict()}, 200


@orders_bp.patch("/<order_id>/payment-status")
@require_auth
def update_payment_status_route(order_id: str):
    """Manual payment-status override: {"paymentStatus": "paid", "transactionId": "..."}"""
    authorize(Action.UPDATE_PAYMENT_STATUS)

    data = json_object(request.get_json(silent=True))

    try:
        order = order_service.set_payment_status(order_id, data.get("paymentStatus"), data.get("transactionId"))
    except NotFoundError:
        return _NOT_MATCHED, 200

    current_app.logger.info(
        "Order %s payment status manually set to %s by %s", order.id, order.payment_status, g.decoded_email
    )
    return {"matchedCount": 1, "modifiedCount": 1, "order": order.to_dict()}, 200


@orders_bp.delete("/<order_id>")
@require_auth
def delete_order_route(order_id: str):
    authorize(Action.DELETE_ORDER)

    try:
        order_service.delete_order(order_id)
    except NotFoundError:
        return {"deletedCount": 0}, 200

    current_app.logger.info("Order %s deleted by %s", order_id, g.decoded_email)
    return {"deletedCount": 1}, 200
