# Overview: Flask API routes for checkout and payment reconciliation; parses input and returns JSON responses.

# backend/garments_tracker/routes/payments.py
"""
Payment API Routes

WHY: Buyers pay on the provider's hosted checkout page. These routes open
that page and record the outcome when the buyer is redirected back.

DESIGN:
- POST /payment-checkout-session: authenticated, opens a session for an
  existing unpaid order and returns its URL
- PATCH /payment-success?session_id=...: looks the session up at the
  provider and hands the snapshot to the reconciler. Safe to call any
  number of times for the same session

SECURITY:
- The success route trusts nothing from the client except the session id
"""

from flask import Blueprint, request, current_app, g

from ..errors import UpstreamError
from ..extensions import PAYMENT_GATEWAY_KEY
from ..decorators import require_auth, authorize
from ..policy import Action
from ..services import payment_service
from ..services.payment_service import Processed, AlreadyProcessed

payments_bp = Blueprint("payments", __name__)


def _gateway():
    gateway = current_app.extensions.get(PAYMENT_GATEWAY_KEY)
    if gateway is None:
        raise UpstreamError("Payment provider is not configured")
    return gateway


@payments_bp.post("/payment-checkout-session")
@require_auth
def create_checkout_session_route():
    """
    Open a hosted checkout session.

    Request body:
    {
        "cost": 49.99,
        "senderEmail": "a@x.com",
        "parcelId": 12,
        "parcelName": "Denim Jacket x 40"   (optional)
    }

    Returns:
        200: {"url": "...", "id": "cs_..."}
        400: missing/invalid fields
        404: order not found
        409: order already paid
    """
    authorize(Action.CREATE_CHECKOUT_SESSION)

    session = payment_service.create_checkout_session(
        request.get_json(silent=True),
        gateway=_gateway(),
        currency=current_app.config["PAYMENT_CURRENCY"],
    )

    current_app.logger.info("Checkout session %s opened by %s", session.id, g.decoded_email)
    return {"url": session.url, "id": session.id}, 200


@payments_bp.patch("/payment-success")
def payment_success_route():
    """
    Reconcile a completed checkout session.

    Query params:
    - session_id: provider checkout session id

    Returns:
        200: processed, or already processed (idempotent replay)
        400: missing session_id, or the session is not paid
        404: the session's order no longer exists
    """
    session_id = (request.args.get("session_id") or "").strip()
    if not session_id:
        return {"error": "Missing session_id", "code": "VALIDATION_ERROR"}, 400

    snapshot = _gateway().retrieve_session(session_id)
    result = payment_service.reconcile(snapshot)

    if isinstance(result, Processed):
        current_app.logger.info(
            "Payment %s recorded for order %s (transaction %s)",
            result.payment_id,
            result.order_id,
            result.transaction_id,
        )
        return {
            "success": True,
            "message": "Payment processed successfully",
            "orderId": result.order_id,
            "transactionId": result.transaction_id,
            "paymentId": result.payment_id,
        }, 200

    if isinstance(result, AlreadyProcessed):
        current_app.logger.info("Payment for transaction %s already recorded", result.transaction_id)
        return {
            "success": True,
            "message": "Payment already processed",
            "transactionId": result.transaction_id,
            "orderId": result.order_id,
        }, 200

    current_app.logger.info("Checkout session %s not completed (status=%s)", result.session_id, result.payment_status)
    return {"success": False, "message": "Payment not completed"}, 400
