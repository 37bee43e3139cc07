# Overview: Service-layer operations for payment; encapsulates business logic and database work.

"""
Checkout and Payment Reconciliation

WHY: Buyers pay through a hosted checkout page at the payment provider. When
they come back (or the provider redelivers the completion), we must record
the payment exactly once and flip the order to paid exactly once.

DESIGN PRINCIPLES:
- Provider truth only: reconcile() consumes a snapshot the caller fetched
  from the provider by session id; client-supplied status is never trusted
- Idempotency anchor: Payment.transaction_id is unique. An existing row for
  the transaction short-circuits with AlreadyProcessed and writes nothing
- No orphans: the order is loaded (and locked) before the payment row is
  inserted; a missing order fails the whole reconcile with OrderNotFoundError
- One transaction: the order update and payment insert commit together.
  A concurrent duplicate that loses the unique-constraint race is reported
  as AlreadyProcessed
- Minor units: amounts are converted to cents with x100 (half-up rounding)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import ValidationError, ConflictError, InvalidIdError, OrderNotFoundError, UpstreamError
from ..integrations.payments import CheckoutSession, CheckoutSessionSnapshot, PaymentGateway
from ..models import Order, Payment
from ..models.orders import PAYMENT_STATUS_PAID
from ..validation import normalize_email, parse_record_id
from ..time_utils import utcnow
from .concurrency import lock_for_update, run_with_retry

PROVIDER_STATUS_PAID = "paid"

# Wire names accepted for each checkout input, first present wins.
_COST_KEYS = ("cost", "totalPrice", "amount")
_EMAIL_KEYS = ("senderEmail", "email")
_ORDER_ID_KEYS = ("parcelId", "orderId")
_TITLE_KEYS = ("parcelName", "productTitle")


# =============================================================================
# RECONCILE RESULTS
# =============================================================================

@dataclass(frozen=True)
class Processed:
    order_id: int
    transaction_id: str
    payment_id: int


@dataclass(frozen=True)
class AlreadyProcessed:
    transaction_id: str
    order_id: int


@dataclass(frozen=True)
class NotCompleted:
    session_id: str
    payment_status: str


ReconcileResult = Union[Processed, AlreadyProcessed, NotCompleted]


# =============================================================================
# CHECKOUT
# =============================================================================

def _first_present(payload: dict, keys: tuple[str, ...]):
    for key in keys:
        value = payload.get(key)
        if value not in (None, ""):
            return value
    return None


def to_minor_units(cost) -> int:
    """
    Major currency units -> cents (x100, half-up).

    Raises:
        ValidationError: not a number, or not positive
    """
    if isinstance(cost, bool):
        raise ValidationError("Invalid cost value")
    try:
        cents = (Decimal(str(cost)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise ValidationError("Invalid cost value")
    if not cents.is_finite() or cents <= 0:
        raise ValidationError("Invalid cost value")
    return int(cents)


def create_checkout_session(payload: dict, *, gateway: PaymentGateway, currency: str) -> CheckoutSession:
    """
    Open a hosted checkout session for an order.

    Request body:
    {
        "cost": 49.99,              (or "totalPrice" / "amount", major units)
        "senderEmail": "a@x.com",   (or "email")
        "parcelId": 12,             (or "orderId")
        "parcelName": "Denim x 40"  (optional, or "productTitle")
    }

    Raises:
        ValidationError: missing/invalid cost, email or order id, or a cost
            that differs from the order total
        OrderNotFoundError: order id does not resolve
        ConflictError: order already paid
        PaymentProviderError: provider call failed
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    cost = _first_present(payload, _COST_KEYS)
    sender_email = _first_present(payload, _EMAIL_KEYS)
    if cost is None or sender_email is None:
        raise ValidationError("Missing required fields: cost and senderEmail")

    amount_cents = to_minor_units(cost)
    sender_email = normalize_email(sender_email, "senderEmail")

    raw_order_id = _first_present(payload, _ORDER_ID_KEYS)
    if raw_order_id is None:
        raise ValidationError("Missing required field: parcelId")
    order_id = parse_record_id(raw_order_id)

    order = db.session.get(Order, order_id)
    if order is None:
        raise OrderNotFoundError()
    if order.payment_status == PAYMENT_STATUS_PAID:
        raise ConflictError("Order is already paid")
    if order.total_price_cents is not None and amount_cents != order.total_price_cents:
        raise ValidationError("cost does not match the order total")

    title = _first_present(payload, _TITLE_KEYS) or order.product_title or "Order"

    return gateway.create_checkout_session(
        amount_cents=amount_cents,
        currency=currency,
        product_name=str(title),
        customer_email=sender_email,
        order_id=order.id,
    )


# =============================================================================
# RECONCILIATION
# =============================================================================

def find_payment_by_transaction(transaction_id: str) -> Payment | None:
    return db.session.query(Payment).filter(Payment.transaction_id == transaction_id).first()


def reconcile(snapshot: CheckoutSessionSnapshot) -> ReconcileResult:
    """
    Turn a provider-confirmed checkout session into a local payment record.

    1. Payment with this transaction id exists -> AlreadyProcessed (no writes)
    2. Provider status is not "paid" -> NotCompleted (no writes)
    3. Lock the order, mark it paid, insert the Payment, commit together
    4. -> Processed

    Raises:
        OrderNotFoundError: the session's order does not exist (nothing written)
    """
    if snapshot.transaction_id:
        existing = find_payment_by_transaction(snapshot.transaction_id)
        if existing is not None:
            return AlreadyProcessed(transaction_id=existing.transaction_id, order_id=existing.order_id)

    if snapshot.payment_status != PROVIDER_STATUS_PAID:
        return NotCompleted(session_id=snapshot.session_id, payment_status=snapshot.payment_status)

    if not snapshot.transaction_id:
        raise UpstreamError("Payment provider returned a paid session without a transaction id")

    try:
        order_id = parse_record_id(snapshot.order_id)
    except InvalidIdError:
        raise OrderNotFoundError()

    def _op():
        order = lock_for_update(db.session.query(Order).filter(Order.id == order_id)).first()
        if order is None:
            raise OrderNotFoundError()

        now = utcnow()
        order.payment_status = PAYMENT_STATUS_PAID
        order.transaction_id = snapshot.transaction_id
        order.paid_at = now
        order.updated_at = now

        payment = Payment(
            order_id=order.id,
            amount_cents=snapshot.amount_cents,
            currency=snapshot.currency,
            customer_email=snapshot.customer_email,
            transaction_id=snapshot.transaction_id,
            payment_status=snapshot.payment_status,
            paid_at=now,
        )
        db.session.add(payment)
        db.session.commit()

        return Processed(order_id=order.id, transaction_id=payment.transaction_id, payment_id=payment.id)

    try:
        return run_with_retry(_op)
    except IntegrityError:
        db.session.rollback()
        existing = find_payment_by_transaction(snapshot.transaction_id)
        if existing is None:
            raise
        return AlreadyProcessed(transaction_id=existing.transaction_id, order_id=existing.order_id)
