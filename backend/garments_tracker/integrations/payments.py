# Overview: Checkout-session adapter for the external payment provider (Stripe).

"""
Payment Provider Gateway

WHY: The reconciler must never trust a client's claim that a payment
succeeded. Everything it acts on comes from retrieve_session(), a
server-side lookup of the provider's own record for the session id.

DESIGN:
- The secret key is passed per request (api_key=...) rather than set on the
  stripe module, so no process-wide provider state exists.
- Provider failures surface as PaymentProviderError with a safe message;
  the provider's own error text is only logged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import stripe
from flask import current_app

from ..errors import UpstreamError

SUCCESS_PATH = "/dashboard/payment-success?session_id={CHECKOUT_SESSION_ID}"
CANCEL_PATH = "/dashboard/payment-cancelled"


class PaymentProviderError(UpstreamError):
    """Raised when the payment provider call fails."""

    def default_message(self) -> str:
        return "Payment provider error"


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    url: str


@dataclass(frozen=True)
class CheckoutSessionSnapshot:
    """Provider-side truth about a checkout session."""
    session_id: str
    transaction_id: Optional[str]
    payment_status: str
    amount_cents: int
    currency: str
    customer_email: Optional[str]
    order_id: Optional[str]


class PaymentGateway(Protocol):
    def create_checkout_session(
        self,
        *,
        amount_cents: int,
        currency: str,
        product_name: str,
        customer_email: str,
        order_id: int,
    ) -> CheckoutSession:
        ...

    def retrieve_session(self, session_id: str) -> CheckoutSessionSnapshot:
        ...


class StripePaymentGateway:
    def __init__(self, secret_key: str, *, site_domain: str):
        self._secret_key = secret_key
        self._site_domain = site_domain.rstrip("/")

    @classmethod
    def from_config(cls, config) -> Optional["StripePaymentGateway"]:
        secret = config.get("STRIPE_SECRET")
        if not secret:
            return None
        return cls(secret, site_domain=config.get("SITE_DOMAIN", ""))

    def create_checkout_session(
        self,
        *,
        amount_cents: int,
        currency: str,
        product_name: str,
        customer_email: str,
        order_id: int,
    ) -> CheckoutSession:
        try:
            session = stripe.checkout.Session.create(
                api_key=self._secret_key,
                line_items=[
                    {
                        "price_data": {
                            "currency": currency,
                            "unit_amount": amount_cents,
                            "product_data": {"name": f"Please pay for: {product_name}"},
                        },
                        "quantity": 1,
                    }
                ],
                mode="payment",
                metadata={"orderId": str(order_id)},
                customer_email=customer_email,
                success_url=f"{self._site_domain}{SUCCESS_PATH}",
                cancel_url=f"{self._site_domain}{CANCEL_PATH}",
            )
        except stripe.StripeError as exc:
            current_app.logger.error("Stripe checkout session creation failed: %s", exc.user_message or type(exc).__name__)
            raise PaymentProviderError("Server error creating checkout session") from exc

        return CheckoutSession(id=session.id, url=session.url)

    def retrieve_session(self, session_id: str) -> CheckoutSessionSnapshot:
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self._secret_key)
        except stripe.StripeError as exc:
            current_app.logger.error("Stripe session lookup failed: %s", exc.user_message or type(exc).__name__)
            raise PaymentProviderError("Server error processing payment") from exc

        payment_intent = getattr(session, "payment_intent", None)
        if payment_intent is not None and not isinstance(payment_intent, str):
            payment_intent = payment_intent.id

        metadata = getattr(session, "metadata", None)
        try:
            order_id = metadata["orderId"] if metadata is not None else None
        except KeyError:
            order_id = None

        customer_email = getattr(session, "customer_email", None)
        if not customer_email:
            details = getattr(session, "customer_details", None)
            customer_email = getattr(details, "email", None) if details is not None else None

        return CheckoutSessionSnapshot(
            session_id=session.id,
            transaction_id=payment_intent,
            payment_status=session.payment_status,
            amount_cents=session.amount_total or 0,
            currency=session.currency,
            customer_email=customer_email,
            order_id=order_id,
        )
