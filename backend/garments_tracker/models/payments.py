from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Payment(db.Model):
    """
    Completed external payment, recorded once per provider transaction.

    IMMUTABLE: rows are inserted by the payment reconciler and never updated.
    transaction_id is the idempotency anchor (unique): a redelivered
    completion for the same transaction finds this row and stops.
    """
    __tablename__ = "payments"
    __table_args__ = (
        db.UniqueConstraint("transaction_id", name="uq_payments_transaction_id"),
        db.Index("ix_payments_order_id", "order_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    # Logical link only: the payment audit trail outlives a deleted order.
    order_id = db.Column(db.Integer, nullable=False)

    amount_cents = db.Column(db.Integer, nullable=False)
    currency = db.Column(db.String(8), nullable=False)
    customer_email = db.Column(db.String(255), nullable=True)

    transaction_id = db.Column(db.String(255), nullable=False)
    payment_status = db.Column(db.String(16), nullable=False)
    paid_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "orderId": self.order_id,
            "amount": self.amount_cents / 100,
            "amountCents": self.amount_cents,
            "currency": self.currency,
            "customerEmail": self.customer_email,
            "transactionId": self.transaction_id,
            "paymentStatus": self.payment_status,
            "paidAt": to_utc_z(self.paid_at),
        }
