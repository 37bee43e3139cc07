from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

ORDER_STATUS_PENDING = "pending"
ORDER_STATUS_APPROVED = "approved"
ORDER_STATUS_REJECTED = "rejected"
VALID_ORDER_STATUSES = (ORDER_STATUS_PENDING, ORDER_STATUS_APPROVED, ORDER_STATUS_REJECTED)

PAYMENT_STATUS_UNPAID = "unpaid"
PAYMENT_STATUS_PAID = "paid"
VALID_PAYMENT_STATUSES = (PAYMENT_STATUS_UNPAID, PAYMENT_STATUS_PAID)


class Order(db.Model):
    """
    Purchase order placed by a buyer.

    Two independent axes:
    - status: approval workflow (pending -> approved | rejected), staff-driven
    - payment_status: unpaid -> paid, driven by the payment reconciler

    An order can be approved before it is paid or paid before it is approved.
    transaction_id/paid_at are denormalized from the payments table for fast
    reads; the reconciler keeps them consistent.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.UniqueConstraint("tracking_id", name="uq_orders_tracking_id"),
        db.Index("ix_orders_email_status", "email", "status"),
        db.Index("ix_orders_created", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Owner (lower-cased email of the buyer account)
    email = db.Column(db.String(255), nullable=False, index=True)
    tracking_id = db.Column(db.String(32), nullable=False)

    # Line item data
    product_id = db.Column(db.Integer, nullable=True)
    product_title = db.Column(db.String(255), nullable=True)
    line_items = db.Column(db.JSON, nullable=False)
    quantity = db.Column(db.Integer, nullable=True)
    total_price_cents = db.Column(db.Integer, nullable=True)

    # Buyer / delivery details
    buyer_name = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    delivery_address = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    payment_option = db.Column(db.String(32), nullable=True)

    status = db.Column(db.String(16), nullable=False, default=ORDER_STATUS_PENDING, index=True)
    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)

    payment_status = db.Column(db.String(16), nullable=False, default=PAYMENT_STATUS_UNPAID, index=True)
    transaction_id = db.Column(db.String(255), nullable=True, index=True)
    paid_at = db.Column(db.DateTime(timezone=True), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True)

    tracking_updates = db.relationship(
        "OrderTrackingUpdate",
        back_populates="order",
        order_by="OrderTrackingUpdate.sequence",
        cascade="all, delete-orphan",
        lazy="select",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Order id={self.id} email={self.email!r} status={self.status} payment_status={self.payment_status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "trackingId": self.tracking_id,
            "productId": self.product_id,
            "productTitle": self.product_title,
            "lineItems": list(self.line_items or []),
            "quantity": self.quantity,
            "totalPriceCents": self.total_price_cents,
            "buyerName": self.buyer_name,
            "phone": self.phone,
            "deliveryAddress": self.delivery_address,
            "notes": self.notes,
            "paymentOption": self.payment_option,
            "status": self.status,
            "approvedAt": to_utc_z(self.approved_at),
            "paymentStatus": self.payment_status,
            "transactionId": self.transaction_id,
            "paidAt": to_utc_z(self.paid_at),
            "trackingUpdates": [u.to_dict() for u in self.tracking_updates],
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }


class OrderTrackingUpdate(db.Model):
    """
    One fulfillment event in an order's tracking history.

    APPEND-ONLY: sequence numbers run 1..N per order in insertion order.
    Rows are never edited; they go away only with their order.
    """
    __tablename__ = "order_tracking_updates"
    __table_args__ = (
        db.UniqueConstraint("order_id", "sequence", name="uq_tracking_order_sequence"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    sequence = db.Column(db.Integer, nullable=False)

    event = db.Column(db.String(64), nullable=False)
    location = db.Column(db.String(255), nullable=True)
    note = db.Column(db.Text, nullable=True)
    recorded_by = db.Column(db.String(255), nullable=True)
    timestamp = db.Column(db.DateTime(timezone=True), nullable=False)

    order = db.relationship("Order", back_populates="tracking_updates")

    def to_dict(self) -> dict:
        return {
            "sequence": self.sequence,
            "event": self.event,
            "location": self.location,
            "note": self.note,
            "recordedBy": self.recorded_by,
            "timestamp": to_utc_z(self.timestamp),
        }
