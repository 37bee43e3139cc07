from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Product(db.Model):
    """
    Catalog entry for a garment that buyers can order.

    Prices are stored in cents (frontend formats for display). created_by is
    the email of the manager/admin who listed it and is stamped server-side.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_created_by", "created_by"),
        db.Index("ix_products_show_on_home", "show_on_home"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(64), nullable=True)

    price_cents = db.Column(db.Integer, nullable=True)
    available_quantity = db.Column(db.Integer, nullable=True)
    minimum_order_quantity = db.Column(db.Integer, nullable=True)

    images = db.Column(db.JSON, nullable=True)
    payment_options = db.Column(db.JSON, nullable=True)
    show_on_home = db.Column(db.Boolean, nullable=False, default=False)

    created_by = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} created_by={self.created_by!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "priceCents": self.price_cents,
            "availableQuantity": self.available_quantity,
            "minimumOrderQuantity": self.minimum_order_quantity,
            "images": list(self.images or []),
            "paymentOptions": list(self.payment_options or []),
            "showOnHome": self.show_on_home,
            "createdBy": self.created_by,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
