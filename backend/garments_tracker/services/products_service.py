# backend/garments_tracker/services/products_service.py
"""
Catalog Store

Product listing is public and paginated. Create/update/delete are gated by
the access policy before these functions are reached (manager/admin, active),
so nothing here checks roles.
"""
from __future__ import annotations

import math

from ..extensions import db
from ..errors import ValidationError, ProductNotFoundError
from ..models import Product
from ..validation import (
    MAX_INT64,
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    parse_record_id,
)
from ..time_utils import utcnow

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "name",
        "description",
        "category",
        "price_cents",
        "available_quantity",
        "minimum_order_quantity",
        "images",
        "payment_options",
        "show_on_home",
    },
    required_on_create={"name"},
    aliases={
        "priceCents": "price_cents",
        "availableQuantity": "available_quantity",
        "minimumOrderQuantity": "minimum_order_quantity",
        "paymentOptions": "payment_options",
        "showOnHome": "show_on_home",
    },
)


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_POLICY.writable_fields:
            continue
        setattr(p, k, v)


def list_products(
    created_by: str | None = None,
    page: int = 1,
    limit: int = 12,
    max_limit: int = 100,
) -> dict:
    """
    Paginated product listing, newest first.

    page < 1 is treated as 1; limit is clamped to [1, max_limit]; page is capped
    so the row offset stays inside the 64-bit integer range.
    totalPages is ceil(totalProducts / limit), so an empty catalog has 0 pages.
    """
    limit = min(max(limit, 1), max_limit)
    page = min(max(page, 1), MAX_INT64 // limit)

    base_query = db.session.query(Product)
    if created_by:
        base_query = base_query.filter(Product.created_by == created_by.strip().lower())

    total = base_query.count()
    products = (
        base_query.order_by(Product.created_at.desc(), Product.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "products": [p.to_dict() for p in products],
        "pagination": {
            "currentPage": page,
            "limit": limit,
            "totalProducts": total,
            "totalPages": math.ceil(total / limit),
        },
    }


def get_product(product_id) -> Product:
    product_id = parse_record_id(product_id)
    product = db.session.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError()
    return product


def create_product(*, payload: dict, created_by: str) -> Product:
    """
    Create a catalog entry owned by created_by (the caller's email).

    Raises:
        ValidationError: missing name, unknown fields, bad values
    """
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_rules_product(patch)

    now = utcnow()
    p = Product(created_by=created_by, created_at=now, updated_at=now)
    apply_product_patch(p, patch)

    db.session.add(p)
    db.session.commit()
    return p


def update_product(*, product_id, payload: dict) -> Product:
    """
    Patch a product.

    Raises:
        InvalidIdError: malformed id (before any query)
        ValidationError: empty or invalid patch
        ProductNotFoundError: id does not resolve
    """
    product_id = parse_record_id(product_id)
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    if not patch:
        raise ValidationError("No fields to update")
    enforce_rules_product(patch)

    p = db.session.get(Product, product_id)
    if p is None:
        raise ProductNotFoundError()

    apply_product_patch(p, patch)
    p.updated_at = utcnow()
    db.session.commit()
    return p


def delete_product(*, product_id) -> None:
    """Hard delete. Orders keep their own copy of the product title."""
    product_id = parse_record_id(product_id)
    p = db.session.get(Product, product_id)
    if p is None:
        raise ProductNotFoundError()

    db.session.delete(p)
    db.session.commit()
