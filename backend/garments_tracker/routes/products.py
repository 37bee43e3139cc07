# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/garments_tracker/routes/products.py
"""
Product catalog routes.

SECURITY:
- Listing and single lookup are public
- Create/update/delete require a bearer identity and pass the access
  policy (manager/admin, not suspended)
"""
from flask import Blueprint, request, g, current_app

from ..errors import NotFoundError
from ..services import products_service
from ..validation import parse_query_int, json_object
from ..decorators import require_auth, authorize
from ..policy import Action

products_bp = Blueprint("products", __name__, url_prefix="/products")


@products_bp.get("")
def list_products():
    """
    Paginated product listing.

    Query params:
    - createdBy: str (optional) - creator email
    - page: int (optional, default 1)
    - limit: int (optional, default PRODUCTS_DEFAULT_PAGE_SIZE, max PRODUCTS_MAX_PAGE_SIZE)
    """
    page = parse_query_int(request.args.get("page"), "page", default=1)
    limit = parse_query_int(
        request.args.get("limit"), "limit", default=current_app.config["PRODUCTS_DEFAULT_PAGE_SIZE"]
    )

    return products_service.list_products(
        created_by=request.args.get("createdBy"),
        page=page,
        limit=limit,
        max_limit=current_app.config["PRODUCTS_MAX_PAGE_SIZE"],
    )


@products_bp.get("/<product_id>")
def get_product(product_id: str):
    try:
        return products_service.get_product(product_id).to_dict()
    except NotFoundError:
        return {}


@products_bp.post("")
@require_auth
def create_product_route():
    """Create a product; createdBy is the caller's email."""
    authorize(Action.CREATE_PRODUCT)

    payload = json_object(request.get_json(silent=True))
    product = products_service.create_product(payload=payload, created_by=g.decoded_email)

    current_app.logger.info("Product %s created by %s", product.id, g.decoded_email)
    return {"insertedId": product.id, "product": product.to_dict()}, 201


@products_bp.patch("/<product_id>")
@require_auth
def update_product_route(product_id: str):
    authorize(Action.UPDATE_PRODUCT)

    payload = json_object(request.get_json(silent=True))

    try:
        product = products_service.update_product(product_id=product_id, payload=payload)
    except NotFoundError:
        return {"matchedCount": 0, "modifiedCount": 0}, 200

    return {"matchedCount": 1, "modifiedCount": 1, "product": product.to_dict()}, 200


@products_bp.delete("/<product_id>")
@require_auth
def delete_product_route(product_id: str):
    authorize(Action.DELETE_PRODUCT)

    try:
        products_service.delete_product(product_id=product_id)
    except NotFoundError:
        return {"deletedCount": 0}, 200

    current_app.logger.info("Product %s deleted by %s", product_id, g.decoded_email)
    return {"deletedCount": 1}, 200
