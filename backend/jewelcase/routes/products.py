# Overview: Flask API routes for the product catalog; parses input and returns JSON responses.

# backend/jewelcase/routes/products.py
"""
Product catalog routes.

- GET lists ACTIVE products only
- PUT is a full overwrite (name, category and price_cents required)
- DELETE is a soft delete
"""
from flask import Blueprint, request

from ..extensions import db
from ..models import Product
from ..services import products_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    NotFoundError,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "category", "price_cents", "photo"},
    required_on_create={"name", "category", "price_cents"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _validated_patch(payload: dict) -> dict:
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_rules_product(patch)
    return patch


@products_bp.get("")
def list_products():
    """List active products (the picker for new case items)."""
    return products_service.list_products(db.session)


@products_bp.post("")
def create_product_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = _validated_patch(payload)
    except ValidationError as e:
        return {"error": str(e)}, 400

    created = products_service.create_product(db.session, patch=patch)
    return created, 201


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    """Single product, removed ones included (old case items still reference them)."""
    try:
        return products_service.get_product(db.session, product_id=product_id), 200
    except NotFoundError as e:
        return {"error": str(e)}, 404


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = _validated_patch(payload)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        updated = products_service.update_product(db.session, product_id=product_id, patch=patch)
    except NotFoundError as e:
        return {"error": str(e)}, 404

    return updated, 200


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    try:
        products_service.delete_product(db.session, product_id=product_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404

    return {"ok": True}, 200
