# Overview: Service-layer operations for the product catalog; encapsulates business logic and database work.

"""
Catalog Service

- Listing only shows ACTIVE products (the new-assignment picker).
- Update is a full overwrite of the mutable fields.
- Delete is a soft delete: historical case items keep pointing at the row.
"""
from __future__ import annotations

from sqlalchemy.orm import Session

from ..models import Product
from ..validation import NotFoundError
from .transaction import atomic

PRODUCT_STATUS_ACTIVE = "ACTIVE"
PRODUCT_STATUS_REMOVED = "REMOVED"

PRODUCT_MUTABLE_FIELDS = ("name", "category", "price_cents", "photo")


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _get_product_or_404(session: Session, product_id: int) -> Product:
    p = session.get(Product, product_id)
    if p is None:
        raise NotFoundError("Product not found")
    return p


def list_products(session: Session) -> dict:
    products = (
        session.query(Product)
        .filter(Product.status == PRODUCT_STATUS_ACTIVE)
        .order_by(Product.name.asc(), Product.id.asc())
        .all()
    )
    return {
        "items": [p.to_dict() for p in products],
        "count": len(products),
    }


def get_product(session: Session, *, product_id: int) -> dict:
    return _get_product_or_404(session, product_id).to_dict()


def create_product(session: Session, *, patch: dict) -> dict:
    """Create product using a validated patch dict. Names are not unique."""
    with atomic(session):
        p = Product(status=PRODUCT_STATUS_ACTIVE)
        apply_product_patch(p, patch)
        session.add(p)
    return p.to_dict()


def update_product(session: Session, *, product_id: int, patch: dict) -> dict:
    """
    Overwrite every mutable field. Fields absent from the patch are cleared
    (only photo is optional, so in practice that means photo -> None).
    """
    with atomic(session):
        p = _get_product_or_404(session, product_id)
        full = {field: patch.get(field) for field in PRODUCT_MUTABLE_FIELDS}
        apply_product_patch(p, full)
    return p.to_dict()


def delete_product(session: Session, *, product_id: int) -> dict:
    """Soft-delete: preserve IDs and historical references."""
    with atomic(session):
        p = _get_product_or_404(session, product_id)
        p.status = PRODUCT_STATUS_REMOVED
    return p.to_dict()
