"""
Product catalog.

Products are identified by a slug of their name. The document collection
"products" is the live catalog; the relational tables carry the same
products with their varieties and per-producer grants.
"""

from __future__ import annotations

import re

from flask import current_app

from ..activity import activity
from ..extensions import db
from ..models import Product, ProductVariety, AuthorizedProduct
from ..notifications import show_error, show_success
from ..validation import ConflictError, ValidationError
from .document_store import COLLECTION_PRODUCTS, get_document_store
from marketplace.time_utils import utcnow_iso

SCOPE = "products"


def product_slug(name: str) -> str:
    """
    "Cherry Tomatoes (Red)" -> "cherry-tomatoes".

    Parenthesized text is dropped, any run of non-alphanumerics becomes a
    dash, and leading/trailing dashes are trimmed.
    """
    slug = (name or "").lower()
    slug = re.sub(r"\([^)]*\)", "", slug)
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    return slug.strip("-")


# ----------------------------------------------------------------------
# Document catalog
# ----------------------------------------------------------------------

def list_products() -> list[dict]:
    return get_document_store().query(COLLECTION_PRODUCTS, order_by="name")


def add_product(product_data: dict) -> dict | None:
    with activity.track(SCOPE):
        try:
            data = {**product_data, "createdAt": utcnow_iso()}
            created = get_document_store().add(COLLECTION_PRODUCTS, data)
            show_success("Product added successfully")
            return created
        except Exception as e:
            current_app.logger.exception("Error adding product")
            show_error(str(e) or "Failed to add product")
            return None


def update_product(product_id: str, product_data: dict) -> bool:
    with activity.track(SCOPE):
        try:
            data = {**product_data, "updatedAt": utcnow_iso()}
            get_document_store().update(COLLECTION_PRODUCTS, product_id, data)
            show_success("Product updated successfully")
            return True
        except Exception as e:
            current_app.logger.exception("Error updating product")
            show_error(str(e) or "Failed to update product")
            return False


def delete_product(product_id: str) -> bool:
    with activity.track(SCOPE):
        try:
            get_document_store().delete(COLLECTION_PRODUCTS, product_id)
            show_success("Product deleted successfully")
            return True
        except Exception as e:
            current_app.logger.exception("Error deleting product")
            show_error(str(e) or "Failed to delete product")
            return False


# ----------------------------------------------------------------------
# Relational catalog
# ----------------------------------------------------------------------

def create_product(
    name: str,
    category: str,
    unit: str,
    box_size: str | None = None,
    varieties: list[str] | None = None,
) -> Product:
    product_id = product_slug(name)
    if not product_id:
        raise ValidationError("name must contain letters or digits")
    if db.session.get(Product, product_id):
        raise ConflictError(f"Product already exists: {product_id}")

    product = Product(
        id=product_id,
        name=name.split("(")[0].strip(),
        category=(category or "").lower(),
        unit=(unit or "").lower(),
        box_size=box_size,
    )
    db.session.add(product)
    for variety in varieties or []:
        product.varieties.append(ProductVariety(name=variety))
    db.session.commit()
    return product


def grant_product(user_id: int, product_id: str) -> bool:
    """Relational grant; a repeated grant is a no-op. Returns True if created."""
    if db.session.get(AuthorizedProduct, (user_id, product_id)):
        return False
    db.session.add(AuthorizedProduct(user_id=user_id, product_id=product_id))
    db.session.commit()
    return True


def get_authorized_products(user_id: int) -> list[dict]:
    """Products a producer may offer, with their varieties."""
    products = (
        db.session.query(Product)
        .join(AuthorizedProduct, AuthorizedProduct.product_id == Product.id)
        .filter(AuthorizedProduct.user_id == user_id)
        .order_by(Product.name.asc())
        .all()
    )
    return [p.to_dict() for p in products]
