# Overview: Flask API routes for the product catalog.

from flask import Blueprint, request

from ..responses import error_response, json_response, result_response
from ..services import products_service
from ..validation import FormValidationError, ValidationError, require_valid, validate_product

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products():
    return json_response({"products": products_service.list_products()})


@products_bp.post("")
def create_product():
    """
    Add a catalog product.

    Body: {name, category, unit, boxSize, varieties?}
    """
    try:
        data = require_valid(validate_product, request.get_json(silent=True))
    except FormValidationError as e:
        return error_response("Validation failed", 400, fields=e.errors)
    except ValidationError as e:
        return error_response(str(e), 400)

    product = products_service.add_product({**data, "slug": products_service.product_slug(data["name"])})
    if product is None:
        return error_response("Failed to add product", 400)
    return json_response({"product": product}, 201)


@products_bp.patch("/<product_id>")
def update_product(product_id: str):
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return error_response("JSON object body required", 400)
    return result_response(products_service.update_product(product_id, data))


@products_bp.delete("/<product_id>")
def delete_product(product_id: str):
    return result_response(products_service.delete_product(product_id))


@products_bp.get("/authorized/<int:user_id>")
def authorized_products(user_id: int):
    """Relational catalog: products a producer account may offer."""
    return json_response({"products": products_service.get_authorized_products(user_id)})
