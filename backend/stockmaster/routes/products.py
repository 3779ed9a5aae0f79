# backend/stockmaster/routes/products.py
"""
Product catalog routes, including the adjust-stock entry point and the
per-product ledger.

SECURITY: All routes require authentication.
"""
from flask import Blueprint, current_app, g, jsonify, request

from ..errors import json_error
from ..models import Product
from ..services import audit_service, products_service, stock_service
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    ConflictError,
    NotFoundError,
    enforce_rules_product,
    validate_payload,
)
from ..decorators import require_auth

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "sku", "price", "stock", "min_stock", "category_id"},
    required_on_create={"name", "sku", "price"},
    # Clients PUT back the object they fetched
    ignored_fields={"id", "category_name", "created_at", "updated_at"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _product_payload() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if isinstance(payload, dict) and payload.get("category_id") == "":
        payload["category_id"] = None
    return payload


@products_bp.get("")
@require_auth
def list_products():
    """
    List all products, newest first.

    Query params:
    - search: str (optional) - substring of name or SKU
    - category_id: int (optional)
    """
    category_id = request.args.get("category_id", type=int)
    search = request.args.get("search")
    try:
        return jsonify(products_service.list_products(search=search, category_id=category_id))
    except Exception as e:
        return json_error(e)


@products_bp.get("/<int:product_id>")
@require_auth
def get_product(product_id: int):
    try:
        return products_service.get_product(product_id).to_dict()
    except NotFoundError as e:
        return {"message": str(e)}, 404


@products_bp.post("")
@require_auth
def create_product_route():
    """
    Create a new product.

    A positive initial stock is recorded as one IN transaction (0 -> stock).
    """
    payload = _product_payload()

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"message": str(e)}, 400

    try:
        created = products_service.create_product(patch=patch, acting_user_id=g.current_user_id)
    except (ValidationError, ConflictError) as e:
        return json_error(e)
    except Exception as e:
        current_app.logger.exception("Failed to create product")
        return json_error(e)

    return created, 201


@products_bp.put("/<int:product_id>")
@require_auth
def update_product_route(product_id: int):
    """
    Update a product.

    Sending a stock value different from the stored one is recorded as an
    ADJUST transaction with reference STOCK_UPDATE.
    """
    payload = _product_payload()

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"message": str(e)}, 400

    try:
        updated = products_service.update_product(
            product_id=product_id, patch=patch, acting_user_id=g.current_user_id
        )
    except (ValidationError, ConflictError, NotFoundError) as e:
        return json_error(e)
    except Exception as e:
        current_app.logger.exception("Failed to update product")
        return json_error(e)

    return updated, 200


@products_bp.delete("/<int:product_id>")
@require_auth
def delete_product_route(product_id: int):
    try:
        products_service.delete_product(product_id=product_id, acting_user_id=g.current_user_id)
    except NotFoundError as e:
        return {"message": str(e)}, 404
    except Exception as e:
        current_app.logger.exception("Failed to delete product")
        return json_error(e)

    return {"message": "Product deleted successfully"}, 200


@products_bp.post("/<int:product_id>/adjust-stock")
@require_auth
def adjust_stock_route(product_id: int):
    """
    Manual stock adjustment.

    Body: {"quantity": number > 0, "type": "IN" | "OUT" | "ADJUST", "notes"?: str}

    - 400 when validation fails or an OUT exceeds the stock on hand
      (body carries "available")
    - 404 when the product does not exist
    """
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return {"message": "Invalid JSON payload"}, 400

    try:
        result = stock_service.apply_stock_change(
            product_id,
            payload.get("type"),
            payload.get("quantity"),
            payload.get("notes"),
            acting_user_id=g.current_user_id,
        )
    except (ValidationError, NotFoundError) as e:
        return json_error(e)
    except Exception as e:
        current_app.logger.exception("Failed to adjust stock")
        return json_error(e)

    return {
        "message": f"Stock {result.type.lower()} successful",
        "product": result.product.to_dict(),
        "transaction": result.transaction_summary(),
    }, 200


@products_bp.get("/<int:product_id>/transactions")
@require_auth
def product_transactions_route(product_id: int):
    """Ledger rows for one product, newest first (limit defaults to 20)."""
    limit = request.args.get("limit", default=20, type=int)
    limit = max(1, min(limit, 200))
    return jsonify(audit_service.list_product_transactions(product_id, limit=limit))
