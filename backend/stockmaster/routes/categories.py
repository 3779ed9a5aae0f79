# backend/stockmaster/routes/categories.py
"""
Category routes.

A category that still has products cannot be deleted (400).
"""
from flask import Blueprint, current_app, g, jsonify, request

from ..errors import json_error
from ..services import categories_service
from ..validation import ConflictError, NotFoundError, ValidationError
from ..decorators import require_auth

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
@require_auth
def list_categories():
    """All categories ordered by name, with product_count."""
    return jsonify(categories_service.list_categories())


@categories_bp.post("")
@require_auth
def create_category_route():
    payload = request.get_json(silent=True) or {}
    try:
        created = categories_service.create_category(
            name=payload.get("name"),
            description=payload.get("description"),
            acting_user_id=g.current_user_id,
        )
    except (ValidationError, ConflictError) as e:
        return json_error(e)
    except Exception as e:
        current_app.logger.exception("Failed to create category")
        return json_error(e)
    return created, 201


@categories_bp.put("/<int:category_id>")
@require_auth
def update_category_route(category_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        updated = categories_service.update_category(
            category_id=category_id,
            name=payload.get("name"),
            description=payload.get("description"),
            acting_user_id=g.current_user_id,
        )
    except (ValidationError, ConflictError, NotFoundError) as e:
        return json_error(e)
    except Exception as e:
        current_app.logger.exception("Failed to update category")
        return json_error(e)
    return updated, 200


@categories_bp.delete("/<int:category_id>")
@require_auth
def delete_category_route(category_id: int):
    try:
        categories_service.delete_category(category_id=category_id, acting_user_id=g.current_user_id)
    except (ConflictError, NotFoundError) as e:
        return json_error(e)
    except Exception as e:
        current_app.logger.exception("Failed to delete category")
        return json_error(e)
    return {"message": "Category deleted successfully"}, 200
