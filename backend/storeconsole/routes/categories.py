# Overview: Flask API routes for category operations; parses input and returns JSON responses.

"""
Category routes.

Sub-category changes are applied to an in-memory draft and written back
with the whole category in a single save.
"""
from flask import Blueprint, request, current_app

from ..decorators import require_auth
from ..errors import ConsoleError, ValidationError, error_response
from ..services import taxonomy_service

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
@require_auth
def list_categories_route():
    categories = taxonomy_service.list_categories()
    return {"items": [c.to_dict() for c in categories], "count": len(categories)}


@categories_bp.post("")
@require_auth
def create_category_route():
    """
    Create a category.

    Body: name (required), description, image_url, sub_categories
    (list of {name, description}).
    """
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return {"error": "Invalid JSON payload"}, 400

    try:
        category = taxonomy_service.create_category(
            name=payload.get("name"),
            description=payload.get("description"),
            image_url=payload.get("image_url"),
            sub_categories=payload.get("sub_categories"),
        )
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create category")
        return {"error": "Internal server error"}, 500

    return category.to_dict(), 201


@categories_bp.get("/<category_id>")
@require_auth
def get_category_route(category_id: str):
    try:
        category = taxonomy_service.get_category(category_id)
    except ConsoleError as e:
        return error_response(e)
    return category.to_dict()


@categories_bp.put("/<category_id>")
@require_auth
def save_category_route(category_id: str):
    """Full save of the edit form, sub-category array included."""
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return {"error": "Invalid JSON payload"}, 400

    try:
        category = taxonomy_service.get_category(category_id)
        draft = taxonomy_service.draft_from_payload(category, payload)
        saved = taxonomy_service.save_category(category_id, draft)
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update category")
        return {"error": "Internal server error"}, 500

    return saved.to_dict()


@categories_bp.patch("/<category_id>/sub-categories")
@require_auth
def edit_sub_categories_route(category_id: str):
    """
    Apply a batch of sub-category edits, then save once.

    Body: {"operations": [{"op": "add", "name", "description"},
                          {"op": "edit", "id", "name", "description"},
                          {"op": "remove", "id"}]}
    """
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return {"error": "Invalid JSON payload"}, 400

    try:
        category = taxonomy_service.get_category(category_id)
        draft = taxonomy_service.CategoryDraft.from_category(category)
        result = taxonomy_service.apply_sub_category_operations(draft, payload.get("operations"))
        saved = taxonomy_service.save_category(category_id, draft)
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update sub-categories")
        return {"error": "Internal server error"}, 500

    return {"category": saved.to_dict(), **result}


@categories_bp.delete("/<category_id>")
@require_auth
def delete_category_route(category_id: str):
    try:
        taxonomy_service.delete_category(category_id)
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete category")
        return {"error": "Internal server error"}, 500

    return {"ok": True}, 200
