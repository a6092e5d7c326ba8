# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/storeconsole/routes/products.py
"""
Product management routes.

Every write goes to `products` and then to the `product_lists` mirror
(see products_service).
"""
from flask import Blueprint, request, current_app

from ..decorators import require_auth
from ..errors import ConsoleError, error_response
from ..services import products_service
from ..validation import coerce_bool

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
def list_products_route():
    """
    List products, newest first.

    Query params:
    - search: matches name, category or tags (case-insensitive)
    - status: all | active | inactive
    - availability: all | available | unavailable
    """
    try:
        products = products_service.filter_products(
            products_service.list_products(),
            search=request.args.get("search"),
            status=request.args.get("status", "all"),
            availability=request.args.get("availability", "all"),
        )
    except ConsoleError as e:
        return error_response(e)

    return {"items": [p.to_dict() for p in products], "count": len(products)}


@products_bp.post("")
@require_auth
def create_product_route():
    """Create a product and its product_lists mirror."""
    payload = request.get_json(silent=True) or {}

    try:
        created = products_service.create_product(payload)
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create product")
        return {"error": "Internal server error"}, 500

    return created.to_dict(), 201


@products_bp.get("/<product_id>")
@require_auth
def get_product_route(product_id: str):
    try:
        product = products_service.get_product(product_id)
    except ConsoleError as e:
        return error_response(e)
    return product.to_dict()


@products_bp.put("/<product_id>")
@require_auth
def update_product_route(product_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        updated = products_service.update_product(product_id, payload)
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update product")
        return {"error": "Internal server error"}, 500

    return updated.to_dict(), 200


@products_bp.delete("/<product_id>")
@require_auth
def delete_product_route(product_id: str):
    try:
        products_service.delete_product(product_id)
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return {"error": "Internal server error"}, 500

    return {"ok": True}, 200


def _current_flag(payload: dict, field: str):
    if field not in payload:
        return None
    return coerce_bool(payload[field], field)


@products_bp.post("/<product_id>/toggle-active")
@require_auth
def toggle_active_route(product_id: str):
    """Body (optional): {"is_active": <value shown in the UI>}."""
    payload = request.get_json(silent=True) or {}

    try:
        value = products_service.toggle_active(product_id, _current_flag(payload, "is_active"))
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to toggle product status")
        return {"error": "Internal server error"}, 500

    return {"id": product_id, "is_active": value}


@products_bp.post("/<product_id>/toggle-available")
@require_auth
def toggle_available_route(product_id: str):
    """Body (optional): {"is_available": <value shown in the UI>}."""
    payload = request.get_json(silent=True) or {}

    try:
        value = products_service.toggle_available(product_id, _current_flag(payload, "is_available"))
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to toggle product availability")
        return {"error": "Internal server error"}, 500

    return {"id": product_id, "is_available": value}
