# Overview: Flask API routes for the inventory view and dashboard; read-only.

from flask import Blueprint, request

from ..decorators import require_auth
from ..errors import ConsoleError, error_response
from ..services import dashboard_service, inventory_service, products_service

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api")


@inventory_bp.get("/inventory")
@require_auth
def inventory_route():
    """
    Stock screen: rows sorted by stock ascending plus totals.

    Query params:
    - search: matches name or category
    - stock: all | good | low | out  ("low" includes out-of-stock)
    - category: exact category name, or "all"
    """
    try:
        view = inventory_service.inventory_view(
            products_service.list_products(),
            search=request.args.get("search"),
            stock=request.args.get("stock", "all"),
            category=request.args.get("category"),
        )
    except ConsoleError as e:
        return error_response(e)
    return view


@inventory_bp.get("/dashboard")
@require_auth
def dashboard_route():
    return dashboard_service.dashboard_stats()
