# Overview: Flask API routes for the denormalized product list and its PDF/CSV exports.

"""
Product-list routes.

Listing and exports read the `product_lists` mirror only. The same filter
query params apply to all three endpoints, so an export always contains
what the list screen shows:

- search: matches name, category or sub-category
- category: exact category name, or "all"
- status: all | active | inactive
- availability: all | available | unavailable
"""
from io import BytesIO

from flask import Blueprint, request, current_app, send_file

from ..decorators import require_auth
from ..errors import ConsoleError, ValidationError, error_response
from ..services import export_service, products_service, settings_service
from ..time_utils import utcnow

product_lists_bp = Blueprint("product_lists", __name__, url_prefix="/api/product-lists")


def _filtered_rows():
    return products_service.filter_product_lists(
        products_service.list_product_lists(),
        search=request.args.get("search"),
        category=request.args.get("category"),
        status=request.args.get("status", "all"),
        availability=request.args.get("availability", "all"),
    )


def _scope(allowed: tuple) -> str:
    scope = (request.args.get("scope") or "all").strip().lower()
    if scope not in allowed:
        raise ValidationError(f"scope must be one of: {', '.join(allowed)}", field="scope")
    return scope


@product_lists_bp.get("")
@require_auth
def list_product_lists_route():
    try:
        all_rows = products_service.list_product_lists()
        rows = products_service.filter_product_lists(
            all_rows,
            search=request.args.get("search"),
            category=request.args.get("category"),
            status=request.args.get("status", "all"),
            availability=request.args.get("availability", "all"),
        )
    except ConsoleError as e:
        return error_response(e)

    return {
        "items": [row.to_dict() for row in rows],
        "count": len(rows),
        "total": len(all_rows),
        "categories": products_service.category_facet(all_rows),
    }


@product_lists_bp.get("/export.pdf")
@require_auth
def export_pdf_route():
    """
    Catalog PDF grouped by category.

    scope: all | available | category (uses the `category` query param)
    """
    try:
        scope = _scope(export_service.PDF_SCOPES)
        category = request.args.get("category")
        if scope == "category" and (not category or category == "all"):
            raise ValidationError("Select a category to export", field="category")
        rows = export_service.select_for_pdf(_filtered_rows(), scope, category)
        if not rows:
            return {"error": "No products to export"}, 400

        store_name = settings_service.store_name()
        document = export_service.render_pdf(export_service.build_report(rows), store_name)
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to generate PDF")
        return {"error": "Failed to generate PDF. Please try again."}, 500

    current_app.logger.info("Exported catalog PDF scope=%s rows=%d", scope, len(rows))
    return send_file(
        BytesIO(document),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=export_service.pdf_filename(store_name, utcnow()),
    )


@product_lists_bp.get("/export.csv")
@require_auth
def export_csv_route():
    """scope: all | active | available | unavailable"""
    try:
        scope = _scope(export_service.CSV_SCOPES)
        rows = export_service.select_for_csv(_filtered_rows(), scope)
        if not rows:
            return {"error": "No products to export"}, 400
        text = export_service.render_csv(rows)
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to export CSV")
        return {"error": "Internal server error"}, 500

    current_app.logger.info("Exported CSV scope=%s rows=%d", scope, len(rows))
    return send_file(
        BytesIO(text.encode("utf-8")),
        mimetype="text/csv",
        as_attachment=True,
        download_name=export_service.csv_filename(scope, utcnow()),
    )
