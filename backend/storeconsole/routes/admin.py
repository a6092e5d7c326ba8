# Overview: Flask API routes for admin operations; parses input and returns JSON responses.

# backend/storeconsole/routes/admin.py
"""
Admin user management.

List/create/toggle/delete require super_admin. Self-protection (own
record cannot be deactivated or deleted) is enforced by access_service
before any database call.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_super_admin
from ..errors import ConsoleError, error_response
from ..services import access_service
from ..services.auth_service import IdentityError
from ..validation import coerce_bool
from .auth import identity_error_response

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/users")
@require_auth
@require_super_admin
def list_users():
    """All admin records, newest first."""
    try:
        users = access_service.list_admin_users(g.actor)
    except ConsoleError as e:
        return error_response(e)
    return jsonify({"users": [u.to_dict() for u in users], "count": len(users)})


@admin_bp.post("/users")
@require_auth
@require_super_admin
def create_user():
    """
    Create an identity and its admin record.

    Request body:
    - email: str (required)
    - password: str (required, min 6 characters)
    - name: str (required)
    - role: "admin" | "super_admin" (default "admin")
    """
    payload = request.get_json(silent=True) or {}

    try:
        record = access_service.create_admin_user(g.actor, payload)
    except IdentityError as e:
        return identity_error_response(e)
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"user": record.to_dict(), "message": "User created"}), 201


@admin_bp.post("/users/<user_id>/toggle-status")
@require_auth
@require_super_admin
def toggle_user_status(user_id: str):
    """Body: {"is_active": <current status shown in the UI>}."""
    payload = request.get_json(silent=True) or {}

    try:
        current_status = coerce_bool(payload.get("is_active", True), "is_active")
        record = access_service.toggle_user_status(g.actor, user_id, current_status)
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update user status")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"user": record.to_dict()})


@admin_bp.delete("/users/<user_id>")
@require_auth
@require_super_admin
def delete_user(user_id: str):
    try:
        access_service.delete_user(g.actor, user_id)
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"ok": True})


@admin_bp.post("/setup")
@require_auth
def setup_super_admin():
    """Promote the signed-in identity to super_admin (first-run setup page)."""
    try:
        record = access_service.make_super_admin(g.session_context.identity)
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to set up super admin")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"admin": record.to_dict(), "message": "Super admin access granted"})
