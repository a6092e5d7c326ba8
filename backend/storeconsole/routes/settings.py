# Overview: Flask API routes for app and store settings; parses input and returns JSON responses.

from __future__ import annotations

from flask import Blueprint, jsonify, request, g, current_app

from ..decorators import require_auth, require_super_admin
from ..errors import ConsoleError, error_response
from ..services import settings_service


settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("/public")
def get_public_settings():
    """Login/sign-up page switches; no auth."""
    return jsonify({"show_sign_up": settings_service.sign_up_enabled()})


@settings_bp.get("/app")
@require_auth
def get_app_settings():
    try:
        settings = settings_service.get_app_settings()
    except ConsoleError as e:
        return error_response(e)
    return jsonify(settings.to_dict())


@settings_bp.put("/app")
@require_auth
@require_super_admin
def save_app_settings():
    payload = request.get_json(silent=True) or {}
    try:
        settings = settings_service.save_app_settings(g.actor, payload)
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to save app settings")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(settings.to_dict())


@settings_bp.get("/store")
@require_auth
def get_store_settings():
    settings = settings_service.get_store_settings()
    if settings is None:
        return jsonify({"error": "Store settings not found"}), 404
    return jsonify(settings.to_dict())


@settings_bp.post("/store/initialize")
@require_auth
def initialize_store_settings():
    try:
        settings, created = settings_service.initialize_store_settings(g.actor)
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to initialize store settings")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(settings.to_dict()), 201 if created else 200


@settings_bp.patch("/store")
@require_auth
def update_store_settings():
    """
    Partial update. Optional ?tab=general|contact|address|hours|social|seo
    restricts the accepted fields to that tab.
    """
    payload = request.get_json(silent=True) or {}
    try:
        settings = settings_service.update_store_settings(g.actor, payload, tab=request.args.get("tab"))
    except ConsoleError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update store settings")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(settings.to_dict())
