# Overview: Service-layer operations for app and store settings; validates and persists settings records.

from __future__ import annotations

from typing import Any

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import BackendError, NotFoundError, ValidationError
from ..extensions import db
from ..models import APP_SETTINGS_ID, STORE_SETTINGS_ID, AppSettings, StoreSettings
from ..time_utils import utcnow
from .access_service import AdminContext, log_security_event, require_super_admin


TYPE_STRING = "string"
TYPE_BOOL = "bool"
TYPE_INT = "int"
TYPE_STRING_LIST = "string_list"

# Store profile fields and the value type each one accepts
STORE_FIELDS: dict[str, str] = {
    "store_name": TYPE_STRING,
    "store_name_hindi": TYPE_STRING,
    "tagline": TYPE_STRING,
    "tagline_hindi": TYPE_STRING,
    "description": TYPE_STRING,
    "description_hindi": TYPE_STRING,
    "free_pickup": TYPE_BOOL,
    "cash_on_pickup": TYPE_BOOL,
    "online_ordering": TYPE_BOOL,
    "primary_phone": TYPE_STRING,
    "secondary_phone": TYPE_STRING,
    "whatsapp_number": TYPE_STRING,
    "email": TYPE_STRING,
    "website": TYPE_STRING,
    "gst_number": TYPE_STRING,
    "license_number": TYPE_STRING,
    "established_year": TYPE_INT,
    "address": TYPE_STRING,
    "address_hindi": TYPE_STRING,
    "city": TYPE_STRING,
    "state": TYPE_STRING,
    "pincode": TYPE_STRING,
    "landmark": TYPE_STRING,
    "monday_to_saturday": TYPE_STRING,
    "sunday": TYPE_STRING,
    "holiday_hours": TYPE_STRING,
    "facebook": TYPE_STRING,
    "instagram": TYPE_STRING,
    "twitter": TYPE_STRING,
    "meta_title": TYPE_STRING,
    "meta_description": TYPE_STRING,
    "keywords": TYPE_STRING_LIST,
}

# Settings page tabs, each saving only its own fields
STORE_TABS: dict[str, tuple[str, ...]] = {
    "general": (
        "store_name", "store_name_hindi", "tagline", "tagline_hindi",
        "description", "description_hindi", "free_pickup", "cash_on_pickup", "online_ordering",
    ),
    "contact": (
        "primary_phone", "secondary_phone", "whatsapp_number", "email",
        "website", "gst_number", "license_number", "established_year",
    ),
    "address": ("address", "address_hindi", "city", "state", "pincode", "landmark"),
    "hours": ("monday_to_saturday", "sunday", "holiday_hours"),
    "social": ("facebook", "instagram", "twitter"),
    "seo": ("meta_title", "meta_description", "keywords"),
}


def _commit(action: str, message: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to %s", action)
        raise BackendError(message)


# =============================================================================
# APP SETTINGS
# =============================================================================

def get_app_settings() -> AppSettings:
    """Return the app settings row, creating it with defaults when missing."""
    settings = db.session.get(AppSettings, APP_SETTINGS_ID)
    if settings is None:
        settings = AppSettings(id=APP_SETTINGS_ID, show_sign_up=True, updated_at=utcnow(), updated_by="")
        db.session.add(settings)
        _commit("create app settings", "Failed to load settings")
    return settings


def sign_up_enabled() -> bool:
    """Public read used by the login and sign-up pages."""
    settings = db.session.get(AppSettings, APP_SETTINGS_ID)
    return True if settings is None else bool(settings.show_sign_up)


def save_app_settings(actor: AdminContext, payload) -> AppSettings:
    require_super_admin(actor)
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    for key in payload:
        if key != "show_sign_up":
            raise ValidationError(f"Field not allowed: {key}", field=key)
    if "show_sign_up" not in payload:
        raise ValidationError("Missing required fields: show_sign_up", field="show_sign_up")

    value = _coerce_value("show_sign_up", TYPE_BOOL, payload["show_sign_up"])

    settings = get_app_settings()
    settings.show_sign_up = value
    settings.updated_at = utcnow()
    settings.updated_by = actor.id
    _commit("save app settings", "Failed to save settings")

    log_security_event(
        actor.id, "APP_SETTINGS_CHANGED", True, resource="app_settings",
        action="show_sign_up", reason=str(value).lower(),
    )
    current_app.logger.info("App settings saved show_sign_up=%s by=%s", value, actor.id)
    return settings


# =============================================================================
# STORE SETTINGS
# =============================================================================

def default_store_settings() -> dict:
    defaults: dict[str, Any] = {}
    for key, value_type in STORE_FIELDS.items():
        if value_type == TYPE_BOOL:
            defaults[key] = False
        elif value_type == TYPE_INT:
            defaults[key] = utcnow().year
        elif value_type == TYPE_STRING_LIST:
            defaults[key] = []
        else:
            defaults[key] = ""
    return defaults


def get_store_settings() -> StoreSettings | None:
    return db.session.get(StoreSettings, STORE_SETTINGS_ID)


def store_name() -> str:
    """Name printed on exports: profile value, else configured STORE_NAME."""
    settings = get_store_settings()
    name = ((settings.data or {}).get("store_name") or "").strip() if settings else ""
    return name or current_app.config["STORE_NAME"]


def initialize_store_settings(actor: AdminContext) -> tuple[StoreSettings, bool]:
    """Create the default profile once. Returns (settings, created)."""
    settings = get_store_settings()
    if settings is not None:
        return settings, False

    now = utcnow()
    settings = StoreSettings(
        id=STORE_SETTINGS_ID,
        data=default_store_settings(),
        created_at=now,
        updated_at=now,
        updated_by=actor.id,
    )
    db.session.add(settings)
    _commit("initialize store settings", "Failed to initialize store settings")

    current_app.logger.info("Store settings initialized by=%s", actor.id)
    return settings, True


def _coerce_value(key: str, value_type: str, v: Any) -> Any:
    if value_type == TYPE_BOOL:
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            s = v.strip().lower()
            if s in {"true", "1", "yes", "on"}:
                return True
            if s in {"false", "0", "no", "off"}:
                return False
        raise ValidationError(f"{key}: expected boolean", field=key)
    if value_type == TYPE_INT:
        if isinstance(v, bool):
            raise ValidationError(f"{key}: expected integer", field=key)
        if isinstance(v, int):
            return v
        if isinstance(v, float) and int(v) == v:
            return int(v)
        if isinstance(v, str) and v.strip().lstrip("-").isdigit():
            return int(v.strip())
        raise ValidationError(f"{key}: expected integer", field=key)
    if value_type == TYPE_STRING_LIST:
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, list) or not all(isinstance(item, str) for item in v):
            raise ValidationError(f"{key}: expected list of strings", field=key)
        return [item.strip() for item in v if item.strip()]
    if v is None:
        return ""
    if not isinstance(v, str):
        raise ValidationError(f"{key}: expected string", field=key)
    return v.strip()


def validate_store_patch(patch, tab: str | None = None) -> dict:
    """Check keys against the registry (and the tab, if given) and coerce values."""
    if not isinstance(patch, dict):
        raise ValidationError("Invalid JSON payload")

    allowed = set(STORE_FIELDS)
    if tab is not None:
        if tab not in STORE_TABS:
            raise ValidationError(f"tab must be one of: {', '.join(STORE_TABS)}", field="tab")
        allowed = set(STORE_TABS[tab])

    cleaned = {}
    for key, raw in patch.items():
        if key not in STORE_FIELDS:
            raise ValidationError(f"Field not allowed: {key}", field=key)
        if key not in allowed:
            raise ValidationError(f"Field {key} does not belong to tab {tab}", field=key)
        cleaned[key] = _coerce_value(key, STORE_FIELDS[key], raw)
    return cleaned


def update_store_settings(actor: AdminContext, patch, tab: str | None = None) -> StoreSettings:
    """
    Merge a partial update into the profile.

    Raises NotFoundError when the profile has not been initialized.
    """
    cleaned = validate_store_patch(patch, tab)

    settings = get_store_settings()
    if settings is None:
        raise NotFoundError("Store settings not found")

    # New dict so the JSON column is flagged dirty
    data = dict(settings.data or {})
    data.update(cleaned)
    settings.data = data
    settings.updated_at = utcnow()
    settings.updated_by = actor.id
    _commit("update store settings", "Failed to update store settings")

    log_security_event(
        actor.id, "STORE_SETTINGS_CHANGED", True, resource="store_settings",
        action=tab or "all", reason=", ".join(sorted(cleaned)),
    )
    current_app.logger.info("Store settings updated tab=%s fields=%d by=%s", tab or "all", len(cleaned), actor.id)
    return settings
