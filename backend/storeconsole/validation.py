from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import ValidationError


# Maximum price accepted for a product: 99,99,99,999.99
MAX_MRP = Decimal("9999999999.99")

# Prices are stored as Numeric(12, 2)
CENT = Decimal("0.01")


@dataclass(frozen=True)
class PayloadPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def check_payload(payload: Any, policy: PayloadPolicy, *, partial: bool) -> dict:
    """
    Reject non-dict payloads, unknown fields, and (on create) missing fields.

    Returns a shallow copy limited to writable fields. Values are coerced by
    the caller, since each entity has its own rules.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}", field=k)

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", field=missing[0])

    return dict(payload)


def clean_str(value: Any, field: str, *, required: bool = False, max_length: int | None = None) -> str:
    """Trimmed string; None becomes "". Required fields may not be blank."""
    if value is None:
        value = ""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    text = value.strip()
    if required and not text:
        raise ValidationError(f"{field} cannot be blank", field=field)
    if max_length and len(text) > max_length:
        raise ValidationError(f"{field} exceeds max length {max_length}", field=field)
    return text


def optional_str(value: Any, field: str, *, max_length: int | None = None) -> str | None:
    """Trimmed string, with blank collapsing to None."""
    text = clean_str(value, field, max_length=max_length)
    return text or None


def coerce_decimal(value: Any, field: str) -> Decimal:
    # Booleans are ints in Python, never a price
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number", field=field)
    if isinstance(value, float):
        value = repr(value)
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number", field=field)
    if not number.is_finite():
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        rounded = number.quantize(CENT)
    except InvalidOperation:
        # Too many digits for cent precision; range checks reject it
        return number
    if rounded != number:
        raise ValidationError(f"{field} must have at most 2 decimal places", field=field)
    return rounded


def coerce_int(value: Any, field: str) -> int:
    """
    Strict integer: rejects floats with a fraction, decimals in strings and
    scientific notation.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be an integer", field=field)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field} must be an integer, not a decimal", field=field)
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped or "e" in stripped.lower() or "." in stripped:
            raise ValidationError(f"{field} must be an integer", field=field)
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer", field=field)
    raise ValidationError(f"{field} must be an integer", field=field)


def coerce_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValidationError(f"{field} must be a boolean", field=field)


def coerce_tags(value: Any, field: str = "tags") -> list[str]:
    """Trimmed, de-duplicated tag list (first occurrence wins)."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(f"{field} must be a list of strings", field=field)
    tags: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValidationError(f"{field} must be a list of strings", field=field)
        tag = item.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules for product writes. Only keys present in `patch` are
    checked, so the same rules serve create and update.
    """
    if "name" in patch and not patch["name"]:
        raise ValidationError("Product name is required", field="name")

    if "mrp" in patch:
        mrp = patch["mrp"]
        if mrp <= 0:
            raise ValidationError("MRP must be greater than 0", field="mrp")
        if mrp > MAX_MRP:
            raise ValidationError(f"MRP cannot exceed {MAX_MRP}", field="mrp")

    if "stock" in patch and patch["stock"] < 0:
        raise ValidationError("Stock cannot be negative", field="stock")

    if "category" in patch and not patch["category"]:
        raise ValidationError("Please select a category", field="category")
