# Overview: Service-layer operations for products; encapsulates business logic and database work.

"""
Products Service

Every product write is mirrored to `product_lists` (same id, reporting
subset of fields). The two writes are committed one after the other; there
is no shared transaction. If the mirror write fails the product row stays
and the caller gets a generic "Failed to ..." BackendError. Nothing is
rolled back automatically; `reconcile_product_lists` repairs the mirror.
"""
from __future__ import annotations

from typing import Iterable

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import BackendError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Product, ProductList, new_document_id
from ..time_utils import utcnow
from ..validation import (
    PayloadPolicy,
    check_payload,
    clean_str,
    optional_str,
    coerce_bool,
    coerce_decimal,
    coerce_int,
    coerce_tags,
    enforce_rules_product,
)

PRODUCT_POLICY = PayloadPolicy(
    writable_fields={
        "name", "mrp", "category", "sub_category", "stock",
        "image_url", "tags", "is_active", "is_available",
    },
    required_on_create={"name", "mrp", "category"},
)

# Fields copied to the product_lists mirror
MIRRORED_FIELDS = ("name", "mrp", "category", "sub_category", "is_active", "is_available")

STATUS_FILTERS = ("all", "active", "inactive")
AVAILABILITY_FILTERS = ("all", "available", "unavailable")


def _coerce_product_fields(payload: dict) -> dict:
    patch: dict = {}
    for key, raw in payload.items():
        if key == "name":
            patch[key] = clean_str(raw, key, max_length=255)
        elif key == "mrp":
            patch[key] = coerce_decimal(raw, key)
        elif key == "category":
            patch[key] = clean_str(raw, key, max_length=120)
        elif key == "sub_category":
            patch[key] = optional_str(raw, key, max_length=120)
        elif key == "stock":
            patch[key] = coerce_int(raw, key)
        elif key == "image_url":
            patch[key] = optional_str(raw, key, max_length=1024)
        elif key == "tags":
            patch[key] = coerce_tags(raw, key)
        elif key in ("is_active", "is_available"):
            patch[key] = coerce_bool(raw, key)
    return patch


def validate_product_payload(payload, *, partial: bool) -> dict:
    """Allowlist, coerce and apply business rules. Returns a clean patch."""
    checked = check_payload(payload, PRODUCT_POLICY, partial=partial)
    patch = _coerce_product_fields(checked)
    enforce_rules_product(patch)
    return patch


def _commit_or_raise(action: str, message: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to %s", action)
        raise BackendError(message)


def _mirror_values(source) -> dict:
    return {key: getattr(source, key) for key in MIRRORED_FIELDS}


def _mirror_patch(patch: dict) -> dict:
    return {key: value for key, value in patch.items() if key in MIRRORED_FIELDS}


def _update_mirror(product_id: str, values: dict, message: str) -> None:
    """
    Second half of a dual write. A missing mirror is not special-cased: it
    surfaces as the same generic failure as any other store error.
    """
    mirror = db.session.get(ProductList, product_id)
    if mirror is None:
        current_app.logger.error(
            "product_lists mirror missing for product id=%s; product row already written", product_id
        )
        raise BackendError(message)

    for key, value in values.items():
        setattr(mirror, key, value)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(
            "Failed to update product_lists mirror id=%s; product row already written", product_id
        )
        raise BackendError(message)


def get_product(product_id: str) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def list_products() -> list[Product]:
    """All products, newest first."""
    return db.session.query(Product).order_by(Product.created_at.desc()).all()


def list_product_lists() -> list[ProductList]:
    """All mirror rows ordered by category, then name (case-insensitive)."""
    rows = db.session.query(ProductList).all()
    return sorted(rows, key=lambda p: ((p.category or "").lower(), (p.name or "").lower()))


def create_product(payload) -> Product:
    """
    Validate, insert into `products`, then insert the `product_lists` mirror.

    Raises:
        ValidationError: bad or missing field (names the field)
        BackendError: either write failed
    """
    patch = validate_product_payload(payload, partial=False)
    now = utcnow()

    product = Product(
        id=new_document_id(),
        name=patch["name"],
        mrp=patch["mrp"],
        category=patch["category"],
        sub_category=patch.get("sub_category"),
        stock=patch.get("stock", 0),
        image_url=patch.get("image_url"),
        tags=patch.get("tags", []),
        is_active=patch.get("is_active", True),
        is_available=patch.get("is_available", True),
        created_at=now,
    )
    db.session.add(product)
    _commit_or_raise("create product", "Failed to create product")

    mirror = ProductList(id=product.id, created_at=now, **_mirror_values(product))
    db.session.add(mirror)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(
            "Failed to write product_lists mirror for new product id=%s; product left without mirror",
            product.id,
        )
        raise BackendError("Failed to create product")

    current_app.logger.info("Created product id=%s name=%s", product.id, product.name)
    return product


def update_product(product_id: str, payload) -> Product:
    """
    Partial update of `products/{id}` followed by the mirror update.

    Raises NotFoundError when the product does not exist. A missing mirror
    is reported as BackendError after the product row has been written.
    """
    patch = validate_product_payload(payload, partial=True)
    product = get_product(product_id)

    for key, value in patch.items():
        setattr(product, key, value)
    _commit_or_raise("update product", "Failed to update product")

    _update_mirror(product_id, _mirror_patch(patch), "Failed to update product")

    current_app.logger.info(
        "Updated product id=%s fields=%s", product_id, ", ".join(sorted(patch.keys()))
    )
    return product


def delete_product(product_id: str) -> None:
    """Delete the product, then its mirror. An orphaned mirror may remain on failure."""
    product = get_product(product_id)
    db.session.delete(product)
    _commit_or_raise("delete product", "Failed to delete product")

    mirror = db.session.get(ProductList, product_id)
    if mirror is not None:
        db.session.delete(mirror)
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception(
                "Failed to delete product_lists mirror id=%s; orphaned mirror remains", product_id
            )
            raise BackendError("Failed to delete product")

    current_app.logger.info("Deleted product id=%s", product_id)


def _toggle(product_id: str, field: str, current: bool | None, message: str) -> bool:
    product = get_product(product_id)
    if current is None:
        current = product.available if field == "is_available" else product.is_active
    new_value = not current

    setattr(product, field, new_value)
    _commit_or_raise(f"toggle {field}", message)
    _update_mirror(product_id, {field: new_value}, message)
    return new_value


def toggle_active(product_id: str, current: bool | None = None) -> bool:
    """Flip is_active on product and mirror. `current` is the caller's view of the flag."""
    return _toggle(product_id, "is_active", current, "Failed to update product status")


def toggle_available(product_id: str, current: bool | None = None) -> bool:
    """Flip is_available on product and mirror."""
    return _toggle(product_id, "is_available", current, "Failed to update product availability")


def _check_choice(value: str, allowed: tuple, field: str) -> str:
    value = (value or "all").strip().lower()
    if value not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(allowed)}", field=field)
    return value


def _matches_status(item, status: str) -> bool:
    if status == "active":
        return bool(item.is_active)
    if status == "inactive":
        return not item.is_active
    return True


def _matches_availability(item, availability: str) -> bool:
    if availability == "available":
        return item.available
    if availability == "unavailable":
        return not item.available
    return True


def filter_products(
    products: Iterable[Product],
    *,
    search: str | None = None,
    status: str = "all",
    availability: str = "all",
) -> list[Product]:
    """Products page filter: search over name, category and tags."""
    status = _check_choice(status, STATUS_FILTERS, "status")
    availability = _check_choice(availability, AVAILABILITY_FILTERS, "availability")
    term = (search or "").strip().lower()

    def matches_search(p) -> bool:
        if not term:
            return True
        return (
            term in (p.name or "").lower()
            or term in (p.category or "").lower()
            or any(term in tag.lower() for tag in (p.tags or []))
        )

    return [
        p for p in products
        if matches_search(p) and _matches_status(p, status) and _matches_availability(p, availability)
    ]


def filter_product_lists(
    items: Iterable[ProductList],
    *,
    search: str | None = None,
    category: str | None = None,
    status: str = "all",
    availability: str = "all",
) -> list[ProductList]:
    """Product-list page filter: search over name, category and sub-category."""
    status = _check_choice(status, STATUS_FILTERS, "status")
    availability = _check_choice(availability, AVAILABILITY_FILTERS, "availability")
    term = (search or "").strip().lower()
    category = None if not category or category == "all" else category

    def matches_search(p) -> bool:
        if not term:
            return True
        return (
            term in (p.name or "").lower()
            or term in (p.category or "").lower()
            or bool(p.sub_category and term in p.sub_category.lower())
        )

    return [
        p for p in items
        if matches_search(p)
        and (category is None or p.category == category)
        and _matches_status(p, status)
        and _matches_availability(p, availability)
    ]


def category_facet(items: Iterable) -> list[str]:
    """Sorted distinct non-empty category names."""
    return sorted({item.category for item in items if item.category})


def reconcile_product_lists() -> dict:
    """
    Rebuild the mirror from `products`.

    Creates missing mirrors, rewrites stale ones, and deletes mirrors whose
    product is gone. Returns counts per action.
    """
    products = {p.id: p for p in db.session.query(Product).all()}
    mirrors = {m.id: m for m in db.session.query(ProductList).all()}

    created = updated = deleted = 0

    for product_id, product in products.items():
        values = _mirror_values(product)
        mirror = mirrors.get(product_id)
        if mirror is None:
            db.session.add(ProductList(id=product_id, created_at=product.created_at, **values))
            created += 1
            continue
        if any(getattr(mirror, key) != value for key, value in values.items()):
            for key, value in values.items():
                setattr(mirror, key, value)
            updated += 1

    for mirror_id, mirror in mirrors.items():
        if mirror_id not in products:
            db.session.delete(mirror)
            deleted += 1

    _commit_or_raise("reconcile product lists", "Failed to reconcile product lists")

    result = {"created": created, "updated": updated, "deleted": deleted}
    current_app.logger.info("Reconciled product_lists: %s", result)
    return result
