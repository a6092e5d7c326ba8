# Overview: Service-layer operations for the category taxonomy; encapsulates business logic and database work.

"""
Taxonomy Service

Categories own an ordered list of sub-categories. Sub-category edits happen
on a CategoryDraft in memory and reach the database only when the whole
category is saved: the entire `sub_categories` array is written back in one
update, so two admins editing the same category concurrently will overwrite
each other (last write wins).

Deleting a category does not touch products. Products keep the category
NAME they were saved with.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import BackendError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Category, new_document_id
from ..time_utils import utcnow
from ..validation import clean_str, optional_str


@dataclass
class CategoryDraft:
    """In-memory editing state for one category."""
    name: str = ""
    description: str = ""
    image_url: str | None = None
    sub_categories: list[dict] = field(default_factory=list)

    @classmethod
    def from_category(cls, category: Category) -> "CategoryDraft":
        return cls(
            name=category.name,
            description=category.description or "",
            image_url=category.image_url,
            sub_categories=[dict(sub) for sub in (category.sub_categories or [])],
        )

    def add_sub_category(self, name: str | None, description: str | None = None) -> dict | None:
        """Append a sub-category; blank names are ignored (returns None)."""
        name = clean_str(name, "name", max_length=120)
        if not name:
            return None
        sub = {
            "id": new_document_id(),
            "name": name,
            "description": clean_str(description, "description"),
        }
        self.sub_categories.append(sub)
        return sub

    def edit_sub_category(self, sub_category_id: str, name: str | None, description: str | None = None) -> bool:
        """Replace name/description in place, keeping id and position."""
        name = clean_str(name, "name", max_length=120)
        if not name:
            return False
        for index, sub in enumerate(self.sub_categories):
            if sub.get("id") == sub_category_id:
                self.sub_categories[index] = {
                    **sub,
                    "name": name,
                    "description": clean_str(description, "description"),
                }
                return True
        return False

    def remove_sub_category(self, sub_category_id: str) -> bool:
        before = len(self.sub_categories)
        self.sub_categories = [sub for sub in self.sub_categories if sub.get("id") != sub_category_id]
        return len(self.sub_categories) != before


def _commit(action: str, message: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to %s", action)
        raise BackendError(message)


def _sub_categories_from_payload(raw) -> list[dict]:
    """
    Normalize a client-supplied sub-category array.

    Entries that carry an id keep it; new entries get one. Blank names are
    dropped, matching the editor's behaviour.
    """
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError("sub_categories must be a list", field="sub_categories")

    draft = CategoryDraft()
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("sub_categories entries must be objects", field="sub_categories")
        sub_id = item.get("id")
        if sub_id:
            name = clean_str(item.get("name"), "name", max_length=120)
            if name:
                draft.sub_categories.append({
                    "id": str(sub_id),
                    "name": name,
                    "description": clean_str(item.get("description"), "description"),
                })
        else:
            draft.add_sub_category(item.get("name"), item.get("description"))
    return draft.sub_categories


def list_categories() -> list[Category]:
    """All categories, newest first."""
    return (
        db.session.query(Category)
        .order_by(Category.created_at.desc(), Category.name.asc())
        .all()
    )


def get_category(category_id: str) -> Category:
    category = db.session.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def create_category(
    *,
    name,
    description=None,
    image_url=None,
    sub_categories=None,
) -> Category:
    """
    Create a category, optionally with an initial sub-category list.

    Raises ValidationError when the name is blank.
    """
    category = Category(
        id=new_document_id(),
        name=clean_str(name, "name", required=True, max_length=120),
        description=clean_str(description, "description"),
        image_url=optional_str(image_url, "image_url", max_length=1024),
        sub_categories=_sub_categories_from_payload(sub_categories),
        created_at=utcnow(),
    )
    db.session.add(category)
    _commit("create category", "Failed to create category")

    current_app.logger.info("Created category id=%s name=%s", category.id, category.name)
    return category


def save_category(category_id: str, draft: CategoryDraft) -> Category:
    """
    Write name, description, image and the WHOLE sub-category array.

    `created_at` is never touched.
    """
    category = get_category(category_id)

    category.name = clean_str(draft.name, "name", required=True, max_length=120)
    category.description = clean_str(draft.description, "description")
    category.image_url = optional_str(draft.image_url, "image_url", max_length=1024)
    # New list object so the JSON column is flagged dirty
    category.sub_categories = [dict(sub) for sub in draft.sub_categories]

    _commit("save category", "Failed to update category")

    current_app.logger.info(
        "Saved category id=%s sub_categories=%d", category.id, len(category.sub_categories)
    )
    return category


def draft_from_payload(category: Category, payload: dict) -> CategoryDraft:
    """Start from the stored category and apply a full-form edit payload."""
    draft = CategoryDraft.from_category(category)
    if "name" in payload:
        draft.name = payload.get("name") or ""
    if "description" in payload:
        draft.description = payload.get("description") or ""
    if "image_url" in payload:
        draft.image_url = payload.get("image_url")
    if "sub_categories" in payload:
        draft.sub_categories = _sub_categories_from_payload(payload.get("sub_categories"))
    return draft


def apply_sub_category_operations(draft: CategoryDraft, operations) -> dict:
    """
    Replay add/edit/remove operations on a draft.

    Each operation is {"op": "add"|"edit"|"remove", ...}. Operations that the
    editor would ignore (blank names, unknown ids) are counted as skipped.
    """
    if not isinstance(operations, list):
        raise ValidationError("operations must be a list", field="operations")

    applied = 0
    skipped = 0
    for operation in operations:
        if not isinstance(operation, dict):
            raise ValidationError("operations entries must be objects", field="operations")
        op = operation.get("op")
        if op == "add":
            ok = draft.add_sub_category(operation.get("name"), operation.get("description")) is not None
        elif op == "edit":
            ok = draft.edit_sub_category(
                str(operation.get("id") or ""), operation.get("name"), operation.get("description")
            )
        elif op == "remove":
            ok = draft.remove_sub_category(str(operation.get("id") or ""))
        else:
            raise ValidationError(f"Unknown operation: {op}", field="operations")

        if ok:
            applied += 1
        else:
            skipped += 1

    return {"applied": applied, "skipped": skipped}


def delete_category(category_id: str) -> None:
    """Delete a category. Products that use its name are left as they are."""
    category = get_category(category_id)
    db.session.delete(category)
    _commit("delete category", "Failed to delete category")

    current_app.logger.info("Deleted category id=%s name=%s", category_id, category.name)
