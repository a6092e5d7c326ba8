from __future__ import annotations

import uuid

from ..extensions import db
from ..time_utils import to_utc_z


def new_document_id() -> str:
    """Opaque document id for new records (32 hex chars)."""
    return uuid.uuid4().hex


def _money(value) -> float | None:
    return float(value) if value is not None else None


class Category(db.Model):
    """
    Top level of the two-level product taxonomy.

    Sub-categories are embedded in `sub_categories` as an ordered list of
    {"id", "name", "description"} dicts. They have no table of their own and
    are always written back as a whole array.

    Products reference a category by NAME, not id, so renaming or deleting a
    category leaves existing products pointing at the old name.
    """
    __tablename__ = "categories"

    id = db.Column(db.String(32), primary_key=True, default=new_document_id)
    name = db.Column(db.String(120), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False, default="")
    image_url = db.Column(db.String(1024), nullable=True)
    sub_categories = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description or "",
            "image_url": self.image_url or None,
            "sub_categories": list(self.sub_categories or []),
            "created_at": to_utc_z(self.created_at),
        }


class Product(db.Model):
    """
    Catalog product (full record).

    `category` / `sub_category` are denormalized copies of the taxonomy names.
    `is_available` is nullable for rows written before the flag existed; NULL
    reads as available.
    """
    __tablename__ = "products"

    id = db.Column(db.String(32), primary_key=True, default=new_document_id)
    name = db.Column(db.String(255), nullable=False)
    mrp = db.Column(db.Numeric(12, 2), nullable=False)
    category = db.Column(db.String(120), nullable=False, index=True)
    sub_category = db.Column(db.String(120), nullable=True)
    stock = db.Column(db.Integer, nullable=False, default=0)
    image_url = db.Column(db.String(1024), nullable=True)
    tags = db.Column(db.JSON, nullable=False, default=list)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_available = db.Column(db.Boolean, nullable=True, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def available(self) -> bool:
        return self.is_available is not False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "mrp": _money(self.mrp),
            "category": self.category,
            "sub_category": self.sub_category,
            "stock": self.stock,
            "image_url": self.image_url or None,
            "tags": list(self.tags or []),
            "is_active": self.is_active,
            "is_available": self.available,
            "created_at": to_utc_z(self.created_at),
        }


class ProductList(db.Model):
    """
    Denormalized reporting mirror of Product used by listings and exports.

    Shares the id of its source product. It is kept in sync by the writer
    (see products_service), not by a foreign key, so an orphan on either
    side is possible after a partial failure.
    """
    __tablename__ = "product_lists"

    id = db.Column(db.String(32), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    mrp = db.Column(db.Numeric(12, 2), nullable=False)
    category = db.Column(db.String(120), nullable=False, index=True)
    sub_category = db.Column(db.String(120), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_available = db.Column(db.Boolean, nullable=True, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=True, server_default=db.func.now())

    @property
    def available(self) -> bool:
        return self.is_available is not False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "mrp": _money(self.mrp),
            "category": self.category,
            "sub_category": self.sub_category,
            "is_active": self.is_active,
            "is_available": self.available,
            "created_at": to_utc_z(self.created_at),
        }
