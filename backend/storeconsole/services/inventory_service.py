# Overview: Read-only inventory view over product records; stock classification, filters and totals.

"""
Inventory View

Pure functions over a sequence of products (anything with `name`,
`category`, `stock` and `mrp` attributes). Nothing here writes; every
request recomputes from a fresh product fetch.

Stock buckets:
- OUT_OF_STOCK: stock == 0
- LOW_STOCK:    0 < stock <= 5
- IN_STOCK:     stock > 5
"""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from ..errors import ValidationError

OUT_OF_STOCK = "out_of_stock"
LOW_STOCK = "low_stock"
IN_STOCK = "in_stock"

LOW_STOCK_THRESHOLD = 5

STOCK_LABELS = {
    OUT_OF_STOCK: "Out of Stock",
    LOW_STOCK: "Low Stock",
    IN_STOCK: "In Stock",
}

# Filter name -> bucket(s) it keeps. "low" keeps everything at or under the
# threshold, out-of-stock included, as the inventory screen always has.
STOCK_FILTERS = {
    "all": None,
    "good": {IN_STOCK},
    "low": {LOW_STOCK, OUT_OF_STOCK},
    "out": {OUT_OF_STOCK},
}


def classify(stock: int) -> str:
    if stock <= 0:
        return OUT_OF_STOCK
    if stock <= LOW_STOCK_THRESHOLD:
        return LOW_STOCK
    return IN_STOCK


def aggregate(products: Iterable) -> dict:
    """
    Totals over ALL given products (active/available flags are ignored).

    total_value is sum(mrp * stock) and is 0 for an empty sequence.
    """
    total = 0
    low_stock = 0
    out_of_stock = 0
    total_value = Decimal("0")

    for product in products:
        total += 1
        bucket = classify(product.stock)
        if bucket == LOW_STOCK:
            low_stock += 1
        elif bucket == OUT_OF_STOCK:
            out_of_stock += 1
        total_value += Decimal(str(product.mrp)) * product.stock

    return {
        "total": total,
        "low_stock": low_stock,
        "out_of_stock": out_of_stock,
        "total_value": total_value,
    }


def filter_inventory(
    products: Iterable,
    *,
    search: str | None = None,
    stock: str = "all",
    category: str | None = None,
) -> list:
    """
    Order-preserving intersection of search, stock bucket and category.

    - search: case-insensitive substring of name or category
    - stock: one of all|good|low|out
    - category: exact match; None or "all" disables it
    """
    stock = (stock or "all").strip().lower()
    if stock not in STOCK_FILTERS:
        raise ValidationError(f"stock must be one of: {', '.join(STOCK_FILTERS)}", field="stock")
    buckets = STOCK_FILTERS[stock]
    term = (search or "").strip().lower()
    category = None if not category or category == "all" else category

    result = []
    for product in products:
        if term and term not in (product.name or "").lower() and term not in (product.category or "").lower():
            continue
        if buckets is not None and classify(product.stock) not in buckets:
            continue
        if category is not None and product.category != category:
            continue
        result.append(product)
    return result


def inventory_row(product) -> dict:
    bucket = classify(product.stock)
    return {
        "id": product.id,
        "name": product.name,
        "category": product.category,
        "sub_category": product.sub_category,
        "image_url": product.image_url or None,
        "stock": product.stock,
        "mrp": float(product.mrp),
        "stock_value": float(Decimal(str(product.mrp)) * product.stock),
        "stock_status": bucket,
        "stock_label": STOCK_LABELS[bucket],
    }


def inventory_view(products: list, *, search=None, stock="all", category=None) -> dict:
    """
    Full inventory screen payload: rows sorted by stock ascending, stats over
    the unfiltered set, and the category facet.
    """
    ordered = sorted(products, key=lambda p: p.stock)
    filtered = filter_inventory(ordered, search=search, stock=stock, category=category)
    stats = aggregate(ordered)

    categories = []
    for product in ordered:
        if product.category and product.category not in categories:
            categories.append(product.category)

    return {
        "items": [inventory_row(p) for p in filtered],
        "count": len(filtered),
        "stats": {**stats, "total_value": float(stats["total_value"])},
        "categories": categories,
    }
