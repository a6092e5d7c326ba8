# Overview: Service-layer read model for the dashboard; counts catalog and admin records.

"""
Dashboard Service

Headline counts for the console home page. Computed from full fetches of
products, categories and admins.
"""

from ..extensions import db
from ..models import AdminUser, Category, Product
from .inventory_service import LOW_STOCK_THRESHOLD

RECENT_PRODUCTS_LIMIT = 5


def dashboard_stats() -> dict:
    products = db.session.query(Product).order_by(Product.created_at.desc()).all()
    category_names = {name for (name,) in db.session.query(Category.name).all()}
    total_admins = db.session.query(AdminUser).count()

    active = [p for p in products if p.is_active]

    return {
        "total_products": len(products),
        "active_products": len(active),
        "low_stock_products": sum(1 for p in active if p.stock <= LOW_STOCK_THRESHOLD),
        "total_categories": db.session.query(Category).count(),
        "total_admins": total_admins,
        # Products whose category name no longer matches any category
        "uncategorized_products": sum(1 for p in products if p.category not in category_names),
        "recent_products": [p.to_dict() for p in products[:RECENT_PRODUCTS_LIMIT]],
    }
