# Overview: Flask API route for service health; checks the database.

# backend/storeconsole/routes/system.py
"""
System health endpoint.

Checks the database and session table so deployments can tell a broken
database from a broken app.
"""

import time
from flask import Blueprint, current_app
from sqlalchemy.exc import SQLAlchemyError
from ..extensions import db
from ..models import Category, Product, ProductList, SessionToken
from ..time_utils import utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details. A products/product_lists count
    mismatch means the mirror needs reconciling (degraded, not unhealthy).
    """
    start_time = time.time()
    try:
        product_count = db.session.query(Product).count()
        mirror_count = db.session.query(ProductList).count()
        category_count = db.session.query(Category).count()
        active_sessions = db.session.query(SessionToken).filter_by(is_revoked=False).count()
    except SQLAlchemyError:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }

    elapsed_ms = (time.time() - start_time) * 1000
    result = {
        "status": "healthy",
        "latency_ms": round(elapsed_ms, 2),
        "details": {
            "products": product_count,
            "product_lists": mirror_count,
            "categories": category_count,
            "active_sessions": active_sessions,
        }
    }
    if product_count != mirror_count:
        result["status"] = "degraded"
        result["warning"] = "product_lists out of sync with products; run `flask catalog reconcile-lists`"
    return result


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: healthy or degraded
    - 503: database unreachable
    """
    database_health = check_database_health()

    if database_health["status"] == "unhealthy":
        http_status = 503
    else:
        http_status = 200

    return {
        "status": database_health["status"],
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {
            "database": database_health,
        }
    }, http_status
