# Overview: Flask API routes for the dashboard; read-only.

from flask import Blueprint, current_app, jsonify

from ..decorators import require_auth
from ..extensions import db
from ..services import dashboard_service


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


def _respond(build, label: str):
    try:
        return jsonify(build())
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to build dashboard %s", label)
        return jsonify({"error": "Internal server error"}), 500


@dashboard_bp.get("/summary")
@require_auth
def summary():
    return _respond(dashboard_service.get_summary, "summary")


@dashboard_bp.get("/sales")
@require_auth
def sales():
    return _respond(lambda: {"sales": dashboard_service.get_sales_by_day()}, "sales")


@dashboard_bp.get("/expenses")
@require_auth
def expenses():
    return _respond(lambda: {"expenses": dashboard_service.get_expenses_by_category()}, "expenses")


@dashboard_bp.get("/popular-products")
@require_auth
def popular_products():
    return _respond(lambda: {"products": dashboard_service.get_popular_products()}, "popular products")


@dashboard_bp.get("/pending-orders")
@require_auth
def pending_orders():
    return _respond(lambda: {"orders": dashboard_service.get_pending_orders()}, "pending orders")
