# Overview: Flask API routes for accounting summaries; read-only.

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth
from ..extensions import db
from ..services import accounting_service
from sweetshop.time_utils import parse_date_range


accounting_bp = Blueprint("accounting", __name__, url_prefix="/api/accounting")


def _range():
    """startDate/endDate query params; a date-only endDate covers the whole day."""
    return parse_date_range(request.args.get("startDate"), request.args.get("endDate"))


@accounting_bp.get("/summary")
@require_auth
def summary():
    try:
        start, end = _range()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    try:
        return jsonify(accounting_service.get_summary(start, end))
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to build accounting summary")
        return jsonify({"error": "Internal server error"}), 500


@accounting_bp.get("/transactions")
@require_auth
def transactions():
    try:
        start, end = _range()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    try:
        rows = accounting_service.get_transactions(start, end)
        return jsonify({"transactions": rows, "count": len(rows)})
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to list accounting transactions")
        return jsonify({"error": "Internal server error"}), 500
