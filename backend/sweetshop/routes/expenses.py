# Overview: Flask API routes for expenses; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth
from ..extensions import db
from ..models import Expense
from ..models.expenses import EXPENSE_CATEGORIES, EXPENSE_PAYMENT_METHODS
from ..services import expense_service
from ..validation import (
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_rules_expense,
    validate_payload,
)
from sweetshop.time_utils import parse_iso_datetime, parse_range_end


EXPENSE_POLICY = ModelValidationPolicy(
    writable_fields={"description", "amount_cents", "category", "payment_method", "date", "notes"},
    required_on_create={"description", "amount_cents", "category", "payment_method"},
    choices={"category": EXPENSE_CATEGORIES, "payment_method": EXPENSE_PAYMENT_METHODS},
    immutable_fields={"id", "created_at"},
)

expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


@expenses_bp.get("/list")
@require_auth
def list_expenses():
    """Query params: category, startDate, endDate (all optional)."""
    try:
        start = parse_iso_datetime(request.args.get("startDate"))
        end = parse_range_end(request.args.get("endDate"))
    except ValueError:
        return jsonify({"error": "startDate/endDate must be ISO-8601"}), 400

    try:
        expenses = expense_service.list_expenses(category=request.args.get("category"), start=start, end=end)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to list expenses")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"expenses": expenses, "count": len(expenses)})


@expenses_bp.post("/create")
@require_auth
def create_expense():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Expense, payload=payload, policy=EXPENSE_POLICY, partial=False)
        enforce_rules_expense(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        return jsonify(expense_service.create_expense(patch)), 201
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create expense")
        return jsonify({"error": "Internal server error"}), 500


@expenses_bp.put("/<int:expense_id>/update")
@require_auth
def update_expense(expense_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Expense, payload=payload, policy=EXPENSE_POLICY, partial=True)
        enforce_rules_expense(patch)
        return jsonify(expense_service.update_expense(expense_id, patch))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update expense")
        return jsonify({"error": "Internal server error"}), 500


@expenses_bp.delete("/<int:expense_id>/delete")
@require_auth
def delete_expense(expense_id: int):
    try:
        expense_service.delete_expense(expense_id)
        return jsonify({"message": "Expense deleted successfully", "id": expense_id})
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to delete expense")
        return jsonify({"error": "Internal server error"}), 500
