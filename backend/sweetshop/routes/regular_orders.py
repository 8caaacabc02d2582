# Overview: Flask API routes for regular orders; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth
from ..extensions import db
from ..services import regular_order_service
from ..validation import NotFoundError, ValidationError


regular_orders_bp = Blueprint("regular_orders", __name__, url_prefix="/api/regular-orders")


@regular_orders_bp.get("/list")
@require_auth
def list_orders():
    try:
        orders = regular_order_service.list_orders()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to list regular orders")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"orders": orders, "count": len(orders)})


@regular_orders_bp.get("/<int:order_id>/list")
@require_auth
def get_order(order_id: int):
    try:
        return jsonify(regular_order_service.get_order(order_id))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to load regular order")
        return jsonify({"error": "Internal server error"}), 500


@regular_orders_bp.post("/create")
@require_auth
def create_order():
    """
    Request body:
    {
        "customer_name": "...",
        "phone": "...",
        "items": [{"item_id": 1, "quantity": 2, "price_cents": 1000, "name": "optional"}],
        "payment": {"method": "cash|phonepay|gpay|card", "card_reference": "optional"},
        "order_date": "optional ISO-8601"
    }

    The payment amount is always the sum of the line totals.
    """
    payload = request.get_json(silent=True) or {}

    try:
        order = regular_order_service.create_order(payload)
        return jsonify(order), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create regular order")
        return jsonify({"error": "Internal server error"}), 500


@regular_orders_bp.put("/<int:order_id>/update")
@require_auth
def update_order(order_id: int):
    """Only customer_name, phone and order_date can change after settlement."""
    payload = request.get_json(silent=True) or {}

    try:
        return jsonify(regular_order_service.update_order(order_id, payload))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update regular order")
        return jsonify({"error": "Internal server error"}), 500


@regular_orders_bp.delete("/<int:order_id>/delete")
@require_auth
def delete_order(order_id: int):
    try:
        return jsonify(regular_order_service.delete_order(order_id))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to delete regular order")
        return jsonify({"error": "Internal server error"}), 500
