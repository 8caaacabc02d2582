# Overview: Flask API routes for event orders; parses input and returns JSON responses.

"""
Event order routes.

Payments are append-only (POST /<id>/payments) and the order status has its
own endpoint (PATCH /<id>/status). PUT /<id>/update covers descriptive fields
and, when "items" is present, re-settles the order's stock.
"""

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth
from ..extensions import db
from ..services import event_order_service
from ..validation import NotFoundError, ValidationError
from sweetshop.time_utils import parse_iso_date


event_orders_bp = Blueprint("event_orders", __name__, url_prefix="/api/event-orders")


@event_orders_bp.get("/list")
@require_auth
def list_orders():
    try:
        orders = event_order_service.list_orders(status=request.args.get("status"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to list event orders")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"orders": orders, "count": len(orders)})


@event_orders_bp.get("/preparation-report")
@require_auth
def preparation_report():
    """Query params: date=YYYY-MM-DD (required)."""
    raw = request.args.get("date")
    try:
        delivery_date = parse_iso_date(raw)
    except ValueError:
        delivery_date = None
    if delivery_date is None:
        return jsonify({"error": "date query parameter (YYYY-MM-DD) is required"}), 400

    try:
        return jsonify(event_order_service.preparation_report(delivery_date))
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to build preparation report")
        return jsonify({"error": "Internal server error"}), 500


@event_orders_bp.get("/<int:order_id>/list")
@require_auth
def get_order(order_id: int):
    try:
        return jsonify(event_order_service.get_order(order_id))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to load event order")
        return jsonify({"error": "Internal server error"}), 500


@event_orders_bp.post("/create")
@require_auth
def create_order():
    """
    Request body:
    {
        "customer_name", "phone", "purpose", "address",
        "delivery_date": "YYYY-MM-DD", "delivery_time": "AM|PM",
        "items": [{"item_id", "quantity", "price_cents", "name"?}],
        "discount_cents": optional int,
        "payments": optional [{"amount_cents", "method", "card_reference"?}],
        "notes": optional
    }
    """
    payload = request.get_json(silent=True) or {}

    try:
        return jsonify(event_order_service.create_order(payload)), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create event order")
        return jsonify({"error": "Internal server error"}), 500


@event_orders_bp.put("/<int:order_id>/update")
@require_auth
def update_order(order_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        return jsonify(event_order_service.update_details(order_id, payload))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update event order")
        return jsonify({"error": "Internal server error"}), 500


@event_orders_bp.post("/<int:order_id>/payments")
@require_auth
def add_payment(order_id: int):
    """Request body: {"amount_cents": int, "method": "...", "card_reference": optional}"""
    payload = request.get_json(silent=True) or {}

    try:
        return jsonify(event_order_service.add_payment(order_id, payload)), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to add event order payment")
        return jsonify({"error": "Internal server error"}), 500


@event_orders_bp.patch("/<int:order_id>/status")
@require_auth
def update_status(order_id: int):
    """Request body: {"order_status": "pending|confirmed|preparing|ready|delivered|cancelled"}"""
    payload = request.get_json(silent=True) or {}

    try:
        return jsonify(event_order_service.update_status(order_id, payload))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update event order status")
        return jsonify({"error": "Internal server error"}), 500


@event_orders_bp.delete("/<int:order_id>/delete")
@require_auth
def delete_order(order_id: int):
    try:
        return jsonify(event_order_service.delete_order(order_id))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to delete event order")
        return jsonify({"error": "Internal server error"}), 500
