# Overview: Flask API routes for inventory operations; parses input and returns JSON responses.

# backend/sweetshop/routes/inventory.py
"""
Inventory routes.

status is derived server-side from quantity and min_stock; sending it is a
validation error (400), not something that is silently dropped.
"""

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth
from ..extensions import db
from ..models import InventoryItem
from ..models.inventory import STOCK_STATUSES
from ..services import inventory_service
from ..validation import (
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_rules_inventory,
    validate_payload,
)


INVENTORY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "category", "quantity", "unit", "min_stock", "cost_per_unit_cents"},
    required_on_create={"name", "category", "quantity", "unit"},
    immutable_fields={"id", "status", "last_updated", "created_at"},
)

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("/list")
@require_auth
def list_inventory():
    """
    Query params:
    - status: in-stock | low-stock | out-of-stock (optional)
    - category: exact match (optional)
    """
    status = request.args.get("status")
    if status and status not in STOCK_STATUSES:
        return jsonify({"error": f"status must be one of: {', '.join(STOCK_STATUSES)}"}), 400

    try:
        items = inventory_service.list_items(status=status, category=request.args.get("category"))
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to list inventory")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"items": items, "count": len(items)})


@inventory_bp.get("/low-stock")
@require_auth
def low_stock():
    try:
        items = inventory_service.list_low_stock()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to list low-stock items")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"items": items, "count": len(items)})


@inventory_bp.post("/create")
@require_auth
def create_item():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=InventoryItem, payload=payload, policy=INVENTORY_POLICY, partial=False)
        enforce_rules_inventory(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        item = inventory_service.create_item(patch)
        return jsonify(item), 201
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create inventory item")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.put("/<int:item_id>/update")
@require_auth
def update_item(item_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=InventoryItem, payload=payload, policy=INVENTORY_POLICY, partial=True)
        enforce_rules_inventory(patch)
        item = inventory_service.update_item(item_id, patch)
        return jsonify(item)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update inventory item")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.delete("/<int:item_id>/delete")
@require_auth
def delete_item(item_id: int):
    try:
        inventory_service.delete_item(item_id)
        return jsonify({"message": "Item deleted successfully", "id": item_id})
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to delete inventory item")
        return jsonify({"error": "Internal server error"}), 500
