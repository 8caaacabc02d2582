# Overview: Flask API routes for vendor operations; parses input and returns JSON responses.

"""
Vendor Routes

All routes require authentication. payment_due_cents may be set directly on
create/update (opening balance, corrections); payments go through /pay so
that every settlement leaves a transaction behind.
"""

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth
from ..extensions import db
from ..models import Vendor
from ..models.vendors import VENDOR_TYPES
from ..services import vendor_service
from ..validation import (
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_rules_vendor,
    validate_payload,
)


VENDOR_POLICY = ModelValidationPolicy(
    writable_fields={
        "name",
        "type",
        "contact",
        "address",
        "supplied_items",
        "daily_supply",
        "monthly_supply",
        "rate_cents",
        "payment_due_cents",
    },
    required_on_create={"name", "type", "contact", "address"},
    choices={"type": VENDOR_TYPES},
    immutable_fields={"id", "transactions", "last_payment_date", "created_at", "updated_at"},
)

vendors_bp = Blueprint("vendors", __name__, url_prefix="/api/vendors")


@vendors_bp.get("/list")
@require_auth
def list_vendors_route():
    """Query params: type (optional, one of the vendor types)."""
    try:
        vendors = vendor_service.list_vendors(vendor_type=request.args.get("type"))
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to list vendors")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"vendors": vendors, "count": len(vendors)})


@vendors_bp.post("/create")
@require_auth
def create_vendor_route():
    data = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Vendor, payload=data, policy=VENDOR_POLICY, partial=False)
        enforce_rules_vendor(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        return jsonify(vendor_service.create_vendor(patch)), 201
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create vendor")
        return jsonify({"error": "Internal server error"}), 500


@vendors_bp.put("/<int:vendor_id>/update")
@require_auth
def update_vendor_route(vendor_id: int):
    data = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Vendor, payload=data, policy=VENDOR_POLICY, partial=True)
        enforce_rules_vendor(patch)
        return jsonify(vendor_service.update_vendor(vendor_id, patch))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError:
        return jsonify({"error": "Vendor not found"}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update vendor")
        return jsonify({"error": "Internal server error"}), 500


@vendors_bp.delete("/<int:vendor_id>/delete")
@require_auth
def delete_vendor_route(vendor_id: int):
    try:
        vendor_service.delete_vendor(vendor_id)
        return jsonify({"message": "Vendor deleted successfully", "id": vendor_id})
    except NotFoundError:
        return jsonify({"error": "Vendor not found"}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to delete vendor")
        return jsonify({"error": "Internal server error"}), 500


@vendors_bp.post("/<int:vendor_id>/pay")
@require_auth
def pay_vendor_route(vendor_id: int):
    """
    Request body:
    {
        "amount_cents": 50000,              // required, > 0, <= payment_due_cents
        "payment_method": "cash",           // cash|phonepe|gpay|paytm|card|bank
        "date": "2024-07-01",               // optional, defaults to today
        "quantity": 120.5,                  // optional supply quantity covered
        "card_reference": "..."             // optional
    }
    """
    data = request.get_json(silent=True) or {}

    try:
        return jsonify(vendor_service.record_payment(vendor_id, data)), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError:
        return jsonify({"error": "Vendor not found"}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to record vendor payment")
        return jsonify({"error": "Internal server error"}), 500
