# Overview: Flask API routes for staff and attendance; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth
from ..extensions import db
from ..models import Staff
from ..services import staff_service
from ..validation import (
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_rules_staff,
    validate_payload,
)


STAFF_POLICY = ModelValidationPolicy(
    writable_fields={"name", "position", "contact", "salary_cents"},
    required_on_create={"name", "position", "contact", "salary_cents"},
    immutable_fields={"id", "attendance", "created_at", "updated_at"},
)

staff_bp = Blueprint("staff", __name__, url_prefix="/api/staff")


@staff_bp.get("/list")
@require_auth
def list_staff():
    """Query params: position (optional, exact match)."""
    try:
        staff = staff_service.list_staff(position=request.args.get("position"))
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to list staff")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"staff": staff, "count": len(staff)})


@staff_bp.get("/<int:staff_id>/list")
@require_auth
def get_staff(staff_id: int):
    try:
        return jsonify(staff_service.get_staff(staff_id))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to load staff member")
        return jsonify({"error": "Internal server error"}), 500


@staff_bp.post("/create")
@require_auth
def create_staff():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Staff, payload=payload, policy=STAFF_POLICY, partial=False)
        enforce_rules_staff(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        return jsonify(staff_service.create_staff(patch)), 201
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create staff member")
        return jsonify({"error": "Internal server error"}), 500


@staff_bp.put("/<int:staff_id>/update")
@require_auth
def update_staff(staff_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Staff, payload=payload, policy=STAFF_POLICY, partial=True)
        enforce_rules_staff(patch)
        return jsonify(staff_service.update_staff(staff_id, patch))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update staff member")
        return jsonify({"error": "Internal server error"}), 500


@staff_bp.delete("/<int:staff_id>/delete")
@require_auth
def delete_staff(staff_id: int):
    try:
        staff_service.delete_staff(staff_id)
        return jsonify({"message": "Staff member deleted", "id": staff_id})
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to delete staff member")
        return jsonify({"error": "Internal server error"}), 500


@staff_bp.post("/<int:staff_id>/attendance")
@require_auth
def record_attendance(staff_id: int):
    """
    Request body:
    {
        "date": "2026-10-19",                     // required
        "status": "present",                      // present|absent|late|leave, default present
        "check_in_at": "2026-10-19T03:30:00Z",    // optional
        "check_out_at": "2026-10-19T12:30:00Z"    // optional, needs check_in_at
    }
    """
    payload = request.get_json(silent=True) or {}

    try:
        return jsonify(staff_service.record_attendance(staff_id, payload)), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to record attendance")
        return jsonify({"error": "Internal server error"}), 500
