# Overview: Service-layer operations for staff and their daily attendance.

"""
Staff Service

Staff records are plain CRUD. Attendance is appended one entry per staff
member per calendar day; a second entry for the same day is rejected
rather than overwriting the first.

An absent or on-leave day carries no check-in/check-out times.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select

from ..extensions import db
from ..models import AttendanceEntry, Staff
from ..models.staff import ATTENDANCE_STATUSES
from ..validation import NotFoundError, ValidationError
from sweetshop.time_utils import parse_iso_date, parse_iso_datetime


class StaffNotFoundError(NotFoundError):
    """Raised when a staff member is not found."""

    def __init__(self, staff_id: int):
        super().__init__(f"Staff member {staff_id} not found")
        self.staff_id = staff_id


class AttendanceError(ValidationError):
    """Raised for an invalid attendance entry."""
    pass


def _get(staff_id: int) -> Staff:
    member = db.session.get(Staff, staff_id)
    if member is None:
        raise StaffNotFoundError(staff_id)
    return member


def list_staff(*, position: str | None = None) -> list[dict]:
    stmt = select(Staff)
    if position:
        stmt = stmt.where(Staff.position == position)
    stmt = stmt.order_by(Staff.name.asc())
    return [s.to_dict() for s in db.session.execute(stmt).scalars().all()]


def get_staff(staff_id: int) -> dict:
    return _get(staff_id).to_dict()


def create_staff(patch: dict) -> dict:
    member = Staff(**patch)
    db.session.add(member)
    db.session.commit()
    return member.to_dict()


def update_staff(staff_id: int, patch: dict) -> dict:
    member = _get(staff_id)
    for k, v in patch.items():
        setattr(member, k, v)
    db.session.commit()
    return member.to_dict()


def delete_staff(staff_id: int) -> None:
    member = _get(staff_id)
    db.session.delete(member)
    db.session.commit()


def _parse_time(payload: dict, key: str) -> datetime | None:
    raw = payload.get(key)
    if raw in (None, ""):
        return None
    if not isinstance(raw, str):
        raise AttendanceError(f"{key} must be an ISO-8601 datetime")
    try:
        return parse_iso_datetime(raw)
    except ValueError:
        raise AttendanceError(f"{key} must be an ISO-8601 datetime")


def _parse_attendance(payload: dict) -> dict:
    if not isinstance(payload, dict):
        raise AttendanceError("Invalid JSON payload")

    raw_date = payload.get("date")
    if not isinstance(raw_date, str) or not raw_date.strip():
        raise AttendanceError("date is required")
    try:
        day = parse_iso_date(raw_date)
    except ValueError:
        raise AttendanceError("date must be an ISO-8601 date")

    status = payload.get("status") or "present"
    if status not in ATTENDANCE_STATUSES:
        raise AttendanceError(f"status must be one of: {', '.join(ATTENDANCE_STATUSES)}")

    check_in = _parse_time(payload, "check_in_at")
    check_out = _parse_time(payload, "check_out_at")

    if status in ("absent", "leave") and (check_in or check_out):
        raise AttendanceError(f"An {status} day cannot have check-in or check-out times")
    if check_out is not None and check_in is None:
        raise AttendanceError("check_out_at requires check_in_at")
    if check_in is not None and check_out is not None and check_out < check_in:
        raise AttendanceError("check_out_at must be after check_in_at")

    return {
        "date": day,
        "status": status,
        "check_in_at": check_in,
        "check_out_at": check_out,
    }


def record_attendance(staff_id: int, payload: dict) -> dict:
    """
    Append one attendance entry and return the staff member with their
    full attendance list.

    Raises:
        StaffNotFoundError: unknown staff member
        AttendanceError: bad input, or the day is already recorded
    """
    data = _parse_attendance(payload)
    member = _get(staff_id)

    if any(entry.date == data["date"] for entry in member.attendance):
        raise AttendanceError(f"Attendance for {data['date'].isoformat()} is already recorded")

    member.attendance.append(AttendanceEntry(**data))
    db.session.commit()
    return member.to_dict()
