from __future__ import annotations

from ..extensions import db
from sweetshop.time_utils import to_utc_z, to_iso_date


ATTENDANCE_STATUSES = ("present", "absent", "late", "leave")


class Staff(db.Model):
    """
    Shop employee: kitchen, counter or delivery.

    salary_cents is the monthly salary. Salary payouts themselves are booked
    as expenses in the "salaries" category; nothing here moves money.
    """
    __tablename__ = "staff"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    position = db.Column(db.String(64), nullable=False)
    contact = db.Column(db.String(64), nullable=False)
    salary_cents = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    attendance = db.relationship(
        "AttendanceEntry",
        backref="staff",
        cascade="all, delete-orphan",
        order_by="AttendanceEntry.date",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Staff id={self.id} name={self.name!r} position={self.position!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "position": self.position,
            "contact": self.contact,
            "salary_cents": self.salary_cents,
            "attendance": [a.to_dict() for a in self.attendance],
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class AttendanceEntry(db.Model):
    """One day of attendance for one staff member."""
    __tablename__ = "attendance_entries"
    __table_args__ = (
        db.UniqueConstraint("staff_id", "date", name="uq_attendance_entries_staff_id_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    staff_id = db.Column(
        db.Integer, db.ForeignKey("staff.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date = db.Column(db.Date, nullable=False)
    check_in_at = db.Column(db.DateTime(timezone=True), nullable=True)
    check_out_at = db.Column(db.DateTime(timezone=True), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="present")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_iso_date(self.date),
            "check_in_at": to_utc_z(self.check_in_at),
            "check_out_at": to_utc_z(self.check_out_at),
            "status": self.status,
        }
