from __future__ import annotations

from ..extensions import db
from sweetshop.time_utils import to_utc_z, utcnow


EXPENSE_CATEGORIES = (
    "ingredients",
    "packaging",
    "utilities",
    "rent",
    "salaries",
    "marketing",
    "equipment",
    "transportation",
    "other",
)
EXPENSE_PAYMENT_METHODS = ("cash", "card", "bank_transfer", "upi")


class Expense(db.Model):
    __tablename__ = "expenses"
    __table_args__ = (
        db.Index("ix_expenses_category_date", "category", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.String(255), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    category = db.Column(db.String(32), nullable=False)
    payment_method = db.Column(db.String(16), nullable=False)
    date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    notes = db.Column(db.Text, nullable=False, default="")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "amount_cents": self.amount_cents,
            "category": self.category,
            "payment_method": self.payment_method,
            "date": to_utc_z(self.date),
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }
