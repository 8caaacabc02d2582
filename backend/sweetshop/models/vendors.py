from __future__ import annotations

from ..extensions import db
from sweetshop.time_utils import to_utc_z, to_iso_date


VENDOR_TYPES = ("milk", "chenna", "sugar", "ghee", "flour", "packaging", "other")

# Vendor settlements use a wider tender set than customer orders
VENDOR_PAYMENT_METHODS = ("cash", "phonepe", "gpay", "paytm", "card", "bank")


class Vendor(db.Model):
    """
    Supplier of raw material (milk, chenna, ghee...) and what the shop owes it.

    payment_due_cents is the running balance owed. It is only ever lowered
    by recording a VendorTransaction (vendor_service.record_payment); a
    direct edit through update is treated as a correction of the ledger.
    """
    __tablename__ = "vendors"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    type = db.Column(db.String(32), nullable=False)
    contact = db.Column(db.String(64), nullable=False)
    address = db.Column(db.Text, nullable=False)

    supplied_items = db.Column(db.JSON, nullable=False, default=list)
    daily_supply = db.Column(db.Float, nullable=False, default=0.0)
    monthly_supply = db.Column(db.Float, nullable=False, default=0.0)

    rate_cents = db.Column(db.Integer, nullable=False, default=0)
    payment_due_cents = db.Column(db.Integer, nullable=False, default=0)
    last_payment_date = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    transactions = db.relationship(
        "VendorTransaction",
        backref="vendor",
        cascade="all, delete-orphan",
        order_by="VendorTransaction.id",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Vendor id={self.id} name={self.name!r} due={self.payment_due_cents}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "contact": self.contact,
            "address": self.address,
            "supplied_items": list(self.supplied_items or []),
            "daily_supply": self.daily_supply,
            "monthly_supply": self.monthly_supply,
            "rate_cents": self.rate_cents,
            "payment_due_cents": self.payment_due_cents,
            "last_payment_date": to_utc_z(self.last_payment_date),
            "transactions": [t.to_dict() for t in self.transactions],
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class VendorTransaction(db.Model):
    """Payment made to a vendor. Append-only."""
    __tablename__ = "vendor_transactions"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(
        db.Integer, db.ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date = db.Column(db.Date, nullable=False)
    quantity = db.Column(db.Float, nullable=False, default=0.0)
    amount_cents = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(db.String(16), nullable=False)
    card_reference = db.Column(db.String(64), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_iso_date(self.date),
            "quantity": self.quantity,
            "amount_cents": self.amount_cents,
            "payment_method": self.payment_method,
            "card_reference": self.card_reference,
        }
