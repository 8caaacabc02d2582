# Overview: Service-layer operations for vendors; encapsulates business logic and database work.

"""
Vendor Service

Vendors supply raw material on credit. payment_due_cents is what the shop
currently owes; record_payment() is the only operation that settles it and
always leaves an append-only VendorTransaction behind.

DESIGN:
- A payment larger than the amount due is rejected, so the balance never
  goes negative through the ledger.
- Deleting a vendor removes its transactions with it (hard delete).
"""

from __future__ import annotations

import math
from datetime import datetime, time

from sqlalchemy import select

from ..extensions import db
from ..models import Vendor, VendorTransaction
from ..models.vendors import VENDOR_PAYMENT_METHODS
from ..validation import NotFoundError, ValidationError, require_amount_cents
from .concurrency import lock_for_update, run_with_retry
from sweetshop.time_utils import parse_iso_date, utcnow


class VendorNotFoundError(NotFoundError):
    """Raised when a vendor is not found."""

    def __init__(self, vendor_id: int):
        super().__init__(f"Vendor {vendor_id} not found")
        self.vendor_id = vendor_id


class VendorValidationError(ValidationError):
    """Raised when a vendor payment fails validation."""
    pass


def _get(vendor_id: int, *, lock: bool = False) -> Vendor:
    stmt = select(Vendor).where(Vendor.id == vendor_id)
    if lock:
        stmt = lock_for_update(stmt)
    vendor = db.session.execute(stmt).scalars().first()
    if vendor is None:
        raise VendorNotFoundError(vendor_id)
    return vendor


def list_vendors(*, vendor_type: str | None = None) -> list[dict]:
    stmt = select(Vendor)
    if vendor_type:
        stmt = stmt.where(Vendor.type == vendor_type)
    stmt = stmt.order_by(Vendor.name.asc())
    return [v.to_dict() for v in db.session.execute(stmt).scalars().all()]


def get_vendor(vendor_id: int) -> dict:
    return _get(vendor_id).to_dict()


def create_vendor(patch: dict) -> dict:
    """patch has been through validate_payload + enforce_rules_vendor."""
    vendor = Vendor(**patch)
    db.session.add(vendor)
    db.session.commit()
    return vendor.to_dict()


def update_vendor(vendor_id: int, patch: dict) -> dict:
    vendor = _get(vendor_id)
    for k, v in patch.items():
        setattr(vendor, k, v)
    db.session.commit()
    return vendor.to_dict()


def delete_vendor(vendor_id: int) -> None:
    vendor = _get(vendor_id)
    db.session.delete(vendor)
    db.session.commit()


def _parse_payment(payload: dict) -> dict:
    if not isinstance(payload, dict):
        raise VendorValidationError("Invalid JSON payload")

    amount = require_amount_cents(payload.get("amount_cents"), field_name="amount_cents")

    method = payload.get("payment_method")
    if method not in VENDOR_PAYMENT_METHODS:
        raise VendorValidationError(
            f"payment_method must be one of: {', '.join(VENDOR_PAYMENT_METHODS)}"
        )

    quantity = payload.get("quantity", 0)
    if (
        isinstance(quantity, bool)
        or not isinstance(quantity, (int, float))
        or not math.isfinite(quantity)
        or quantity < 0
    ):
        raise VendorValidationError("quantity must be a number >= 0")

    raw_date = payload.get("date")
    if raw_date in (None, ""):
        paid_on = utcnow().date()
    elif isinstance(raw_date, str):
        try:
            paid_on = parse_iso_date(raw_date)
        except ValueError:
            raise VendorValidationError("date must be an ISO-8601 date")
        if paid_on is None:
            paid_on = utcnow().date()
    else:
        raise VendorValidationError("date must be an ISO-8601 date")

    card_reference = payload.get("card_reference")
    if card_reference is not None and not isinstance(card_reference, str):
        raise VendorValidationError("card_reference must be a string")

    return {
        "date": paid_on,
        "quantity": float(quantity),
        "amount_cents": amount,
        "payment_method": method,
        "card_reference": (card_reference or "").strip() or None,
    }


def record_payment(vendor_id: int, payload: dict) -> dict:
    """
    Pay a vendor: append a transaction, lower payment_due by exactly the
    amount and stamp last_payment_date with the payment's own date.

    Raises:
        VendorNotFoundError: unknown vendor
        VendorValidationError / ValidationError: bad input or overpayment
    """
    data = _parse_payment(payload)

    def _op() -> Vendor:
        vendor = _get(vendor_id, lock=True)
        if data["amount_cents"] > vendor.payment_due_cents:
            raise VendorValidationError(
                f"Payment of {data['amount_cents']} exceeds the amount due ({vendor.payment_due_cents})"
            )
        vendor.transactions.append(VendorTransaction(**data))
        vendor.payment_due_cents = vendor.payment_due_cents - data["amount_cents"]
        vendor.last_payment_date = datetime.combine(data["date"], time.min)
        db.session.commit()
        return vendor

    return run_with_retry(_op).to_dict()


def total_payment_due() -> int:
    return int(db.session.execute(select(db.func.coalesce(db.func.sum(Vendor.payment_due_cents), 0))).scalar() or 0)
