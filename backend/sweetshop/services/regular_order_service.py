# Overview: Service-layer operations for regular (walk-in) orders; settlement, reversal and side effects.

"""
Regular order lifecycle

    create  -> validate lines, snapshot name/price, payment = sum of lines,
               deduct stock for every line, commit (one transaction),
               then send the invoice (after commit, best effort)
    update  -> customer_name / phone / order_date only
    delete  -> restore stock for every line, delete, commit,
               then send a cancellation notice (best effort)

Lines and the payment are fixed at creation. An update that touches them is
rejected rather than silently ignored.
"""

from __future__ import annotations

from sqlalchemy import select

from ..extensions import db
from ..models import RegularOrder, RegularOrderLine
from ..validation import ModelValidationPolicy, NotFoundError, ValidationError, validate_payload
from .concurrency import run_with_retry
from .inventory_service import apply_order_lines
from .order_lines import lines_subtotal, parse_lines, parse_payment, resolve_lines
from . import side_effects
from .document_service import INVOICES


REGULAR_ORDER_HEADER_POLICY = ModelValidationPolicy(
    writable_fields={"customer_name", "phone", "order_date"},
    required_on_create={"customer_name", "phone"},
    immutable_fields={
        "items",
        "lines",
        "payment",
        "payment_amount_cents",
        "payment_method",
        "card_reference",
        "id",
        "created_at",
        "updated_at",
    },
)


class RegularOrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int):
        super().__init__(f"Regular order {order_id} not found")
        self.order_id = order_id


def _serialize(order: RegularOrder) -> dict:
    data = order.to_dict()
    data["invoice_url"] = side_effects.public_document_url(INVOICES, f"invoice_{order.id}.pdf")
    return data


def _get(order_id: int) -> RegularOrder:
    order = db.session.get(RegularOrder, order_id)
    if order is None:
        raise RegularOrderNotFoundError(order_id)
    return order


def list_orders() -> list[dict]:
    stmt = select(RegularOrder).order_by(RegularOrder.order_date.desc(), RegularOrder.id.desc())
    return [_serialize(o) for o in db.session.execute(stmt).scalars().all()]


def get_order(order_id: int) -> dict:
    return _serialize(_get(order_id))


def create_order(payload: dict) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    header_payload = {k: v for k, v in payload.items() if k not in ("items", "payment")}
    header = validate_payload(
        model=RegularOrder,
        payload=header_payload,
        policy=REGULAR_ORDER_HEADER_POLICY,
        partial=False,
    )
    parsed_lines = parse_lines(payload.get("items"))
    # The amount is always the sum of the lines; a client-sent amount is ignored
    payment = parse_payment(payload.get("payment"), require_amount=False)

    def _settle() -> RegularOrder:
        lines = resolve_lines(parsed_lines)
        order = RegularOrder(
            **header,
            payment_amount_cents=lines_subtotal(lines),
            payment_method=payment["method"],
            card_reference=payment["card_reference"],
        )
        order.lines = [RegularOrderLine(**line) for line in lines]
        db.session.add(order)
        db.session.flush()

        apply_order_lines(lines, sign=-1, order_ref=f"regular order {order.id}")
        db.session.commit()
        return order

    order = run_with_retry(_settle)
    snapshot = _serialize(order)
    side_effects.regular_order_settled(snapshot)
    return snapshot


def update_order(order_id: int, payload: dict) -> dict:
    order = _get(order_id)
    patch = validate_payload(
        model=RegularOrder,
        payload=payload,
        policy=REGULAR_ORDER_HEADER_POLICY,
        partial=True,
    )
    for k, v in patch.items():
        setattr(order, k, v)
    db.session.commit()
    return _serialize(order)


def delete_order(order_id: int) -> dict:
    """
    Reverse the stock movement of every line, then remove the order.
    Items deleted since the sale are skipped (logged by apply_order_lines).
    """
    def _reverse() -> dict:
        order = _get(order_id)
        snapshot = order.to_dict()
        skipped = apply_order_lines(order.lines, sign=1, order_ref=f"regular order {order.id}")
        db.session.delete(order)
        db.session.commit()
        return {"order": snapshot, "skipped_item_ids": skipped}

    result = run_with_retry(_reverse)
    side_effects.regular_order_cancelled(result["order"])
    return {
        "message": "Order deleted successfully",
        "id": order_id,
        "skipped_item_ids": result["skipped_item_ids"],
    }
