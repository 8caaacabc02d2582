# Overview: Service-layer operations for event (bulk/catering) orders; settlement, installments and reconciliation.

"""
Event order lifecycle

    create          -> total = sum(lines) - discount; optional initial payments;
                       deduct stock; commit; booking receipt + message
    add_payment     -> append an installment (never beyond the balance, never
                       on a cancelled order); commit; partial receipt or, once
                       paid >= total, the final invoice
    update_status   -> any order_status from any order_status; "delivered"
                       sends a delivery message
    update_details  -> descriptive fields; when items are supplied the old
                       lines are reversed and the new ones applied in the
                       same transaction, and the total is recomputed
    delete          -> restore stock; delete; commit; cancellation notice
                       (mentions the refund when something was paid)

paid_amount_cents and payment_status are never written here; the model's
before_flush hook derives them from the payments list.

Setting order_status to "cancelled" does not move stock. Only delete
reverses inventory.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date

from sqlalchemy import select

from ..extensions import db
from ..models import EventOrder, EventOrderLine, EventOrderPayment, InventoryItem
from ..models.orders import (
    DELIVERY_SLOTS,
    ORDER_STATUSES,
    ORDER_STATUS_CANCELLED,
    ORDER_STATUS_DELIVERED,
)
from ..validation import (
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    require_amount_cents,
    validate_payload,
)
from .concurrency import lock_for_update, run_with_retry
from .document_service import RECEIPTS
from .inventory_service import apply_order_lines
from .order_lines import lines_subtotal, parse_lines, parse_payment, resolve_lines
from . import side_effects


_DERIVED_OR_OWNED = {
    "id",
    "lines",
    "payments",
    "total_amount_cents",
    "paid_amount_cents",
    "payment_status",
    "balance_cents",
    "created_at",
    "updated_at",
}

EVENT_ORDER_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={
        "customer_name",
        "phone",
        "purpose",
        "address",
        "delivery_date",
        "delivery_time",
        "notes",
        "order_status",
    },
    required_on_create={"customer_name", "phone", "purpose", "address", "delivery_date", "delivery_time"},
    choices={"delivery_time": DELIVERY_SLOTS, "order_status": ORDER_STATUSES},
    immutable_fields=_DERIVED_OR_OWNED,
)

EVENT_ORDER_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={
        "customer_name",
        "phone",
        "purpose",
        "address",
        "delivery_date",
        "delivery_time",
        "notes",
    },
    choices={"delivery_time": DELIVERY_SLOTS},
    # Status has its own endpoint and payments are append-only
    immutable_fields=_DERIVED_OR_OWNED | {"order_status"},
)


class EventOrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int):
        super().__init__(f"Event order {order_id} not found")
        self.order_id = order_id


def _serialize(order: EventOrder) -> dict:
    data = order.to_dict()
    data["booking_receipt_url"] = side_effects.public_document_url(RECEIPTS, f"booking_{order.id}.pdf")
    return data


def _get(order_id: int, *, lock: bool = False) -> EventOrder:
    stmt = select(EventOrder).where(EventOrder.id == order_id)
    if lock:
        stmt = lock_for_update(stmt)
    order = db.session.execute(stmt).scalars().first()
    if order is None:
        raise EventOrderNotFoundError(order_id)
    return order


def _parse_discount(raw, subtotal: int) -> int:
    if raw is None:
        return 0
    discount = require_amount_cents(raw, field_name="discount_cents", allow_zero=True)
    if discount > subtotal:
        raise ValidationError("discount_cents cannot exceed the items subtotal")
    return discount


def _parse_initial_payments(raw) -> list[dict]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError("payments must be a list")
    return [parse_payment(p, field_name=f"payments[{i}]") for i, p in enumerate(raw)]


def list_orders(*, status: str | None = None) -> list[dict]:
    stmt = select(EventOrder)
    if status:
        if status not in ORDER_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(ORDER_STATUSES)}")
        stmt = stmt.where(EventOrder.order_status == status)
    stmt = stmt.order_by(EventOrder.delivery_date.asc(), EventOrder.id.asc())
    return [_serialize(o) for o in db.session.execute(stmt).scalars().all()]


def get_order(order_id: int) -> dict:
    return _serialize(_get(order_id))


def create_order(payload: dict) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    header_payload = {
        k: v for k, v in payload.items() if k not in ("items", "payments", "discount_cents")
    }
    header = validate_payload(
        model=EventOrder,
        payload=header_payload,
        policy=EVENT_ORDER_CREATE_POLICY,
        partial=False,
    )
    parsed_lines = parse_lines(payload.get("items"))
    payments = _parse_initial_payments(payload.get("payments"))

    def _settle() -> EventOrder:
        lines = resolve_lines(parsed_lines)
        subtotal = lines_subtotal(lines)
        discount = _parse_discount(payload.get("discount_cents"), subtotal)
        total = subtotal - discount

        paid = sum(p["amount_cents"] for p in payments)
        if paid > total:
            raise ValidationError("Initial payments exceed the order total")

        order = EventOrder(**header, discount_cents=discount, total_amount_cents=total)
        order.lines = [EventOrderLine(**line) for line in lines]
        order.payments = [EventOrderPayment(**p) for p in payments]
        db.session.add(order)
        db.session.flush()

        apply_order_lines(lines, sign=-1, order_ref=f"event order {order.id}")
        db.session.commit()
        return order

    order = run_with_retry(_settle)
    snapshot = _serialize(order)
    side_effects.event_order_booked(snapshot)
    return snapshot


def add_payment(order_id: int, payload: dict) -> dict:
    payment_in = parse_payment(payload)

    def _append() -> tuple[EventOrder, EventOrderPayment]:
        order = _get(order_id, lock=True)
        if order.order_status == ORDER_STATUS_CANCELLED:
            raise ValidationError("Cannot add a payment to a cancelled order")
        if payment_in["amount_cents"] > order.balance_cents:
            raise ValidationError(
                f"Payment of {payment_in['amount_cents']} exceeds the remaining balance of {order.balance_cents}"
            )
        payment = EventOrderPayment(**payment_in)
        order.payments.append(payment)
        db.session.commit()
        return order, payment

    order, payment = run_with_retry(_append)
    snapshot = _serialize(order)
    side_effects.event_payment_received(snapshot, payment.to_dict())
    return snapshot


def update_status(order_id: int, payload: dict) -> dict:
    status = (payload or {}).get("order_status")
    if status not in ORDER_STATUSES:
        raise ValidationError(f"order_status must be one of: {', '.join(ORDER_STATUSES)}")

    order = _get(order_id)
    order.order_status = status
    db.session.commit()

    snapshot = _serialize(order)
    if status == ORDER_STATUS_DELIVERED:
        side_effects.event_order_delivered(snapshot)
    return snapshot


def update_details(order_id: int, payload: dict) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    header_payload = {k: v for k, v in payload.items() if k not in ("items", "discount_cents")}
    patch = validate_payload(
        model=EventOrder,
        payload=header_payload,
        policy=EVENT_ORDER_UPDATE_POLICY,
        partial=True,
    )
    parsed_lines = parse_lines(payload["items"]) if "items" in payload else None
    discount_given = "discount_cents" in payload

    def _apply() -> EventOrder:
        order = _get(order_id, lock=True)
        for k, v in patch.items():
            setattr(order, k, v)

        if parsed_lines is not None or discount_given:
            if parsed_lines is not None:
                new_lines = resolve_lines(parsed_lines)
                apply_order_lines(order.lines, sign=1, order_ref=f"event order {order.id}")
                order.lines = [EventOrderLine(**line) for line in new_lines]
                db.session.flush()
                apply_order_lines(new_lines, sign=-1, order_ref=f"event order {order.id}")
                subtotal = lines_subtotal(new_lines)
            else:
                subtotal = sum(line.line_total_cents for line in order.lines)

            discount = (
                _parse_discount(payload.get("discount_cents"), subtotal)
                if discount_given
                else min(order.discount_cents, subtotal)
            )
            order.discount_cents = discount
            order.total_amount_cents = subtotal - discount

        db.session.commit()
        return order

    order = run_with_retry(_apply)
    return _serialize(order)


def delete_order(order_id: int) -> dict:
    def _reverse() -> dict:
        order = _get(order_id, lock=True)
        snapshot = order.to_dict()
        skipped = apply_order_lines(order.lines, sign=1, order_ref=f"event order {order.id}")
        db.session.delete(order)
        db.session.commit()
        return {"order": snapshot, "skipped_item_ids": skipped}

    result = run_with_retry(_reverse)
    side_effects.event_order_cancelled(result["order"])
    return {
        "message": "Order deleted successfully",
        "id": order_id,
        "refund_cents": result["order"]["paid_amount_cents"],
        "skipped_item_ids": result["skipped_item_ids"],
    }


def preparation_report(delivery_date: date) -> dict:
    """
    What the kitchen has to make for one delivery date: quantities per item
    summed across every non-cancelled event order, split by AM/PM slot.
    """
    stmt = (
        select(EventOrder)
        .where(EventOrder.delivery_date == delivery_date)
        .where(EventOrder.order_status != ORDER_STATUS_CANCELLED)
        .order_by(EventOrder.delivery_time.asc(), EventOrder.id.asc())
    )
    orders = db.session.execute(stmt).scalars().all()

    totals: dict[int, dict] = {}
    by_slot: dict[str, dict[int, float]] = defaultdict(lambda: defaultdict(float))
    for order in orders:
        for line in order.lines:
            row = totals.setdefault(line.item_id, {
                "item_id": line.item_id,
                "name": line.name,
                "unit": line.unit,
                "quantity": 0.0,
                "order_ids": [],
            })
            row["quantity"] += line.quantity
            if order.id not in row["order_ids"]:
                row["order_ids"].append(order.id)
            by_slot[order.delivery_time][line.item_id] += line.quantity

    on_hand = {}
    if totals:
        on_hand = {
            item.id: item.quantity
            for item in db.session.execute(
                select(InventoryItem).where(InventoryItem.id.in_(totals.keys()))
            ).scalars()
        }

    items = []
    for item_id, row in sorted(totals.items(), key=lambda kv: kv[1]["name"]):
        row["on_hand"] = on_hand.get(item_id)
        items.append(row)

    return {
        "date": delivery_date.isoformat(),
        "order_count": len(orders),
        "items": items,
        "by_slot": {
            slot: [{"item_id": item_id, "quantity": qty} for item_id, qty in sorted(slot_items.items())]
            for slot, slot_items in sorted(by_slot.items())
        },
        "orders": [
            {
                "id": o.id,
                "customer_name": o.customer_name,
                "delivery_time": o.delivery_time,
                "order_status": o.order_status,
            }
            for o in orders
        ],
    }
