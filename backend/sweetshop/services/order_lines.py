# Overview: Line-item and payment parsing shared by regular and event orders.

from __future__ import annotations

from typing import Any

from sqlalchemy import select

from ..extensions import db
from ..models import InventoryItem
from ..models.orders import PAYMENT_METHODS
from ..validation import ValidationError, require_amount_cents, require_positive_quantity


def parse_lines(raw_items: Any) -> list[dict]:
    """
    Validate the client's line list.

    Each entry: {"item_id": int, "quantity": number > 0, "price_cents": int >= 0,
    "name": optional display name}. Returns normalized dicts; inventory
    references are checked later by resolve_lines().
    """
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("items must be a non-empty list")

    parsed = []
    for idx, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{idx}] must be an object")

        item_id = raw.get("item_id")
        if isinstance(item_id, bool) or not isinstance(item_id, int):
            raise ValidationError(f"items[{idx}].item_id must be an integer")

        quantity = require_positive_quantity(raw.get("quantity"), field_name=f"items[{idx}].quantity")
        price_cents = require_amount_cents(
            raw.get("price_cents"), field_name=f"items[{idx}].price_cents", allow_zero=True
        )

        name = raw.get("name")
        if name is not None and not isinstance(name, str):
            raise ValidationError(f"items[{idx}].name must be a string")

        parsed.append({
            "item_id": item_id,
            "quantity": quantity,
            "price_cents": price_cents,
            "name": name.strip() if name else None,
        })
    return parsed


def resolve_lines(parsed: list[dict]) -> list[dict]:
    """
    Check every referenced inventory item exists and build the line snapshots.

    All references are checked before any stock moves, so a bad id fails the
    whole order with nothing deducted.
    """
    ids = {line["item_id"] for line in parsed}
    found = {
        item.id: item
        for item in db.session.execute(
            select(InventoryItem).where(InventoryItem.id.in_(ids))
        ).scalars()
    }
    missing = sorted(ids - found.keys())
    if missing:
        raise ValidationError(f"Unknown inventory item(s): {', '.join(str(i) for i in missing)}")

    lines = []
    for line in parsed:
        item = found[line["item_id"]]
        lines.append({
            "item_id": item.id,
            "name": line["name"] or item.name,
            "unit": item.unit,
            "price_cents": line["price_cents"],
            "quantity": line["quantity"],
            "line_total_cents": int(round(line["price_cents"] * line["quantity"])),
        })
    return lines


def lines_subtotal(lines: list[dict]) -> int:
    return sum(line["line_total_cents"] for line in lines)


def parse_payment(raw: Any, *, field_name: str = "payment", require_amount: bool = True) -> dict:
    """
    {"amount_cents": int > 0, "method": one of PAYMENT_METHODS, "card_reference": optional str}
    """
    if not isinstance(raw, dict):
        raise ValidationError(f"{field_name} must be an object")

    method = raw.get("method")
    if method not in PAYMENT_METHODS:
        raise ValidationError(f"{field_name}.method must be one of: {', '.join(PAYMENT_METHODS)}")

    card_reference = raw.get("card_reference")
    if card_reference is not None:
        if not isinstance(card_reference, str):
            raise ValidationError(f"{field_name}.card_reference must be a string")
        card_reference = card_reference.strip() or None

    payment = {"method": method, "card_reference": card_reference}
    if require_amount:
        payment["amount_cents"] = require_amount_cents(
            raw.get("amount_cents"), field_name=f"{field_name}.amount_cents"
        )
    return payment
