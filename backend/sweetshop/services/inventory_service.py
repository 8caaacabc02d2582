# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

# backend/sweetshop/services/inventory_service.py
"""
Inventory ledger invariants (authoritative)

- InventoryItem.quantity is the on-hand balance. Orders never overwrite it;
  they move it by deltas through adjust_quantity().
- InventoryItem.status is derived from (quantity, min_stock):
    quantity <= 0          -> out-of-stock
    quantity <= min_stock  -> low-stock
    otherwise              -> in-stock
  Plain ORM writes get it from the before_flush hook on the model.
  adjust_quantity() computes it in the same UPDATE statement as the delta,
  so two concurrent orders can never leave a stale status behind.
- Nothing here commits except the CRUD entry points. Settlement helpers
  (adjust_quantity, apply_order_lines) run inside the caller's transaction.
"""

from __future__ import annotations

from typing import Iterable

from flask import current_app
from sqlalchemy import case, select, update

from ..extensions import db
from ..models import InventoryItem
from ..models.inventory import STOCK_IN, STOCK_LOW, STOCK_OUT, derive_stock_status
from ..validation import NotFoundError
from sweetshop.time_utils import utcnow


__all__ = [
    "derive_stock_status",
    "adjust_quantity",
    "apply_order_lines",
    "list_items",
    "list_low_stock",
    "get_item",
    "create_item",
    "update_item",
    "delete_item",
]


class InventoryItemNotFoundError(NotFoundError):
    def __init__(self, item_id: int):
        super().__init__(f"Inventory item {item_id} not found")
        self.item_id = item_id


def _status_after(delta: float):
    new_quantity = InventoryItem.quantity + delta
    return case(
        (new_quantity <= 0, STOCK_OUT),
        (new_quantity <= InventoryItem.min_stock, STOCK_LOW),
        else_=STOCK_IN,
    )


def adjust_quantity(item_id: int, delta: float) -> InventoryItem | None:
    """
    Move an item's quantity by delta and refresh its status atomically.

    The right-hand sides of an UPDATE all see the pre-update row, so the
    status CASE is written against quantity + delta.

    Returns the refreshed item, or None when the item no longer exists.
    """
    stmt = (
        update(InventoryItem)
        .where(InventoryItem.id == item_id)
        .values(
            quantity=InventoryItem.quantity + delta,
            status=_status_after(delta),
            last_updated=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if result.rowcount == 0:
        return None

    item = db.session.get(InventoryItem, item_id)
    if item is not None:
        db.session.refresh(item)
    return item


def apply_order_lines(lines: Iterable, *, sign: int, order_ref: str = "") -> list[int]:
    """
    Apply sign * quantity for every order line (sign=-1 deducts, +1 restores).

    Lines whose item has been deleted are skipped and logged. Returns the
    skipped item ids.
    """
    skipped: list[int] = []
    for line in lines:
        item_id = line["item_id"] if isinstance(line, dict) else line.item_id
        quantity = line["quantity"] if isinstance(line, dict) else line.quantity
        if adjust_quantity(item_id, sign * quantity) is None:
            current_app.logger.warning(
                "Inventory item %s not found while settling %s; stock left unchanged",
                item_id, order_ref or "order",
            )
            skipped.append(item_id)
    return skipped


def list_items(*, status: str | None = None, category: str | None = None) -> list[dict]:
    stmt = select(InventoryItem)
    if status:
        stmt = stmt.where(InventoryItem.status == status)
    if category:
        stmt = stmt.where(InventoryItem.category == category)
    stmt = stmt.order_by(InventoryItem.category.asc(), InventoryItem.name.asc())
    return [item.to_dict() for item in db.session.execute(stmt).scalars().all()]


def list_low_stock() -> list[dict]:
    """Items at or below their reorder point, emptiest first."""
    stmt = (
        select(InventoryItem)
        .where(InventoryItem.status.in_((STOCK_LOW, STOCK_OUT)))
        .order_by(InventoryItem.quantity.asc(), InventoryItem.name.asc())
    )
    return [item.to_dict() for item in db.session.execute(stmt).scalars().all()]


def get_item(item_id: int) -> InventoryItem:
    item = db.session.get(InventoryItem, item_id)
    if item is None:
        raise InventoryItemNotFoundError(item_id)
    return item


def create_item(patch: dict) -> dict:
    """patch is the output of validate_payload; status is derived on flush."""
    item = InventoryItem(**patch)
    db.session.add(item)
    db.session.commit()
    return item.to_dict()


def update_item(item_id: int, patch: dict) -> dict:
    item = get_item(item_id)
    for k, v in patch.items():
        setattr(item, k, v)
    db.session.commit()
    return item.to_dict()


def delete_item(item_id: int) -> None:
    """
    Hard delete. Order lines keep their own name/price snapshot, so
    historical orders are unaffected; a later reversal simply skips the id.
    """
    item = get_item(item_id)
    db.session.delete(item)
    db.session.commit()
