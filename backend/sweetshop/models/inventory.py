from __future__ import annotations

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from ..extensions import db
from sweetshop.time_utils import to_utc_z, utcnow


STOCK_IN = "in-stock"
STOCK_LOW = "low-stock"
STOCK_OUT = "out-of-stock"
STOCK_STATUSES = (STOCK_IN, STOCK_LOW, STOCK_OUT)


def derive_stock_status(quantity: float, min_stock: float) -> str:
    """The only source of an item's stock status."""
    if quantity <= 0:
        return STOCK_OUT
    if quantity <= min_stock:
        return STOCK_LOW
    return STOCK_IN


class InventoryItem(db.Model):
    """
    Stock-keeping record for an ingredient or finished sweet.

    quantity is the authoritative balance and is only moved by deltas
    (see inventory_service.adjust_quantity). status is a projection of
    (quantity, min_stock) and is recomputed on every write; it is never
    accepted from API input.

    quantity may go negative transiently when an order is settled against
    stock that was never entered (the shop still sells the box of laddoos).
    """
    __tablename__ = "inventory_items"
    __table_args__ = (
        db.Index("ix_inventory_items_category_name", "category", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(64), nullable=False)

    quantity = db.Column(db.Float, nullable=False, default=0.0)
    unit = db.Column(db.String(16), nullable=False)
    min_stock = db.Column(db.Float, nullable=False, default=0.0)

    # Authoritative storage in paise (frontend may only format for display)
    cost_per_unit_cents = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default=STOCK_OUT, index=True)
    last_updated = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<InventoryItem id={self.id} name={self.name!r} quantity={self.quantity} status={self.status}>"

    def refresh_status(self) -> None:
        self.status = derive_stock_status(self.quantity or 0.0, self.min_stock or 0.0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "quantity": self.quantity,
            "unit": self.unit,
            "min_stock": self.min_stock,
            "cost_per_unit_cents": self.cost_per_unit_cents,
            "status": self.status,
            "last_updated": to_utc_z(self.last_updated),
            "created_at": to_utc_z(self.created_at),
        }


@event.listens_for(Session, "before_flush")
def _derive_inventory_status(session, flush_context, instances):
    """Recompute status for every new or modified item before it hits the DB."""
    for obj in list(session.new) + list(session.dirty):
        if not isinstance(obj, InventoryItem):
            continue
        if obj in session.new:
            obj.refresh_status()
            obj.last_updated = utcnow()
            continue
        state = inspect(obj)
        if state.attrs.quantity.history.has_changes() or state.attrs.min_stock.history.has_changes():
            obj.refresh_status()
            obj.last_updated = utcnow()
