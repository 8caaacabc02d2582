from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import Session

from ..extensions import db
from sweetshop.time_utils import to_utc_z, to_iso_date, utcnow


# Customer tenders (regular and event orders share the same set)
PAYMENT_METHODS = ("cash", "phonepay", "gpay", "card")

PAYMENT_STATUS_PENDING = "pending"
PAYMENT_STATUS_PARTIAL = "partial"
PAYMENT_STATUS_PAID = "paid"

ORDER_STATUS_PENDING = "pending"
ORDER_STATUS_CONFIRMED = "confirmed"
ORDER_STATUS_PREPARING = "preparing"
ORDER_STATUS_READY = "ready"
ORDER_STATUS_DELIVERED = "delivered"
ORDER_STATUS_CANCELLED = "cancelled"
ORDER_STATUSES = (
    ORDER_STATUS_PENDING,
    ORDER_STATUS_CONFIRMED,
    ORDER_STATUS_PREPARING,
    ORDER_STATUS_READY,
    ORDER_STATUS_DELIVERED,
    ORDER_STATUS_CANCELLED,
)

DELIVERY_SLOTS = ("AM", "PM")


def derive_payment_status(paid_cents: int, total_cents: int) -> str:
    if paid_cents >= total_cents:
        return PAYMENT_STATUS_PAID
    if paid_cents > 0:
        return PAYMENT_STATUS_PARTIAL
    return PAYMENT_STATUS_PENDING


class _OrderLineMixin:
    """
    Snapshot of an inventory item at the time of sale.

    item_id is a plain reference (no FK): inventory items can be deleted
    while historical orders keep their name/price snapshot.
    """
    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(db.Integer, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    unit = db.Column(db.String(16), nullable=True)
    price_cents = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Float, nullable=False)
    line_total_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "name": self.name,
            "unit": self.unit,
            "price_cents": self.price_cents,
            "quantity": self.quantity,
            "line_total_cents": self.line_total_cents,
        }


class RegularOrder(db.Model):
    """
    Walk-in sale: settled in one shot with a single payment.

    Lines and payment are immutable once created; only the customer
    details and order_date can be corrected afterwards.
    """
    __tablename__ = "regular_orders"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    customer_name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=False)

    payment_amount_cents = db.Column(db.Integer, nullable=True)
    payment_method = db.Column(db.String(16), nullable=False)
    card_reference = db.Column(db.String(64), nullable=True)

    order_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    lines = db.relationship(
        "RegularOrderLine",
        backref="order",
        cascade="all, delete-orphan",
        order_by="RegularOrderLine.id",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<RegularOrder id={self.id} customer={self.customer_name!r} amount={self.payment_amount_cents}>"

    @property
    def lines_total_cents(self) -> int:
        return sum(line.line_total_cents for line in self.lines)

    @property
    def revenue_cents(self) -> int:
        """Payment amount, falling back to the line totals for legacy rows."""
        if self.payment_amount_cents is not None:
            return self.payment_amount_cents
        return self.lines_total_cents

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "phone": self.phone,
            "items": [line.to_dict() for line in self.lines],
            "payment": {
                "amount_cents": self.payment_amount_cents,
                "method": self.payment_method,
                "card_reference": self.card_reference,
            },
            "order_date": to_utc_z(self.order_date),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class RegularOrderLine(_OrderLineMixin, db.Model):
    __tablename__ = "regular_order_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    order_id = db.Column(
        db.Integer, db.ForeignKey("regular_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )


class EventOrder(db.Model):
    """
    Bulk/catering order with scheduled delivery and installment payments.

    order_status is set explicitly by staff. paid_amount_cents and
    payment_status are projections of the payments list and are
    recomputed before every flush.
    """
    __tablename__ = "event_orders"
    __table_args__ = (
        db.Index("ix_event_orders_delivery", "delivery_date", "order_status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    purpose = db.Column(db.String(255), nullable=False)
    address = db.Column(db.Text, nullable=False)
    delivery_date = db.Column(db.Date, nullable=False)
    delivery_time = db.Column(db.String(8), nullable=False)

    discount_cents = db.Column(db.Integer, nullable=False, default=0)
    total_amount_cents = db.Column(db.Integer, nullable=False)
    paid_amount_cents = db.Column(db.Integer, nullable=False, default=0)
    payment_status = db.Column(db.String(16), nullable=False, default=PAYMENT_STATUS_PENDING)
    order_status = db.Column(db.String(16), nullable=False, default=ORDER_STATUS_PENDING, index=True)

    notes = db.Column(db.Text, nullable=False, default="")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    lines = db.relationship(
        "EventOrderLine",
        backref="order",
        cascade="all, delete-orphan",
        order_by="EventOrderLine.id",
        lazy="selectin",
    )
    payments = db.relationship(
        "EventOrderPayment",
        backref="order",
        cascade="all, delete-orphan",
        order_by="EventOrderPayment.id",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return (
            f"<EventOrder id={self.id} customer={self.customer_name!r} "
            f"total={self.total_amount_cents} paid={self.paid_amount_cents}>"
        )

    @property
    def balance_cents(self) -> int:
        return self.total_amount_cents - self.paid_amount_cents

    @property
    def revenue_cents(self) -> int:
        """Total amount, falling back to the sum of payments."""
        if self.total_amount_cents is not None:
            return self.total_amount_cents
        return sum(p.amount_cents for p in self.payments)

    def refresh_payment_state(self) -> None:
        self.paid_amount_cents = sum(p.amount_cents for p in self.payments)
        self.payment_status = derive_payment_status(self.paid_amount_cents, self.total_amount_cents or 0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "phone": self.phone,
            "purpose": self.purpose,
            "address": self.address,
            "delivery_date": to_iso_date(self.delivery_date),
            "delivery_time": self.delivery_time,
            "items": [line.to_dict() for line in self.lines],
            "payments": [p.to_dict() for p in self.payments],
            "discount_cents": self.discount_cents,
            "total_amount_cents": self.total_amount_cents,
            "paid_amount_cents": self.paid_amount_cents,
            "balance_cents": self.balance_cents,
            "payment_status": self.payment_status,
            "order_status": self.order_status,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class EventOrderLine(_OrderLineMixin, db.Model):
    __tablename__ = "event_order_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    order_id = db.Column(
        db.Integer, db.ForeignKey("event_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )


class EventOrderPayment(db.Model):
    """Installment towards an event order. Append-only."""
    __tablename__ = "event_order_payments"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(
        db.Integer, db.ForeignKey("event_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount_cents = db.Column(db.Integer, nullable=False)
    method = db.Column(db.String(16), nullable=False)
    card_reference = db.Column(db.String(64), nullable=True)
    paid_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "amount_cents": self.amount_cents,
            "method": self.method,
            "card_reference": self.card_reference,
            "paid_at": to_utc_z(self.paid_at),
        }


@event.listens_for(Session, "before_flush")
def _derive_event_payment_state(session, flush_context, instances):
    """paid_amount/payment_status always follow the payments list."""
    orders = set()
    for obj in list(session.new) + list(session.dirty):
        if isinstance(obj, EventOrder):
            orders.add(obj)
        elif isinstance(obj, EventOrderPayment) and obj.order is not None:
            orders.add(obj.order)
    for order in orders:
        if order in session.deleted:
            continue
        order.refresh_payment_state()
