# Overview: Read-only figures for the dashboard landing page.

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, time, timedelta

from sqlalchemy import func, select

from ..extensions import db
from ..models import (
    EventOrder,
    EventOrderLine,
    Expense,
    InventoryItem,
    RegularOrder,
    RegularOrderLine,
)
from ..models.inventory import STOCK_LOW
from ..models.orders import ORDER_STATUS_DELIVERED, ORDER_STATUS_PENDING
from sweetshop.time_utils import utcnow
from .vendor_service import total_payment_due


SALES_WINDOW_DAYS = 30
TOP_PRODUCTS = 5
PENDING_ORDERS = 5


def _sum(column, *where) -> int:
    stmt = select(func.coalesce(func.sum(column), 0))
    for clause in where:
        stmt = stmt.where(clause)
    return int(db.session.execute(stmt).scalar() or 0)


def _count(model, *where) -> int:
    stmt = select(func.count()).select_from(model)
    for clause in where:
        stmt = stmt.where(clause)
    return int(db.session.execute(stmt).scalar() or 0)


def get_summary() -> dict:
    """
    Event orders count as sales only once delivered; regular orders count
    as soon as they are rung up.
    """
    event_sales = _sum(EventOrder.total_amount_cents, EventOrder.order_status == ORDER_STATUS_DELIVERED)
    regular_sales = _sum(RegularOrder.payment_amount_cents)
    total_sales = event_sales + regular_sales
    total_expenses = _sum(Expense.amount_cents)

    return {
        "total_sales_cents": total_sales,
        "total_expenses_cents": total_expenses,
        "net_profit_cents": total_sales - total_expenses,
        "pending_orders": _count(EventOrder, EventOrder.order_status == ORDER_STATUS_PENDING),
        "low_stock_items": _count(InventoryItem, InventoryItem.status == STOCK_LOW),
        "vendor_payment_due_cents": total_payment_due(),
    }


def get_sales_by_day(*, days: int = SALES_WINDOW_DAYS) -> list[dict]:
    """Daily sales for the trailing window, oldest day first; days without sales are omitted."""
    since = datetime.combine((utcnow() - timedelta(days=days)).date(), time.min)
    by_day: dict[str, int] = defaultdict(int)

    delivered = db.session.execute(
        select(EventOrder.delivery_date, EventOrder.total_amount_cents)
        .where(EventOrder.order_status == ORDER_STATUS_DELIVERED)
        .where(EventOrder.delivery_date >= since.date())
    ).all()
    for delivery_date, amount in delivered:
        by_day[delivery_date.isoformat()] += amount or 0

    regular = db.session.execute(
        select(RegularOrder.order_date, RegularOrder.payment_amount_cents)
        .where(RegularOrder.order_date >= since)
    ).all()
    for order_date, amount in regular:
        by_day[order_date.date().isoformat()] += amount or 0

    return [{"date": d, "amount_cents": amount} for d, amount in sorted(by_day.items())]


def get_expenses_by_category() -> list[dict]:
    rows = db.session.execute(
        select(Expense.category, func.sum(Expense.amount_cents))
        .group_by(Expense.category)
        .order_by(Expense.category.asc())
    ).all()
    return [{"category": category, "amount_cents": int(amount or 0)} for category, amount in rows]


def get_popular_products(*, limit: int = TOP_PRODUCTS) -> list[dict]:
    """Best sellers by quantity across both order kinds."""
    products: dict[int, dict] = {}
    for line_model in (RegularOrderLine, EventOrderLine):
        rows = db.session.execute(
            select(
                line_model.item_id,
                func.min(line_model.name),
                func.sum(line_model.quantity),
                func.sum(line_model.line_total_cents),
            ).group_by(line_model.item_id)
        ).all()
        for item_id, name, quantity, revenue in rows:
            row = products.setdefault(item_id, {
                "item_id": item_id,
                "name": name,
                "quantity_sold": 0.0,
                "revenue_cents": 0,
            })
            row["quantity_sold"] += float(quantity or 0)
            row["revenue_cents"] += int(revenue or 0)

    top = sorted(products.values(), key=lambda p: p["quantity_sold"], reverse=True)[:limit]

    items = {}
    if top:
        items = {
            item.id: item
            for item in db.session.execute(
                select(InventoryItem).where(InventoryItem.id.in_([p["item_id"] for p in top]))
            ).scalars()
        }
    for p in top:
        item = items.get(p["item_id"])
        p["category"] = item.category if item else "Unknown"
        p["unit"] = item.unit if item else None
    return top


def get_pending_orders(*, limit: int = PENDING_ORDERS) -> list[dict]:
    """Pending event orders, nearest delivery first."""
    orders = db.session.execute(
        select(EventOrder)
        .where(EventOrder.order_status == ORDER_STATUS_PENDING)
        .order_by(EventOrder.delivery_date.asc(), EventOrder.id.asc())
        .limit(limit)
    ).scalars().all()
    return [o.to_dict() for o in orders]
