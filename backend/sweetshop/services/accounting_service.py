# Overview: Read-only financial aggregation over expenses, regular orders and event orders.

"""
Accounting rules

Range membership:
    expenses       -> Expense.date
    regular orders -> RegularOrder.order_date
    event orders   -> EventOrder.created_at (booking time, not delivery)

Revenue per order:
    regular -> payment amount, falling back to the sum of line totals
    event   -> total amount, falling back to the sum of payments

profit_margin = round(net_profit / total_revenue * 100, 2), or 0 when
there is no revenue. All money is integer cents.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta

from sqlalchemy import select

from ..extensions import db
from ..models import EventOrder, Expense, RegularOrder
from sweetshop.time_utils import to_utc_z


# Placeholder balances (cents) until a real balance sheet exists
PLACEHOLDER_ASSETS = {
    "cash": 12_500_000,
    "inventory": 6_850_000,
    "equipment": 21_500_000,
}


def _load(start: datetime, end: datetime):
    expenses = db.session.execute(
        select(Expense).where(Expense.date >= start, Expense.date <= end)
    ).scalars().all()
    regular = db.session.execute(
        select(RegularOrder).where(RegularOrder.order_date >= start, RegularOrder.order_date <= end)
    ).scalars().all()
    events = db.session.execute(
        select(EventOrder).where(EventOrder.created_at >= start, EventOrder.created_at <= end)
    ).scalars().all()
    return expenses, regular, events


def profit_margin(net_profit: int, total_revenue: int) -> float:
    if total_revenue <= 0:
        return 0
    return round(net_profit / total_revenue * 100, 2)


def _weekly_trend(start: datetime, end: datetime, expenses, regular, events) -> list[dict]:
    """7-day windows from start; the last (possibly partial) window is kept."""
    trend = []
    week_start = start
    week = 1
    while week_start <= end:
        week_end = min(week_start + timedelta(days=7), end + timedelta(microseconds=1))

        def _in(ts):
            return ts is not None and week_start <= ts < week_end

        revenue = sum(o.revenue_cents for o in regular if _in(o.order_date))
        revenue += sum(o.revenue_cents for o in events if _in(o.created_at))
        spent = sum(e.amount_cents for e in expenses if _in(e.date))

        trend.append({
            "period": f"Week {week}",
            "start": to_utc_z(week_start),
            "end": to_utc_z(min(week_start + timedelta(days=7), end)),
            "revenue_cents": revenue,
            "expenses_cents": spent,
            "profit_cents": revenue - spent,
        })
        week_start += timedelta(days=7)
        week += 1
    return trend


def get_summary(start: datetime, end: datetime) -> dict:
    expenses, regular, events = _load(start, end)

    total_expenses = sum(e.amount_cents for e in expenses)
    regular_revenue = sum(o.revenue_cents for o in regular)
    event_revenue = sum(o.revenue_cents for o in events)
    total_revenue = regular_revenue + event_revenue
    net_profit = total_revenue - total_expenses

    expense_distribution: dict[str, int] = defaultdict(int)
    for e in expenses:
        expense_distribution[e.category] += e.amount_cents

    return {
        "start_date": to_utc_z(start),
        "end_date": to_utc_z(end),
        "total_revenue_cents": total_revenue,
        "total_expenses_cents": total_expenses,
        "net_profit_cents": net_profit,
        "profit_margin": profit_margin(net_profit, total_revenue),
        "expense_distribution": dict(expense_distribution),
        "revenue_distribution": {"regular": regular_revenue, "event": event_revenue},
        "profit_trend": _weekly_trend(start, end, expenses, regular, events),
        "assets": dict(PLACEHOLDER_ASSETS),
    }


def get_transactions(start: datetime, end: datetime) -> list[dict]:
    """Expenses and both order kinds as one ledger, newest first."""
    expenses, regular, events = _load(start, end)

    rows = []
    for e in expenses:
        rows.append((e.date, {
            "id": f"expense-{e.id}",
            "date": to_utc_z(e.date),
            "description": e.description,
            "type": "expense",
            "category": e.category,
            "amount_cents": e.amount_cents,
        }))
    for o in regular:
        rows.append((o.order_date, {
            "id": f"regular-{o.id}",
            "date": to_utc_z(o.order_date),
            "description": f"Order from {o.customer_name}",
            "type": "revenue",
            "category": "regular",
            "amount_cents": o.revenue_cents,
        }))
    for o in events:
        rows.append((o.created_at, {
            "id": f"event-{o.id}",
            "date": to_utc_z(o.created_at),
            "description": f"{o.purpose} order",
            "type": "revenue",
            "category": "event",
            "amount_cents": o.revenue_cents,
        }))

    rows.sort(key=lambda r: r[0], reverse=True)
    return [row for _, row in rows]
