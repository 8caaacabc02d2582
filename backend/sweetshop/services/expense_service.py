# Overview: Service-layer operations for expenses.

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select

from ..extensions import db
from ..models import Expense
from ..validation import NotFoundError


class ExpenseNotFoundError(NotFoundError):
    def __init__(self, expense_id: int):
        super().__init__(f"Expense {expense_id} not found")
        self.expense_id = expense_id


def _get(expense_id: int) -> Expense:
    expense = db.session.get(Expense, expense_id)
    if expense is None:
        raise ExpenseNotFoundError(expense_id)
    return expense


def list_expenses(
    *,
    category: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[dict]:
    stmt = select(Expense)
    if category:
        stmt = stmt.where(Expense.category == category)
    if start is not None:
        stmt = stmt.where(Expense.date >= start)
    if end is not None:
        stmt = stmt.where(Expense.date <= end)
    stmt = stmt.order_by(Expense.date.desc(), Expense.id.desc())
    return [e.to_dict() for e in db.session.execute(stmt).scalars().all()]


def create_expense(patch: dict) -> dict:
    expense = Expense(**patch)
    db.session.add(expense)
    db.session.commit()
    return expense.to_dict()


def update_expense(expense_id: int, patch: dict) -> dict:
    expense = _get(expense_id)
    for k, v in patch.items():
        setattr(expense, k, v)
    db.session.commit()
    return expense.to_dict()


def delete_expense(expense_id: int) -> None:
    db.session.delete(_get(expense_id))
    db.session.commit()
