# Overview: Service-layer operations for shop expenses and the simple profit and loss view.

from __future__ import annotations

import uuid

from ..data_store import DataStore
from ..models import Expense
from ..models.accounting import DEFAULT_EXPENSE_CATEGORY, EXPENSE_CATEGORIES
from ..time_utils import now_iso
from ..validation import NotFoundError, ValidationError, money, parse_amount, require_choice


def list_expenses(store: DataStore) -> list[Expense]:
    expenses = [Expense.from_dict(row) for row in store.expenses.all()]
    return sorted(expenses, key=lambda e: e.date, reverse=True)


def add_expense(store: DataStore, payload: dict) -> Expense:
    """Title and a positive amount are required; category defaults to OTHER."""
    if not isinstance(payload, dict):
        raise ValidationError("JSON object body required")

    title = (payload.get("title") or "").strip()
    if not title:
        raise ValidationError("title is required")
    amount = parse_amount(payload.get("amount"), "amount", allow_zero=False)
    category = require_choice(
        payload.get("category") or DEFAULT_EXPENSE_CATEGORY, EXPENSE_CATEGORIES, "category"
    )

    expense = Expense(
        id=str(uuid.uuid4()),
        title=title,
        amount=amount,
        category=category,
        date=payload.get("date") or now_iso(),
        notes=(payload.get("notes") or "").strip(),
    )
    created = store.expenses.create(expense.to_dict()).unwrap()
    return Expense.from_dict(created)


def delete_expense(store: DataStore, expense_id: str) -> None:
    if not store.expenses.get(expense_id):
        raise NotFoundError(f"Expense {expense_id} not found")
    store.expenses.delete(expense_id).unwrap()


def totals_by_category(store: DataStore) -> dict[str, float]:
    totals: dict[str, float] = {}
    for expense in list_expenses(store):
        totals[expense.category] = money(totals.get(expense.category, 0.0) + expense.amount)
    return totals


def accounting_summary(store: DataStore) -> dict:
    # Simplified P&L: sales revenue minus recorded expenses
    total_sales = money(sum(float(row.get("totalAmount") or 0) for row in store.sales.all()))
    total_expenses = money(sum(e.amount for e in list_expenses(store)))
    return {
        "totalSales": total_sales,
        "totalExpenses": total_expenses,
        "netProfit": money(total_sales - total_expenses),
        "byCategory": totals_by_category(store),
    }
