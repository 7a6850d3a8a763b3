# Overview: Service-layer operations for reporting; range filters, period buckets and dashboard stats.

"""
Reporting Aggregation

Pure functions over the cached collections, recomputed on every request.
All dates are compared in UTC.

RANGES:
- TODAY   same calendar day as now
- WEEK    the last 7 days (created at or after now - 7 days)
- MONTH   same calendar month and year
- YEAR    same calendar year
- CUSTOM  start-of-day(start) .. end-of-day(end), both inclusive

BUCKETS (revenue, profit, itemCount):
- TODAY          one bucket named "Today"
- WEEK, CUSTOM   one per day with sales ("Mar 04"); WEEK shows the last 7
                 empty days when there are no sales at all
- MONTH          one per day with sales ("04")
- YEAR           always 12 monthly buckets ("Jan" .. "Dec")
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable

from ..data_store import DataStore
from ..models import PurchaseOrder, Sale, SupplierTransaction
from ..models.suppliers import TX_PAYMENT
from ..time_utils import parse_iso_datetime, utcnow
from ..validation import ValidationError, money, require_choice
from . import inventory_service
from .supplier_service import pending_arrivals


RANGE_TODAY = "TODAY"
RANGE_WEEK = "WEEK"
RANGE_MONTH = "MONTH"
RANGE_YEAR = "YEAR"
RANGE_CUSTOM = "CUSTOM"
REPORT_RANGES = frozenset({RANGE_TODAY, RANGE_WEEK, RANGE_MONTH, RANGE_YEAR, RANGE_CUSTOM})

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _parse_day(value: str | None, field_name: str) -> date:
    if not value:
        raise ValidationError(f"{field_name} is required for a CUSTOM range")
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date")


def range_predicate(
    range_type: str,
    now: datetime | None = None,
    start: str | None = None,
    end: str | None = None,
) -> Callable[[datetime], bool]:
    """Return a predicate telling whether a timestamp falls inside the range."""
    require_choice(range_type, REPORT_RANGES, "range")
    now = now or utcnow()

    if range_type == RANGE_TODAY:
        return lambda dt: dt.date() == now.date()
    if range_type == RANGE_WEEK:
        cutoff = now - timedelta(days=7)
        return lambda dt: dt >= cutoff
    if range_type == RANGE_MONTH:
        return lambda dt: (dt.year, dt.month) == (now.year, now.month)
    if range_type == RANGE_YEAR:
        return lambda dt: dt.year == now.year

    start_day = _parse_day(start, "start")
    end_day = _parse_day(end, "end")
    if end_day < start_day:
        raise ValidationError("end must not be before start")
    lower = datetime.combine(start_day, time.min)
    upper = datetime.combine(end_day, time.max)
    return lambda dt: lower <= dt <= upper


def _stamp(value: str | None) -> datetime | None:
    try:
        return parse_iso_datetime(value)
    except ValueError:
        return None


def filter_sales(sales: Iterable[Sale], predicate: Callable[[datetime], bool]) -> list[Sale]:
    matched = []
    for sale in sales:
        dt = _stamp(sale.created_at)
        if dt is not None and predicate(dt):
            matched.append(sale)
    return sorted(matched, key=lambda s: s.created_at)


def _empty_bucket(name: str) -> dict:
    return {"name": name, "revenue": 0.0, "profit": 0.0, "itemCount": 0}


def _add_to_bucket(bucket: dict, sale: Sale) -> None:
    bucket["revenue"] = money(bucket["revenue"] + sale.total_amount)
    bucket["profit"] = money(bucket["profit"] + sale.profit)
    bucket["itemCount"] += sale.item_count


def period_buckets(sales: list[Sale], range_type: str, now: datetime | None = None) -> list[dict]:
    """Group already-filtered sales into chart buckets for the range."""
    now = now or utcnow()

    if range_type == RANGE_TODAY:
        bucket = _empty_bucket("Today")
        for sale in sales:
            _add_to_bucket(bucket, sale)
        return [bucket]

    if range_type == RANGE_YEAR:
        buckets = [_empty_bucket(label) for label in MONTH_LABELS]
        for sale in sales:
            _add_to_bucket(buckets[_stamp(sale.created_at).month - 1], sale)
        return buckets

    label_format = "%d" if range_type == RANGE_MONTH else "%b %d"
    buckets: dict[str, dict] = {}
    for sale in sales:
        label = _stamp(sale.created_at).strftime(label_format)
        if label not in buckets:
            buckets[label] = _empty_bucket(label)
        _add_to_bucket(buckets[label], sale)

    if not buckets and range_type == RANGE_WEEK:
        return [
            _empty_bucket((now - timedelta(days=offset)).strftime(label_format))
            for offset in range(6, -1, -1)
        ]
    return list(buckets.values())


def payment_method_totals(sales: Iterable[Sale]) -> dict[str, float]:
    totals: dict[str, float] = {}
    for sale in sales:
        totals[sale.payment_method] = money(totals.get(sale.payment_method, 0.0) + sale.total_amount)
    return totals


def sales_report(
    store: DataStore,
    range_type: str = RANGE_WEEK,
    *,
    start: str | None = None,
    end: str | None = None,
    now: datetime | None = None,
) -> dict:
    now = now or utcnow()
    predicate = range_predicate(range_type, now, start, end)

    all_sales = [Sale.from_dict(row) for row in store.sales.all()]
    in_range = filter_sales(all_sales, predicate)

    supplier_log = []
    for row in store.transactions.all():
        dt = _stamp(row.get("date"))
        if dt is not None and predicate(dt):
            supplier_log.append(SupplierTransaction.from_dict(row))
    supplier_log.sort(key=lambda t: t.date, reverse=True)
    supplier_debit = sum(t.amount for t in supplier_log if t.type == TX_PAYMENT)

    return {
        "range": range_type,
        "buckets": period_buckets(in_range, range_type, now),
        "paymentMethods": payment_method_totals(in_range),
        "metrics": {
            "totalRevenue": money(sum(s.total_amount for s in in_range)),
            "totalProfit": money(sum(s.profit for s in in_range)),
            # Outstanding balances are global, not range bound
            "customersUnpaid": money(sum(s.due_amount for s in all_sales)),
            "suppliersUnpaid": money(sum(
                float(row.get("dueAmount") or 0) for row in store.purchase_orders.all()
            )),
            "supplierDebit": money(supplier_debit),
        },
        "sales": [s.to_dict() for s in in_range],
        "supplierTransactions": [t.to_dict() for t in supplier_log],
    }


# =============================================================================
# DASHBOARD
# =============================================================================

def _week_start(day: date) -> date:
    # Weeks start on Sunday
    return day - timedelta(days=(day.weekday() + 1) % 7)


def period_stats(sales: Iterable[Sale], predicate: Callable[[datetime], bool]) -> dict:
    matched = filter_sales(sales, predicate)
    return {
        "revenue": money(sum(s.total_amount for s in matched)),
        "profit": money(sum(s.profit for s in matched)),
        "count": len(matched),
        "productsSoldCount": sum(s.item_count for s in matched),
    }


def dashboard(store: DataStore, low_stock_threshold: int = 5, now: datetime | None = None) -> dict:
    now = now or utcnow()
    today = now.date()
    week_start = _week_start(today)

    sales = [Sale.from_dict(row) for row in store.sales.all()]
    low_stock = inventory_service.low_stock_products(store, low_stock_threshold)
    arrivals: list[PurchaseOrder] = pending_arrivals(store)
    recent = sorted(sales, key=lambda s: s.created_at, reverse=True)[:10]

    return {
        "today": period_stats(sales, lambda dt: dt.date() == today),
        "week": period_stats(sales, lambda dt: week_start <= dt.date() < week_start + timedelta(days=7)),
        "month": period_stats(sales, lambda dt: (dt.year, dt.month) == (now.year, now.month)),
        "year": period_stats(sales, lambda dt: dt.year == now.year),
        "inventoryWorth": inventory_service.inventory_worth(store),
        "lowStock": [p.to_dict() for p in low_stock],
        "pendingArrivals": [o.to_dict() for o in arrivals],
        "recentInvoices": [s.to_dict() for s in recent],
    }
