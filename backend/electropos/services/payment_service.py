# Overview: Service-layer operations for collecting dues on stored sales.

"""
Payment Ledger (sales)

WHY: A sale can leave the counter partly paid. Later payments are appended
to the sale's payment list and the totals are recomputed from that list.

DESIGN PRINCIPLES:
- Payments are append-only; existing PaymentRecords are never edited
- paid_amount = sum(payments), due_amount = max(0, total - paid)
- Over-payment is refused at the call site (amount must be <= current due)
- Status moves to PAID once nothing is due
"""

from __future__ import annotations

import uuid
from dataclasses import replace

from ..data_store import DataStore
from ..models import PaymentRecord, Sale
from ..models.sales import METHOD_CASH, PAYMENT_METHODS
from ..time_utils import now_iso
from ..validation import money, parse_amount, require_choice
from .sales_service import get_sale, payment_status_for


PARTIAL_PAYMENT_NOTE = "Partial Payment"
FULL_SETTLEMENT_NOTE = "Full Settlement"


class PaymentError(Exception):
    """Raised for payment operation errors."""
    pass


# =============================================================================
# VALIDATION
# =============================================================================

def validate_payment_amount(sale: Sale, amount) -> float:
    """Amount must be a positive number no larger than what is still due."""
    value = parse_amount(amount, "amount", allow_zero=False)
    if value > money(sale.due_amount):
        raise PaymentError(
            f"Payment of {value:.2f} exceeds the amount due ({sale.due_amount:.2f}) on {sale.invoice_no}"
        )
    return value


# =============================================================================
# PURE LEDGER STEP
# =============================================================================

def apply_payment(sale: Sale, payment: PaymentRecord) -> Sale:
    """Return a copy of the sale with the payment appended and totals recomputed."""
    payments = list(sale.payments) + [payment]
    paid_amount = money(sum(p.amount for p in payments))
    due_amount = money(max(0.0, sale.total_amount - paid_amount))
    return replace(
        sale,
        payments=payments,
        paid_amount=paid_amount,
        due_amount=due_amount,
        payment_status=payment_status_for(due_amount),
    )


# =============================================================================
# PERSISTED OPERATIONS
# =============================================================================

def add_payment(
    store: DataStore,
    sale_id: str,
    amount,
    method: str = METHOD_CASH,
    note: str | None = None,
) -> Sale:
    """
    Collect a later payment against a stored sale.

    Raises:
        NotFoundError: unknown sale
        ValidationError / PaymentError: bad amount or method
        DataStoreError: the write did not go through
    """
    sale = get_sale(store, sale_id)
    require_choice(method, PAYMENT_METHODS, "payment method")
    value = validate_payment_amount(sale, amount)

    payment = PaymentRecord(
        id=str(uuid.uuid4()),
        amount=value,
        method=method,
        date=now_iso(),
        note=note or PARTIAL_PAYMENT_NOTE,
    )
    updated = apply_payment(sale, payment)
    row = store.sales.update(sale.id, {
        "payments": [p.to_dict() for p in updated.payments],
        "paidAmount": updated.paid_amount,
        "dueAmount": updated.due_amount,
        "paymentStatus": updated.payment_status,
    }).unwrap()
    return Sale.from_dict(row)


def settle_sale(store: DataStore, sale_id: str, method: str = METHOD_CASH) -> Sale:
    """Pay off the whole remaining due in one payment."""
    sale = get_sale(store, sale_id)
    if sale.due_amount <= 0:
        raise PaymentError(f"Nothing is due on {sale.invoice_no}")
    return add_payment(store, sale_id, sale.due_amount, method=method, note=FULL_SETTLEMENT_NOTE)


def total_receivable(store: DataStore) -> float:
    """What customers still owe across every sale."""
    return money(sum(float(row.get("dueAmount") or 0) for row in store.sales.all()))
