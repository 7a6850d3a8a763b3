# Overview: Service-layer operations for checkout; turns a cart into a stored sale.

"""
Sale Finalizer

WHY: Checkout is the one place where a cart, a discount and the tendered
amount become an immutable invoice, and where stock and customer stats move.

TOTALS:
- sub_total = sum(sell_price * quantity)
- discount has ONE source of truth, the absolute amount; a percent input is
  converted once (amount = sub_total * percent / 100)
- total_amount = sub_total - discount
- paid amount: blank -> full payment, unparsable -> 0, otherwise verbatim
- due_amount = max(0, total_amount - paid_amount)
- payment_status = PAID if due_amount <= 0 else PARTIAL
- profit = sum((sell_price - buy_price) * quantity) - discount

SIDE EFFECTS (in order, no rollback):
1. store the sale
2. decrement stock for every line
3. accrue the customer's purchase stats
4. clear the cart
If step 1 fails nothing else happens. Failures in steps 2-3 are reported
on the CheckoutResult so the caller can surface them.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable

from ..data_store import DataStore, DataStoreError
from ..models import Customer, PaymentRecord, Sale
from ..models.sales import (
    PAYMENT_METHODS,
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_PARTIAL,
    WALK_IN_CUSTOMER,
)
from ..time_utils import epoch_millis, now_iso
from ..validation import (
    NotFoundError,
    ValidationError,
    money,
    parse_amount,
    parse_lenient_amount,
    parse_quantity,
    require_choice,
)
from . import customer_service, inventory_service
from .cart_service import Cart


logger = logging.getLogger(__name__)


INVOICE_PREFIX = "INV-"
INITIAL_PAYMENT_NOTE = "Initial Payment"

# Invoice list filters
FILTER_ALL = "ALL"
FILTER_DUE = "DUE"
FILTER_PAID = "PAID"
INVOICE_FILTERS = frozenset({FILTER_ALL, FILTER_DUE, FILTER_PAID})


class SaleError(Exception):
    """Raised for checkout errors."""
    pass


@dataclass
class CheckoutResult:
    sale: Sale
    failures: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict:
        return {
            "sale": self.sale.to_dict(),
            "complete": self.complete,
            "failures": list(self.failures),
        }


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def resolve_discount(sub_total: float, amount: Any = None, percent: Any = None) -> float:
    """
    Return the absolute discount for a cart.

    Exactly one of amount / percent may be supplied; blank counts as absent.
    The result is always within 0 <= discount <= sub_total.
    """
    has_amount = not _is_blank(amount)
    has_percent = not _is_blank(percent)

    if has_amount and has_percent:
        raise ValidationError("Provide either a discount amount or a discount percent, not both")

    if has_percent:
        pct = parse_amount(percent, "discount_percent")
        if pct > 100:
            raise ValidationError("discount_percent cannot exceed 100")
        return money(sub_total * pct / 100)

    if not has_amount:
        return 0.0

    discount = parse_amount(amount, "discount")
    if discount > sub_total:
        raise ValidationError("Discount cannot exceed the cart subtotal")
    return discount


def resolve_paid_amount(paid: Any, total_amount: float) -> float:
    """Blank means 'paid in full'; anything unparsable counts as 0."""
    if _is_blank(paid):
        return money(total_amount)
    value = parse_lenient_amount(paid)
    if value < 0:
        raise ValidationError("Paid amount cannot be negative")
    return value


def make_invoice_number(millis: int | None = None) -> str:
    """INV- plus the last 6 digits of the epoch-millisecond clock."""
    stamp = str(millis if millis is not None else epoch_millis())
    return f"{INVOICE_PREFIX}{stamp[-6:]}"


def payment_status_for(due_amount: float) -> str:
    return PAYMENT_STATUS_PAID if due_amount <= 0 else PAYMENT_STATUS_PARTIAL


def finalize_sale(
    cart: Cart,
    *,
    payment_method: str,
    discount: float = 0.0,
    paid_amount: Any = None,
    customer: Customer | None = None,
    invoice_no: str | None = None,
    created_at: str | None = None,
) -> Sale:
    """
    Build the Sale record for a cart. Pure: nothing is stored.

    Raises:
        SaleError: if the cart is empty
        ValidationError: for an unknown payment method or out-of-range input
    """
    if not len(cart):
        raise SaleError("Cart is empty")
    require_choice(payment_method, PAYMENT_METHODS, "payment method")

    sub_total = cart.subtotal()
    if discount < 0 or discount > sub_total:
        raise ValidationError("Discount must be between 0 and the cart subtotal")

    total_amount = money(max(0.0, sub_total - discount))
    paid = resolve_paid_amount(paid_amount, total_amount)
    due_amount = money(max(0.0, total_amount - paid))
    profit = money(sum(item.line_profit for item in cart.items) - discount)
    created_at = created_at or now_iso()

    payments = []
    if paid > 0:
        payments.append(PaymentRecord(
            id=str(uuid.uuid4()),
            amount=paid,
            method=payment_method,
            date=created_at,
            note=INITIAL_PAYMENT_NOTE,
        ))

    return Sale(
        id=str(uuid.uuid4()),
        invoice_no=invoice_no or make_invoice_number(),
        items=cart.items,
        sub_total=sub_total,
        discount=money(discount),
        total_amount=total_amount,
        paid_amount=paid,
        due_amount=due_amount,
        profit=profit,
        payment_method=payment_method,
        payment_status=payment_status_for(due_amount),
        created_at=created_at,
        payments=payments,
        customer_id=customer.id if customer else None,
        customer_name=customer.name if customer else WALK_IN_CUSTOMER,
    )


def build_cart(store: DataStore, lines: Iterable[dict]) -> Cart:
    """
    Build a cart from [{"productId": ..., "quantity": ...}, ...].

    Repeated product ids merge into one line.
    """
    lines = list(lines or [])
    if not lines:
        raise SaleError("Cart is empty")

    parsed = []
    for line in lines:
        if not isinstance(line, dict) or not line.get("productId"):
            raise ValidationError("Each cart line needs a productId")
        parsed.append((line["productId"], parse_quantity(line.get("quantity", 1))))

    products = inventory_service.require_products(store, [product_id for product_id, _ in parsed])
    cart = Cart()
    for product_id, quantity in parsed:
        cart.add(products[product_id], quantity)
    return cart


def quote(cart: Cart, *, discount_amount: Any = None, discount_percent: Any = None, paid_amount: Any = None) -> dict:
    """Totals preview for the billing panel; nothing is stored."""
    sub_total = cart.subtotal()
    discount = resolve_discount(sub_total, discount_amount, discount_percent)
    total_amount = money(max(0.0, sub_total - discount))
    paid = resolve_paid_amount(paid_amount, total_amount)
    due_amount = money(max(0.0, total_amount - paid))
    return {
        "subTotal": sub_total,
        "discount": discount,
        "discountPercent": money(discount / sub_total * 100) if sub_total else 0.0,
        "totalAmount": total_amount,
        "paidAmount": paid,
        "dueAmount": due_amount,
        "paymentStatus": payment_status_for(due_amount),
        "profit": money(sum(item.line_profit for item in cart.items) - discount),
        "itemCount": cart.item_count(),
    }


def checkout(
    store: DataStore,
    cart: Cart,
    *,
    payment_method: str,
    discount_amount: Any = None,
    discount_percent: Any = None,
    paid_amount: Any = None,
    customer_id: str | None = None,
    loyalty_point_unit: int = 100,
) -> CheckoutResult:
    """
    Finalize and store a sale, then apply its side effects.

    Raises:
        SaleError / ValidationError: for bad input (nothing stored)
        DataStoreError: if the sale itself could not be stored
    """
    customer = None
    if customer_id:
        row = store.customers.get(customer_id)
        if not row:
            raise ValidationError(f"Customer {customer_id} not found")
        customer = Customer.from_dict(row)

    discount = resolve_discount(cart.subtotal(), discount_amount, discount_percent)
    sale = finalize_sale(
        cart,
        payment_method=payment_method,
        discount=discount,
        paid_amount=paid_amount,
        customer=customer,
    )

    stored = store.sales.create(sale.to_dict()).unwrap()
    sale = Sale.from_dict(stored)
    result = CheckoutResult(sale=sale)

    for item in sale.items:
        try:
            inventory_service.decrease_stock(store, item.product.id, item.quantity)
        except DataStoreError as exc:
            logger.warning("Sale %s: stock decrement failed for %s: %s", sale.invoice_no, item.product.id, exc)
            result.failures.append(f"Stock not updated for {item.product.name}")

    if customer:
        try:
            customer_service.update_customer_purchase(
                store, customer.id, sale.sub_total, loyalty_point_unit=loyalty_point_unit
            )
        except DataStoreError as exc:
            logger.warning("Sale %s: customer stats update failed: %s", sale.invoice_no, exc)
            result.failures.append(f"Purchase stats not updated for {customer.name}")

    cart.clear()
    return result


def get_sale(store: DataStore, sale_id: str) -> Sale:
    row = store.sales.fetch(sale_id).unwrap()
    if not row:
        raise NotFoundError(f"Sale {sale_id} not found")
    return Sale.from_dict(row)


def list_sales(store: DataStore, status_filter: str = FILTER_ALL, search: str | None = None) -> list[Sale]:
    """Invoice list: ALL, DUE (something owed) or PAID (nothing owed), newest first."""
    require_choice(status_filter, INVOICE_FILTERS, "filter")
    sales = [Sale.from_dict(row) for row in store.sales.all()]

    if search:
        needle = search.lower()
        sales = [
            s for s in sales
            if needle in (s.invoice_no or "").lower() or needle in (s.customer_name or "").lower()
        ]
    if status_filter == FILTER_DUE:
        sales = [s for s in sales if s.due_amount > 0]
    elif status_filter == FILTER_PAID:
        sales = [s for s in sales if s.due_amount == 0]

    return sorted(sales, key=lambda s: s.created_at, reverse=True)
