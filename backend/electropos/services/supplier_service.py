# Overview: Service-layer operations for suppliers; purchase orders and the supplier ledger.

"""
Supplier Ledger Service

WHY: The shop buys on credit. Every bill and every payment to a supplier is
written to an append-only transaction log, and the amount owed is always
recomputed from that log rather than stored.

LEDGER:
- BILL increases what the shop owes; PAYMENT, SETTLEMENT and
  DISCOUNT_CREDIT decrease it (see BALANCE_SIGN)
- balance_after on each entry is a snapshot taken at write time
- supplier_balance() never trusts those snapshots; it sums the log

PURCHASE ORDERS:
- Creating an order writes the order, then a BILL, then (when something was
  paid up front) a PAYMENT; both ledger entries are computed from the
  balance captured before the first write
- Inventory is untouched until the order is received (receive_service)
- Writes are not transactional: the first failed write aborts the rest and
  the earlier writes stay applied

STATUS:
- PARTIAL   something still due (also an order opened with nothing paid)
- SETTLED   paid in full
- RECEIVED  goods arrived (set by receive_service)
All status changes go through transition_purchase_order(). PENDING is
accepted on stored orders but never assigned here.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Iterable

from ..data_store import DataStore
from ..models import (
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderPayment,
    Supplier,
    SupplierTransaction,
)
from ..models.suppliers import (
    BALANCE_SIGN,
    DEFAULT_PAYMENT_TERMS,
    PAYMENT_TRANSACTION_TYPES,
    PO_STATUS_PARTIAL,
    PO_STATUS_SETTLED,
    PO_STATUSES,
    SUPPLIER_METHOD_CASH,
    SUPPLIER_METHODS,
    TX_BILL,
    TX_DISCOUNT_CREDIT,
    TX_PAYMENT,
    TX_SETTLEMENT,
)
from ..time_utils import now_iso, utcnow
from ..validation import (
    NotFoundError,
    PayloadPolicy,
    ValidationError,
    apply_policy,
    money,
    parse_amount,
    parse_quantity,
    require_choice,
)
from . import inventory_service


logger = logging.getLogger(__name__)


RESTOCK_BILL_PREFIX = "DRC-"
NEW_PRODUCT_BILL_PREFIX = "NEW-"

PAYMENT_LABELS = {
    TX_PAYMENT: "Partial Payment",
    TX_SETTLEMENT: "Settlement",
    TX_DISCOUNT_CREDIT: "Discount Credit",
}

# Order ledger filters
LEDGER_FILTER_ALL = "ALL"
LEDGER_FILTER_SETTLED = "SETTLED"
LEDGER_FILTER_PENDING = "PENDING"
LEDGER_FILTERS = frozenset({LEDGER_FILTER_ALL, LEDGER_FILTER_SETTLED, LEDGER_FILTER_PENDING})


SUPPLIER_POLICY = PayloadPolicy(
    writable_fields=frozenset({
        "name", "contactPerson", "phone", "email", "VATIn", "address",
        "category", "website", "paymentTerms", "notes",
    }),
    required_on_create=frozenset({"name", "contactPerson", "phone"}),
)


class SupplierLedgerError(Exception):
    """Raised for purchase order and supplier payment errors."""
    pass


# =============================================================================
# SUPPLIERS
# =============================================================================

def list_suppliers(store: DataStore, search: str | None = None) -> list[Supplier]:
    suppliers = [Supplier.from_dict(row) for row in store.suppliers.all()]
    if search:
        needle = search.lower()
        suppliers = [
            s for s in suppliers
            if needle in s.name.lower() or needle in s.category.lower() or needle in s.id.lower()
        ]
    return suppliers


def get_supplier(store: DataStore, supplier_id: str) -> Supplier:
    row = store.suppliers.get(supplier_id)
    if not row:
        raise NotFoundError(f"Supplier {supplier_id} not found")
    return Supplier.from_dict(row)


def create_supplier(store: DataStore, payload: dict) -> Supplier:
    data = apply_policy(SUPPLIER_POLICY, payload, creating=True)
    supplier = Supplier.from_dict({
        "paymentTerms": DEFAULT_PAYMENT_TERMS,
        **data,
        "id": str(uuid.uuid4()),
        "createdAt": now_iso(),
    })
    created = store.suppliers.create(supplier.to_dict()).unwrap()
    return Supplier.from_dict(created)


def update_supplier(store: DataStore, supplier_id: str, payload: dict) -> Supplier:
    get_supplier(store, supplier_id)
    changes = apply_policy(SUPPLIER_POLICY, payload, creating=False)
    updated = store.suppliers.update(supplier_id, changes).unwrap()
    return Supplier.from_dict(updated)


def delete_supplier(store: DataStore, supplier_id: str) -> None:
    """Orders and ledger entries of the supplier are kept."""
    get_supplier(store, supplier_id)
    store.suppliers.delete(supplier_id).unwrap()


# =============================================================================
# LEDGER
# =============================================================================

def list_transactions(store: DataStore, supplier_id: str | None = None) -> list[SupplierTransaction]:
    rows = store.transactions.filter(supplierId=supplier_id) if supplier_id else store.transactions.all()
    entries = [SupplierTransaction.from_dict(row) for row in rows]
    return sorted(entries, key=lambda t: t.date, reverse=True)


def _sum_ledger(rows: Iterable[dict], supplier_id: str) -> float:
    return money(sum(
        BALANCE_SIGN.get(row.get("type"), -1) * float(row.get("amount") or 0)
        for row in rows
        if row.get("supplierId") == supplier_id
    ))


def supplier_balance(store: DataStore, supplier_id: str) -> float:
    """What the shop owes this supplier, summed from the transaction log as the backend holds it now."""
    store.refresh(("transactions",))
    return _sum_ledger(store.transactions.all(), supplier_id)


def supplier_balances(store: DataStore) -> dict[str, float]:
    store.refresh(("transactions",))
    rows = store.transactions.all()
    return {s.id: _sum_ledger(rows, s.id) for s in list_suppliers(store)}


def _append_transaction(
    store: DataStore,
    *,
    supplier_id: str,
    tx_type: str,
    amount: float,
    description: str,
    tx_date: str,
    balance_after: float,
    reference_id: str | None = None,
    method: str | None = None,
    tx_id: str | None = None,
) -> SupplierTransaction:
    entry = SupplierTransaction(
        id=tx_id or str(uuid.uuid4()),
        supplier_id=supplier_id,
        type=tx_type,
        amount=money(amount),
        description=description,
        date=tx_date,
        balance_after=money(balance_after),
        reference_id=reference_id,
        method=method,
    )
    created = store.transactions.create(entry.to_dict()).unwrap()
    return SupplierTransaction.from_dict(created)


# =============================================================================
# PURCHASE ORDERS
# =============================================================================

def get_purchase_order(store: DataStore, order_id: str) -> PurchaseOrder:
    row = store.purchase_orders.fetch(order_id).unwrap()
    if not row:
        raise NotFoundError(f"Purchase order {order_id} not found")
    return PurchaseOrder.from_dict(row)


def status_for_payment(total_amount: float, paid_amount: float) -> str:
    if paid_amount >= total_amount:
        return PO_STATUS_SETTLED
    return PO_STATUS_PARTIAL


def transition_purchase_order(
    store: DataStore,
    order: PurchaseOrder,
    target: str,
    changes: dict | None = None,
) -> PurchaseOrder:
    """
    The only way an order's status changes.

    Any valid status may follow any other; the target is validated against
    PO_STATUSES and written together with the accompanying field changes.
    """
    require_choice(target, PO_STATUSES, "purchase order status")
    if order.status != target:
        logger.info("Purchase order %s: %s -> %s", order.bill_number, order.status, target)
    row = store.purchase_orders.update(order.id, {**(changes or {}), "status": target}).unwrap()
    return PurchaseOrder.from_dict(row)


def _default_bill_number(prefix: str) -> str:
    return f"{prefix}{uuid.uuid4().hex[:6].upper()}"


def _bill_date(value) -> str:
    if value in (None, ""):
        return utcnow().date().isoformat()
    try:
        return date.fromisoformat(str(value)[:10]).isoformat()
    except ValueError:
        raise ValidationError("billDate must be a YYYY-MM-DD date")


def _open_order(
    store: DataStore,
    supplier: Supplier,
    lines: list[PurchaseOrderLine],
    *,
    bill_number: str,
    bill_date: str,
    arrival_date: str | None,
    paid_amount,
    notes: str,
    bill_description: str,
    initial_payment_note: str,
    payment_description: str,
) -> PurchaseOrder:
    total_amount = money(sum(line.total for line in lines))
    paid = parse_amount(paid_amount if paid_amount not in (None, "") else 0, "paidAmount")
    if paid > total_amount:
        raise ValidationError("paidAmount cannot exceed the order total")

    prior_balance = supplier_balance(store, supplier.id)
    created_at = now_iso()

    payments = []
    if paid > 0:
        payments.append(PurchaseOrderPayment(
            id=str(uuid.uuid4()),
            amount=paid,
            date=created_at,
            method=SUPPLIER_METHOD_CASH,
            description=initial_payment_note,
        ))

    order = PurchaseOrder(
        id=str(uuid.uuid4()),
        supplier_id=supplier.id,
        supplier_name=supplier.name,
        bill_number=bill_number,
        bill_date=bill_date,
        items=lines,
        total_amount=total_amount,
        paid_amount=paid,
        due_amount=money(total_amount - paid),
        status=status_for_payment(total_amount, paid),
        is_received=False,
        arrival_date=arrival_date or bill_date,
        created_at=created_at,
        payments=payments,
        notes=notes or "",
    )
    stored = PurchaseOrder.from_dict(store.purchase_orders.create(order.to_dict()).unwrap())

    _append_transaction(
        store,
        supplier_id=supplier.id,
        tx_type=TX_BILL,
        amount=total_amount,
        description=bill_description,
        tx_date=bill_date,
        balance_after=prior_balance + total_amount,
        reference_id=stored.id,
    )
    if paid > 0:
        _append_transaction(
            store,
            supplier_id=supplier.id,
            tx_type=TX_PAYMENT,
            amount=paid,
            description=payment_description,
            tx_date=bill_date,
            balance_after=prior_balance + total_amount - paid,
            reference_id=stored.id,
            method=SUPPLIER_METHOD_CASH,
        )
    return stored


def create_restock_order(
    store: DataStore,
    supplier_id: str,
    items: Iterable[dict],
    *,
    bill_number: str | None = None,
    bill_date=None,
    arrival_date: str | None = None,
    paid_amount=0,
    notes: str = "",
) -> PurchaseOrder:
    """
    Order more of existing products.

    items: [{"productId": ..., "quantity": ..., "buyPrice": ...}]; buyPrice
    defaults to the product's current buy price.
    """
    supplier = get_supplier(store, supplier_id)
    items = list(items or [])
    if not items:
        raise SupplierLedgerError("A restock order needs at least one item")

    for item in items:
        if not isinstance(item, dict) or not item.get("productId"):
            raise ValidationError("Each restock item needs a productId")
    products = inventory_service.require_products(store, [item["productId"] for item in items])

    lines = []
    for item in items:
        product = products[item["productId"]]
        quantity = parse_quantity(item.get("quantity"))
        buy_price = (
            parse_amount(item["buyPrice"], "buyPrice")
            if item.get("buyPrice") not in (None, "")
            else product.buy_price
        )
        lines.append(PurchaseOrderLine(
            product_id=product.id,
            name=product.name,
            quantity=quantity,
            buy_price=buy_price,
            total=money(quantity * buy_price),
        ))

    bill_number = bill_number or _default_bill_number(RESTOCK_BILL_PREFIX)
    return _open_order(
        store,
        supplier,
        lines,
        bill_number=bill_number,
        bill_date=_bill_date(bill_date),
        arrival_date=arrival_date,
        paid_amount=paid_amount,
        notes=notes,
        bill_description=f"Purchase Bill #{bill_number}",
        initial_payment_note="Initial Restock Payment",
        payment_description=f"Payment for Bill #{bill_number}",
    )


def create_new_product_order(
    store: DataStore,
    supplier_id: str,
    product_payload: dict,
    quantity,
    *,
    bill_number: str | None = None,
    bill_date=None,
    arrival_date: str | None = None,
    paid_amount=0,
    notes: str = "",
) -> PurchaseOrder:
    """
    Register a product the shop has never stocked and order it.

    The product is created first with stock 0; its stock arrives with the
    order receipt.
    """
    supplier = get_supplier(store, supplier_id)
    quantity = parse_quantity(quantity)

    payload = {**(product_payload or {}), "stock": 0, "supplierId": supplier.id}
    product = inventory_service.create_product(store, payload)

    line = PurchaseOrderLine(
        product_id=product.id,
        name=product.name,
        quantity=quantity,
        buy_price=product.buy_price,
        total=money(quantity * product.buy_price),
    )
    return _open_order(
        store,
        supplier,
        [line],
        bill_number=bill_number or _default_bill_number(NEW_PRODUCT_BILL_PREFIX),
        bill_date=_bill_date(bill_date),
        arrival_date=arrival_date,
        paid_amount=paid_amount,
        notes=notes,
        bill_description=f"New Product Order - {product.name}",
        initial_payment_note="Initial Payment for New Product Order",
        payment_description="Payment for New Product Order",
    )


def record_supplier_payment(
    store: DataStore,
    supplier_id: str,
    amount,
    *,
    tx_type: str = TX_PAYMENT,
    method: str = SUPPLIER_METHOD_CASH,
    order_id: str | None = None,
    description: str | None = None,
) -> tuple[SupplierTransaction, PurchaseOrder | None]:
    """
    Pay a supplier, either in general or against one order.

    Against an order the amount may not exceed what is still due on it,
    and the order's payments, paid/due figures and status are updated.

    Returns (ledger entry, updated order or None).
    """
    supplier = get_supplier(store, supplier_id)
    require_choice(tx_type, PAYMENT_TRANSACTION_TYPES, "transaction type")
    require_choice(method, SUPPLIER_METHODS, "payment method")
    value = parse_amount(amount, "amount", allow_zero=False)

    order = None
    if order_id:
        order = get_purchase_order(store, order_id)
        if order.supplier_id != supplier.id:
            raise SupplierLedgerError(f"Bill #{order.bill_number} does not belong to {supplier.name}")
        if value > money(order.due_amount):
            raise SupplierLedgerError(
                f"Payment of {value:.2f} exceeds the amount due ({order.due_amount:.2f}) on Bill #{order.bill_number}"
            )

    label = PAYMENT_LABELS[tx_type]
    if description is None or not description.strip():
        target = f"for Bill #{order.bill_number}" if order else "(General)"
        ledger_description = f"{label} {target}"
        payment_description = label
    else:
        ledger_description = payment_description = description.strip()

    prior_balance = supplier_balance(store, supplier.id)
    entry = _append_transaction(
        store,
        supplier_id=supplier.id,
        tx_type=tx_type,
        amount=value,
        description=ledger_description,
        tx_date=now_iso(),
        balance_after=prior_balance - value,
        reference_id=order.id if order else None,
        method=method,
    )

    if order is None:
        return entry, None

    paid = money(order.paid_amount + value)
    payments = list(order.payments) + [PurchaseOrderPayment(
        id=entry.id,
        amount=value,
        date=entry.date,
        method=method,
        description=payment_description,
    )]
    updated = transition_purchase_order(
        store,
        order,
        status_for_payment(order.total_amount, paid),
        {
            "paidAmount": paid,
            "dueAmount": money(order.total_amount - paid),
            "payments": [p.to_dict() for p in payments],
        },
    )
    return entry, updated


def settle_purchase_order(
    store: DataStore,
    order_id: str,
    method: str = SUPPLIER_METHOD_CASH,
) -> tuple[SupplierTransaction, PurchaseOrder]:
    """One SETTLEMENT for everything still due on the order."""
    order = get_purchase_order(store, order_id)
    if order.due_amount <= 0:
        raise SupplierLedgerError(f"Bill #{order.bill_number} is already settled")
    entry, updated = record_supplier_payment(
        store,
        order.supplier_id,
        order.due_amount,
        tx_type=TX_SETTLEMENT,
        method=method,
        order_id=order.id,
    )
    return entry, updated


def _line_names(order: PurchaseOrder) -> Iterable[str]:
    return (line.name.lower() for line in order.items)


def list_purchase_orders(
    store: DataStore,
    supplier_id: str | None = None,
    *,
    search: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    status_filter: str = LEDGER_FILTER_ALL,
) -> list[PurchaseOrder]:
    """
    Order ledger, newest first.

    search matches the bill number or any item name; the date window is
    inclusive and compared on the creation date; SETTLED means nothing is
    due, PENDING means something is.
    """
    require_choice(status_filter, LEDGER_FILTERS, "filter")
    rows = store.purchase_orders.filter(supplierId=supplier_id) if supplier_id else store.purchase_orders.all()
    orders = [PurchaseOrder.from_dict(row) for row in rows]

    if search:
        needle = search.lower()
        orders = [
            o for o in orders
            if needle in o.bill_number.lower() or any(needle in name for name in _line_names(o))
        ]
    if date_from:
        orders = [o for o in orders if o.created_at[:10] >= date_from[:10]]
    if date_to:
        orders = [o for o in orders if o.created_at[:10] <= date_to[:10]]
    if status_filter == LEDGER_FILTER_SETTLED:
        orders = [o for o in orders if o.due_amount <= 0]
    elif status_filter == LEDGER_FILTER_PENDING:
        orders = [o for o in orders if o.due_amount > 0]

    return sorted(orders, key=lambda o: o.created_at, reverse=True)


def pending_arrivals(store: DataStore) -> list[PurchaseOrder]:
    """Orders whose goods have not arrived, soonest expected first."""
    orders = [PurchaseOrder.from_dict(row) for row in store.purchase_orders.all() if not row.get("isReceived")]
    return sorted(orders, key=lambda o: o.arrival_date or o.created_at)


def total_payable(store: DataStore) -> float:
    """What the shop still owes across every purchase order."""
    return money(sum(float(row.get("dueAmount") or 0) for row in store.purchase_orders.all()))


def supplier_summary(store: DataStore, supplier_id: str) -> dict:
    supplier = get_supplier(store, supplier_id)
    orders = list_purchase_orders(store, supplier_id)
    return {
        "supplier": supplier.to_dict(),
        "balance": supplier_balance(store, supplier_id),
        "totalBilled": money(sum(o.total_amount for o in orders)),
        "totalPaid": money(sum(o.paid_amount for o in orders)),
        "openOrders": sum(1 for o in orders if o.due_amount > 0),
        "awaitingArrival": sum(1 for o in orders if not o.is_received),
    }
