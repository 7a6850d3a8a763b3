from __future__ import annotations

from dataclasses import dataclass, field

from .inventory import Product


# Tender types accepted at the counter
METHOD_CASH = "CASH"
METHOD_CARD = "CARD"
METHOD_WALLET = "WALLET"
METHOD_TRANSFER = "TRANSFER"
METHOD_OTHER = "OTHER"

PAYMENT_METHODS = frozenset({
    METHOD_CASH,
    METHOD_CARD,
    METHOD_WALLET,
    METHOD_TRANSFER,
    METHOD_OTHER,
})

PAYMENT_STATUS_PAID = "PAID"
PAYMENT_STATUS_PARTIAL = "PARTIAL"
PAYMENT_STATUS_DUE = "DUE"  # declared by the data model, never produced

PAYMENT_STATUSES = frozenset({
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_PARTIAL,
    PAYMENT_STATUS_DUE,
})

WALK_IN_CUSTOMER = "Walk-in"


@dataclass
class CartItem:
    """Product snapshot plus the quantity being sold."""
    product: Product
    quantity: int

    @property
    def line_total(self) -> float:
        return self.product.sell_price * self.quantity

    @property
    def line_profit(self) -> float:
        return (self.product.sell_price - self.product.buy_price) * self.quantity

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        return cls(product=Product.from_dict(data), quantity=int(data.get("quantity") or 0))

    def to_dict(self) -> dict:
        return {**self.product.to_dict(), "quantity": self.quantity}


@dataclass(frozen=True)
class PaymentRecord:
    """Immutable once appended to a sale."""
    id: str
    amount: float
    method: str
    date: str
    note: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "PaymentRecord":
        return cls(
            id=data["id"],
            amount=float(data.get("amount") or 0),
            method=data.get("method", METHOD_CASH),
            date=data.get("date", ""),
            note=data.get("note") or "",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "amount": self.amount,
            "method": self.method,
            "date": self.date,
            "note": self.note,
        }


@dataclass
class Sale:
    """
    Finalized invoice.

    INVARIANTS:
    - total_amount = sub_total - discount
    - due_amount = max(0, total_amount - paid_amount)
    - payment_status = PAID iff due_amount <= 0, otherwise PARTIAL
    - items never change after checkout; only payments are appended
    """
    id: str
    invoice_no: str
    items: list[CartItem]
    sub_total: float
    discount: float
    total_amount: float
    paid_amount: float
    due_amount: float
    profit: float
    payment_method: str
    payment_status: str
    created_at: str
    payments: list[PaymentRecord] = field(default_factory=list)
    customer_id: str | None = None
    customer_name: str = WALK_IN_CUSTOMER
    tax: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "Sale":
        return cls(
            id=data["id"],
            invoice_no=data.get("invoiceNo", ""),
            items=[CartItem.from_dict(item) for item in data.get("items") or []],
            sub_total=float(data.get("subTotal") or 0),
            discount=float(data.get("discount") or 0),
            total_amount=float(data.get("totalAmount") or 0),
            paid_amount=float(data.get("paidAmount") or 0),
            due_amount=float(data.get("dueAmount") or 0),
            profit=float(data.get("profit") or 0),
            payment_method=data.get("paymentMethod", METHOD_CASH),
            payment_status=data.get("paymentStatus", PAYMENT_STATUS_PARTIAL),
            created_at=data.get("createdAt", ""),
            payments=[PaymentRecord.from_dict(p) for p in data.get("payments") or []],
            customer_id=data.get("customerId"),
            customer_name=data.get("customerName") or WALK_IN_CUSTOMER,
            tax=float(data.get("tax") or 0),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoiceNo": self.invoice_no,
            "items": [item.to_dict() for item in self.items],
            "subTotal": self.sub_total,
            "tax": self.tax,
            "discount": self.discount,
            "totalAmount": self.total_amount,
            "paidAmount": self.paid_amount,
            "dueAmount": self.due_amount,
            "profit": self.profit,
            "paymentMethod": self.payment_method,
            "paymentStatus": self.payment_status,
            "customerId": self.customer_id,
            "customerName": self.customer_name,
            "createdAt": self.created_at,
            "payments": [payment.to_dict() for payment in self.payments],
        }

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)
