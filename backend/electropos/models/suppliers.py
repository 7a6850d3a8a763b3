from __future__ import annotations

from dataclasses import dataclass, field


# Purchase order statuses
PO_STATUS_PENDING = "PENDING"
PO_STATUS_RECEIVED = "RECEIVED"
PO_STATUS_PARTIAL = "PARTIAL"
PO_STATUS_SETTLED = "SETTLED"

PO_STATUSES = frozenset({
    PO_STATUS_PENDING,
    PO_STATUS_RECEIVED,
    PO_STATUS_PARTIAL,
    PO_STATUS_SETTLED,
})

# Supplier-side tender types
SUPPLIER_METHOD_CASH = "CASH"
SUPPLIER_METHODS = frozenset({"CASH", "BANK", "WALLET", "OTHER"})

# Ledger transaction types
TX_BILL = "BILL"
TX_PAYMENT = "PAYMENT"
TX_SETTLEMENT = "SETTLEMENT"
TX_DISCOUNT_CREDIT = "DISCOUNT_CREDIT"

# Effect of each transaction type on what the shop owes the supplier
BALANCE_SIGN = {
    TX_BILL: 1,
    TX_PAYMENT: -1,
    TX_SETTLEMENT: -1,
    TX_DISCOUNT_CREDIT: -1,
}

TRANSACTION_TYPES = frozenset(BALANCE_SIGN)
PAYMENT_TRANSACTION_TYPES = frozenset({TX_PAYMENT, TX_SETTLEMENT, TX_DISCOUNT_CREDIT})

DEFAULT_PAYMENT_TERMS = "Immediate"


@dataclass(frozen=True)
class PurchaseOrderLine:
    name: str
    quantity: int
    buy_price: float
    total: float
    product_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "PurchaseOrderLine":
        return cls(
            name=data.get("name", ""),
            quantity=int(data.get("quantity") or 0),
            buy_price=float(data.get("buyPrice") or 0),
            total=float(data.get("total") or 0),
            product_id=data.get("productId"),
        )

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "buyPrice": self.buy_price,
            "total": self.total,
        }


@dataclass(frozen=True)
class PurchaseOrderPayment:
    id: str
    amount: float
    date: str
    method: str
    description: str

    @classmethod
    def from_dict(cls, data: dict) -> "PurchaseOrderPayment":
        return cls(
            id=data["id"],
            amount=float(data.get("amount") or 0),
            date=data.get("date", ""),
            method=data.get("method", SUPPLIER_METHOD_CASH),
            description=data.get("description") or "",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "amount": self.amount,
            "date": self.date,
            "method": self.method,
            "description": self.description,
        }


@dataclass
class PurchaseOrder:
    """
    Supplier bill for goods that may not have arrived yet.

    INVARIANTS:
    - due_amount = total_amount - paid_amount after every mutation
    - inventory stock is untouched until the order is received
    """
    id: str
    supplier_id: str
    supplier_name: str
    bill_number: str
    bill_date: str
    items: list[PurchaseOrderLine]
    total_amount: float
    paid_amount: float
    due_amount: float
    status: str
    is_received: bool
    arrival_date: str
    created_at: str
    payments: list[PurchaseOrderPayment] = field(default_factory=list)
    received_at: str | None = None
    notes: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "PurchaseOrder":
        return cls(
            id=data["id"],
            supplier_id=data.get("supplierId", ""),
            supplier_name=data.get("supplierName", ""),
            bill_number=data.get("billNumber") or "",
            bill_date=data.get("billDate") or "",
            items=[PurchaseOrderLine.from_dict(item) for item in data.get("items") or []],
            total_amount=float(data.get("totalAmount") or 0),
            paid_amount=float(data.get("paidAmount") or 0),
            due_amount=float(data.get("dueAmount") or 0),
            status=data.get("status", PO_STATUS_PENDING),
            is_received=bool(data.get("isReceived")),
            arrival_date=data.get("arrivalDate") or "",
            created_at=data.get("createdAt", ""),
            payments=[PurchaseOrderPayment.from_dict(p) for p in data.get("payments") or []],
            received_at=data.get("receivedAt"),
            notes=data.get("notes") or "",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "supplierId": self.supplier_id,
            "supplierName": self.supplier_name,
            "billNumber": self.bill_number,
            "billDate": self.bill_date,
            "items": [item.to_dict() for item in self.items],
            "totalAmount": self.total_amount,
            "paidAmount": self.paid_amount,
            "dueAmount": self.due_amount,
            "status": self.status,
            "payments": [payment.to_dict() for payment in self.payments],
            "notes": self.notes,
            "arrivalDate": self.arrival_date,
            "isReceived": self.is_received,
            "receivedAt": self.received_at,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class SupplierTransaction:
    """Append-only ledger entry; balance_after is fixed at write time."""
    id: str
    supplier_id: str
    type: str
    amount: float
    description: str
    date: str
    balance_after: float
    reference_id: str | None = None
    method: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "SupplierTransaction":
        return cls(
            id=data["id"],
            supplier_id=data.get("supplierId", ""),
            type=data.get("type", TX_BILL),
            amount=float(data.get("amount") or 0),
            description=data.get("description") or "",
            date=data.get("date", ""),
            balance_after=float(data.get("balanceAfter") or 0),
            reference_id=data.get("referenceId"),
            method=data.get("method"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "supplierId": self.supplier_id,
            "type": self.type,
            "amount": self.amount,
            "method": self.method,
            "referenceId": self.reference_id,
            "description": self.description,
            "date": self.date,
            "balanceAfter": self.balance_after,
        }


@dataclass
class Supplier:
    id: str
    name: str
    contact_person: str = ""
    phone: str = ""
    email: str = ""
    vat_in: str = ""
    address: str = ""
    category: str = ""
    website: str = ""
    payment_terms: str = DEFAULT_PAYMENT_TERMS
    notes: str = ""
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Supplier":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            contact_person=data.get("contactPerson") or "",
            phone=data.get("phone") or "",
            email=data.get("email") or "",
            vat_in=data.get("VATIn") or "",
            address=data.get("address") or "",
            category=data.get("category") or "",
            website=data.get("website") or "",
            payment_terms=data.get("paymentTerms") or DEFAULT_PAYMENT_TERMS,
            notes=data.get("notes") or "",
            created_at=data.get("createdAt", ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "contactPerson": self.contact_person,
            "phone": self.phone,
            "email": self.email,
            "VATIn": self.vat_in,
            "address": self.address,
            "category": self.category,
            "website": self.website,
            "paymentTerms": self.payment_terms,
            "notes": self.notes,
            "createdAt": self.created_at,
        }
