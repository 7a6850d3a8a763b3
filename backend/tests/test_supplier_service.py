"""
Supplier ledger tests.

Verifies:
- Balance is always the signed sum of the transaction log
- Opening an order writes the order, a BILL and (if paid) a PAYMENT
- Payments against an order respect its due amount and move its status
- Orders open as PARTIAL until paid in full, then SETTLED
- Ordering never changes stock
"""

import pytest

from electropos.data_store import DataStoreError
from electropos.services import supplier_service
from electropos.services.supplier_service import SupplierLedgerError
from electropos.validation import NotFoundError, ValidationError


@pytest.fixture
def supplier(seed):
    return seed.supplier()


@pytest.fixture
def phone(seed, supplier):
    return seed.product(name="Redmi 13C", buyPrice=100.0, sellPrice=130.0, stock=4, supplierId=supplier["id"])


class TestSupplierDirectory:
    def test_create_requires_contact_fields(self, store):
        with pytest.raises(ValidationError, match="contactPerson"):
            supplier_service.create_supplier(store, {"name": "Sagar Traders", "phone": "98"})

    def test_create_defaults_payment_terms(self, backend, store):
        created = supplier_service.create_supplier(store, {
            "name": "Sagar Traders", "contactPerson": "Hari", "phone": "98", "VATIn": "600123",
        })

        assert created.payment_terms == "Immediate"
        assert created.vat_in == "600123"
        assert backend.find("suppliers", created.id)["VATIn"] == "600123"

    def test_search_by_name_category_or_id(self, seed, store):
        first = seed.supplier(name="Himal Distributors", category="Phones")
        seed.supplier(name="Kantipur Audio", category="Audio")

        assert [s.name for s in supplier_service.list_suppliers(store, "audio")] == ["Kantipur Audio"]
        assert [s.id for s in supplier_service.list_suppliers(store, first["id"][:8])] == [first["id"]]

    def test_unknown_fields_rejected_on_update(self, store, supplier):
        with pytest.raises(ValidationError, match="Unknown"):
            supplier_service.update_supplier(store, supplier["id"], {"balance": 0})

    def test_delete_keeps_ledger(self, backend, store, supplier):
        backend.seed("transactions", {"supplierId": supplier["id"], "type": "BILL", "amount": 50, "date": "2024-03-01"})

        supplier_service.delete_supplier(store, supplier["id"])

        assert backend.find("suppliers", supplier["id"]) is None
        assert len(backend.collections["transactions"]) == 1

    def test_missing_supplier(self, store):
        with pytest.raises(NotFoundError):
            supplier_service.get_supplier(store, "ghost")


class TestLedgerBalance:
    def test_balance_sums_signed_entries(self, backend, store, supplier):
        for tx_type, amount in [("BILL", 1000), ("PAYMENT", 300), ("SETTLEMENT", 200), ("DISCOUNT_CREDIT", 50)]:
            backend.seed("transactions", {
                "supplierId": supplier["id"], "type": tx_type, "amount": amount,
                "date": "2024-03-01", "balanceAfter": 999999,
            })

        # Stored snapshots are ignored
        assert supplier_service.supplier_balance(store, supplier["id"]) == 450

    def test_transactions_newest_first(self, backend, store, supplier):
        backend.seed("transactions", {"supplierId": supplier["id"], "type": "BILL", "amount": 1, "date": "2024-03-01"})
        backend.seed("transactions", {"supplierId": supplier["id"], "type": "BILL", "amount": 2, "date": "2024-03-05"})
        backend.seed("transactions", {"supplierId": "other", "type": "BILL", "amount": 3, "date": "2024-03-09"})

        entries = supplier_service.list_transactions(store, supplier["id"])

        assert [e.amount for e in entries] == [2, 1]


class TestRestockOrder:
    def test_unpaid_order_adds_bill_to_balance(self, backend, store, supplier, phone):
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": phone["id"], "quantity": 10}],
        )

        assert order.total_amount == 1000
        assert order.paid_amount == 0
        assert order.due_amount == 1000
        # An unpaid order opens as PARTIAL; PENDING is never assigned
        assert order.status == "PARTIAL"
        assert order.is_received is False
        assert order.bill_number.startswith("DRC-")
        assert supplier_service.supplier_balance(store, supplier["id"]) == 1000

        bills = backend.collections["transactions"]
        assert len(bills) == 1
        assert bills[0]["type"] == "BILL"
        assert bills[0]["referenceId"] == order.id
        assert bills[0]["balanceAfter"] == 1000

        # Stock waits for the receipt
        assert backend.find("products", phone["id"])["stock"] == 4

    def test_payment_against_order(self, store, supplier, phone):
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": phone["id"], "quantity": 10}],
        )

        entry, updated = supplier_service.record_supplier_payment(
            store, supplier["id"], 400, order_id=order.id,
        )

        assert supplier_service.supplier_balance(store, supplier["id"]) == 600
        assert updated.due_amount == 600
        assert updated.paid_amount == 400
        assert updated.status == "PARTIAL"
        assert entry.description == f"Partial Payment for Bill #{order.bill_number}"
        assert entry.balance_after == 600
        assert updated.payments[-1].id == entry.id

    def test_paid_up_front(self, backend, store, supplier, phone):
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": phone["id"], "quantity": 2, "buyPrice": 90}],
            bill_number="B-77", bill_date="2024-03-10", paid_amount=180,
        )

        assert order.total_amount == 180
        assert order.status == "SETTLED"
        assert order.bill_date == "2024-03-10"
        assert order.arrival_date == "2024-03-10"
        assert order.payments[0].description == "Initial Restock Payment"

        types = [(t["type"], t["balanceAfter"]) for t in backend.collections["transactions"]]
        assert types == [("BILL", 180), ("PAYMENT", 0)]
        assert supplier_service.supplier_balance(store, supplier["id"]) == 0

    @pytest.mark.parametrize("paid, expected", [(0, "PARTIAL"), (40, "PARTIAL"), (200, "SETTLED")])
    def test_status_at_creation(self, store, supplier, phone, paid, expected):
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": phone["id"], "quantity": 2}], paid_amount=paid,
        )

        assert order.status == expected

    def test_write_order(self, backend, store, supplier, phone):
        supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": phone["id"], "quantity": 1}], paid_amount=50,
        )

        posts = [path for method, path in backend.requests if method == "POST"]
        assert posts == ["/purchaseOrders", "/transactions", "/transactions"]

    def test_overpaid_order_rejected(self, store, supplier, phone):
        with pytest.raises(ValidationError, match="exceed"):
            supplier_service.create_restock_order(
                store, supplier["id"], [{"productId": phone["id"], "quantity": 1}], paid_amount=101,
            )

    def test_empty_order_rejected(self, store, supplier):
        with pytest.raises(SupplierLedgerError):
            supplier_service.create_restock_order(store, supplier["id"], [])

    def test_failed_bill_write_keeps_order(self, backend, store, supplier, phone):
        backend.fail_on("POST", "transactions")

        with pytest.raises(DataStoreError):
            supplier_service.create_restock_order(
                store, supplier["id"], [{"productId": phone["id"], "quantity": 1}],
            )
        assert len(backend.collections["purchaseOrders"]) == 1
        assert backend.collections["transactions"] == []


class TestNewProductOrder:
    def test_creates_product_with_zero_stock(self, backend, store, supplier):
        order = supplier_service.create_new_product_order(
            store,
            supplier["id"],
            {"name": "Pixel 8", "serialNo": "PX8", "category": "Phones", "buyPrice": 500, "sellPrice": 650},
            3,
        )

        assert order.bill_number.startswith("NEW-")
        assert order.total_amount == 1500
        product = backend.find("products", order.items[0].product_id)
        assert product["stock"] == 0
        assert product["supplierId"] == supplier["id"]
        assert backend.collections["transactions"][0]["description"] == "New Product Order - Pixel 8"


class TestSupplierPayments:
    def test_general_payment(self, store, supplier):
        entry, order = supplier_service.record_supplier_payment(store, supplier["id"], 250, method="BANK")

        assert order is None
        assert entry.description == "Partial Payment (General)"
        assert entry.method == "BANK"
        assert supplier_service.supplier_balance(store, supplier["id"]) == -250

    def test_discount_credit_has_its_own_label(self, store, supplier, phone):
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": phone["id"], "quantity": 2}],
        )

        entry, updated = supplier_service.record_supplier_payment(
            store, supplier["id"], 50, tx_type="DISCOUNT_CREDIT", order_id=order.id,
        )

        assert entry.description == f"Discount Credit for Bill #{order.bill_number}"
        assert updated.payments[-1].description == "Discount Credit"
        assert updated.status == "PARTIAL"
        assert supplier_service.supplier_balance(store, supplier["id"]) == 150

    def test_payment_over_due_rejected(self, store, supplier, phone):
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": phone["id"], "quantity": 1}],
        )

        with pytest.raises(SupplierLedgerError, match="exceeds"):
            supplier_service.record_supplier_payment(store, supplier["id"], 100.01, order_id=order.id)

    def test_order_of_other_supplier_rejected(self, seed, store, supplier, phone):
        other = seed.supplier(name="Other")
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": phone["id"], "quantity": 1}],
        )

        with pytest.raises(SupplierLedgerError, match="does not belong"):
            supplier_service.record_supplier_payment(store, other["id"], 10, order_id=order.id)

    def test_settle_order(self, store, supplier, phone):
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": phone["id"], "quantity": 3}], paid_amount=100,
        )

        entry, settled = supplier_service.settle_purchase_order(store, order.id)

        assert entry.type == "SETTLEMENT"
        assert entry.amount == 200
        assert entry.description == f"Settlement for Bill #{order.bill_number}"
        assert settled.status == "SETTLED"
        assert settled.due_amount == 0

        with pytest.raises(SupplierLedgerError, match="already settled"):
            supplier_service.settle_purchase_order(store, order.id)


class TestOrderLedger:
    def test_filters(self, store, supplier, phone):
        open_order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": phone["id"], "quantity": 1}], bill_number="OPEN-1",
        )
        paid_order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": phone["id"], "quantity": 1}], bill_number="PAID-1", paid_amount=100,
        )

        def bills(**kwargs):
            return {o.bill_number for o in supplier_service.list_purchase_orders(store, supplier["id"], **kwargs)}

        assert bills() == {"OPEN-1", "PAID-1"}
        assert bills(status_filter="PENDING") == {open_order.bill_number}
        assert bills(status_filter="SETTLED") == {paid_order.bill_number}
        assert bills(search="redmi") == {"OPEN-1", "PAID-1"}
        assert bills(search="paid") == {"PAID-1"}
        assert bills(date_to="2000-01-01") == set()

    def test_summary(self, store, supplier, phone):
        supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": phone["id"], "quantity": 5}], paid_amount=200,
        )

        summary = supplier_service.supplier_summary(store, supplier["id"])

        assert summary["balance"] == 300
        assert summary["totalBilled"] == 500
        assert summary["totalPaid"] == 200
        assert summary["openOrders"] == 1
        assert summary["awaitingArrival"] == 1
        assert supplier_service.total_payable(store) == 300

    def test_transition_rejects_unknown_status(self, store, supplier, phone):
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": phone["id"], "quantity": 1}],
        )

        with pytest.raises(ValidationError):
            supplier_service.transition_purchase_order(store, order, "LOST")
