import pytest

from electropos.data_store import DataStoreError
from electropos.models import PaymentRecord, Sale
from electropos.services import payment_service, sales_service
from electropos.services.payment_service import PaymentError
from electropos.validation import NotFoundError, ValidationError


def _partial_sale(seed, paid=50.0, total=200.0):
    return seed.sale(
        subTotal=total,
        totalAmount=total,
        paidAmount=paid,
        dueAmount=total - paid,
        paymentStatus="PARTIAL",
        payments=[{
            "id": "pay-1", "amount": paid, "method": "CASH",
            "date": "2024-03-01T09:00:00.000Z", "note": "Initial Payment",
        }],
    )


class TestApplyPayment:
    def test_recomputes_from_payment_list(self):
        sale = Sale.from_dict({
            "id": "s1", "invoiceNo": "INV-1", "totalAmount": 200, "paidAmount": 50,
            "dueAmount": 150, "paymentStatus": "PARTIAL",
            "payments": [{"id": "a", "amount": 50, "method": "CASH", "date": "d"}],
        })
        updated = payment_service.apply_payment(
            sale, PaymentRecord(id="b", amount=150, method="CARD", date="d2")
        )

        assert updated.paid_amount == 200
        assert updated.due_amount == 0
        assert updated.payment_status == "PAID"
        assert [p.id for p in updated.payments] == ["a", "b"]
        # Original untouched
        assert len(sale.payments) == 1


class TestAddPayment:
    def test_partial_then_full(self, backend, seed, store):
        sale = _partial_sale(seed)

        updated = payment_service.add_payment(store, sale["id"], 150)

        assert updated.paid_amount == 200
        assert updated.due_amount == 0
        assert updated.payment_status == "PAID"
        assert updated.payments[-1].note == "Partial Payment"
        assert backend.find("sales", sale["id"])["paymentStatus"] == "PAID"

    def test_amount_over_due_rejected(self, seed, store):
        sale = _partial_sale(seed)

        with pytest.raises(PaymentError, match="exceeds"):
            payment_service.add_payment(store, sale["id"], 151)

    def test_zero_amount_rejected(self, seed, store):
        sale = _partial_sale(seed)

        with pytest.raises(ValidationError):
            payment_service.add_payment(store, sale["id"], 0)

    def test_unknown_method_rejected(self, seed, store):
        sale = _partial_sale(seed)

        with pytest.raises(ValidationError):
            payment_service.add_payment(store, sale["id"], 10, method="IOU")

    def test_unknown_sale(self, store):
        with pytest.raises(NotFoundError):
            payment_service.add_payment(store, "ghost", 10)

    def test_failed_write_raises(self, backend, seed, store):
        sale = _partial_sale(seed)
        store.sales.all()
        backend.fail_on("PATCH", "sales")

        with pytest.raises(DataStoreError):
            payment_service.add_payment(store, sale["id"], 10)
        assert sales_service.get_sale(store, sale["id"]).due_amount == 150


class TestSettleSale:
    def test_settle_pays_remaining_due(self, seed, store):
        sale = _partial_sale(seed, paid=20.0, total=120.0)

        settled = payment_service.settle_sale(store, sale["id"], method="WALLET")

        assert settled.due_amount == 0
        assert settled.payments[-1].amount == 100
        assert settled.payments[-1].method == "WALLET"
        assert settled.payments[-1].note == "Full Settlement"

    def test_settle_paid_sale_rejected(self, seed, store):
        sale = seed.sale()

        with pytest.raises(PaymentError, match="Nothing is due"):
            payment_service.settle_sale(store, sale["id"])

    def test_total_receivable(self, seed, store):
        _partial_sale(seed, paid=50.0, total=200.0)
        _partial_sale(seed, paid=10.0, total=30.0)
        seed.sale()

        assert payment_service.total_receivable(store) == 170
