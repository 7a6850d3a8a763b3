"""
Checkout tests.

Verifies:
- Totals, due and status follow from the cart, discount and paid input
- Discount has one source of truth (amount); percent is converted once
- Checkout stores the sale before any stock or customer write
- Downstream write failures are reported, not raised
"""

import pytest

from electropos.data_store import DataStoreError
from electropos.models import Customer, Product
from electropos.services import sales_service
from electropos.services.cart_service import Cart
from electropos.services.sales_service import SaleError
from electropos.validation import NotFoundError, ValidationError


def _cart(sell=100.0, buy=60.0, quantity=2, stock=10):
    cart = Cart()
    cart.add(Product.from_dict({
        "id": "p1", "name": "Earbuds", "serialNo": "EB-1",
        "buyPrice": buy, "sellPrice": sell, "stock": stock, "category": "Audio",
    }), quantity)
    return cart


class TestFinalizeSale:
    def test_blank_paid_means_paid_in_full(self):
        sale = sales_service.finalize_sale(_cart(), payment_method="CASH", paid_amount="")

        assert sale.sub_total == 200
        assert sale.total_amount == 200
        assert sale.paid_amount == 200
        assert sale.due_amount == 0
        assert sale.profit == 80
        assert sale.payment_status == "PAID"
        assert len(sale.payments) == 1
        assert sale.payments[0].note == "Initial Payment"

    def test_partial_payment(self):
        sale = sales_service.finalize_sale(_cart(), payment_method="CARD", paid_amount="50")

        assert sale.paid_amount == 50
        assert sale.due_amount == 150
        assert sale.payment_status == "PARTIAL"

    def test_unparsable_paid_counts_as_zero(self):
        sale = sales_service.finalize_sale(_cart(), payment_method="CASH", paid_amount="abc")

        assert sale.paid_amount == 0
        assert sale.due_amount == 200
        # Zero paid is still PARTIAL; DUE is never produced
        assert sale.payment_status == "PARTIAL"
        assert sale.payments == []

    def test_nan_paid_counts_as_zero(self):
        sale = sales_service.finalize_sale(_cart(), payment_method="CASH", paid_amount="NaN")
        assert sale.paid_amount == 0

    def test_overpayment_leaves_no_due(self):
        sale = sales_service.finalize_sale(_cart(), payment_method="CASH", paid_amount=250)

        assert sale.paid_amount == 250
        assert sale.due_amount == 0
        assert sale.payment_status == "PAID"

    def test_negative_paid_rejected(self):
        with pytest.raises(ValidationError):
            sales_service.finalize_sale(_cart(), payment_method="CASH", paid_amount="-5")

    def test_discount_reduces_total_and_profit(self):
        sale = sales_service.finalize_sale(_cart(), payment_method="CASH", discount=20)

        assert sale.total_amount == 180
        assert sale.profit == 60
        assert sale.paid_amount == 180

    def test_empty_cart_rejected(self):
        with pytest.raises(SaleError, match="empty"):
            sales_service.finalize_sale(Cart(), payment_method="CASH")

    def test_unknown_payment_method_rejected(self):
        with pytest.raises(ValidationError, match="payment method"):
            sales_service.finalize_sale(_cart(), payment_method="BARTER")

    def test_walk_in_and_named_customer(self):
        walk_in = sales_service.finalize_sale(_cart(), payment_method="CASH")
        assert walk_in.customer_name == "Walk-in"
        assert walk_in.customer_id is None

        customer = Customer.from_dict({"id": "c1", "name": "Asha", "phone": "98"})
        named = sales_service.finalize_sale(_cart(), payment_method="CASH", customer=customer)
        assert named.customer_id == "c1"
        assert named.customer_name == "Asha"

    def test_invoice_number_uses_last_six_digits(self):
        assert sales_service.make_invoice_number(1709280000123456) == "INV-123456"
        assert sales_service.make_invoice_number().startswith("INV-")


class TestResolveDiscount:
    def test_percent_converted_to_amount(self):
        assert sales_service.resolve_discount(250.0, percent="10") == 25.0

    def test_blank_inputs_mean_no_discount(self):
        assert sales_service.resolve_discount(250.0, amount="", percent=None) == 0.0

    def test_both_inputs_rejected(self):
        with pytest.raises(ValidationError, match="not both"):
            sales_service.resolve_discount(250.0, amount=10, percent=10)

    def test_amount_above_subtotal_rejected(self):
        with pytest.raises(ValidationError, match="subtotal"):
            sales_service.resolve_discount(100.0, amount=101)

    def test_percent_above_hundred_rejected(self):
        with pytest.raises(ValidationError):
            sales_service.resolve_discount(100.0, percent=120)


class TestQuote:
    def test_quote_matches_finalized_sale(self):
        cart = _cart()
        preview = sales_service.quote(cart, discount_percent=10, paid_amount="100")

        assert preview["subTotal"] == 200
        assert preview["discount"] == 20
        assert preview["discountPercent"] == 10
        assert preview["totalAmount"] == 180
        assert preview["dueAmount"] == 80
        assert preview["paymentStatus"] == "PARTIAL"
        assert preview["profit"] == 60
        assert preview["itemCount"] == 2
        # Quoting does not consume the cart
        assert len(cart) == 1


class TestCheckout:
    def test_checkout_stores_sale_and_applies_side_effects(self, backend, seed, store):
        product = seed.product(sellPrice=100, buyPrice=60, stock=5)
        customer = seed.customer()

        cart = sales_service.build_cart(store, [{"productId": product["id"], "quantity": 2}])
        result = sales_service.checkout(
            store, cart, payment_method="CASH", paid_amount="", customer_id=customer["id"],
        )

        assert result.complete
        assert result.sale.total_amount == 200
        assert result.sale.payment_status == "PAID"
        assert len(backend.collections["sales"]) == 1
        assert backend.find("products", product["id"])["stock"] == 3

        stats = backend.find("customers", customer["id"])
        assert stats["totalPurchases"] == 200
        assert stats["visitCount"] == 1
        assert stats["loyaltyPoints"] == 2
        assert stats["lastVisit"]

        assert len(cart) == 0

    def test_sale_write_happens_before_stock_writes(self, backend, seed, store):
        product = seed.product()

        cart = sales_service.build_cart(store, [{"productId": product["id"], "quantity": 1}])
        sales_service.checkout(store, cart, payment_method="CASH")

        writes = [r for r in backend.requests if r[0] in ("POST", "PATCH")]
        assert writes[0] == ("POST", "/sales")
        assert writes[1] == ("PATCH", f"/products/{product['id']}")

    def test_failed_sale_write_changes_nothing(self, backend, seed, store):
        product = seed.product(stock=5)
        cart = sales_service.build_cart(store, [{"productId": product["id"], "quantity": 2}])
        backend.fail_on("POST", "sales")

        with pytest.raises(DataStoreError):
            sales_service.checkout(store, cart, payment_method="CASH")

        assert backend.find("products", product["id"])["stock"] == 5
        assert len(cart) == 1

    def test_stock_failure_is_reported(self, backend, seed, store):
        product = seed.product(stock=5)
        cart = sales_service.build_cart(store, [{"productId": product["id"], "quantity": 2}])
        backend.fail_on("PATCH", "products")

        result = sales_service.checkout(store, cart, payment_method="CASH")

        assert not result.complete
        assert "Stock not updated" in result.failures[0]
        assert len(backend.collections["sales"]) == 1

    def test_overselling_floors_stock_at_zero(self, backend, seed, store):
        product = seed.product(stock=1)
        cart = sales_service.build_cart(store, [{"productId": product["id"], "quantity": 3}])

        sales_service.checkout(store, cart, payment_method="CASH")

        assert backend.find("products", product["id"])["stock"] == 0

    def test_unknown_customer_rejected(self, seed, store):
        product = seed.product()
        cart = sales_service.build_cart(store, [{"productId": product["id"]}])

        with pytest.raises(ValidationError, match="Customer"):
            sales_service.checkout(store, cart, payment_method="CASH", customer_id="ghost")

    def test_build_cart_rejects_unknown_product(self, store):
        with pytest.raises(ValidationError, match="Unknown product"):
            sales_service.build_cart(store, [{"productId": "ghost", "quantity": 1}])


class TestInvoiceList:
    def test_filters_and_newest_first(self, seed, store):
        seed.sale(invoiceNo="INV-000001", createdAt="2024-03-01T09:00:00.000Z")
        seed.sale(
            invoiceNo="INV-000002", createdAt="2024-03-02T09:00:00.000Z",
            paidAmount=40, dueAmount=60, paymentStatus="PARTIAL", customerName="Bikash",
        )

        assert [s.invoice_no for s in sales_service.list_sales(store)] == ["INV-000002", "INV-000001"]
        assert [s.invoice_no for s in sales_service.list_sales(store, "DUE")] == ["INV-000002"]
        assert [s.invoice_no for s in sales_service.list_sales(store, "PAID")] == ["INV-000001"]
        assert [s.invoice_no for s in sales_service.list_sales(store, search="bik")] == ["INV-000002"]

    def test_unknown_filter_rejected(self, store):
        with pytest.raises(ValidationError):
            sales_service.list_sales(store, "OVERDUE")

    def test_get_missing_sale(self, store):
        with pytest.raises(NotFoundError):
            sales_service.get_sale(store, "nope")
