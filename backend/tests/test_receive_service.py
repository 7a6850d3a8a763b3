import pytest

from electropos.data_store import DataStoreError
from electropos.services import receive_service, supplier_service
from electropos.validation import ConflictError, NotFoundError, ValidationError


@pytest.fixture
def supplier(seed):
    return seed.supplier()


class TestReceiveOrder:
    def test_same_buy_price_merges_stock(self, backend, seed, store, supplier):
        product = seed.product(buyPrice=100.0, stock=4)
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": product["id"], "quantity": 6}],
        )
        assert backend.find("products", product["id"])["stock"] == 4

        received, touched = receive_service.receive_order(store, order.id)

        assert received.is_received is True
        assert received.status == "RECEIVED"
        assert received.received_at
        assert [p.id for p in touched] == [product["id"]]
        assert backend.find("products", product["id"])["stock"] == 10
        assert len(backend.collections["products"]) == 1

    def test_different_buy_price_creates_batch(self, backend, seed, store, supplier):
        product = seed.product(name="Nokia G21", buyPrice=100.0, sellPrice=140.0, stock=4)
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": product["id"], "quantity": 5, "buyPrice": 95}],
        )

        _, touched = receive_service.receive_order(store, order.id)

        assert backend.find("products", product["id"])["stock"] == 4
        assert len(touched) == 1
        batch = backend.find("products", touched[0].id)
        assert batch["id"] != product["id"]
        assert batch["name"] == "Nokia G21"
        assert batch["buyPrice"] == 95
        assert batch["sellPrice"] == 140
        assert batch["stock"] == 5

    def test_new_product_order_stock_arrives_on_receipt(self, backend, store, supplier):
        order = supplier_service.create_new_product_order(
            store,
            supplier["id"],
            {"name": "Pixel 8", "serialNo": "PX8", "category": "Phones", "buyPrice": 500, "sellPrice": 650},
            3,
        )
        product_id = order.items[0].product_id
        assert backend.find("products", product_id)["stock"] == 0

        receive_service.receive_order(store, order.id)

        assert backend.find("products", product_id)["stock"] == 3

    def test_receiving_twice_is_a_conflict(self, backend, seed, store, supplier):
        product = seed.product(stock=1)
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": product["id"], "quantity": 2}],
        )
        receive_service.receive_order(store, order.id)

        with pytest.raises(ConflictError, match="already received"):
            receive_service.receive_order(store, order.id)
        assert backend.find("products", product["id"])["stock"] == 3

    def test_explicit_received_at_normalized(self, seed, store, supplier):
        product = seed.product()
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": product["id"], "quantity": 1}],
        )

        received, _ = receive_service.receive_order(store, order.id, "2024-03-05T10:30:00+05:45")

        assert received.received_at == "2024-03-05T04:45:00.000Z"

    def test_bad_received_at_rejected(self, seed, store, supplier):
        product = seed.product()
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": product["id"], "quantity": 1}],
        )

        with pytest.raises(ValidationError):
            receive_service.receive_order(store, order.id, "next tuesday")

    def test_payment_after_receipt_keeps_received_flag(self, seed, store, supplier):
        product = seed.product(buyPrice=100.0)
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": product["id"], "quantity": 2}],
        )
        receive_service.receive_order(store, order.id)

        _, updated = supplier_service.record_supplier_payment(store, supplier["id"], 50, order_id=order.id)

        assert updated.status == "PARTIAL"
        assert updated.is_received is True

    def test_lines_without_product_are_skipped(self, backend, store, supplier):
        order = backend.seed("purchaseOrders", {
            "supplierId": supplier["id"], "billNumber": "MANUAL-1", "totalAmount": 10,
            "dueAmount": 10, "status": "PENDING", "isReceived": False,
            "items": [{"name": "Loose screws", "quantity": 10, "buyPrice": 1, "total": 10}],
        })

        received, touched = receive_service.receive_order(store, order["id"])

        assert touched == []
        assert received.is_received is True

    def test_failed_stock_write_leaves_order_open(self, backend, seed, store, supplier):
        product = seed.product()
        order = supplier_service.create_restock_order(
            store, supplier["id"], [{"productId": product["id"], "quantity": 1}],
        )
        backend.fail_on("PATCH", "products")

        with pytest.raises(DataStoreError):
            receive_service.receive_order(store, order.id)
        assert backend.find("purchaseOrders", order.id)["isReceived"] is False

    def test_unknown_order(self, store):
        with pytest.raises(NotFoundError):
            receive_service.receive_order(store, "ghost")
