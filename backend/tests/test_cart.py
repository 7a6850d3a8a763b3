import pytest

from electropos.models import Product
from electropos.services.cart_service import Cart, CartError


def _product(product_id="p1", sell=100.0, buy=60.0, stock=5):
    return Product.from_dict({
        "id": product_id,
        "name": f"Item {product_id}",
        "serialNo": f"SN-{product_id}",
        "buyPrice": buy,
        "sellPrice": sell,
        "stock": stock,
        "category": "Phones",
    })


class TestCart:
    def test_add_merges_same_product(self):
        cart = Cart()
        cart.add(_product())
        cart.add(_product(), 2)

        assert len(cart) == 1
        assert cart.items[0].quantity == 3
        assert cart.item_count() == 3

    def test_subtotal(self):
        cart = Cart()
        cart.add(_product("a", sell=100.0), 2)
        cart.add(_product("b", sell=49.99))

        assert cart.subtotal() == 249.99

    def test_out_of_stock_rejected(self):
        with pytest.raises(CartError, match="out of stock"):
            Cart().add(_product(stock=0))

    def test_quantity_below_one_rejected_on_add(self):
        with pytest.raises(CartError):
            Cart().add(_product(), 0)

    def test_update_quantity(self):
        cart = Cart()
        cart.add(_product())
        cart.update_quantity("p1", 4)

        assert cart.items[0].quantity == 4

    def test_update_quantity_to_zero_removes_line(self):
        cart = Cart()
        cart.add(_product("a"))
        cart.add(_product("b"))
        cart.update_quantity("a", 0)

        assert [i.product.id for i in cart.items] == ["b"]

    def test_update_unknown_line(self):
        with pytest.raises(CartError, match="not in the cart"):
            Cart().update_quantity("nope", 2)

    def test_remove_and_clear(self):
        cart = Cart()
        cart.add(_product("a"))
        cart.add(_product("b"))
        cart.remove("a")
        assert len(cart) == 1

        cart.clear()
        assert len(cart) == 0
        assert cart.subtotal() == 0
