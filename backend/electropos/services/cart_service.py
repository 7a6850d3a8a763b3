# Overview: In-memory cart accumulator used by checkout.

from __future__ import annotations

from ..models import CartItem, Product
from ..validation import money


class CartError(Exception):
    """Raised for invalid cart operations."""
    pass


class Cart:
    """
    Transient list of line items, one per product id.

    Adding a product that is already in the cart merges the quantity
    onto the existing line. Lines always hold a quantity of at least 1.
    """

    def __init__(self):
        self._items: list[CartItem] = []

    @property
    def items(self) -> list[CartItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def _find(self, product_id: str) -> CartItem | None:
        for item in self._items:
            if item.product.id == product_id:
                return item
        return None

    def add(self, product: Product, quantity: int = 1) -> CartItem:
        if quantity < 1:
            raise CartError("Quantity must be at least 1")
        if product.stock <= 0:
            raise CartError(f"{product.name} is out of stock")

        existing = self._find(product.id)
        if existing:
            existing.quantity += quantity
            return existing

        item = CartItem(product=product, quantity=quantity)
        self._items.append(item)
        return item

    def remove(self, product_id: str) -> None:
        self._items = [item for item in self._items if item.product.id != product_id]

    def update_quantity(self, product_id: str, quantity: int) -> None:
        """Set a line's quantity; anything below 1 drops the line."""
        if quantity < 1:
            self.remove(product_id)
            return
        item = self._find(product_id)
        if not item:
            raise CartError(f"Product {product_id} is not in the cart")
        item.quantity = quantity

    def clear(self) -> None:
        self._items = []

    def subtotal(self) -> float:
        return money(sum(item.line_total for item in self._items))

    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)
