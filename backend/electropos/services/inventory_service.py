# Overview: Service-layer operations for inventory; encapsulates product and stock rules.

"""
Inventory Service

Products live in the `products` collection of the REST data store.

STOCK RULES:
- A sale decrements stock (floored at 0).
- Stock only increases through a manual edit or a purchase order receipt.
- A receipt whose buy price differs from the product's stored buy price
  creates a new product row ("batch") instead of merging the stock.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Iterable

from ..data_store import DataStore
from ..models import Product, PurchaseOrderLine
from ..time_utils import now_iso
from ..validation import (
    NotFoundError,
    PayloadPolicy,
    ValidationError,
    apply_policy,
    money,
    parse_quantity,
)


logger = logging.getLogger(__name__)


PRODUCT_POLICY = PayloadPolicy(
    writable_fields=frozenset({
        "name", "customId", "brand", "model", "description", "image",
        "specifications", "serialNo", "buyPrice", "sellPrice", "stock",
        "category", "warrantyPeriod", "supplierId",
    }),
    required_on_create=frozenset({"name", "serialNo", "category", "buyPrice", "sellPrice"}),
    numeric_fields=frozenset({"buyPrice", "sellPrice"}),
)


def list_products(store: DataStore, search: str | None = None, in_stock_only: bool = False) -> list[Product]:
    products = [Product.from_dict(row) for row in store.products.all()]
    if search:
        products = [p for p in products if p.matches(search)]
    if in_stock_only:
        products = [p for p in products if p.stock > 0]
    # Newest first
    return sorted(products, key=lambda p: p.created_at, reverse=True)


def get_product(store: DataStore, product_id: str) -> Product:
    row = store.products.fetch(product_id).unwrap()
    if not row:
        raise NotFoundError(f"Product {product_id} not found")
    return Product.from_dict(row)


def create_product(store: DataStore, payload: dict) -> Product:
    data = apply_policy(PRODUCT_POLICY, payload, creating=True)
    data["stock"] = parse_quantity(data.get("stock", 0), "stock", minimum=0)

    product = Product.from_dict({
        **data,
        "id": str(uuid.uuid4()),
        "createdAt": now_iso(),
    })
    return add_product(store, product)


def add_product(store: DataStore, product: Product) -> Product:
    """Persist an already-built product record."""
    created = store.products.create(product.to_dict()).unwrap()
    return Product.from_dict(created)


def update_product(store: DataStore, product_id: str, payload: dict) -> Product:
    get_product(store, product_id)
    changes = apply_policy(PRODUCT_POLICY, payload, creating=False)
    if "stock" in changes:
        changes["stock"] = parse_quantity(changes["stock"], "stock", minimum=0)
    updated = store.products.update(product_id, changes).unwrap()
    return Product.from_dict(updated)


def delete_product(store: DataStore, product_id: str) -> None:
    """Hard delete; sales keep their own item snapshots."""
    get_product(store, product_id)
    store.products.delete(product_id).unwrap()


def decrease_stock(store: DataStore, product_id: str, amount: int) -> Product | None:
    """
    Take sold units out of stock, never below zero.

    Returns None when the product no longer exists (nothing to decrement).
    """
    row = store.products.fetch(product_id).unwrap()
    if not row:
        logger.warning("Stock decrement skipped: product %s not found", product_id)
        return None
    product = Product.from_dict(row)
    new_stock = max(0, product.stock - amount)
    updated = store.products.update(product_id, {"stock": new_stock}).unwrap()
    return Product.from_dict(updated)


def handle_stock_arrival(store: DataStore, lines: Iterable[PurchaseOrderLine]) -> list[Product]:
    """
    Put arrived goods on the shelf.

    Same buy price -> stock += quantity on the existing product.
    Different buy price -> a new batch row copied from the product with
    its own id, the arriving buy price and stock = quantity.
    Lines without a known product are skipped.

    Returns the products that were updated or created.

    Raises:
        DataStoreError: if a stock write fails (earlier writes stay applied)
    """
    touched: list[Product] = []
    for line in lines:
        if not line.product_id:
            logger.info("Arrival line %r has no product reference; skipped", line.name)
            continue
        row = store.products.fetch(line.product_id).unwrap()
        if not row:
            logger.warning("Arrival line %r references missing product %s; skipped", line.name, line.product_id)
            continue

        existing = Product.from_dict(row)
        if money(existing.buy_price) == money(line.buy_price):
            updated = store.products.update(
                existing.id, {"stock": existing.stock + line.quantity}
            ).unwrap()
            touched.append(Product.from_dict(updated))
        else:
            batch = replace(
                existing,
                id=str(uuid.uuid4()),
                buy_price=line.buy_price,
                stock=line.quantity,
                created_at=now_iso(),
            )
            touched.append(add_product(store, batch))
    return touched


def low_stock_products(store: DataStore, threshold: int) -> list[Product]:
    return [
        Product.from_dict(row) for row in store.products.all()
        if int(row.get("stock") or 0) < threshold
    ]


def inventory_worth(store: DataStore) -> float:
    """Stock valued at buy price."""
    return money(sum(
        float(row.get("buyPrice") or 0) * int(row.get("stock") or 0)
        for row in store.products.all()
    ))


def categories(store: DataStore) -> list[str]:
    return sorted({row.get("category") for row in store.products.all() if row.get("category")})


def require_products(store: DataStore, product_ids: Iterable[str]) -> dict[str, Product]:
    """Resolve ids to products or raise ValidationError naming the missing ones."""
    resolved = {}
    missing = []
    for product_id in product_ids:
        row = store.products.get(product_id)
        if row:
            resolved[product_id] = Product.from_dict(row)
        else:
            missing.append(product_id)
    if missing:
        raise ValidationError(f"Unknown product(s): {', '.join(missing)}")
    return resolved
