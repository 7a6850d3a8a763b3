# Overview: Service-layer operations for customers; CRUD plus purchase stats and history.

from __future__ import annotations

import math
import uuid

from ..data_store import DataStore
from ..models import Customer, RepairJob, Sale
from ..time_utils import now_iso
from ..validation import NotFoundError, PayloadPolicy, apply_policy, money


CUSTOMER_POLICY = PayloadPolicy(
    writable_fields=frozenset({"name", "phone", "email", "address", "notes"}),
    required_on_create=frozenset({"name", "phone"}),
)


def list_customers(store: DataStore, search: str | None = None) -> list[Customer]:
    customers = [Customer.from_dict(row) for row in store.customers.all()]
    if search:
        needle = search.lower()
        customers = [
            c for c in customers
            if needle in c.name.lower() or search in (c.phone or "")
        ]
    return customers


def get_customer(store: DataStore, customer_id: str) -> Customer:
    row = store.customers.get(customer_id)
    if not row:
        raise NotFoundError(f"Customer {customer_id} not found")
    return Customer.from_dict(row)


def create_customer(store: DataStore, payload: dict) -> Customer:
    data = apply_policy(CUSTOMER_POLICY, payload, creating=True)
    customer = Customer.from_dict({
        **data,
        "id": str(uuid.uuid4()),
        "totalPurchases": 0,
        "createdAt": now_iso(),
    })
    created = store.customers.create(customer.to_dict()).unwrap()
    return Customer.from_dict(created)


def update_customer(store: DataStore, customer_id: str, payload: dict) -> Customer:
    get_customer(store, customer_id)
    changes = apply_policy(CUSTOMER_POLICY, payload, creating=False)
    updated = store.customers.update(customer_id, changes).unwrap()
    return Customer.from_dict(updated)


def delete_customer(store: DataStore, customer_id: str) -> None:
    get_customer(store, customer_id)
    store.customers.delete(customer_id).unwrap()


def update_customer_purchase(
    store: DataStore,
    customer_id: str,
    amount: float,
    loyalty_point_unit: int = 100,
) -> Customer | None:
    """
    Accrue one completed purchase onto the customer's running stats.

    - total_purchases += amount
    - visit_count += 1
    - loyalty_points += floor(amount / loyalty_point_unit)
    - last_visit = now

    Returns None when the customer is unknown (nothing to update).
    """
    row = store.customers.fetch(customer_id).unwrap()
    if not row:
        return None
    customer = Customer.from_dict(row)

    changes = {
        "totalPurchases": money(customer.total_purchases + amount),
        "visitCount": customer.visit_count + 1,
        "loyaltyPoints": customer.loyalty_points + math.floor(amount / loyalty_point_unit),
        "lastVisit": now_iso(),
    }
    updated = store.customers.update(customer_id, changes).unwrap()
    return Customer.from_dict(updated)


def customer_history(store: DataStore, customer_id: str) -> dict:
    """Sales and repair jobs tied to one customer, with summary figures."""
    customer = get_customer(store, customer_id)
    sales = [Sale.from_dict(row) for row in store.sales.all() if row.get("customerId") == customer_id]
    repairs = [RepairJob.from_dict(row) for row in store.repairs.all() if row.get("customerId") == customer_id]

    return {
        "customer": customer.to_dict(),
        "sales": [sale.to_dict() for sale in sales],
        "repairs": [job.to_dict() for job in repairs],
        "summary": {
            "totalProfit": money(sum(sale.profit for sale in sales)),
            "totalItems": sum(sale.item_count for sale in sales),
            "totalRepairsValue": money(sum(job.estimated_cost for job in repairs)),
            "totalDue": money(sum(sale.due_amount for sale in sales)),
        },
    }
