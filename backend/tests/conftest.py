"""
Pytest fixtures for ElectroPOS backend tests.

Provides an in-memory json-server double behind httpx.MockTransport, a
DataStore wired to it, the Flask app and test client, and seed helpers.
"""

import json
import uuid

import httpx
import pytest

from electropos import create_app
from electropos.data_store import AUXILIARY_COLLECTIONS, BACKUP_COLLECTIONS, DataStore
from electropos.services import user_service


BASE_URL = "http://store.test"


class FakeRestStore:
    """
    json-server lookalike: one list per collection plus a /settings object.

    fail_on(method, collection) makes matching requests return 500 so tests
    can exercise dropped writes.
    """

    def __init__(self):
        self.collections = {name: [] for name in BACKUP_COLLECTIONS + AUXILIARY_COLLECTIONS}
        self.settings = {}
        self.failures = set()
        self.requests = []

    def fail_on(self, method: str, collection: str):
        self.failures.add((method.upper(), collection))

    def recover(self):
        self.failures.clear()

    def seed(self, collection: str, record: dict) -> dict:
        record = {"id": str(uuid.uuid4()), **record}
        self.collections[collection].append(record)
        return record

    def find(self, collection: str, record_id: str):
        for item in self.collections[collection]:
            if item["id"] == record_id:
                return item
        return None

    def handle(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        parts = [p for p in request.url.path.split("/") if p]
        self.requests.append((method, request.url.path))

        if not parts:
            return httpx.Response(404)
        name = parts[0]
        if (method, name) in self.failures:
            return httpx.Response(500, json={"error": "injected failure"})

        body = json.loads(request.content) if request.content else None

        if name == "settings":
            if method == "GET":
                return httpx.Response(200, json=self.settings)
            if method == "PATCH":
                self.settings = {**self.settings, **body}
                return httpx.Response(200, json=self.settings)
            return httpx.Response(405)

        if name not in self.collections:
            return httpx.Response(404)
        items = self.collections[name]

        if len(parts) == 1:
            if method == "GET":
                return httpx.Response(200, json=items)
            if method == "POST":
                record = {"id": str(uuid.uuid4()), **body}
                if self.find(name, record["id"]):
                    return httpx.Response(500, json={"error": "duplicate id"})
                items.append(record)
                return httpx.Response(201, json=record)
            return httpx.Response(405)

        record = self.find(name, parts[1])
        if record is None:
            return httpx.Response(404, json={})
        if method == "GET":
            return httpx.Response(200, json=record)
        if method == "PATCH":
            record.update(body)
            return httpx.Response(200, json=record)
        if method == "DELETE":
            items.remove(record)
            return httpx.Response(200, json={})
        return httpx.Response(405)


class Seeder:
    """Writes fixture records straight into the fake backend."""

    def __init__(self, backend: FakeRestStore):
        self.backend = backend

    def product(self, **overrides) -> dict:
        return self.backend.seed("products", {
            "name": "Galaxy A15",
            "serialNo": f"SN-{uuid.uuid4().hex[:8]}",
            "buyPrice": 80.0,
            "sellPrice": 100.0,
            "stock": 10,
            "category": "Phones",
            "supplierId": "",
            "createdAt": "2024-03-01T09:00:00.000Z",
            **overrides,
        })

    def customer(self, **overrides) -> dict:
        return self.backend.seed("customers", {
            "name": "Asha Rai",
            "phone": "9800000001",
            "totalPurchases": 0,
            "loyaltyPoints": 0,
            "visitCount": 0,
            "createdAt": "2024-03-01T09:00:00.000Z",
            **overrides,
        })

    def supplier(self, **overrides) -> dict:
        return self.backend.seed("suppliers", {
            "name": "Himal Distributors",
            "contactPerson": "Ram",
            "phone": "9811111111",
            "paymentTerms": "Immediate",
            "createdAt": "2024-03-01T09:00:00.000Z",
            **overrides,
        })

    def sale(self, **overrides) -> dict:
        return self.backend.seed("sales", {
            "invoiceNo": "INV-000001",
            "items": [],
            "subTotal": 100.0,
            "tax": 0,
            "discount": 0,
            "totalAmount": 100.0,
            "paidAmount": 100.0,
            "dueAmount": 0,
            "profit": 20.0,
            "paymentMethod": "CASH",
            "paymentStatus": "PAID",
            "customerName": "Walk-in",
            "createdAt": "2024-03-01T09:00:00.000Z",
            "payments": [],
            **overrides,
        })


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Cost factor 12 is too slow for a test run."""
    monkeypatch.setattr(user_service, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def backend():
    return FakeRestStore()


@pytest.fixture
def seed(backend):
    return Seeder(backend)


@pytest.fixture
def store(backend):
    """DataStore talking to the fake backend."""
    data_store = DataStore(BASE_URL, transport=httpx.MockTransport(backend.handle))
    yield data_store
    data_store.close()


@pytest.fixture
def app(backend):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'DATA_STORE_URL': BASE_URL,
        'DATA_STORE_TRANSPORT': httpx.MockTransport(backend.handle),
        'SEED_DEFAULT_ADMIN': False,
    })
    yield app
    app.extensions["data_store"].close()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()
