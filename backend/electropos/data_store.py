# Overview: HTTP client for the shop's REST data store; one cached repository per collection.

"""
REST Data Store Client

The shop keeps every entity in an external json-server style service:

    GET    /<collection>          list
    POST   /<collection>          create (body echoed back)
    PATCH  /<collection>/<id>     partial update
    DELETE /<collection>/<id>     delete
    GET    /settings              singleton object
    PATCH  /settings              singleton partial update

RULES:
- Every mutation returns a Result; callers decide what a failure means.
- The local cache only changes after the backend confirms the write.
- Network errors are logged and returned as failures, never raised.
- No retries and no version tokens: last writer wins at the backend.

FRESHNESS:
- List reads are cached per collection until invalidate() marks them stale;
  the app invalidates every collection at the start of each request.
- Read-modify-write paths re-read the record itself with fetch() so they
  build on what the backend holds now, not on the cached copy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

import httpx


logger = logging.getLogger(__name__)


# Collections included in backups, in restore order
BACKUP_COLLECTIONS = (
    "products",
    "sales",
    "customers",
    "suppliers",
    "purchaseOrders",
    "transactions",
    "expenses",
    "repairs",
)

# Application collections that live outside the backup document
AUXILIARY_COLLECTIONS = ("users",)


class DataStoreError(Exception):
    """Raised when a required data store write or read did not go through."""
    pass


@dataclass(frozen=True)
class Result:
    """Outcome of a data store call: success(value) or failure(error)."""
    ok: bool
    value: Any = None
    error: str | None = None

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "Result":
        return cls(ok=False, error=error)

    def unwrap(self) -> Any:
        """Return the value or raise DataStoreError for a failure."""
        if not self.ok:
            raise DataStoreError(self.error)
        return self.value


class Collection:
    """
    Cached repository for one REST collection.

    The cache is a plain list of JSON records (camelCase dicts).
    """

    def __init__(self, store: "DataStore", name: str):
        self._store = store
        self.name = name
        self._items: list[dict] = []
        self._loaded = False

    @property
    def path(self) -> str:
        return f"/{self.name}"

    def refresh(self) -> Result:
        result = self._store.request("GET", self.path)
        if not result.ok:
            return result
        data = result.value
        if not isinstance(data, list):
            return Result.failure(f"GET {self.path} did not return a list")
        self._items = data
        self._loaded = True
        return Result.success(list(data))

    def invalidate(self) -> None:
        """Next read goes back to the backend."""
        self._loaded = False

    def fetch(self, record_id: str) -> Result:
        """
        Read one record straight from the backend and update the cache.

        Success carries the record, or None when the backend does not have it.
        """
        result = self._store.request("GET", f"{self.path}/{record_id}", missing_ok=True)
        if not result.ok:
            return result
        record = result.value if isinstance(result.value, dict) and result.value else None
        if record is None:
            self._items = [item for item in self._items if item.get("id") != record_id]
            return Result.success(None)
        for index, item in enumerate(self._items):
            if item.get("id") == record_id:
                self._items[index] = record
                break
        else:
            if self._loaded:
                self._items.append(record)
        return Result.success(record)

    def all(self) -> list[dict]:
        if not self._loaded:
            self.refresh().unwrap()
        return list(self._items)

    def get(self, record_id: str) -> dict | None:
        for item in self.all():
            if item.get("id") == record_id:
                return item
        return None

    def filter(self, **criteria) -> list[dict]:
        return [
            item for item in self.all()
            if all(item.get(key) == value for key, value in criteria.items())
        ]

    def create(self, record: dict) -> Result:
        result = self._store.request("POST", self.path, json=record)
        if not result.ok:
            return result
        created = result.value if isinstance(result.value, dict) else dict(record)
        self._items.append(created)
        return Result.success(created)

    def update(self, record_id: str, changes: dict) -> Result:
        result = self._store.request("PATCH", f"{self.path}/{record_id}", json=changes)
        if not result.ok:
            return result

        updated = None
        for index, item in enumerate(self._items):
            if item.get("id") == record_id:
                if isinstance(result.value, dict):
                    updated = result.value
                else:
                    updated = {**item, **changes}
                self._items[index] = updated
                break
        if updated is None:
            updated = result.value if isinstance(result.value, dict) else {"id": record_id, **changes}
        return Result.success(updated)

    def delete(self, record_id: str) -> Result:
        result = self._store.request("DELETE", f"{self.path}/{record_id}")
        if not result.ok:
            return result
        self._items = [item for item in self._items if item.get("id") != record_id]
        return Result.success(record_id)

    def clear(self) -> Result:
        """Delete every record one by one (the backend has no bulk delete)."""
        listing = self.refresh()
        if not listing.ok:
            return listing
        failed = []
        for item in listing.value:
            result = self.delete(item["id"])
            if not result.ok:
                failed.append(item["id"])
        if failed:
            return Result.failure(f"Could not delete {len(failed)} record(s) from {self.name}")
        return Result.success(len(listing.value))


class SettingsResource:
    """The singleton /settings object."""

    path = "/settings"

    def __init__(self, store: "DataStore"):
        self._store = store
        self.details: dict = {}

    def fetch(self) -> Result:
        result = self._store.request("GET", self.path)
        if not result.ok:
            return result
        self.details = result.value if isinstance(result.value, dict) else {}
        return Result.success(dict(self.details))

    def update(self, changes: dict) -> Result:
        result = self._store.request("PATCH", self.path, json=changes)
        if not result.ok:
            return result
        merged = result.value if isinstance(result.value, dict) else {**self.details, **changes}
        self.details = merged
        return Result.success(dict(merged))


class DataStore:
    """
    One REST backend, one httpx client, one cached Collection per entity.

    Built once by the application factory and handed to services explicitly.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )
        self.collections: dict[str, Collection] = {
            name: Collection(self, name)
            for name in BACKUP_COLLECTIONS + AUXILIARY_COLLECTIONS
        }
        self.settings = SettingsResource(self)

    # Named accessors keep call sites readable
    @property
    def products(self) -> Collection:
        return self.collections["products"]

    @property
    def sales(self) -> Collection:
        return self.collections["sales"]

    @property
    def customers(self) -> Collection:
        return self.collections["customers"]

    @property
    def suppliers(self) -> Collection:
        return self.collections["suppliers"]

    @property
    def purchase_orders(self) -> Collection:
        return self.collections["purchaseOrders"]

    @property
    def transactions(self) -> Collection:
        return self.collections["transactions"]

    @property
    def expenses(self) -> Collection:
        return self.collections["expenses"]

    @property
    def repairs(self) -> Collection:
        return self.collections["repairs"]

    @property
    def users(self) -> Collection:
        return self.collections["users"]

    def request(self, method: str, path: str, json: Any = None, *, missing_ok: bool = False) -> Result:
        try:
            response = self.client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            logger.warning("Data store %s %s failed: %s", method, path, exc)
            return Result.failure(f"{method} {path} failed: {exc}")

        if missing_ok and response.status_code == 404:
            return Result.success(None)
        if response.is_error:
            logger.warning("Data store %s %s returned %s", method, path, response.status_code)
            return Result.failure(f"{method} {path} returned {response.status_code}")

        if not response.content:
            return Result.success(None)
        try:
            return Result.success(response.json())
        except ValueError:
            return Result.success(None)

    def refresh(self, names: Iterable[str]) -> None:
        """Reload the named collections; raises DataStoreError on the first failure."""
        for name in names:
            self.collections[name].refresh().unwrap()

    def invalidate(self) -> None:
        for collection in self.collections.values():
            collection.invalidate()

    def close(self) -> None:
        self.client.close()
