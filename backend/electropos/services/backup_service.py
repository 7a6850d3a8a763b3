# Overview: Service-layer operations for full-database backup, restore and factory reset.

"""
Backup Service

The backup document is a JSON object with one key per collection (a list of
records) plus "settings" (an object):

    {"products": [...], "sales": [...], ..., "repairs": [...], "settings": {...}}

RESTORE:
1. every collection is cleared with per-record DELETEs
2. every record of the document is POSTed back with its original id
3. settings are PATCHed

There is no transaction: an interruption leaves a partially restored store.
The users collection is not part of the document and is never touched.
"""

from __future__ import annotations

import logging

from ..data_store import BACKUP_COLLECTIONS, DataStore, DataStoreError
from ..time_utils import utcnow


logger = logging.getLogger(__name__)


SETTINGS_KEY = "settings"


class BackupError(Exception):
    """Raised for malformed backup documents."""
    pass


def backup_filename() -> str:
    return f"electro_pos_full_backup_{utcnow().date().isoformat()}.json"


def export_backup(store: DataStore) -> dict:
    """
    Snapshot every collection straight from the backend.

    Settings that cannot be read export as {}; a collection that cannot be
    read fails the export.
    """
    document: dict = {}
    for name in BACKUP_COLLECTIONS:
        document[name] = store.collections[name].refresh().unwrap()

    settings = store.settings.fetch()
    document[SETTINGS_KEY] = settings.value if settings.ok else {}
    return document


def validate_backup(document) -> dict:
    if not isinstance(document, dict):
        raise BackupError("Backup must be a JSON object")
    for name in BACKUP_COLLECTIONS:
        records = document.get(name, [])
        if not isinstance(records, list):
            raise BackupError(f"'{name}' must be a list")
        for record in records:
            if not isinstance(record, dict) or not record.get("id"):
                raise BackupError(f"Every record in '{name}' needs an id")
    settings = document.get(SETTINGS_KEY)
    if settings is not None and not isinstance(settings, dict):
        raise BackupError("'settings' must be an object")
    return document


def clear_all(store: DataStore) -> dict[str, int]:
    """Delete every record of every backed-up collection; returns counts removed."""
    removed = {}
    for name in BACKUP_COLLECTIONS:
        removed[name] = store.collections[name].clear().unwrap()
        logger.info("Cleared %s (%d records)", name, removed[name])
    return removed


def import_backup(store: DataStore, document) -> dict[str, int]:
    """
    Replace the store's contents with the backup document.

    Returns counts of records restored per collection.

    Raises:
        BackupError: malformed document (nothing touched)
        DataStoreError: a write failed part-way through
    """
    validate_backup(document)
    clear_all(store)

    restored = {}
    for name in BACKUP_COLLECTIONS:
        collection = store.collections[name]
        count = 0
        for record in document.get(name) or []:
            collection.create(record).unwrap()
            count += 1
        restored[name] = count

    if document.get(SETTINGS_KEY):
        store.settings.update(document[SETTINGS_KEY]).unwrap()

    logger.info("Backup restored: %s", restored)
    return restored


def factory_reset(store: DataStore) -> dict[str, int]:
    try:
        return clear_all(store)
    except DataStoreError:
        logger.error("Factory reset stopped part-way; the store is partially cleared")
        raise
