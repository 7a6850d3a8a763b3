# Overview: Service-layer operations for the shop details singleton (invoice header, UI preferences).

from __future__ import annotations

import copy
import logging
from typing import Any

from ..data_store import DataStore
from ..models.settings import (
    DEFAULT_DASHBOARD_PREFERENCES,
    DEFAULT_SHOP_DETAILS,
    UI_SCALE_MAX,
    UI_SCALE_MIN,
)
from ..validation import ValidationError


logger = logging.getLogger(__name__)


WRITABLE_KEYS = frozenset(DEFAULT_SHOP_DETAILS)


def merge_with_defaults(stored: dict | None) -> dict:
    """Stored values over defaults; dashboard preferences merged key by key."""
    stored = stored or {}
    details = {**copy.deepcopy(DEFAULT_SHOP_DETAILS), **stored}
    details["dashboardPreferences"] = {
        **DEFAULT_DASHBOARD_PREFERENCES,
        **(stored.get("dashboardPreferences") or {}),
    }
    return details


def clamp_ui_scale(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("uiScale must be a number")
    try:
        scale = int(round(float(value)))
    except (TypeError, ValueError):
        raise ValidationError("uiScale must be a number")
    return max(UI_SCALE_MIN, min(UI_SCALE_MAX, scale))


def get_shop_details(store: DataStore) -> dict:
    """A fresh data store may have no settings yet; defaults fill the gaps."""
    result = store.settings.fetch()
    if not result.ok:
        logger.warning("Shop settings unavailable, serving defaults: %s", result.error)
        return merge_with_defaults(store.settings.details)
    return merge_with_defaults(result.value)


def update_shop_details(store: DataStore, changes: dict) -> dict:
    if not isinstance(changes, dict):
        raise ValidationError("JSON object body required")

    unknown = set(changes) - WRITABLE_KEYS
    if unknown:
        raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")

    cleaned = dict(changes)
    if "uiScale" in cleaned:
        cleaned["uiScale"] = clamp_ui_scale(cleaned["uiScale"])
    if "dashboardPreferences" in cleaned:
        prefs = cleaned["dashboardPreferences"]
        if not isinstance(prefs, dict):
            raise ValidationError("dashboardPreferences must be an object")
        bad = set(prefs) - set(DEFAULT_DASHBOARD_PREFERENCES)
        if bad:
            raise ValidationError(f"Unknown dashboard preferences: {', '.join(sorted(bad))}")
        current = get_shop_details(store)["dashboardPreferences"]
        cleaned["dashboardPreferences"] = {**current, **{k: bool(v) for k, v in prefs.items()}}

    updated = store.settings.update(cleaned).unwrap()
    return merge_with_defaults(updated)
