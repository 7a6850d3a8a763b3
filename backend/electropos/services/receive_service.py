# Overview: Service-layer operations for purchase order receipt; puts arrived goods into stock.

"""
Receive Service

WHY: Ordering and paying for goods never changes stock. Stock moves only
when the shop confirms the goods physically arrived.

STEPS:
1. handle_stock_arrival() for the order's lines (merge or new batch)
2. mark the order received: is_received, received_at, status RECEIVED

An order can be received once.
"""

from __future__ import annotations

import logging

from ..data_store import DataStore
from ..models import Product, PurchaseOrder
from ..models.suppliers import PO_STATUS_RECEIVED
from ..time_utils import now_iso, parse_iso_datetime, to_utc_z
from ..validation import ConflictError, ValidationError
from . import inventory_service
from .supplier_service import get_purchase_order, transition_purchase_order


logger = logging.getLogger(__name__)


def receive_order(
    store: DataStore,
    order_id: str,
    received_at: str | None = None,
) -> tuple[PurchaseOrder, list[Product]]:
    """
    Confirm arrival of a purchase order.

    Returns (updated order, products updated or created).

    Raises:
        NotFoundError: unknown order
        ConflictError: the order was already received
        DataStoreError: a stock or order write failed
    """
    order = get_purchase_order(store, order_id)
    if order.is_received:
        raise ConflictError(f"Bill #{order.bill_number} was already received")

    if received_at:
        try:
            stamp = to_utc_z(parse_iso_datetime(received_at), keep_millis=True)
        except ValueError:
            raise ValidationError("receivedAt must be an ISO-8601 datetime")
    else:
        stamp = now_iso()

    touched = inventory_service.handle_stock_arrival(store, order.items)
    updated = transition_purchase_order(
        store,
        order,
        PO_STATUS_RECEIVED,
        {"isReceived": True, "receivedAt": stamp},
    )
    logger.info("Received Bill #%s: %d product row(s) touched", order.bill_number, len(touched))
    return updated, touched
