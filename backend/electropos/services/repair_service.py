# Overview: Service-layer operations for repair job cards.

from __future__ import annotations

import logging
import random
import uuid

from ..data_store import DataStore
from ..models import RepairJob
from ..models.repairs import REPAIR_DELIVERED, REPAIR_READY, REPAIR_RECEIVED, REPAIR_STATUSES
from ..time_utils import now_iso
from ..validation import NotFoundError, PayloadPolicy, ValidationError, apply_policy, require_choice
from .customer_service import get_customer


logger = logging.getLogger(__name__)


JOB_ID_PREFIX = "JOB-"

# Workshop board filters
REPAIR_FILTER_ALL = "ALL"
REPAIR_FILTER_ACTIVE = "ACTIVE"
REPAIR_FILTER_READY = "READY"
REPAIR_FILTERS = frozenset({REPAIR_FILTER_ALL, REPAIR_FILTER_ACTIVE, REPAIR_FILTER_READY})


REPAIR_POLICY = PayloadPolicy(
    writable_fields=frozenset({
        "customerId", "deviceModel", "serialNo", "issueDescription",
        "estimatedCost", "advanceAmount", "assignedTechnician", "notes",
    }),
    required_on_create=frozenset({"customerId", "deviceModel", "issueDescription"}),
    numeric_fields=frozenset({"estimatedCost", "advanceAmount"}),
)


def make_job_id() -> str:
    return f"{JOB_ID_PREFIX}{random.randrange(10000)}"


def list_repairs(store: DataStore, search: str | None = None, status_filter: str = REPAIR_FILTER_ALL) -> list[RepairJob]:
    """ACTIVE is anything still on the bench; READY is waiting for pickup."""
    require_choice(status_filter, REPAIR_FILTERS, "filter")
    jobs = [RepairJob.from_dict(row) for row in store.repairs.all()]

    if search:
        needle = search.lower()
        jobs = [
            j for j in jobs
            if needle in j.customer_name.lower() or needle in j.serial_no.lower() or needle in j.job_id.lower()
        ]
    if status_filter == REPAIR_FILTER_ACTIVE:
        jobs = [j for j in jobs if j.status not in (REPAIR_READY, REPAIR_DELIVERED)]
    elif status_filter == REPAIR_FILTER_READY:
        jobs = [j for j in jobs if j.status == REPAIR_READY]
    return jobs


def get_repair(store: DataStore, repair_id: str) -> RepairJob:
    row = store.repairs.get(repair_id)
    if not row:
        raise NotFoundError(f"Repair job {repair_id} not found")
    return RepairJob.from_dict(row)


def _customer_fields(store: DataStore, customer_id: str) -> dict:
    try:
        customer = get_customer(store, customer_id)
    except NotFoundError:
        raise ValidationError(f"Customer {customer_id} not found")
    return {
        "customerId": customer.id,
        "customerName": customer.name,
        "customerPhone": customer.phone,
    }


def create_repair(store: DataStore, payload: dict) -> RepairJob:
    data = apply_policy(REPAIR_POLICY, payload, creating=True)
    stamp = now_iso()
    job = RepairJob.from_dict({
        "serialNo": "",
        "estimatedCost": 0,
        "advanceAmount": 0,
        **data,
        **_customer_fields(store, data["customerId"]),
        "id": str(uuid.uuid4()),
        "jobId": make_job_id(),
        "status": REPAIR_RECEIVED,
        "createdAt": stamp,
        "updatedAt": stamp,
    })
    created = store.repairs.create(job.to_dict()).unwrap()
    return RepairJob.from_dict(created)


def update_repair(store: DataStore, repair_id: str, payload: dict) -> RepairJob:
    get_repair(store, repair_id)
    changes = apply_policy(REPAIR_POLICY, payload, creating=False)
    if changes.get("customerId"):
        changes.update(_customer_fields(store, changes["customerId"]))
    changes["updatedAt"] = now_iso()
    updated = store.repairs.update(repair_id, changes).unwrap()
    return RepairJob.from_dict(updated)


def transition_repair(store: DataStore, repair_id: str, target: str) -> RepairJob:
    """
    The only way a job's status changes. Any valid status may follow any
    other (jobs get reopened); the target is validated and updatedAt stamped.
    """
    job = get_repair(store, repair_id)
    require_choice(target, frozenset(REPAIR_STATUSES), "repair status")
    if job.status != target:
        logger.info("Repair %s: %s -> %s", job.job_id, job.status, target)
    updated = store.repairs.update(repair_id, {"status": target, "updatedAt": now_iso()}).unwrap()
    return RepairJob.from_dict(updated)


def delete_repair(store: DataStore, repair_id: str) -> None:
    get_repair(store, repair_id)
    store.repairs.delete(repair_id).unwrap()
