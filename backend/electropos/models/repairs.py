from __future__ import annotations

from dataclasses import dataclass


REPAIR_RECEIVED = "received"
REPAIR_IN_PROGRESS = "in-progress"
REPAIR_WAITING_FOR_PARTS = "waiting-for-parts"
REPAIR_READY = "ready"
REPAIR_DELIVERED = "delivered"

# Workshop board order
REPAIR_STATUSES = (
    REPAIR_RECEIVED,
    REPAIR_IN_PROGRESS,
    REPAIR_WAITING_FOR_PARTS,
    REPAIR_READY,
    REPAIR_DELIVERED,
)


@dataclass
class RepairJob:
    """Device service ticket (job card)."""
    id: str
    job_id: str
    customer_name: str
    customer_phone: str
    device_model: str
    serial_no: str
    issue_description: str
    status: str
    estimated_cost: float
    created_at: str
    updated_at: str
    customer_id: str | None = None
    advance_amount: float = 0.0
    assigned_technician: str = ""
    notes: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "RepairJob":
        return cls(
            id=data["id"],
            job_id=data.get("jobId", ""),
            customer_name=data.get("customerName", ""),
            customer_phone=data.get("customerPhone", ""),
            device_model=data.get("deviceModel", ""),
            serial_no=data.get("serialNo", ""),
            issue_description=data.get("issueDescription", ""),
            status=data.get("status", REPAIR_RECEIVED),
            estimated_cost=float(data.get("estimatedCost") or 0),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
            customer_id=data.get("customerId"),
            advance_amount=float(data.get("advanceAmount") or 0),
            assigned_technician=data.get("assignedTechnician") or "",
            notes=data.get("notes") or "",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "jobId": self.job_id,
            "customerId": self.customer_id,
            "customerName": self.customer_name,
            "customerPhone": self.customer_phone,
            "deviceModel": self.device_model,
            "serialNo": self.serial_no,
            "issueDescription": self.issue_description,
            "status": self.status,
            "estimatedCost": self.estimated_cost,
            "advanceAmount": self.advance_amount,
            "assignedTechnician": self.assigned_technician,
            "notes": self.notes,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
