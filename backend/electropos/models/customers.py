from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Customer:
    """Walk-in or registered buyer; purchase stats accrue on every checkout."""
    id: str
    name: str
    phone: str
    total_purchases: float = 0.0
    loyalty_points: int = 0
    visit_count: int = 0
    last_visit: str | None = None
    email: str = ""
    address: str = ""
    notes: str = ""
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Customer":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            phone=data.get("phone", ""),
            total_purchases=float(data.get("totalPurchases") or 0),
            loyalty_points=int(data.get("loyaltyPoints") or 0),
            visit_count=int(data.get("visitCount") or 0),
            last_visit=data.get("lastVisit"),
            email=data.get("email") or "",
            address=data.get("address") or "",
            notes=data.get("notes") or "",
            created_at=data.get("createdAt", ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "totalPurchases": self.total_purchases,
            "loyaltyPoints": self.loyalty_points,
            "visitCount": self.visit_count,
            "lastVisit": self.last_visit,
            "createdAt": self.created_at,
            "notes": self.notes,
        }
