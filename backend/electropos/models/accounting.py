from __future__ import annotations

from dataclasses import dataclass


EXPENSE_CATEGORIES = frozenset({"RENT", "SALARY", "UTILITIES", "MAINTENANCE", "OTHER"})
DEFAULT_EXPENSE_CATEGORY = "OTHER"


@dataclass(frozen=True)
class Expense:
    id: str
    title: str
    amount: float
    category: str
    date: str
    notes: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Expense":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            amount=float(data.get("amount") or 0),
            category=data.get("category", DEFAULT_EXPENSE_CATEGORY),
            date=data.get("date", ""),
            notes=data.get("notes") or "",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "amount": self.amount,
            "category": self.category,
            "date": self.date,
            "notes": self.notes,
        }
