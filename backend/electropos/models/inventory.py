from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Product:
    """
    Sellable stock item.

    Stock is only added by receiving a purchase order or by a manual edit;
    a sale decrements it. Products created from a supplier "new order"
    start with stock 0 until the goods arrive.
    """
    id: str
    name: str
    serial_no: str
    buy_price: float
    sell_price: float
    stock: int
    category: str
    supplier_id: str = ""
    custom_id: str = ""
    brand: str = ""
    model: str = ""
    description: str = ""
    image: str = ""
    specifications: str = ""
    warranty_period: str = ""
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            serial_no=data.get("serialNo", ""),
            buy_price=float(data.get("buyPrice") or 0),
            sell_price=float(data.get("sellPrice") or 0),
            stock=int(data.get("stock") or 0),
            category=data.get("category", ""),
            supplier_id=data.get("supplierId") or "",
            custom_id=data.get("customId") or "",
            brand=data.get("brand") or "",
            model=data.get("model") or "",
            description=data.get("description") or "",
            image=data.get("image") or "",
            specifications=data.get("specifications") or "",
            warranty_period=data.get("warrantyPeriod") or "",
            created_at=data.get("createdAt") or "",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "customId": self.custom_id,
            "brand": self.brand,
            "model": self.model,
            "description": self.description,
            "image": self.image,
            "specifications": self.specifications,
            "serialNo": self.serial_no,
            "buyPrice": self.buy_price,
            "sellPrice": self.sell_price,
            "stock": self.stock,
            "category": self.category,
            "warrantyPeriod": self.warranty_period,
            "supplierId": self.supplier_id,
            "createdAt": self.created_at,
        }

    def matches(self, term: str) -> bool:
        """Case-insensitive search across the fields the POS search box covers."""
        needle = term.lower()
        haystack = (
            self.name, self.serial_no, self.specifications, self.custom_id,
            self.brand, self.model, self.category,
        )
        return any(needle in (value or "").lower() for value in haystack)
