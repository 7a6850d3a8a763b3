from __future__ import annotations

from dataclasses import dataclass, field


ROLE_ADMIN = "ADMIN"
ROLES = frozenset({ROLE_ADMIN, "MANAGER", "CASHIER", "TECHNICIAN", "STAFF"})
DEFAULT_ROLE = "STAFF"

# Grants every screen
WILDCARD_PERMISSION = "*"

# Screens a user can be granted, by dashboard path
SCREEN_PATHS = (
    "/",
    "/dashboard",
    "/billing",
    "/inventory",
    "/repairs",
    "/customers",
    "/suppliers",
    "/invoices",
    "/accounting",
    "/reports",
    "/users",
    "/settings",
)

DEFAULT_PERMISSIONS = ["/"]


@dataclass
class User:
    id: str
    username: str
    name: str
    role: str
    password_hash: str
    permissions: list[str] = field(default_factory=list)
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return cls(
            id=data["id"],
            username=data.get("username", ""),
            name=data.get("name", ""),
            role=data.get("role", DEFAULT_ROLE),
            password_hash=data.get("passwordHash", ""),
            permissions=list(data.get("permissions") or []),
            created_at=data.get("createdAt", ""),
        )

    def to_dict(self, include_hash: bool = False) -> dict:
        data = {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "role": self.role,
            "permissions": list(self.permissions),
            "createdAt": self.created_at,
        }
        if include_hash:
            data["passwordHash"] = self.password_hash
        return data
