# Overview: Service-layer operations for shop users; password hashing and screen permissions.

"""
User Directory Service

WHY: The dashboard shows each staff member only the screens they were
granted. Users live in the `users` collection of the data store, which is
never part of a backup document.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, upper, lower, digit and special char required
- Usernames are stored upper-cased and are unique
- The seeded admin holds the wildcard permission and cannot be deleted
"""

from __future__ import annotations

import logging
import re
import uuid

import bcrypt

from ..data_store import DataStore
from ..models import User
from ..models.auth import (
    DEFAULT_PERMISSIONS,
    DEFAULT_ROLE,
    ROLE_ADMIN,
    ROLES,
    SCREEN_PATHS,
    WILDCARD_PERMISSION,
)
from ..time_utils import now_iso
from ..validation import ConflictError, NotFoundError, ValidationError, require_choice


logger = logging.getLogger(__name__)


BCRYPT_ROUNDS = 12


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


class UserError(Exception):
    """Raised for user directory errors."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character (!@#$%^&*(),.'":{}|<>)
    """
    if not isinstance(password, str) or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")
    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")
    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")
    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")
    if not re.search(r"[!@#$%^&*(),.'\":{}|<>]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt check; malformed hashes never match."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def _normalize_username(username) -> str:
    if not isinstance(username, str) or not username.strip():
        raise ValidationError("username is required")
    return username.strip().upper()


def _clean_permissions(permissions) -> list[str]:
    if not isinstance(permissions, list):
        raise ValidationError("permissions must be a list of screen paths")
    unknown = [p for p in permissions if p != WILDCARD_PERMISSION and p not in SCREEN_PATHS]
    if unknown:
        raise ValidationError(f"Unknown screen path(s): {', '.join(map(str, unknown))}")
    # Keep order, drop duplicates
    return list(dict.fromkeys(permissions))


def list_users(store: DataStore) -> list[User]:
    return [User.from_dict(row) for row in store.users.all()]


def get_user(store: DataStore, user_id: str) -> User:
    row = store.users.get(user_id)
    if not row:
        raise NotFoundError(f"User {user_id} not found")
    return User.from_dict(row)


def find_user(store: DataStore, username: str) -> User | None:
    wanted = _normalize_username(username)
    for row in store.users.all():
        if (row.get("username") or "").upper() == wanted:
            return User.from_dict(row)
    return None


def add_user(
    store: DataStore,
    *,
    username: str,
    password: str,
    name: str = "",
    role: str = DEFAULT_ROLE,
    permissions: list[str] | None = None,
) -> User:
    username = _normalize_username(username)
    require_choice(role, ROLES, "role")
    store.refresh(("users",))
    if find_user(store, username):
        raise ConflictError(f"User {username} already exists")

    if permissions is None:
        permissions = [WILDCARD_PERMISSION] if role == ROLE_ADMIN else list(DEFAULT_PERMISSIONS)

    user = User(
        id=str(uuid.uuid4()),
        username=username,
        name=(name or username).strip(),
        role=role,
        password_hash=hash_password(password),
        permissions=_clean_permissions(permissions),
        created_at=now_iso(),
    )
    created = store.users.create(user.to_dict(include_hash=True)).unwrap()
    return User.from_dict(created)


def delete_user(store: DataStore, user_id: str) -> None:
    """An ADMIN can only be removed while another ADMIN remains, whatever their screens."""
    store.refresh(("users",))
    user = get_user(store, user_id)
    if user.role == ROLE_ADMIN:
        admins = [u for u in list_users(store) if u.role == ROLE_ADMIN]
        if len(admins) <= 1:
            raise UserError("The last administrator cannot be deleted")
    store.users.delete(user_id).unwrap()


def update_permissions(store: DataStore, user_id: str, permissions) -> User:
    """Replace the user's screen list."""
    get_user(store, user_id)
    updated = store.users.update(user_id, {"permissions": _clean_permissions(permissions)}).unwrap()
    return User.from_dict(updated)


def authenticate(store: DataStore, username: str, password: str) -> User | None:
    """Return the user when the credentials match, else None."""
    try:
        user = find_user(store, username)
    except ValidationError:
        return None
    if not user or not verify_password(password, user.password_hash):
        logger.info("Failed login for %r", username)
        return None
    return user


def has_access(user: User, path: str) -> bool:
    """The dashboard home is open to everyone; other screens need a grant."""
    if WILDCARD_PERMISSION in user.permissions:
        return True
    if path == "/":
        return True
    return path in user.permissions


def ensure_default_admin(store: DataStore, username: str, password: str) -> User | None:
    """Create the administrator when the directory is empty; returns it if created."""
    if store.users.all():
        return None
    logger.info("Seeding default administrator %s", username.upper())
    return add_user(
        store,
        username=username,
        password=password,
        name="Administrator",
        role=ROLE_ADMIN,
        permissions=[WILDCARD_PERMISSION],
    )
