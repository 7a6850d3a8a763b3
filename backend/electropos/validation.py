from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any


# Largest amount accepted on any money field
MAX_AMOUNT = 999_999_999


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., receiving an order twice)."""


class NotFoundError(LookupError):
    """404-level missing record."""


def money(value: float) -> float:
    """Normalize a computed amount to two decimals."""
    return round(float(value) + 0.0, 2)


def parse_amount(value: Any, field_name: str, *, allow_zero: bool = True) -> float:
    """
    Coerce a client supplied amount (number or numeric string).

    Rejects booleans, NaN/inf, negatives and values above MAX_AMOUNT.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} must be a number")
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field_name} must be a number")
        try:
            value = float(stripped)
        except ValueError:
            raise ValidationError(f"{field_name} must be a number")
    if not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name} must be a number")
    if math.isnan(value) or math.isinf(value):
        raise ValidationError(f"{field_name} must be a finite number")
    if value < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    if not allow_zero and value == 0:
        raise ValidationError(f"{field_name} must be greater than zero")
    if value > MAX_AMOUNT:
        raise ValidationError(f"{field_name} exceeds maximum allowed ({MAX_AMOUNT})")
    return money(value)


def parse_lenient_amount(value: Any) -> float:
    """
    Lenient numeric read used by form-style inputs: anything that does not
    parse as a finite number counts as 0.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return money(number)


def parse_quantity(value: Any, field_name: str = "quantity", *, minimum: int = 1) -> int:
    """Integer quantities only: no floats, no scientific notation."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    if isinstance(value, int):
        quantity = value
    elif isinstance(value, float) and value.is_integer():
        quantity = int(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped or 'e' in stripped.lower() or '.' in stripped:
            raise ValidationError(f"{field_name} must be a plain integer")
        try:
            quantity = int(stripped)
        except ValueError:
            raise ValidationError(f"{field_name} must be an integer")
    else:
        raise ValidationError(f"{field_name} must be an integer")
    if quantity < minimum:
        raise ValidationError(f"{field_name} must be at least {minimum}")
    return quantity


def require_choice(value: Any, choices: frozenset[str] | set[str], field_name: str) -> str:
    if value not in choices:
        raise ValidationError(f"Invalid {field_name}: {value}. Must be one of {sorted(choices)}")
    return value


@dataclass(frozen=True)
class PayloadPolicy:
    """
    Central policy layer for free-form records (suppliers, customers, ...):
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - numeric_fields: fields coerced to non-negative numbers
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = field(default_factory=frozenset)
    numeric_fields: frozenset[str] = field(default_factory=frozenset)


def apply_policy(policy: PayloadPolicy, payload: dict | None, *, creating: bool) -> dict:
    if payload is None or not isinstance(payload, dict):
        raise ValidationError("JSON object body required")

    unknown = set(payload) - policy.writable_fields
    if unknown:
        raise ValidationError(f"Unknown or read-only fields: {', '.join(sorted(unknown))}")

    if creating:
        missing = [
            name for name in sorted(policy.required_on_create)
            if payload.get(name) in (None, "")
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cleaned = {}
    for key, value in payload.items():
        if key in policy.numeric_fields and value is not None:
            value = parse_amount(value, key)
        elif isinstance(value, str):
            value = value.strip()
        cleaned[key] = value
    return cleaned
