"""
Payload validation shared by every write route.

Routes describe what a client may send with a ModelValidationPolicy; the
column types on the SQLAlchemy model decide how each value is coerced.
Anything not on the allowlist is an error, never silently dropped.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable

from sqlalchemy import Boolean, Date, DateTime, Float, Integer, JSON, String, Text
from sqlalchemy.orm import DeclarativeMeta

from sweetshop.time_utils import parse_iso_date, parse_iso_datetime


# Upper bound for any money field: ₹99,99,99,999.99 in paise
MAX_AMOUNT_CENTS = 9_999_999_999


class ValidationError(ValueError):
    """400-level input problem."""


class NotFoundError(LookupError):
    """404-level: an entity id does not resolve."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Per-route write policy.

    writable_fields     keys a client may send
    required_on_create  keys that must be present and non-blank on create
    choices             closed enums (field -> allowed values)
    immutable_fields    real or derived fields that exist but are never writable;
                        named separately so the error says so
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    choices: dict[str, tuple[str, ...]] = field(default_factory=dict)
    immutable_fields: set[str] = field(default_factory=set)


def _coerce_int(key: str, value: Any) -> int:
    # bool is an int subclass
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{key} must be an integer")

    text = value.strip()
    if "e" in text.lower():
        raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
    if "." in text:
        raise ValidationError(f"{key} must be an integer (no decimals)")
    try:
        return int(text)
    except ValueError:
        raise ValidationError(f"{key} must be an integer")


def _coerce_float(key: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise ValidationError(f"{key} must be a number")
    else:
        raise ValidationError(f"{key} must be a number")
    # NaN and Infinity get through Flask's JSON parser
    if not math.isfinite(number):
        raise ValidationError(f"{key} must be a finite number")
    return number


def _coerce_bool(key: str, value: Any) -> bool:
    return value if isinstance(value, bool) else bool(value)


def _coerce_datetime(key: str, value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a datetime")
    try:
        parsed = parse_iso_datetime(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"{key} must be an ISO-8601 datetime")
    return parsed


def _coerce_date(key: str, value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a date")
    try:
        parsed = parse_iso_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"{key} must be an ISO-8601 date")
    return parsed


def _coerce_text(key: str, value: Any) -> str:
    return str(value).strip()


def _passthrough(key: str, value: Any) -> Any:
    return value


# First match wins; BigInteger and friends match Integer
_COERCERS: tuple[tuple[type, Callable[[str, Any], Any]], ...] = (
    (Integer, _coerce_int),
    (Float, _coerce_float),
    (Boolean, _coerce_bool),
    (DateTime, _coerce_datetime),
    (Date, _coerce_date),
    (String, _coerce_text),
    (Text, _coerce_text),
    # JSON shapes are checked by the per-model enforce_rules_* functions
    (JSON, _passthrough),
)


def _coerce_value(col, value: Any):
    if value is None:
        return None
    for coltype, coerce in _COERCERS:
        if isinstance(col.type, coltype):
            return coerce(col.key, value)
    return value


def _check_text(col, value: Any) -> None:
    if not isinstance(value, str) or not isinstance(col.type, (String, Text)):
        return
    if value == "" and not col.nullable:
        raise ValidationError(f"{col.key} cannot be blank")
    length = getattr(col.type, "length", None)
    if length and len(value) > length:
        raise ValidationError(f"{col.key} exceeds max length {length}")


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Check a JSON body against the policy and the model's columns and return
    the cleaned patch (writable keys only, values coerced to column types).

    partial=False is create: required_on_create is enforced.
    partial=True is an update: only the keys present are checked.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    columns = {c.key: c for c in model.__mapper__.columns}

    for key in payload:
        if key in policy.immutable_fields:
            raise ValidationError(f"{key} cannot be modified")
        if key not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {key}")
        if key not in columns:
            raise ValidationError(f"Unknown field: {key}")

    patch: dict = {}
    for key, raw in payload.items():
        col = columns[key]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{key} cannot be null")
            patch[key] = None
            continue

        value = _coerce_value(col, raw)
        _check_text(col, value)

        allowed = policy.choices.get(key)
        if allowed is not None and value not in allowed:
            raise ValidationError(f"{key} must be one of: {', '.join(allowed)}")

        patch[key] = value

    return patch


def require_amount_cents(value: Any, *, field_name: str, allow_zero: bool = False) -> int:
    """Money amounts are integer paise, non-negative and bounded."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer amount in cents")
    if value < 0 or (value == 0 and not allow_zero):
        raise ValidationError(f"{field_name} must be {'>= 0' if allow_zero else '> 0'}")
    if value > MAX_AMOUNT_CENTS:
        raise ValidationError(f"{field_name} cannot exceed {MAX_AMOUNT_CENTS}")
    return value


def require_positive_quantity(value: Any, *, field_name: str = "quantity") -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(value):
        raise ValidationError(f"{field_name} must be a finite number")
    if value <= 0:
        raise ValidationError(f"{field_name} must be > 0")
    return float(value)


def enforce_rules_inventory(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    # Only settlement may drive quantity below zero, never a manual edit
    if "quantity" in patch and patch["quantity"] is not None and patch["quantity"] < 0:
        raise ValidationError("quantity must be >= 0")
    if "min_stock" in patch and patch["min_stock"] is not None and patch["min_stock"] < 0:
        raise ValidationError("min_stock must be >= 0")
    if "cost_per_unit_cents" in patch and patch["cost_per_unit_cents"] is not None:
        require_amount_cents(patch["cost_per_unit_cents"], field_name="cost_per_unit_cents", allow_zero=True)


def enforce_rules_vendor(patch: dict) -> None:
    if "rate_cents" in patch and patch["rate_cents"] is not None:
        require_amount_cents(patch["rate_cents"], field_name="rate_cents", allow_zero=True)

    if "payment_due_cents" in patch and patch["payment_due_cents"] is not None:
        require_amount_cents(patch["payment_due_cents"], field_name="payment_due_cents", allow_zero=True)

    for key in ("daily_supply", "monthly_supply"):
        if key in patch and patch[key] is not None and patch[key] < 0:
            raise ValidationError(f"{key} must be >= 0")

    if "supplied_items" in patch and patch["supplied_items"] is not None:
        items = patch["supplied_items"]
        if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
            raise ValidationError("supplied_items must be a list of names")
        patch["supplied_items"] = [i.strip() for i in items if i.strip()]


def enforce_rules_expense(patch: dict) -> None:
    if "amount_cents" in patch:
        require_amount_cents(patch["amount_cents"], field_name="amount_cents")


def enforce_rules_staff(patch: dict) -> None:
    if "salary_cents" in patch and patch["salary_cents"] is not None:
        require_amount_cents(patch["salary_cents"], field_name="salary_cents", allow_zero=True)
