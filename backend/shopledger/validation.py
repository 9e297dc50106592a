from __future__ import annotations
from datetime import datetime
from shopledger.time_utils import parse_iso_datetime

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Boolean, Integer, String, Text, DateTime
from sqlalchemy.orm import DeclarativeMeta


# Maximum price: 9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_PRICE_CENTS = 999_999_999

# Largest stock count a single inventory row may hold
MAX_QUANTITY = 10_000_000


class ValidationError(ValueError):
    """400-level input problem, reported against a single field when known."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class ConflictError(ValueError):
    """409-level uniqueness or concurrent-update conflict."""

    retryable = False

    def __init__(self, message: str, fields: tuple[str, ...] = ()):
        super().__init__(message)
        self.fields = tuple(fields)


class BusyError(ConflictError):
    """Lock wait or retry budget exhausted; the caller may resubmit."""

    retryable = True


class NotFoundError(ValueError):
    """Referenced entity is absent or belongs to another tenant."""


class InsufficientStockError(ValueError):
    """Requested quantity exceeds stock on hand; nothing was applied."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST, non-empty after trimming
    - enum_fields: fields restricted to a fixed set of values
    - upper_fields: string fields stored upper-cased
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    enum_fields: dict[str, tuple[str, ...]] = field(default_factory=dict)
    upper_fields: set[str] = field(default_factory=set)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _label(key: str) -> str:
    return key.replace("_", " ")


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        # String input - must be plain digits (with optional leading minus)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{col.key} must be an integer", field=col.key)
            # Reject scientific notation (e.g., "1e15", "1E10")
            if 'e' in stripped.lower():
                raise ValidationError(
                    f"{col.key} must be a plain integer (scientific notation not allowed)",
                    field=col.key,
                )
            # Reject decimal points (e.g., "12.5")
            if '.' in stripped:
                raise ValidationError(f"{col.key} must be an integer (no decimals)", field=col.key)
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer", field=col.key)
        # Reject floats explicitly
        if isinstance(value, float):
            raise ValidationError(f"{col.key} must be an integer, not a decimal", field=col.key)
        # Other types
        raise ValidationError(f"{col.key} must be an integer", field=col.key)

    # Booleans
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in {"true", "1", "yes"}:
                return True
            if lowered in {"false", "0", "no", ""}:
                return False
            raise ValidationError(f"{col.key} must be true or false", field=col.key)
        if isinstance(value, int):
            return bool(value)
        raise ValidationError(f"{col.key} must be true or false", field=col.key)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime", field=col.key)
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime", field=col.key)
            return dt
        raise ValidationError(f"{col.key} must be a datetime", field=col.key)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{col.key} must be text", field=col.key)
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    - enum_fields / upper_fields
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create
    if not partial:
        missing = sorted(f for f in required if f not in payload or payload[f] is None)
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                field=missing[0],
            )

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}", field=k)
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}", field=k)

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null", field=k)
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for required and non-nullable text fields
        if isinstance(val, str) and val == "":
            if k in required:
                raise ValidationError(f"{_label(k).capitalize()} is required", field=k)
            if col.nullable:
                val = None

        if isinstance(val, str) and k in policy.upper_fields:
            val = val.upper()

        if k in policy.enum_fields and val is not None:
            allowed = policy.enum_fields[k]
            if val not in allowed:
                raise ValidationError(
                    f"{k} must be one of: {', '.join(allowed)}",
                    field=k,
                )

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}", field=k)

        patch[k] = val

    return patch


def enforce_rules_money(patch: dict, fields: tuple[str, ...]) -> None:
    """
    Cents amounts must be non-negative and bounded.
    """
    for key in fields:
        if key not in patch or patch[key] is None:
            continue
        amount = patch[key]
        if amount < 0:
            raise ValidationError(f"{key} must be >= 0", field=key)
        if amount > MAX_PRICE_CENTS:
            raise ValidationError(
                f"{key} cannot exceed {MAX_PRICE_CENTS} ({MAX_PRICE_CENTS / 100:,.2f})",
                field=key,
            )


def enforce_rules_inventory(patch: dict) -> None:
    enforce_rules_money(patch, ("cost_price_cents", "selling_price_cents"))

    if "quantity" in patch and patch["quantity"] is not None:
        qty = patch["quantity"]
        if qty < 0:
            raise ValidationError("quantity must be >= 0", field="quantity")
        if qty > MAX_QUANTITY:
            raise ValidationError(f"quantity cannot exceed {MAX_QUANTITY}", field="quantity")


def enforce_rules_sale_quantity(quantity: Any) -> int:
    # SALE requires an integer qty > 0 (bools and floats are rejected)
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        if isinstance(quantity, str) and quantity.strip().isdigit():
            quantity = int(quantity.strip())
        else:
            raise ValidationError("quantity must be a positive integer", field="quantity")
    if quantity <= 0:
        raise ValidationError("quantity must be > 0", field="quantity")
    return quantity
