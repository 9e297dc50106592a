from __future__ import annotations

import math
from typing import Any

from ..validation import ValidationError
from . import customer_service, inventory_service, staff_service


def _finite(number: float, raw: Any) -> float:
    if not math.isfinite(number):
        raise ValidationError(f"'{raw}' is not a usable number")
    return number


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = _finite(value, value)
    else:
        text = str(value).strip()
        if not text:
            return None
        number = _finite(float(text), value)
    # Spreadsheets hand whole numbers over as floats; fractions are rejected
    if not number.is_integer():
        raise ValidationError(f"'{value}' must be a whole number")
    return int(number)


def _to_cents(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"'{value}' is not an amount")
    if isinstance(value, int):
        return value * 100
    if isinstance(value, float):
        return int(round(_finite(value, value) * 100))
    text = str(value).strip().replace(",", "")
    for symbol in ("₦", "$"):
        text = text.replace(symbol, "")
    if not text:
        return None
    return int(round(_finite(float(text), value) * 100))


def _to_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def _to_bool(value: Any) -> bool | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    return str(value).strip().lower() in {"true", "1", "yes", "y"}


def _pick(raw_row: dict[str, Any], *keys: str) -> Any:
    """First non-blank value among alternative column names."""
    for key in keys:
        value = raw_row.get(key)
        if value is not None and value != "":
            return value
    return None


def _money(raw_row: dict[str, Any], cents_key: str, *unit_keys: str) -> int | None:
    cents = raw_row.get(cents_key)
    if cents not in (None, ""):
        return _to_int(cents)
    return _to_cents(_pick(raw_row, *unit_keys))


def _compact(row: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in row.items() if v is not None}


class BaseImportSchema:
    """
    One spreadsheet row in, one create call out. normalize_row maps the
    accepted column spellings onto service payload keys; post_row runs the
    regular create operation, which owns validation and its own transaction.
    """

    def normalize_row(self, raw_row: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    def post_row(self, store_id: int, normalized_row: dict[str, Any]):
        raise NotImplementedError


class CustomersSchema(BaseImportSchema):
    def normalize_row(self, raw_row: dict[str, Any]) -> dict[str, Any]:
        return _compact({
            "name": _to_text(raw_row.get("name")),
            # Blank numbers are allocated from the store counter
            "customer_number": _to_text(_pick(raw_row, "customer_number", "customerNumber")),
            "mobile_number": _to_text(_pick(raw_row, "mobile_number", "mobileNumber", "phone")),
            "country_code": _to_text(_pick(raw_row, "country_code", "countryCode")),
            "address": _to_text(raw_row.get("address")),
        })

    def post_row(self, store_id: int, normalized_row: dict[str, Any]):
        return customer_service.create_customer(store_id, normalized_row)


class StaffSchema(BaseImportSchema):
    def normalize_row(self, raw_row: dict[str, Any]) -> dict[str, Any]:
        role = _to_text(raw_row.get("role"))
        return _compact({
            "name": _to_text(raw_row.get("name")),
            "staff_number": _to_text(_pick(raw_row, "staff_number", "staffNumber")),
            "mobile_number": _to_text(_pick(raw_row, "mobile_number", "mobileNumber", "phone")),
            "country_code": _to_text(_pick(raw_row, "country_code", "countryCode")),
            "pay_per_month_cents": _money(raw_row, "pay_per_month_cents", "pay_per_month", "payPerMonth"),
            "signed_contract": _to_bool(_pick(raw_row, "signed_contract", "signedContract")),
            "role": role.lower() if role else None,
        })

    def post_row(self, store_id: int, normalized_row: dict[str, Any]):
        return staff_service.create_staff(store_id, normalized_row)


class InventorySchema(BaseImportSchema):
    def normalize_row(self, raw_row: dict[str, Any]) -> dict[str, Any]:
        item_type = _to_text(raw_row.get("type"))
        item_type = item_type.lower() if item_type else None
        quantity = _to_int(raw_row.get("quantity"))
        if item_type == "service":
            quantity = 0
        return _compact({
            "name": _to_text(raw_row.get("name")),
            "type": item_type,
            "cost_price_cents": _money(raw_row, "cost_price_cents", "cost_price", "costPrice"),
            "selling_price_cents": _money(raw_row, "selling_price_cents", "selling_price", "sellingPrice"),
            "quantity": quantity if quantity is not None else 0,
        })

    def post_row(self, store_id: int, normalized_row: dict[str, Any]):
        return inventory_service.create_item(store_id, normalized_row)


SCHEMAS: dict[str, BaseImportSchema] = {
    "customers": CustomersSchema(),
    "staff": StaffSchema(),
    "inventory": InventorySchema(),
}
