from __future__ import annotations
from datetime import datetime
import re

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import JSON, Boolean, Integer, String, Text, DateTime
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError, InvalidIdError
from .time_utils import parse_iso_datetime


# Maximum price: $9,999,999.99 (999,999,999 cents)
MAX_PRICE_CENTS = 999_999_999

_RECORD_ID_RE = re.compile(r"^[1-9][0-9]{0,17}$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_INTEGER_RE = re.compile(r"-?[0-9]+")

# Signed 64-bit range of an SQL INTEGER column
MAX_INT64 = 2 ** 63 - 1
MIN_INT64 = -(2 ** 63)


def parse_int_text(text: str, name: str) -> int:
    """ASCII base-10 integer within the 64-bit column range, else ValidationError."""
    stripped = text.strip()
    if not _INTEGER_RE.fullmatch(stripped):
        raise ValidationError(f"{name} must be an integer")
    value = int(stripped)
    return check_int_range(value, name)


def check_int_range(value: int, name: str) -> int:
    if value > MAX_INT64 or value < MIN_INT64:
        raise ValidationError(f"{name} is out of range")
    return value


def json_object(payload: Any) -> dict:
    """Request body as a dict; absent body -> {}, any other JSON type -> ValidationError."""
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Per-endpoint request schema:
    - writable_fields: column keys clients are allowed to set (security boundary)
    - required_on_create: column keys required for POST
    - aliases: wire name -> column key (the JSON API speaks camelCase)
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    aliases: dict[str, str] = field(default_factory=dict)

    def column_for(self, wire_name: str) -> str:
        return self.aliases.get(wire_name, wire_name)

    def wire_name_for(self, column_key: str) -> str:
        for wire, col in self.aliases.items():
            if col == column_key:
                return wire
        return column_key


def parse_record_id(raw: Any) -> int:
    """
    Validate an opaque record identifier before touching the store.

    Raises InvalidIdError for anything that is not a positive base-10 integer.
    """
    if isinstance(raw, bool):
        raise InvalidIdError()
    if isinstance(raw, int):
        if raw <= 0 or raw > MAX_INT64:
            raise InvalidIdError()
        return raw
    if not isinstance(raw, str) or not _RECORD_ID_RE.match(raw.strip()):
        raise InvalidIdError()
    return int(raw.strip())


def normalize_email(value: Any, field_name: str = "email") -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    email = value.strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError(f"{field_name} must be a valid email address")
    return email


def parse_query_int(raw: str | None, name: str, *, default: int) -> int:
    """Integer query param; absent -> default, non-integer -> ValidationError."""
    if raw is None or raw.strip() == "":
        return default
    return parse_int_text(raw, name)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any, wire_name: str):
    coltype = col.type

    if value is None:
        return None

    # Integers - reject floats, bools and scientific notation
    if isinstance(coltype, Integer):
        if isinstance(value, int) and not isinstance(value, bool):
            return check_int_range(value, wire_name)
        if isinstance(value, str):
            return parse_int_text(value, wire_name)
        raise ValidationError(f"{wire_name} must be an integer")

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{wire_name} must be a boolean")

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{wire_name} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{wire_name} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{wire_name} must be a datetime")

    if isinstance(coltype, JSON):
        if not isinstance(value, (list, dict)):
            raise ValidationError(f"{wire_name} must be a list or object")
        return value

    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{wire_name} must be a string")
        return str(value).strip()

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
    Returns a cleaned patch dict keyed by column name.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    payload = json_object(payload)

    by_column = {policy.column_for(k): (k, v) for k, v in payload.items()}

    if not partial:
        missing = sorted(
            policy.wire_name_for(f)
            for f in policy.required_on_create
            if f not in by_column or by_column[f][1] in (None, "", [], {})
        )
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    for col_key, (wire_name, _) in by_column.items():
        if col_key not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {wire_name}")
        if col_key not in cols:
            raise ValidationError(f"Unknown field: {wire_name}")

    patch: dict = {}

    for col_key, (wire_name, raw) in by_column.items():
        col = cols[col_key]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{wire_name} cannot be null")
            patch[col_key] = None
            continue

        val = _coerce_value(col, raw, wire_name)

        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{wire_name} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{wire_name} exceeds max length {col.type.length}")

        patch[col_key] = val

    return patch


def enforce_rules_product(patch: dict) -> None:
    """Catalog rules that column metadata cannot express."""
    price = patch.get("price_cents")
    if price is not None:
        if price < 0:
            raise ValidationError("priceCents must be >= 0")
        if price > MAX_PRICE_CENTS:
            raise ValidationError(f"priceCents cannot exceed {MAX_PRICE_CENTS} (${MAX_PRICE_CENTS / 100:,.2f})")

    qty = patch.get("available_quantity")
    if qty is not None and qty < 0:
        raise ValidationError("availableQuantity must be >= 0")

    moq = patch.get("minimum_order_quantity")
    if moq is not None and moq < 1:
        raise ValidationError("minimumOrderQuantity must be >= 1")

    for key, wire in (("images", "images"), ("payment_options", "paymentOptions")):
        value = patch.get(key)
        if value is not None and not (isinstance(value, list) and all(isinstance(v, str) for v in value)):
            raise ValidationError(f"{wire} must be a list of strings")


def enforce_rules_order(patch: dict) -> None:
    """Order rules: line items are a non-empty list of objects; amounts non-negative."""
    if "line_items" in patch:
        items = patch["line_items"]
        if not isinstance(items, list) or not items:
            raise ValidationError("lineItems must be a non-empty list")
        if not all(isinstance(item, dict) for item in items):
            raise ValidationError("lineItems entries must be objects")

    quantity = patch.get("quantity")
    if quantity is not None and quantity < 1:
        raise ValidationError("quantity must be >= 1")

    total = patch.get("total_price_cents")
    if total is not None and total < 0:
        raise ValidationError("totalPriceCents must be >= 0")
