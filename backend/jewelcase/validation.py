from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta


# Maximum price: 9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_PRICE_CENTS = 999_999_999

# Per-line quantity cap and case total cap keep total_value_cents inside SQLite INTEGER
MAX_QUANTITY = 100_000
MAX_CASE_TOTAL_CENTS = 999_999_999_999

PRODUCT_CATEGORIES = ("earring", "ring", "bracelet", "necklace")


class ValidationError(ValueError):
    """400-level input problem."""


class NotFoundError(LookupError):
    """404-level unknown id."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., agent still has cases in field)."""

    def __init__(self, message: str, *, code: str | None = None, details: dict | None = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"error": str(self)}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set
    - required_on_create: fields required for POST (and for full-overwrite PUT)
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


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
                raise ValidationError(f"{col.key} must be an integer")
            if 'e' in stripped.lower():
                raise ValidationError(f"{col.key} must be a plain integer (scientific notation not allowed)")
            if '.' in stripped:
                raise ValidationError(f"{col.key} must be an integer (no decimals)")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        if isinstance(value, float):
            raise ValidationError(f"{col.key} must be an integer, not a decimal")
        raise ValidationError(f"{col.key} must be an integer")

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise ValidationError(f"{col.key} must be a string")
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
    Returns a cleaned patch dict with only writable fields.

    partial=False: create / overwrite semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if payload.get(f) is None)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def _enforce_money(patch: dict, key: str) -> None:
    if key in patch and patch[key] is not None:
        value = patch[key]
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValidationError(f"{key} must be an integer")
        if value < 0:
            raise ValidationError(f"{key} must be >= 0")
        if value > MAX_PRICE_CENTS:
            raise ValidationError(f"{key} cannot exceed {MAX_PRICE_CENTS} ({MAX_PRICE_CENTS / 100:,.2f})")


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    _enforce_money(patch, "price_cents")

    if "category" in patch and patch["category"] is not None:
        category = patch["category"].lower()
        if category not in PRODUCT_CATEGORIES:
            raise ValidationError(f"category must be one of: {', '.join(PRODUCT_CATEGORIES)}")
        patch["category"] = category


def enforce_rules_manual_commission(patch: dict) -> None:
    _enforce_money(patch, "price_cents")
    _enforce_money(patch, "commission_value_cents")


def parse_case_items(raw_items: Any) -> list[dict]:
    """
    Normalize a nested items array of {product_id, quantity, price_cents}.
    Product existence is checked by the case service, inside its unit of work.
    """
    if not isinstance(raw_items, list):
        raise ValidationError("items must be a list")

    items = []
    for idx, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{idx}] must be an object")

        unknown = set(raw.keys()) - {"product_id", "quantity", "price_cents"}
        if unknown:
            raise ValidationError(f"items[{idx}] has unknown fields: {', '.join(sorted(unknown))}")

        parsed = {}
        for key in ("product_id", "quantity", "price_cents"):
            value = raw.get(key)
            if value is None:
                raise ValidationError(f"items[{idx}].{key} is required")
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValidationError(f"items[{idx}].{key} must be an integer")
            parsed[key] = value

        if parsed["product_id"] < 1:
            raise ValidationError(f"items[{idx}].product_id must be a catalog product id")
        if parsed["quantity"] < 1:
            raise ValidationError(f"items[{idx}].quantity must be >= 1")
        if parsed["quantity"] > MAX_QUANTITY:
            raise ValidationError(f"items[{idx}].quantity cannot exceed {MAX_QUANTITY}")
        if parsed["price_cents"] < 0:
            raise ValidationError(f"items[{idx}].price_cents must be >= 0")
        if parsed["price_cents"] > MAX_PRICE_CENTS:
            raise ValidationError(f"items[{idx}].price_cents cannot exceed {MAX_PRICE_CENTS}")

        items.append(parsed)

    return items
