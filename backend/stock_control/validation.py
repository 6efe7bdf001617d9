from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Integer, String, Text

from .errors import ValidationError


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: wire fields clients are allowed to set (security boundary)
    - required_on_create: wire fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def strict_int(value: Any, field: str) -> int:
    """
    Accept ints only. Booleans, floats, and numeric strings are rejected so a
    quantity of 2.5 or "3" never slips through.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer")
    return value


def require_text(payload: dict, field: str) -> str:
    value = payload.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def check_length(field: str, col, value: Any) -> None:
    if isinstance(col.type, String) and col.type.length and isinstance(value, str):
        if len(value) > col.type.length:
            raise ValidationError(f"{field} exceeds max length {col.type.length}")


def require_column_text(model, payload: dict, field: str) -> str:
    """require_text, bounded by the String length of the mapped column."""
    value = require_text(payload, field)
    check_length(field, model.__mapper__.columns[model.FIELD_COLUMNS[field]], value)
    return value


def _coerce_value(field: str, col, value: Any):
    coltype = col.type

    if isinstance(coltype, Integer):
        return strict_int(value, field)

    if isinstance(coltype, Boolean):
        if not isinstance(value, bool):
            raise ValidationError(f"{field} must be a boolean")
        return value

    if isinstance(coltype, (String, Text)):
        if not isinstance(value, str):
            raise ValidationError(f"{field} must be a string")
        return value.strip()

    return value


def validate_payload(
    *,
    model,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - the model's column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned dict keyed by wire field names.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    columns = model.__mapper__.columns
    patch: dict = {}

    for field, raw in payload.items():
        if field not in policy.writable_fields or field not in model.FIELD_COLUMNS:
            raise ValidationError(f"Field not allowed: {field}")
        col = columns[model.FIELD_COLUMNS[field]]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{field} cannot be null")
            patch[field] = None
            continue

        val = _coerce_value(field, col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable and val == "":
            raise ValidationError(f"{field} cannot be blank")

        check_length(field, col, val)

        patch[field] = val

    return patch
