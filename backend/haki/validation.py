from __future__ import annotations
from datetime import datetime
from decimal import Decimal, InvalidOperation
from haki.time_utils import parse_iso_datetime

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Integer, Numeric, String, Text, DateTime
from sqlalchemy.orm import DeclarativeMeta


# Upper bound for any money column (Numeric(18, 2))
MAX_PRICE = Decimal("9999999999999999.99")


class ValidationError(ValueError):
    """400-level input problem."""


class NotFoundError(LookupError):
    """404-level missing resource."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate email)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def parse_decimal(value: Any, field: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{field} phải là số")
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} phải là số")
    if not result.is_finite():
        raise ValidationError(f"{field} phải là số")
    return result


def parse_int(value: Any, field: str) -> int:
    """Strict integer parsing: rejects bools, floats, decimals and scientific notation."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped and "e" not in stripped.lower() and "." not in stripped:
            try:
                return int(stripped)
            except ValueError:
                pass
    raise ValidationError(f"{field} phải là số nguyên")


def parse_optional_datetime(value: Any, field: str) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{field} phải là ngày giờ ISO-8601")
    try:
        return parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"{field} phải là ngày giờ ISO-8601")


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return parse_int(value, col.key)

    if isinstance(coltype, Numeric):
        return parse_decimal(value, col.key)

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{col.key} phải là true/false")

    if isinstance(coltype, DateTime):
        dt = parse_optional_datetime(value, col.key)
        if dt is None:
            raise ValidationError(f"{col.key} phải là ngày giờ ISO-8601")
        return dt

    if isinstance(coltype, (String, Text)):
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
    - a policy allowlist (writable_fields); other keys are ignored
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Dữ liệu JSON không hợp lệ.")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Thiếu trường bắt buộc: {', '.join(missing)}")

    cols = _columns_by_key(model)
    patch: dict = {}

    for k, raw in payload.items():
        if k not in policy.writable_fields or k not in cols:
            continue
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} không được để trống")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} không được để trống")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} vượt quá {col.type.length} ký tự")

        patch[k] = val

    return patch


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    if "price_sell" in patch:
        price = patch["price_sell"]
        if price is None or price <= 0:
            raise ValidationError("Giá bán phải lớn hơn 0.")
        if price > MAX_PRICE:
            raise ValidationError("Giá bán vượt quá giới hạn cho phép.")

    if patch.get("price_cost") is not None:
        if patch["price_cost"] < 0:
            raise ValidationError("Giá vốn không thể nhỏ hơn 0.")
        if patch["price_cost"] > MAX_PRICE:
            raise ValidationError("Giá vốn vượt quá giới hạn cho phép.")


def enforce_rules_stock_quantity(quantity: int) -> None:
    if quantity < 0:
        raise ValidationError("Số lượng tồn kho không thể nhỏ hơn 0.")


def enforce_rules_password(password: str | None, confirm_password: str | None) -> None:
    if password != confirm_password:
        raise ValidationError("Mật khẩu xác nhận không khớp.")
    if not password or len(password) < 6:
        raise ValidationError("Mật khẩu phải có ít nhất 6 ký tự.")
