from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any

from ..core.exceptions import InvalidAmount, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} không hợp lệ")
    return str(value).strip()


def require_positive_amount(value: Any, field_name: str = "Số tiền") -> int:
    """Coerce to an integer amount (VND) and require it to be > 0."""

    amount = coerce_amount(value, field_name)
    if amount <= 0:
        raise InvalidAmount(f"{field_name} phải lớn hơn 0")
    return amount


def coerce_amount(value: Any, field_name: str = "Số tiền") -> int:
    """Exact integer amount; never routed through float so large values keep every digit."""

    if isinstance(value, bool):
        raise InvalidAmount(f"{field_name} không hợp lệ")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise InvalidAmount(f"{field_name} phải là số nguyên")
        return int(value)
    if isinstance(value, (str, Decimal)):
        text = str(value).strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            as_decimal = Decimal(text)
        except InvalidOperation:
            raise InvalidAmount(f"{field_name} không hợp lệ")
        if not as_decimal.is_finite() or as_decimal != as_decimal.to_integral_value():
            raise InvalidAmount(f"{field_name} phải là số nguyên")
        return int(as_decimal)
    raise InvalidAmount(f"{field_name} không hợp lệ")


def require_page(page: Any, limit: Any, *, max_limit: int) -> tuple[int, int]:
    try:
        p = int(page or 1)
        lim = int(limit or 10)
    except (TypeError, ValueError):
        raise ValidationError("Tham số phân trang không hợp lệ")
    if p < 1 or lim < 1 or lim > max_limit:
        raise ValidationError("Tham số phân trang không hợp lệ")
    return p, lim
