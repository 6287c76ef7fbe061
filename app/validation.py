from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Generic, Mapping, Optional, TypeVar

T = TypeVar("T")

MIN_AMOUNT = Decimal("0.01")
MAX_AMOUNT = Decimal("1000000")

_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)

INVALID_BODY = "Invalid request body"


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """Either a normalized payload or the ordered list of reasons it was rejected."""

    errors: tuple[str, ...] = field(default_factory=tuple)
    data: Optional[T] = None

    @property
    def valid(self) -> bool:
        return not self.errors and self.data is not None

    @classmethod
    def ok(cls, data: T) -> "ValidationResult[T]":
        return cls(errors=(), data=data)

    @classmethod
    def failed(cls, errors: list[str]) -> "ValidationResult[T]":
        return cls(errors=tuple(errors), data=None)


def as_object(data: Any) -> Mapping[str, Any] | None:
    if isinstance(data, Mapping):
        return data
    return None


def is_blank(value: Any) -> bool:
    """Missing, null or empty string, i.e. not provided."""
    return value is None or value == ""


def is_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(_UUID_RE.match(value))


def _to_decimal(value: Any) -> Decimal | None:
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return None if value.is_nan() else value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if math.isnan(value):
            return None
        try:
            return Decimal(str(value))
        except InvalidOperation:
            return None
    return None


def check_amount(
    req: Mapping[str, Any],
    errors: list[str],
    *,
    minimum: Decimal = MIN_AMOUNT,
    maximum: Decimal = MAX_AMOUNT,
) -> Decimal | None:
    value = req.get("amount")
    if value is None:
        errors.append("Amount is required")
        return None

    amount = _to_decimal(value)
    if amount is None:
        errors.append("Amount must be a valid number")
        return None
    if amount < minimum:
        errors.append(f"Amount must be at least {minimum}")
        return None
    if amount > maximum:
        errors.append(f"Amount cannot exceed {maximum}")
        return None
    return amount


def check_optional_text(
    value: Any,
    errors: list[str],
    *,
    label: str,
    max_length: int,
    too_long: str | None = None,
) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        errors.append(f"{label} must be a string")
        return None
    if len(value) > max_length:
        errors.append(too_long or f"{label} is too long (max {max_length} characters)")
        return None
    return value
