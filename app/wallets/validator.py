from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from app.catalog.services import Currency, currency_values, parse_currency
from app.validation import (
    INVALID_BODY,
    ValidationResult,
    as_object,
    check_amount,
    check_optional_text,
    is_blank,
    is_uuid,
)

MAX_NOTES_LENGTH = 500


@dataclass(frozen=True)
class TopUpRequest:
    wallet_id: UUID
    amount: Decimal


@dataclass(frozen=True)
class FloatAllocationRequest:
    agent_id: UUID
    amount: Decimal
    currency: Currency
    notes: Optional[str] = None


def _check_uuid(value: Any, errors: list[str], *, label: str) -> UUID | None:
    if is_blank(value) or not isinstance(value, str):
        errors.append(f"{label} is required")
        return None
    if not is_uuid(value):
        errors.append(f"Invalid {label[0].lower()}{label[1:]} format")
        return None
    return UUID(value)


def validate_topup_input(data: Any) -> ValidationResult[TopUpRequest]:
    req = as_object(data)
    if req is None:
        return ValidationResult.failed([INVALID_BODY])

    errors: list[str] = []
    wallet_id = _check_uuid(req.get("wallet_id"), errors, label="Wallet ID")
    amount = check_amount(req, errors)

    if errors:
        return ValidationResult.failed(errors)
    return ValidationResult.ok(TopUpRequest(wallet_id=wallet_id, amount=amount))


def validate_float_allocation_input(data: Any) -> ValidationResult[FloatAllocationRequest]:
    req = as_object(data)
    if req is None:
        return ValidationResult.failed([INVALID_BODY])

    errors: list[str] = []
    agent_id = _check_uuid(req.get("agent_id"), errors, label="Agent ID")
    amount = check_amount(req, errors)

    currency = None
    raw_currency = req.get("currency")
    if is_blank(raw_currency) or not isinstance(raw_currency, str):
        errors.append("Currency is required")
    else:
        currency = parse_currency(raw_currency)
        if currency is None:
            errors.append(f"Invalid currency. Must be one of: {', '.join(currency_values())}")

    notes = check_optional_text(
        req.get("notes"),
        errors,
        label="Notes",
        max_length=MAX_NOTES_LENGTH,
        too_long=f"Notes are too long (max {MAX_NOTES_LENGTH} characters)",
    )

    if errors:
        return ValidationResult.failed(errors)
    return ValidationResult.ok(
        FloatAllocationRequest(
            agent_id=agent_id,
            amount=amount,
            currency=currency,
            notes=(notes or "").strip() or None,
        )
    )
