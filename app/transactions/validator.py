from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

from app.catalog.operators import MobileOperator, operator_values, parse_operator
from app.catalog.services import (
    Currency,
    TransactionType,
    currency_values,
    parse_currency,
    parse_transaction_type,
    transaction_type_values,
)
from app.transactions.phone import clean_phone, validate_phone_for_operator
from app.validation import (
    INVALID_BODY,
    ValidationResult,
    as_object,
    check_amount,
    check_optional_text,
    is_blank,
)

PHONE_RE = re.compile(r"^\+?[1-9]\d{1,14}$")
MAX_PHONE_LENGTH = 20
MAX_NAME_LENGTH = 100
MAX_NOTES_LENGTH = 500
MAX_DESTINATION_LENGTH = 100


@dataclass(frozen=True)
class TransactionRequest:
    transaction_type: TransactionType
    amount: Decimal
    currency: Currency
    recipient_phone: str
    recipient_name: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None

    @property
    def mobile_operator(self) -> MobileOperator | None:
        if not self.metadata:
            return None
        return parse_operator(self.metadata.get("mobile_operator"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "transaction_type": self.transaction_type.value,
            "amount": self.amount,
            "currency": self.currency.value,
            "recipient_phone": self.recipient_phone,
            "recipient_name": self.recipient_name,
            "metadata": dict(self.metadata) if self.metadata is not None else None,
        }


def _check_transaction_type(req: Mapping[str, Any], errors: list[str]) -> TransactionType | None:
    value = req.get("transaction_type")
    if is_blank(value) or not isinstance(value, str):
        errors.append("Transaction type is required")
        return None
    parsed = parse_transaction_type(value)
    if parsed is None:
        errors.append(f"Invalid transaction type. Must be one of: {', '.join(transaction_type_values())}")
    return parsed


def _check_currency(req: Mapping[str, Any], errors: list[str]) -> Currency | None:
    value = req.get("currency")
    if is_blank(value) or not isinstance(value, str):
        errors.append("Currency is required")
        return None
    parsed = parse_currency(value)
    if parsed is None:
        errors.append(f"Invalid currency. Must be one of: {', '.join(currency_values())}")
    return parsed


def _check_phone_base(req: Mapping[str, Any], errors: list[str]) -> str | None:
    """Presence, emptiness and length. Returns the trimmed phone when these pass."""
    value = req.get("recipient_phone")
    if is_blank(value) or not isinstance(value, str):
        errors.append("Recipient phone is required")
        return None
    phone = value.strip()
    if not phone:
        errors.append("Recipient phone cannot be empty")
        return None
    if len(phone) > MAX_PHONE_LENGTH:
        errors.append(f"Recipient phone is too long (max {MAX_PHONE_LENGTH} characters)")
        return None
    return phone


def _check_metadata(req: Mapping[str, Any], errors: list[str]) -> tuple[dict[str, Any] | None, Any]:
    value = req.get("metadata")
    if value is None:
        return None, None
    meta = as_object(value)
    if meta is None:
        errors.append("Metadata must be an object")
        return None, None

    check_optional_text(
        meta.get("notes"),
        errors,
        label="Notes",
        max_length=MAX_NOTES_LENGTH,
        too_long=f"Notes are too long (max {MAX_NOTES_LENGTH} characters)",
    )
    check_optional_text(
        meta.get("destination"),
        errors,
        label="Destination",
        max_length=MAX_DESTINATION_LENGTH,
    )
    return dict(meta), meta.get("mobile_operator")


def _check_airtime(raw_operator: Any, phone: str | None, errors: list[str]) -> None:
    if is_blank(raw_operator) or not isinstance(raw_operator, str):
        errors.append("Mobile operator is required for airtime transactions")
        return
    operator = parse_operator(raw_operator)
    if operator is None:
        errors.append(f"Invalid mobile operator. Must be one of: {', '.join(operator_values())}")
        return
    if phone is None:
        # base phone checks already reported
        return
    error = validate_phone_for_operator(phone, operator)
    if error:
        errors.append(error)


def validate_transaction_input(data: Any) -> ValidationResult[TransactionRequest]:
    """
    Validate a sale-request payload.

    Every violation is collected; the operator prefix rule for airtime only runs
    once the phone has passed its base checks. Airtime numbers are shaped by
    their operator (local 09X numbers would fail the generic international
    pattern), every other service uses the generic pattern.
    """
    req = as_object(data)
    if req is None:
        return ValidationResult.failed([INVALID_BODY])

    errors: list[str] = []

    tx_type = _check_transaction_type(req, errors)
    amount = check_amount(req, errors)
    currency = _check_currency(req, errors)
    phone = _check_phone_base(req, errors)

    if phone is not None and tx_type is not TransactionType.AIRTIME:
        if not PHONE_RE.match(clean_phone(phone)):
            errors.append("Invalid phone number format")

    name = check_optional_text(
        req.get("recipient_name"),
        errors,
        label="Recipient name",
        max_length=MAX_NAME_LENGTH,
    )

    metadata, raw_operator = _check_metadata(req, errors)

    if tx_type is TransactionType.AIRTIME:
        _check_airtime(raw_operator, phone, errors)

    if errors:
        return ValidationResult.failed(errors)

    name = name.strip() if name is not None else None
    return ValidationResult.ok(
        TransactionRequest(
            transaction_type=tx_type,
            amount=amount,
            currency=currency,
            recipient_phone=phone,
            recipient_name=name or None,
            metadata=metadata,
        )
    )
