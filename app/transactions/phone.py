from __future__ import annotations

import re

from app.catalog.operators import (
    INTERNATIONAL_PHONE_LENGTH,
    LOCAL_PHONE_LENGTH,
    OPERATOR_PREFIXES,
    MobileOperator,
)

_SEPARATORS_RE = re.compile(r"[\s-]")
_DIGITS_RE = re.compile(r"^\+?\d+$")


def clean_phone(phone: str) -> str:
    return _SEPARATORS_RE.sub("", phone or "")


def _wrong_prefix_message(operator: MobileOperator) -> str:
    prefixes = OPERATOR_PREFIXES[operator]
    return (
        f"Phone number must start with {prefixes.local} or {prefixes.international} "
        f"for {operator.value.upper()}"
    )


def validate_phone_for_operator(phone: str, operator: MobileOperator) -> str | None:
    """
    Strict check used before a sale request is persisted.

    Returns an error message, or None when the number belongs to the operator:
    local form is the local prefix and exactly 10 digits, international form
    is "+" plus the international prefix and digits, exactly 13 characters.
    """
    cleaned = clean_phone(phone)
    if not _DIGITS_RE.match(cleaned):
        return _wrong_prefix_message(operator)

    prefixes = OPERATOR_PREFIXES[operator]
    if cleaned.startswith("+"):
        if not cleaned.startswith(prefixes.international):
            return _wrong_prefix_message(operator)
        if len(cleaned) != INTERNATIONAL_PHONE_LENGTH:
            return f"International phone number must be {INTERNATIONAL_PHONE_LENGTH} characters"
        return None

    if not cleaned.startswith(prefixes.local):
        return _wrong_prefix_message(operator)
    if len(cleaned) != LOCAL_PHONE_LENGTH:
        return f"Local phone number must be {LOCAL_PHONE_LENGTH} digits"
    return None


def validate_phone_prefix(phone: str, operator: MobileOperator) -> str | None:
    """Lenient variant for partially typed numbers; empty input is accepted."""
    if not phone:
        return None

    prefixes = OPERATOR_PREFIXES[operator]
    cleaned = clean_phone(phone)
    message = f"{prefixes.label} numbers must start with {prefixes.local} or {prefixes.international}"

    if cleaned.startswith("+"):
        if not cleaned.startswith(prefixes.international):
            return message
        if len(cleaned) > INTERNATIONAL_PHONE_LENGTH:
            return "Phone number is too long"
        return None

    # only flag a wrong local prefix once enough has been typed to tell
    typed = cleaned[: len(prefixes.local)]
    if len(cleaned) >= 2 and not prefixes.local.startswith(typed):
        return message
    if len(cleaned) > LOCAL_PHONE_LENGTH:
        return "Phone number is too long"
    return None


def validate_phone_prefix_realtime(phone: str, operator: MobileOperator | None) -> str | None:
    """Progressive prefix warning while the number is being entered."""
    if not phone or operator is None:
        return None

    prefixes = OPERATOR_PREFIXES[operator]
    cleaned = clean_phone(phone)

    if cleaned.startswith("+"):
        expected = prefixes.international
        if cleaned[: len(expected)] != expected[: len(cleaned)]:
            return f"Invalid prefix for {prefixes.label}. Expected: {expected}"
        return None

    expected = prefixes.local
    if cleaned and cleaned[: len(expected)] != expected[: len(cleaned)]:
        return f"Invalid prefix for {prefixes.label}. Expected: {expected} or {prefixes.international}"
    return None


def format_phone_number(phone: str) -> str:
    cleaned = clean_phone(phone)

    if cleaned.startswith("+"):
        # +211 92 XXX XXXX
        if len(cleaned) > 4:
            parts = [cleaned[:4], cleaned[4:6], cleaned[6:9], cleaned[9:]]
            return " ".join(p for p in parts if p)
        return cleaned

    # 092 XXX XXXX
    if len(cleaned) > 3:
        parts = [cleaned[:3], cleaned[3:6], cleaned[6:]]
        return " ".join(p for p in parts if p)
    return cleaned


def is_phone_complete(phone: str, operator: MobileOperator) -> bool:
    cleaned = clean_phone(phone)
    if not _DIGITS_RE.match(cleaned):
        return False
    prefixes = OPERATOR_PREFIXES[operator]
    if cleaned.startswith("+"):
        return len(cleaned) == INTERNATIONAL_PHONE_LENGTH and cleaned.startswith(prefixes.international)
    return len(cleaned) == LOCAL_PHONE_LENGTH and cleaned.startswith(prefixes.local)
