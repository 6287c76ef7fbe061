from __future__ import annotations

import re
from typing import Any


_EMAIL_RE = re.compile(r"\b([A-Za-z0-9._%+-])([A-Za-z0-9._%+-]*)(@[A-Za-z0-9.-]+\.[A-Za-z]{2,})\b")
# international (+21192...) and local (0921234567) forms, with optional separators
_PHONE_RE = re.compile(r"(?<![\w+])(\+\d[\d \-]{6,18}\d|0\d[\d \-]{6,12}\d)(?!\w)")

_SECRET_KEY_MARKERS = (
    "token",
    "authorization",
    "secret",
    "password",
    "national_id",
)

_PHONE_KEY_MARKERS = ("phone",)


def mask_phone(value: str) -> str:
    """Keep the operator prefix and the last two digits: +21192****67, 092****67."""
    digits = re.sub(r"[\s-]", "", value or "")
    if len(digits) <= 6:
        return digits
    keep = 6 if digits.startswith("+") else 3
    return f"{digits[:keep]}****{digits[-2:]}"


def _mask_email(match: re.Match) -> str:
    return f"{match.group(1)}***{match.group(3)}"


def redact_text(value: str) -> str:
    masked = _EMAIL_RE.sub(_mask_email, value)
    masked = _PHONE_RE.sub(lambda m: mask_phone(m.group(0)), masked)

    lowered = masked.lower()
    if "bearer " in lowered or "access_token" in lowered:
        return "[REDACTED]"

    return masked


def _key_has(key: str, markers: tuple[str, ...]) -> bool:
    key_l = (key or "").lower()
    return any(marker in key_l for marker in markers)


def redact_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, dict):
        return redact_dict(value)
    if isinstance(value, (list, tuple)):
        return [redact_value(v) for v in value]
    return value


def redact_dict(payload: dict[str, Any]) -> dict[str, Any]:
    """Copy of payload safe to log: secrets dropped, phones and emails masked."""
    out: dict[str, Any] = {}
    for k, v in payload.items():
        if _key_has(k, _SECRET_KEY_MARKERS):
            out[k] = "[REDACTED]"
        elif _key_has(k, _PHONE_KEY_MARKERS) and isinstance(v, str):
            out[k] = mask_phone(v)
        else:
            out[k] = redact_value(v)
    return out
