# services/db_errors.py
from __future__ import annotations

import logging
import re
from fastapi import HTTPException

logger = logging.getLogger("agency")

DB_ERROR_HTTP_MAP: dict[str, tuple[int, str]] = {
    "WALLET_NOT_FOUND": (404, "Wallet not found"),
    "AGENT_NOT_FOUND": (404, "Agent not found"),
    "USER_NOT_FOUND": (404, "User not found"),
    "EMAIL_TAKEN": (409, "A user with this email already exists"),
    "INVALID_AMOUNT": (400, "Invalid amount"),
    "INSUFFICIENT_FUNDS": (409, "Insufficient funds"),
    "FORBIDDEN": (403, "Insufficient permissions"),
}

# SQLSTATE classes raised by constraints and row-level policies
PGCODE_HTTP_MAP: dict[str, tuple[int, str]] = {
    "23505": (409, "Duplicate record"),
    "23503": (404, "Referenced record not found"),
    "23514": (400, "Value out of allowed range"),
    "22P02": (400, "Invalid value"),
    "42501": (403, "Insufficient permissions"),
}

# word-boundary match (avoids substring mistakes)
_DB_ERROR_PATTERN = re.compile(r"\b(" + "|".join(map(re.escape, DB_ERROR_HTTP_MAP.keys())) + r")\b")


def _extract_code_from_text(text: str) -> str | None:
    if not text:
        return None

    # Preferred format: "DB_ERROR: CODE"
    if "DB_ERROR:" in text:
        tail = text.split("DB_ERROR:", 1)[1].strip()
        m = _DB_ERROR_PATTERN.search(tail)
        if m:
            return m.group(1)
        first = tail.split()[0].strip(":").strip() if tail.split() else ""
        return first or None

    m = _DB_ERROR_PATTERN.search(text)
    if m:
        return m.group(1)

    return None


def _extract_code(exc: Exception) -> str | None:
    """
    Extract a business error code from str(exc), then from psycopg2 diagnostics.
    """
    code = _extract_code_from_text(str(exc))
    if code:
        return code

    diag = getattr(exc, "diag", None)
    if diag is not None:
        for attr in ("message_primary", "message_detail", "message_hint", "context"):
            val = getattr(diag, attr, None)
            if isinstance(val, str) and val:
                code = _extract_code_from_text(val)
                if code:
                    return code

    return None


def raise_http_from_db_error(exc: Exception) -> None:
    """
    Convert known DB errors into HTTP responses; otherwise fail closed with 500.
    """
    code = _extract_code(exc)
    if code and code in DB_ERROR_HTTP_MAP:
        status, message = DB_ERROR_HTTP_MAP[code]
        raise HTTPException(status_code=status, detail=message)

    pgcode = getattr(exc, "pgcode", None)
    if pgcode and pgcode in PGCODE_HTTP_MAP:
        status, message = PGCODE_HTTP_MAP[pgcode]
        raise HTTPException(status_code=status, detail=message)

    logger.error("unmapped db error: %s", type(exc).__name__)
    raise HTTPException(status_code=500, detail="An unexpected error occurred")
