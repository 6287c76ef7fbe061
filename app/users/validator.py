from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from email_validator import EmailNotValidError, validate_email

from app.catalog.roles import USER_CREATORS, AppRole, parse_role, role_values
from app.validation import INVALID_BODY, ValidationResult, as_object, check_optional_text, is_blank

MIN_PASSWORD_LENGTH = 8
MAX_NAME_LENGTH = 100
MAX_PHONE_LENGTH = 20
MAX_URL_LENGTH = 500


@dataclass(frozen=True)
class CreateUserRequest:
    email: str
    password: str
    full_name: str
    role: AppRole
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    national_id_url: Optional[str] = None


def can_create_role(creator: AppRole | None, new_role: AppRole) -> bool:
    """Super agents create anyone; HR/finance create anyone but super agents."""
    if creator not in USER_CREATORS:
        return False
    if creator is AppRole.HR_FINANCE and new_role is AppRole.SUPER_AGENT:
        return False
    return True


def _check_email(value: Any, errors: list[str]) -> str | None:
    if is_blank(value) or not isinstance(value, str):
        errors.append("Email is required")
        return None
    try:
        return validate_email(value.strip(), check_deliverability=False).normalized
    except EmailNotValidError:
        errors.append("Invalid email address")
        return None


def validate_create_user_input(data: Any) -> ValidationResult[CreateUserRequest]:
    req = as_object(data)
    if req is None:
        return ValidationResult.failed([INVALID_BODY])

    errors: list[str] = []
    email = _check_email(req.get("email"), errors)

    password = req.get("password")
    if is_blank(password) or not isinstance(password, str):
        errors.append("Password is required")
        password = None
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        password = None

    full_name = req.get("full_name")
    if is_blank(full_name) or not isinstance(full_name, str) or not full_name.strip():
        errors.append("Full name is required")
        full_name = None
    elif len(full_name.strip()) > MAX_NAME_LENGTH:
        errors.append(f"Full name is too long (max {MAX_NAME_LENGTH} characters)")
        full_name = None

    role = None
    raw_role = req.get("role")
    if is_blank(raw_role) or not isinstance(raw_role, str):
        errors.append("Role is required")
    else:
        role = parse_role(raw_role)
        if role is None:
            errors.append(f"Invalid role. Must be one of: {', '.join(role_values())}")

    phone = check_optional_text(req.get("phone"), errors, label="Phone", max_length=MAX_PHONE_LENGTH)
    photo_url = check_optional_text(req.get("photo_url"), errors, label="Photo URL", max_length=MAX_URL_LENGTH)
    national_id_url = check_optional_text(
        req.get("national_id_url"), errors, label="National ID URL", max_length=MAX_URL_LENGTH
    )

    if errors:
        return ValidationResult.failed(errors)
    return ValidationResult.ok(
        CreateUserRequest(
            email=email,
            password=password,
            full_name=full_name.strip(),
            role=role,
            phone=(phone or "").strip() or None,
            photo_url=photo_url or None,
            national_id_url=national_id_url or None,
        )
    )
