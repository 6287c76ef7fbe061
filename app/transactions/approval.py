# app/transactions/approval.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Optional

from app.catalog.roles import AppRole
from app.catalog.services import Currency, TransactionType, parse_currency, parse_transaction_type
from app.commission.tiers import AIRTIME_COMMISSION_TIERS_SSP, commission_for_amount
from app.validation import INVALID_BODY, ValidationResult, as_object, check_optional_text, is_blank

MAX_REASON_LENGTH = 500
CENT = Decimal("0.01")


class InvalidTransition(Exception):
    pass


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ESCALATED = "escalated"


ALLOWED = {
    ApprovalStatus.PENDING: {ApprovalStatus.APPROVED, ApprovalStatus.REJECTED, ApprovalStatus.ESCALATED},
    ApprovalStatus.ESCALATED: {ApprovalStatus.APPROVED, ApprovalStatus.REJECTED},
    ApprovalStatus.APPROVED: set(),
    ApprovalStatus.REJECTED: set(),
}

# transaction status written alongside each approval decision
STATUS_FOR_DECISION = {
    ApprovalStatus.APPROVED: "approved",
    ApprovalStatus.REJECTED: "rejected",
    ApprovalStatus.ESCALATED: "pending",
}

# escalated sales are decided above the sales assistant
ESCALATION_REVIEWERS = frozenset({AppRole.SUPER_AGENT})


def parse_approval_status(value: Any) -> ApprovalStatus | None:
    try:
        return ApprovalStatus(str(value))
    except ValueError:
        return None


def assert_transition(old: ApprovalStatus | str, new: ApprovalStatus) -> None:
    current = parse_approval_status(old)
    if current is None or new not in ALLOWED.get(current, set()):
        raise InvalidTransition(f"Illegal approval transition: {old} -> {new.value}")


def can_decide(role: AppRole | None, current: ApprovalStatus | str) -> bool:
    if parse_approval_status(current) is ApprovalStatus.ESCALATED:
        return role in ESCALATION_REVIEWERS
    return True


@dataclass(frozen=True)
class ReviewRequest:
    reason: Optional[str] = None


def validate_review_input(data: Any, *, reason_required: bool) -> ValidationResult[ReviewRequest]:
    """
    Body of a reject or escalate call: `{"reason": "..."}`.

    Rejections must say why; an escalation reason is optional. A missing body
    is the same as an empty object.
    """
    req = {} if data is None else as_object(data)
    if req is None:
        return ValidationResult.failed([INVALID_BODY])

    errors: list[str] = []
    raw = req.get("reason")
    if reason_required and (is_blank(raw) or (isinstance(raw, str) and not raw.strip())):
        errors.append("Reason is required")
        return ValidationResult.failed(errors)

    reason = check_optional_text(raw, errors, label="Reason", max_length=MAX_REASON_LENGTH)
    if errors:
        return ValidationResult.failed(errors)
    return ValidationResult.ok(ReviewRequest(reason=(reason or "").strip() or None))


def earns_commission(transaction_type: Any, currency: Any) -> bool:
    """Only airtime sold in SSP is paid on the tier table."""
    return (
        parse_transaction_type(str(transaction_type)) is TransactionType.AIRTIME
        and parse_currency(str(currency)) is Currency.SSP
    )


def sale_commission(amount, prior_volume, tiers=AIRTIME_COMMISSION_TIERS_SSP) -> Decimal:
    # rate comes from the volume approved before this sale
    return commission_for_amount(amount, prior_volume, tiers).quantize(CENT, rounding=ROUND_HALF_UP)
