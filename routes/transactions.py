# routes/transactions.py
from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from app.catalog.roles import FLOAT_MANAGERS, AppRole
from app.catalog.services import SERVICE_LABELS, parse_transaction_type
from app.errors import InputValidationError
from app.pagination import Paginator
from app.transactions.approval import (
    STATUS_FOR_DECISION,
    ApprovalStatus,
    InvalidTransition,
    assert_transition,
    can_decide,
    earns_commission,
    sale_commission,
    validate_review_input,
)
from app.transactions.repository import (
    approve_transaction,
    approved_volume,
    escalate_transaction,
    get_transaction_for_update,
    insert_transaction,
    list_agent_transactions,
    reject_transaction,
)
from app.transactions.validator import validate_transaction_input
from db import get_conn
from db_session import set_db_actor
from deps.auth import CurrentUser, get_current_user
from deps.roles import INSUFFICIENT_PERMISSIONS, require_roles
from schemas import (
    PageInfo,
    TransactionCreatedResponse,
    TransactionPageResponse,
    TransactionRecord,
    TransactionReviewResponse,
)
from services.audit_log import write_audit_log
from services.db_errors import raise_http_from_db_error
from services.redaction import redact_dict
from settings import settings

logger = logging.getLogger("agency")
router = APIRouter(prefix="/v1", tags=["transactions"])

TRANSACTION_NOT_FOUND = "Transaction not found"
NOT_REVIEWABLE = "Only pending transactions can be reviewed"

_ACTIONS = {
    ApprovalStatus.APPROVED: "approve",
    ApprovalStatus.REJECTED: "reject",
    ApprovalStatus.ESCALATED: "escalate",
}


def _service_label(transaction_type: Any) -> str:
    parsed = parse_transaction_type(str(transaction_type))
    return SERVICE_LABELS[parsed] if parsed else str(transaction_type)


@router.post("/transactions", response_model=TransactionCreatedResponse)
def create_transaction(
    payload: Any = Body(default=None),
    user: CurrentUser = Depends(get_current_user),
):
    logger.info("processing sale request for user_id=%s", user.user_id)

    result = validate_transaction_input(payload)
    if not result.valid:
        logger.info("sale request rejected: user_id=%s errors=%s", user.user_id, list(result.errors))
        raise InputValidationError(result.errors)

    req = result.data
    logger.info("validated sale request: %s", redact_dict(req.to_dict()))

    try:
        with get_conn() as conn:
            with conn.cursor() as cur:
                set_db_actor(cur, user.user_id)

            record = insert_transaction(conn, agent_id=user.user_id, req=req)
            write_audit_log(
                conn,
                actor_user_id=str(user.user_id),
                action="transaction.create",
                entity_type="transaction",
                entity_id=str(record["id"]),
                new_values={
                    "transaction_type": req.transaction_type.value,
                    "service": SERVICE_LABELS[req.transaction_type],
                    "amount": req.amount,
                    "currency": req.currency.value,
                },
            )
    except HTTPException:
        raise
    except Exception as e:
        logger.error("sale request insert failed: user_id=%s error=%s", user.user_id, type(e).__name__)
        raise_http_from_db_error(e)

    logger.info("transaction created: id=%s service=%s", record["id"], SERVICE_LABELS[req.transaction_type])
    return TransactionCreatedResponse(data=TransactionRecord(**record))


@router.get("/transactions", response_model=TransactionPageResponse)
def my_transactions(
    page: int = Query(default=1, ge=1),
    page_size: Optional[int] = Query(default=None, ge=1),
    user: CurrentUser = Depends(get_current_user),
):
    size = min(page_size or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)

    try:
        with get_conn() as conn:
            with conn.cursor() as cur:
                set_db_actor(cur, user.user_id)
            rows = list_agent_transactions(conn, agent_id=user.user_id)
    except HTTPException:
        raise
    except Exception as e:
        raise_http_from_db_error(e)

    pager = Paginator(rows, page_size=size, page=page)
    return TransactionPageResponse(
        data=[TransactionRecord(**r) for r in pager.page_items],
        pagination=PageInfo(**pager.to_dict()),
    )


def _decide(
    transaction_id: UUID,
    decision: ApprovalStatus,
    user: CurrentUser,
    *,
    reason: Optional[str] = None,
) -> dict[str, Any]:
    """
    Apply a supervisor decision to a queued sale.

    The row is locked while the decision is taken. Approving SSP airtime stores
    the commission earned at the agent's tier before this sale.
    """
    try:
        with get_conn() as conn:
            with conn.cursor() as cur:
                set_db_actor(cur, user.user_id)

            record = get_transaction_for_update(conn, transaction_id=transaction_id)
            if record is None:
                raise HTTPException(status_code=404, detail=TRANSACTION_NOT_FOUND)

            current = record["approval_status"]
            try:
                assert_transition(current, decision)
            except InvalidTransition:
                logger.info("sale review refused: id=%s approval_status=%s", transaction_id, current)
                raise HTTPException(status_code=409, detail=NOT_REVIEWABLE)

            if not can_decide(user.role, current):
                logger.info("user_id=%s cannot decide escalated sale id=%s", user.user_id, transaction_id)
                raise HTTPException(status_code=403, detail=INSUFFICIENT_PERMISSIONS)

            commission = None
            if decision is ApprovalStatus.APPROVED:
                if earns_commission(record["transaction_type"], record["currency"]):
                    prior = approved_volume(conn, agent_id=record["agent_id"])
                    commission = sale_commission(record["amount"], prior)
                updated = approve_transaction(
                    conn,
                    transaction_id=transaction_id,
                    reviewer_id=user.user_id,
                    commission_amount=commission,
                )
            elif decision is ApprovalStatus.REJECTED:
                updated = reject_transaction(
                    conn,
                    transaction_id=transaction_id,
                    reviewer_id=user.user_id,
                    reason=reason,
                )
            else:
                updated = escalate_transaction(
                    conn,
                    transaction_id=transaction_id,
                    escalated_by=user.user_id,
                    reason=reason,
                )

            service = _service_label(record["transaction_type"])
            write_audit_log(
                conn,
                actor_user_id=str(user.user_id),
                action=f"transaction.{_ACTIONS[decision]}",
                entity_type="transaction",
                entity_id=str(transaction_id),
                old_values={"approval_status": str(current), "status": str(record["status"])},
                new_values={
                    "approval_status": decision.value,
                    "status": STATUS_FOR_DECISION[decision],
                    "service": service,
                    "commission_amount": commission,
                    "reason": reason,
                },
            )
    except HTTPException:
        raise
    except Exception as e:
        logger.error("sale review failed: id=%s error=%s", transaction_id, type(e).__name__)
        raise_http_from_db_error(e)

    logger.info(
        "sale %s: id=%s service=%s by user_id=%s",
        decision.value,
        transaction_id,
        service,
        user.user_id,
    )
    return updated


@router.post("/transactions/{transaction_id}/approve", response_model=TransactionReviewResponse)
def approve_sale(
    transaction_id: UUID,
    user: CurrentUser = Depends(require_roles(*FLOAT_MANAGERS)),
):
    record = _decide(transaction_id, ApprovalStatus.APPROVED, user)
    return TransactionReviewResponse(message="Request approved successfully", data=TransactionRecord(**record))


@router.post("/transactions/{transaction_id}/reject", response_model=TransactionReviewResponse)
def reject_sale(
    transaction_id: UUID,
    payload: Any = Body(default=None),
    user: CurrentUser = Depends(require_roles(*FLOAT_MANAGERS)),
):
    result = validate_review_input(payload, reason_required=True)
    if not result.valid:
        raise InputValidationError(result.errors)

    record = _decide(transaction_id, ApprovalStatus.REJECTED, user, reason=result.data.reason)
    return TransactionReviewResponse(message="Request rejected", data=TransactionRecord(**record))


@router.post("/transactions/{transaction_id}/escalate", response_model=TransactionReviewResponse)
def escalate_sale(
    transaction_id: UUID,
    payload: Any = Body(default=None),
    user: CurrentUser = Depends(require_roles(AppRole.SALES_ASSISTANT)),
):
    result = validate_review_input(payload, reason_required=False)
    if not result.valid:
        raise InputValidationError(result.errors)

    record = _decide(transaction_id, ApprovalStatus.ESCALATED, user, reason=result.data.reason)
    return TransactionReviewResponse(message="Request escalated", data=TransactionRecord(**record))
