# routes/wallets.py
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from app.catalog.roles import FLOAT_MANAGERS
from app.errors import InputValidationError
from app.wallets.repository import agent_exists, allocate_float, top_up_wallet
from app.wallets.validator import validate_float_allocation_input, validate_topup_input
from db import get_conn
from db_session import set_db_actor
from deps.auth import CurrentUser
from deps.roles import require_roles
from schemas import (
    FloatAllocationData,
    FloatAllocationRecord,
    FloatAllocationResponse,
    WalletRecord,
    WalletResponse,
)
from services.audit_log import write_audit_log
from services.db_errors import raise_http_from_db_error

logger = logging.getLogger("agency")
router = APIRouter(prefix="/v1", tags=["wallets"])

require_float_manager = require_roles(*FLOAT_MANAGERS)


@router.post("/wallets/top-up", response_model=WalletResponse)
def wallet_top_up(
    payload: Any = Body(default=None),
    user: CurrentUser = Depends(require_float_manager),
):
    logger.info("processing top-up for user_id=%s role=%s", user.user_id, user.role.value)

    result = validate_topup_input(payload)
    if not result.valid:
        logger.info("top-up rejected: errors=%s", list(result.errors))
        raise InputValidationError(result.errors)

    req = result.data
    try:
        with get_conn() as conn:
            with conn.cursor() as cur:
                set_db_actor(cur, user.user_id)

            wallet = top_up_wallet(conn, req=req)
            if wallet is None:
                raise HTTPException(status_code=404, detail="Wallet not found")

            write_audit_log(
                conn,
                actor_user_id=str(user.user_id),
                action="wallet.top_up",
                entity_type="wallet",
                entity_id=str(req.wallet_id),
                new_values={"amount": req.amount, "balance": wallet["balance"]},
            )
    except HTTPException:
        raise
    except Exception as e:
        logger.error("top-up failed: wallet_id=%s error=%s", req.wallet_id, type(e).__name__)
        raise_http_from_db_error(e)

    logger.info("wallet topped up: wallet_id=%s amount=%s", req.wallet_id, req.amount)
    return WalletResponse(data=WalletRecord(**wallet))


@router.post("/float-allocations", response_model=FloatAllocationResponse)
def float_allocation(
    payload: Any = Body(default=None),
    user: CurrentUser = Depends(require_float_manager),
):
    logger.info("processing float allocation for user_id=%s role=%s", user.user_id, user.role.value)

    result = validate_float_allocation_input(payload)
    if not result.valid:
        logger.info("float allocation rejected: errors=%s", list(result.errors))
        raise InputValidationError(result.errors)

    req = result.data
    try:
        with get_conn() as conn:
            with conn.cursor() as cur:
                set_db_actor(cur, user.user_id)

            if not agent_exists(conn, agent_id=req.agent_id):
                raise HTTPException(status_code=404, detail="Agent not found")

            out = allocate_float(conn, req=req, allocated_by=user.user_id)
            write_audit_log(
                conn,
                actor_user_id=str(user.user_id),
                action="float.allocate",
                entity_type="float_allocation",
                entity_id=str(out["allocation"]["id"]),
                new_values={
                    "agent_id": str(req.agent_id),
                    "amount": req.amount,
                    "currency": req.currency.value,
                },
            )
    except HTTPException:
        raise
    except Exception as e:
        logger.error("float allocation failed: agent_id=%s error=%s", req.agent_id, type(e).__name__)
        raise_http_from_db_error(e)

    if out["wallet"] is None:
        logger.warning("agent_id=%s has no %s wallet; allocation recorded only", req.agent_id, req.currency.value)

    return FloatAllocationResponse(
        data=FloatAllocationData(
            allocation=FloatAllocationRecord(**out["allocation"]),
            wallet=WalletRecord(**out["wallet"]) if out["wallet"] else None,
        )
    )
