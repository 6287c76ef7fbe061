# routes/users.py
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from app.catalog.roles import USER_CREATORS, AppRole
from app.errors import InputValidationError
from app.users.repository import create_user
from app.users.validator import can_create_role, validate_create_user_input
from db import get_conn
from deps.auth import CurrentUser
from deps.roles import require_roles
from schemas import UserCreatedResponse, UserRecord
from services.audit_log import write_audit_log
from services.db_errors import raise_http_from_db_error
from services.redaction import redact_text

logger = logging.getLogger("agency")
router = APIRouter(prefix="/v1", tags=["users"])


@router.post("/users", response_model=UserCreatedResponse)
def create_user_route(
    payload: Any = Body(default=None),
    user: CurrentUser = Depends(require_roles(*USER_CREATORS)),
):
    result = validate_create_user_input(payload)
    if not result.valid:
        raise InputValidationError(result.errors)

    req = result.data
    if not can_create_role(user.role, req.role):
        if user.role is AppRole.HR_FINANCE:
            detail = "HR/Finance cannot create Super Agent users"
        else:
            detail = "Insufficient permissions"
        raise HTTPException(status_code=403, detail=detail)

    logger.info(
        "creating user: email=%s role=%s created_by_role=%s",
        redact_text(req.email),
        req.role.value,
        user.role.value,
    )

    try:
        with get_conn() as conn:
            created = create_user(conn, req)
            write_audit_log(
                conn,
                actor_user_id=str(user.user_id),
                action="user.create",
                entity_type="user",
                entity_id=str(created["id"]),
                new_values={"role": req.role.value},
            )
    except HTTPException:
        raise
    except Exception as e:
        if getattr(e, "pgcode", None) == "23505":
            raise HTTPException(status_code=409, detail="A user with this email already exists")
        raise_http_from_db_error(e)

    return UserCreatedResponse(data=UserRecord(**created))
