import logging
from typing import Callable

from fastapi import Depends, HTTPException, status

from app.catalog.roles import AppRole
from db import get_conn
from deps.auth import CurrentUser, get_current_user
from services.roles import get_user_role

logger = logging.getLogger("agency")

INSUFFICIENT_PERMISSIONS = "Insufficient permissions"


def current_user_with_role(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    with get_conn() as conn:
        user.role = get_user_role(conn, str(user.user_id))
    return user


def require_roles(*allowed: AppRole) -> Callable[..., CurrentUser]:
    allowed_set = frozenset(allowed)

    def _dependency(user: CurrentUser = Depends(current_user_with_role)) -> CurrentUser:
        if user.role is None:
            logger.info("role check failed: user_id=%s has no role", user.user_id)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")
        if user.role not in allowed_set:
            logger.info("user_id=%s role=%s lacks permission", user.user_id, user.role.value)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=INSUFFICIENT_PERMISSIONS,
            )
        return user

    return _dependency
