from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.catalog.roles import AppRole
from security import decode_token

bearer = HTTPBearer(auto_error=False)

UNAUTHORIZED = "Unauthorized"


@dataclass
class CurrentUser:
    user_id: UUID
    # filled in by deps.roles once the role has been looked up
    role: Optional[AppRole] = None


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=UNAUTHORIZED,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> CurrentUser:
    if not creds or (creds.scheme or "").lower() != "bearer":
        raise _unauthorized()

    sub = decode_token(creds.credentials).get("sub")
    if not sub:
        raise _unauthorized()

    try:
        return CurrentUser(user_id=UUID(sub))
    except (TypeError, ValueError):
        raise _unauthorized()
