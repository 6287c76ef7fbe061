# routes/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException

from app.users.repository import get_user_by_email, update_password_hash
from db import get_conn
from deps.auth import CurrentUser
from deps.roles import current_user_with_role
from schemas import LoginRequest, LoginResponse, MeResponse
from security import create_access_token, hash_password, password_needs_rehash, verify_password
from services.redaction import redact_text

logger = logging.getLogger("agency")
router = APIRouter(prefix="/v1/auth", tags=["auth"])

INVALID_CREDENTIALS = "Invalid email or password"


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest):
    with get_conn() as conn:
        row = get_user_by_email(conn, body.email)

        if not row:
            logger.info("login failed: unknown email=%s", redact_text(body.email))
            raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

        user_id, password_hash_db = row

        if not verify_password(body.password, password_hash_db):
            logger.info("login failed: bad password for user_id=%s", user_id)
            raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

        if password_needs_rehash(password_hash_db):
            update_password_hash(conn, user_id, hash_password(body.password))

    token = create_access_token(sub=str(user_id))
    return LoginResponse(access_token=token, user_id=user_id)


@router.get("/me", response_model=MeResponse)
def me(user: CurrentUser = Depends(current_user_with_role)):
    return MeResponse(user_id=user.user_id, role=user.role.value if user.role else None)
