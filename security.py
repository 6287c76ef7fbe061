from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from settings import settings

# pbkdf2 hashes from older imports still verify and get upgraded on login
pwd_context = CryptContext(
    schemes=["bcrypt", "pbkdf2_sha256"],
    deprecated=["pbkdf2_sha256"],
)

ACCESS_TOKEN_TYPE = "access"
TOKEN_ISSUER = "agency-api"


# -----------------------
# Password hashing
# -----------------------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)

def password_needs_rehash(password_hash: str) -> bool:
    return bool(password_hash) and pwd_context.needs_update(password_hash)


# -----------------------
# Access tokens (JWT)
# -----------------------
def create_access_token(sub: str, minutes: Optional[int] = None) -> str:
    exp_minutes = minutes if minutes is not None else settings.JWT_ACCESS_MINUTES
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "typ": ACCESS_TOKEN_TYPE,
        "iss": TOKEN_ISSUER,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=exp_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)

def decode_token(token: str) -> Dict[str, Any]:
    """Claims of a valid access token; {} for anything expired, forged or of another type."""
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
            issuer=TOKEN_ISSUER,
        )
    except JWTError:
        return {}
    if claims.get("typ") != ACCESS_TOKEN_TYPE:
        return {}
    return claims
