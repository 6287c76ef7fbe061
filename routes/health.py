from __future__ import annotations

from fastapi import APIRouter

from db import get_conn
from settings import settings

router = APIRouter(tags=["health"])

MIGRATION_REVISION = "0002_transaction_approval"


def _check_db() -> tuple[bool, str | None]:
    try:
        with get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True, None
    except Exception as exc:
        return False, type(exc).__name__


def _check_migrations() -> bool:
    try:
        with get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT to_regclass('public.alembic_version');")
                if not cur.fetchone()[0]:
                    return False
                cur.execute("SELECT version_num FROM alembic_version LIMIT 1;")
                row = cur.fetchone()
                return bool(row and row[0])
    except Exception:
        return False


@router.get("/health")
def health():
    return {
        "success": True,
        "data": {"ok": True, "env": settings.ENV, "version": settings.APP_VERSION},
    }


@router.get("/readyz")
def readyz():
    db_ok, db_error = _check_db()
    migrations_ok = _check_migrations() if db_ok else False
    ready = bool(db_ok and migrations_ok)
    return {
        "success": ready,
        "data": {
            "ready": ready,
            "version": settings.APP_VERSION,
            "db_ok": db_ok,
            "db_error": db_error,
            "migrations_ok": migrations_ok,
            "migration_revision": MIGRATION_REVISION,
        },
    }
