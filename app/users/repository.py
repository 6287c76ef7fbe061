# app/users/repository.py
from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from app.catalog.services import Currency
from app.users.validator import CreateUserRequest
from security import hash_password
from services.roles import set_user_role


def get_user_by_email(conn, email: str) -> Optional[tuple[UUID, str]]:
    with conn.cursor() as cur:
        cur.execute(
            """
            SELECT id, password_hash
            FROM public.profiles
            WHERE lower(email) = lower(%s)
            LIMIT 1;
            """,
            (email,),
        )
        row = cur.fetchone()
    return (row[0], row[1]) if row else None


def create_user(conn, req: CreateUserRequest) -> dict[str, Any]:
    """
    Profile + role + one zero-balance wallet per currency, in one transaction.
    Raises psycopg2's UniqueViolation (SQLSTATE 23505) for a taken email.
    """
    with conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO public.profiles
              (email, password_hash, full_name, phone, photo_url, national_id_url)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id, email, full_name, phone, created_at;
            """,
            (
                req.email,
                hash_password(req.password),
                req.full_name,
                req.phone,
                req.photo_url,
                req.national_id_url,
            ),
        )
        row = cur.fetchone()
        cols = [d[0] for d in cur.description]
        user = dict(zip(cols, row))

        for currency in Currency:
            cur.execute(
                """
                INSERT INTO public.wallets (user_id, currency, balance)
                VALUES (%s::uuid, %s::public.currency_code, 0)
                ON CONFLICT (user_id, currency) DO NOTHING;
                """,
                (str(user["id"]), currency.value),
            )

    set_user_role(conn, str(user["id"]), req.role)
    user["role"] = req.role.value
    return user


def update_password_hash(conn, user_id: UUID, password_hash: str) -> None:
    with conn.cursor() as cur:
        cur.execute(
            """
            UPDATE public.profiles
            SET password_hash = %s,
                updated_at = now()
            WHERE id = %s::uuid;
            """,
            (password_hash, str(user_id)),
        )
