from __future__ import annotations

from app.catalog.roles import AppRole, parse_role


def get_user_role(conn, user_id: str) -> AppRole | None:
    if not user_id:
        return None

    with conn.cursor() as cur:
        cur.execute(
            """
            SELECT role
            FROM public.user_roles
            WHERE user_id = %s::uuid
            ORDER BY created_at
            LIMIT 1
            """,
            (str(user_id),),
        )
        row = cur.fetchone()

    if not row:
        return None
    return parse_role(row[0])


def set_user_role(conn, user_id: str, role: AppRole) -> None:
    with conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO public.user_roles (user_id, role)
            VALUES (%s::uuid, %s::public.app_role)
            ON CONFLICT (user_id) DO UPDATE
              SET role = EXCLUDED.role;
            """,
            (str(user_id), role.value),
        )
