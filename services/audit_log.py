from __future__ import annotations

import json
from typing import Any
from psycopg2.extras import Json

from services.observability import get_request_id


def _dumps(value: Any) -> str:
    # Decimal amounts and UUIDs end up in the payloads
    return json.dumps(value, default=str)


def write_audit_log(
    conn,
    *,
    actor_user_id: str,
    action: str,
    entity_type: str,
    entity_id: str | None,
    old_values: dict[str, Any] | None = None,
    new_values: dict[str, Any] | None = None,
    ip_address: str | None = None,
) -> None:
    with conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO public.audit_logs
              (actor_user_id, action, entity_type, entity_id, old_values, new_values, ip_address, request_id)
            VALUES (%s::uuid, %s, %s, %s, %s::jsonb, %s::jsonb, %s, %s);
            """,
            (
                actor_user_id,
                action,
                entity_type,
                entity_id,
                Json(old_values, dumps=_dumps) if old_values is not None else None,
                Json(dict(new_values or {}), dumps=_dumps),
                ip_address,
                get_request_id(),
            ),
        )
