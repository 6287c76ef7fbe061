# app/transactions/repository.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from psycopg2.extras import Json

from app.catalog.services import Currency, TransactionType
from app.transactions.validator import TransactionRequest

PENDING = "pending"

TRANSACTION_COLUMNS = """
  id,
  agent_id,
  transaction_type,
  amount,
  currency,
  recipient_phone,
  recipient_name,
  status,
  approval_status,
  commission_amount,
  metadata,
  approved_by,
  approved_at,
  rejection_reason,
  escalated_by,
  escalated_at,
  escalation_reason,
  created_at
"""


def _rows(cur) -> list[dict[str, Any]]:
    cols = [d[0] for d in cur.description]
    return [dict(zip(cols, row)) for row in cur.fetchall()]


def _row(cur) -> Optional[dict[str, Any]]:
    row = cur.fetchone()
    if row is None:
        return None
    cols = [d[0] for d in cur.description]
    return dict(zip(cols, row))


# ==========================================================
# Writes
# ==========================================================

def insert_transaction(conn, *, agent_id: UUID, req: TransactionRequest) -> dict[str, Any]:
    """New sale request; always enters the approval queue as pending/pending."""
    cur = conn.cursor()
    cur.execute(
        f"""
        INSERT INTO public.transactions (
          agent_id,
          transaction_type,
          amount,
          currency,
          recipient_name,
          recipient_phone,
          metadata,
          approval_status,
          status
        )
        VALUES (
          %s::uuid,
          %s::public.transaction_type,
          %s,
          %s::public.currency_code,
          %s,
          %s,
          %s::jsonb,
          %s::public.approval_status,
          %s::public.transaction_status
        )
        RETURNING {TRANSACTION_COLUMNS}
        """,
        (
            str(agent_id),
            req.transaction_type.value,
            req.amount,
            req.currency.value,
            req.recipient_name,
            req.recipient_phone,
            Json(req.metadata or {}),
            PENDING,
            PENDING,
        ),
    )
    return _row(cur)


def approve_transaction(
    conn,
    *,
    transaction_id: UUID,
    reviewer_id: UUID,
    commission_amount: Optional[Decimal],
) -> dict[str, Any]:
    cur = conn.cursor()
    cur.execute(
        f"""
        UPDATE public.transactions
        SET approval_status = 'approved'::public.approval_status,
            status = 'approved'::public.transaction_status,
            approved_by = %s::uuid,
            approved_at = now(),
            commission_amount = %s
        WHERE id = %s::uuid
        RETURNING {TRANSACTION_COLUMNS}
        """,
        (str(reviewer_id), commission_amount, str(transaction_id)),
    )
    return _row(cur)


def reject_transaction(conn, *, transaction_id: UUID, reviewer_id: UUID, reason: str) -> dict[str, Any]:
    cur = conn.cursor()
    cur.execute(
        f"""
        UPDATE public.transactions
        SET approval_status = 'rejected'::public.approval_status,
            status = 'rejected'::public.transaction_status,
            approved_by = %s::uuid,
            approved_at = now(),
            rejection_reason = %s
        WHERE id = %s::uuid
        RETURNING {TRANSACTION_COLUMNS}
        """,
        (str(reviewer_id), reason, str(transaction_id)),
    )
    return _row(cur)


def escalate_transaction(
    conn,
    *,
    transaction_id: UUID,
    escalated_by: UUID,
    reason: Optional[str],
) -> dict[str, Any]:
    """Hand a pending sale up to a super agent; the sale itself stays pending."""
    cur = conn.cursor()
    cur.execute(
        f"""
        UPDATE public.transactions
        SET approval_status = 'escalated'::public.approval_status,
            escalated_by = %s::uuid,
            escalated_at = now(),
            escalation_reason = %s
        WHERE id = %s::uuid
        RETURNING {TRANSACTION_COLUMNS}
        """,
        (str(escalated_by), reason, str(transaction_id)),
    )
    return _row(cur)


# ==========================================================
# Reads
# ==========================================================

def get_transaction_for_update(conn, *, transaction_id: UUID) -> Optional[dict[str, Any]]:
    cur = conn.cursor()
    cur.execute(
        f"SELECT {TRANSACTION_COLUMNS} FROM public.transactions WHERE id = %s::uuid FOR UPDATE",
        (str(transaction_id),),
    )
    return _row(cur)


def list_agent_transactions(conn, *, agent_id: UUID, limit: int = 1000) -> list[dict[str, Any]]:
    cur = conn.cursor()
    cur.execute(
        f"""
        SELECT {TRANSACTION_COLUMNS}
        FROM public.transactions
        WHERE agent_id = %s::uuid
        ORDER BY created_at DESC, id DESC
        LIMIT %s
        """,
        (str(agent_id), int(limit)),
    )
    return _rows(cur)


def approved_volume(
    conn,
    *,
    agent_id: UUID,
    transaction_type: TransactionType = TransactionType.AIRTIME,
    currency: Currency = Currency.SSP,
) -> Decimal:
    """Cumulative approved sales for one service/currency; drives the commission tier."""
    cur = conn.cursor()
    cur.execute(
        """
        SELECT COALESCE(SUM(amount), 0)
        FROM public.transactions
        WHERE agent_id = %s::uuid
          AND transaction_type = %s::public.transaction_type
          AND currency = %s::public.currency_code
          AND approval_status = 'approved'
        """,
        (str(agent_id), transaction_type.value, currency.value),
    )
    row = cur.fetchone()
    return Decimal(row[0] or 0) if row else Decimal(0)
