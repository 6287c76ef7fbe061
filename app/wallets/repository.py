# app/wallets/repository.py
from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from app.wallets.validator import FloatAllocationRequest, TopUpRequest

WALLET_COLUMNS = "id, user_id, currency, balance, updated_at"


def _row(cur) -> Optional[dict[str, Any]]:
    row = cur.fetchone()
    if row is None:
        return None
    cols = [d[0] for d in cur.description]
    return dict(zip(cols, row))


def get_wallet_for_update(conn, *, wallet_id: UUID) -> Optional[dict[str, Any]]:
    cur = conn.cursor()
    cur.execute(
        f"SELECT {WALLET_COLUMNS} FROM public.wallets WHERE id = %s::uuid FOR UPDATE",
        (str(wallet_id),),
    )
    return _row(cur)


def credit_wallet(conn, *, wallet_id: UUID, amount) -> dict[str, Any]:
    """Add amount to the wallet balance in place and return the updated row."""
    cur = conn.cursor()
    cur.execute(
        f"""
        UPDATE public.wallets
        SET balance = balance + %s,
            updated_at = now()
        WHERE id = %s::uuid
        RETURNING {WALLET_COLUMNS}
        """,
        (amount, str(wallet_id)),
    )
    return _row(cur)


def top_up_wallet(conn, *, req: TopUpRequest) -> Optional[dict[str, Any]]:
    wallet = get_wallet_for_update(conn, wallet_id=req.wallet_id)
    if wallet is None:
        return None
    return credit_wallet(conn, wallet_id=req.wallet_id, amount=req.amount)


def agent_exists(conn, *, agent_id: UUID) -> bool:
    cur = conn.cursor()
    cur.execute("SELECT 1 FROM public.profiles WHERE id = %s::uuid", (str(agent_id),))
    return cur.fetchone() is not None


def allocate_float(conn, *, req: FloatAllocationRequest, allocated_by: UUID) -> dict[str, Any]:
    """
    Record the allocation and credit the agent's wallet in that currency.
    An agent without a wallet in the currency still gets the allocation row;
    wallet is None in that case.
    """
    cur = conn.cursor()
    cur.execute(
        """
        INSERT INTO public.float_allocations (agent_id, amount, currency, allocated_by, notes)
        VALUES (%s::uuid, %s, %s::public.currency_code, %s::uuid, %s)
        RETURNING id, agent_id, amount, currency, allocated_by, notes, created_at
        """,
        (str(req.agent_id), req.amount, req.currency.value, str(allocated_by), req.notes),
    )
    allocation = _row(cur)

    cur.execute(
        "SELECT id FROM public.wallets WHERE user_id = %s::uuid AND currency = %s::public.currency_code FOR UPDATE",
        (str(req.agent_id), req.currency.value),
    )
    wallet_row = cur.fetchone()
    wallet = None
    if wallet_row:
        wallet = credit_wallet(conn, wallet_id=wallet_row[0], amount=req.amount)

    return {"allocation": allocation, "wallet": wallet}
