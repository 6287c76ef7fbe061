import uuid
from datetime import datetime, timezone
from decimal import Decimal

import app.users.repository as user_repo
from app.transactions.repository import (
    approve_transaction,
    approved_volume,
    escalate_transaction,
    get_transaction_for_update,
    insert_transaction,
    reject_transaction,
)
from app.transactions.validator import validate_transaction_input
from app.users.validator import validate_create_user_input
from app.wallets.repository import allocate_float, top_up_wallet
from app.wallets.validator import validate_float_allocation_input, validate_topup_input
from services.audit_log import write_audit_log
from services.observability import set_request_id

NOW = datetime(2026, 10, 1, tzinfo=timezone.utc)


def test_insert_transaction_is_pending(fake_conn):
    req = validate_transaction_input(
        {"transaction_type": "digicash", "amount": 40, "currency": "USD", "recipient_phone": "+211981234567"}
    ).data
    fake_conn.columns = ["id", "status", "approval_status"]
    fake_conn.rows = [(uuid.uuid4(), "pending", "pending")]

    agent_id = uuid.uuid4()
    row = insert_transaction(fake_conn, agent_id=agent_id, req=req)

    assert row["status"] == "pending" and row["approval_status"] == "pending"
    sql, params = fake_conn.executed[0]
    assert "INSERT INTO public.transactions" in sql
    assert params[0] == str(agent_id)
    assert params[1:4] == ("digicash", Decimal("40"), "USD")
    assert params[-2:] == ("pending", "pending")


def test_approved_volume_sums_ssp_airtime(fake_conn):
    fake_conn.rows = [(Decimal("2500000.00"),)]
    assert approved_volume(fake_conn, agent_id=uuid.uuid4()) == Decimal("2500000.00")
    _, params = fake_conn.executed[0]
    assert params[1:] == ("airtime", "SSP")


def test_get_transaction_for_update_locks_row(fake_conn):
    tx_id = uuid.uuid4()
    assert get_transaction_for_update(fake_conn, transaction_id=tx_id) is None
    (statement,) = fake_conn.statements()
    assert statement.endswith("FOR UPDATE")
    assert fake_conn.executed[0][1] == (str(tx_id),)


def test_approve_writes_reviewer_and_commission(fake_conn):
    tx_id, reviewer = uuid.uuid4(), uuid.uuid4()
    fake_conn.columns = ["id", "approval_status", "commission_amount"]
    fake_conn.rows = [(tx_id, "approved", Decimal("1.50"))]

    row = approve_transaction(fake_conn, transaction_id=tx_id, reviewer_id=reviewer, commission_amount=Decimal("1.50"))

    assert row["commission_amount"] == Decimal("1.50")
    (statement,) = fake_conn.statements()
    assert "approval_status = 'approved'::public.approval_status" in statement
    assert "status = 'approved'::public.transaction_status" in statement
    assert "approved_at = now()" in statement
    assert fake_conn.executed[0][1] == (str(reviewer), Decimal("1.50"), str(tx_id))


def test_reject_stores_reason(fake_conn):
    tx_id, reviewer = uuid.uuid4(), uuid.uuid4()
    reject_transaction(fake_conn, transaction_id=tx_id, reviewer_id=reviewer, reason="wrong number")
    (statement,) = fake_conn.statements()
    assert "rejection_reason = %s" in statement
    assert fake_conn.executed[0][1] == (str(reviewer), "wrong number", str(tx_id))


def test_escalate_leaves_status_alone(fake_conn):
    tx_id, assistant = uuid.uuid4(), uuid.uuid4()
    escalate_transaction(fake_conn, transaction_id=tx_id, escalated_by=assistant, reason=None)
    (statement,) = fake_conn.statements()
    assert "approval_status = 'escalated'::public.approval_status" in statement
    assert " status =" not in statement.split("RETURNING")[0]
    assert fake_conn.executed[0][1] == (str(assistant), None, str(tx_id))


def test_top_up_missing_wallet_returns_none(fake_conn):
    req = validate_topup_input({"wallet_id": str(uuid.uuid4()), "amount": 10}).data
    assert top_up_wallet(fake_conn, req=req) is None
    assert len(fake_conn.executed) == 1


def test_top_up_adds_in_one_update(fake_conn):
    wallet_id = uuid.uuid4()
    req = validate_topup_input({"wallet_id": str(wallet_id), "amount": 10}).data
    fake_conn.columns = ["id", "user_id", "currency", "balance", "updated_at"]
    fake_conn.rows = [
        (wallet_id, uuid.uuid4(), "SSP", Decimal("5"), NOW),
        (wallet_id, uuid.uuid4(), "SSP", Decimal("15"), NOW),
    ]
    wallet = top_up_wallet(fake_conn, req=req)
    assert wallet["balance"] == Decimal("15")
    update_sql, params = fake_conn.executed[1]
    assert "balance = balance + %s" in update_sql
    assert params == (Decimal("10"), str(wallet_id))


def test_allocate_float_without_wallet(fake_conn):
    agent_id = uuid.uuid4()
    req = validate_float_allocation_input(
        {"agent_id": str(agent_id), "amount": 300, "currency": "KES"}
    ).data
    fake_conn.columns = ["id", "agent_id"]
    fake_conn.rows = [(uuid.uuid4(), agent_id)]

    out = allocate_float(fake_conn, req=req, allocated_by=uuid.uuid4())
    assert out["allocation"]["agent_id"] == agent_id
    assert out["wallet"] is None


def test_create_user_opens_wallet_per_currency(fake_conn, monkeypatch):
    monkeypatch.setattr(user_repo, "hash_password", lambda pw: f"hashed:{pw}", raising=True)
    req = validate_create_user_input(
        {"email": "nyandeng@agency.co", "password": "password123", "full_name": "Nyandeng", "role": "marketing"}
    ).data
    user_id = uuid.uuid4()
    fake_conn.columns = ["id", "email", "full_name", "phone", "created_at"]
    fake_conn.rows = [(user_id, req.email, req.full_name, None, NOW)]

    user = user_repo.create_user(fake_conn, req)

    assert user["id"] == user_id
    assert user["role"] == "marketing"
    statements = fake_conn.statements()
    assert sum("INSERT INTO public.wallets" in s for s in statements) == 4
    assert any("INSERT INTO public.user_roles" in s for s in statements)
    assert fake_conn.executed[0][1][1] == "hashed:password123"


def test_audit_log_carries_request_id(fake_conn):
    set_request_id("req-123")
    try:
        write_audit_log(
            fake_conn,
            actor_user_id=str(uuid.uuid4()),
            action="wallet.top_up",
            entity_type="wallet",
            entity_id=str(uuid.uuid4()),
            new_values={"amount": Decimal("10")},
        )
    finally:
        set_request_id(None)

    sql, params = fake_conn.executed[0]
    assert "INSERT INTO public.audit_logs" in sql
    assert params[1] == "wallet.top_up"
    assert params[-1] == "req-123"
