import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

import routes.transactions as transaction_routes


def _record(agent_id, **overrides):
    row = {
        "id": uuid.uuid4(),
        "agent_id": uuid.UUID(agent_id),
        "transaction_type": "airtime",
        "amount": Decimal("150.00"),
        "currency": "SSP",
        "recipient_phone": "0921234567",
        "recipient_name": None,
        "status": "pending",
        "approval_status": "pending",
        "commission_amount": None,
        "metadata": {"mobile_operator": "mtn"},
        "created_at": datetime(2026, 10, 1, tzinfo=timezone.utc),
    }
    row.update(overrides)
    return row


AIRTIME = {
    "transaction_type": "airtime",
    "amount": 150,
    "currency": "SSP",
    "recipient_phone": "092 123 4567",
    "metadata": {"mobile_operator": "mtn"},
}


def test_create_requires_token(client, fake_conn):
    r = client.post("/v1/transactions", json=AIRTIME)
    assert r.status_code == 401, r.text
    assert r.json() == {"success": False, "errors": ["Unauthorized"]}


def test_create_rejects_garbage_token(client, fake_conn):
    r = client.post("/v1/transactions", json=AIRTIME, headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401, r.text


def test_create_inserts_pending_sale(client, fake_conn, sales_agent, monkeypatch):
    captured = {}

    def fake_insert(conn, *, agent_id, req):
        captured["agent_id"] = str(agent_id)
        captured["req"] = req
        return _record(str(agent_id))

    monkeypatch.setattr(transaction_routes, "insert_transaction", fake_insert, raising=True)

    r = client.post("/v1/transactions", json=AIRTIME, headers=sales_agent.headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert body["data"]["status"] == "pending"
    assert body["data"]["approval_status"] == "pending"
    assert body["data"]["amount"] == 150.0

    assert captured["agent_id"] == sales_agent.user_id
    assert captured["req"].recipient_phone == "092 123 4567"

    statements = fake_conn.statements()
    assert any("set_config('app.user_id'" in s for s in statements)
    assert any("INSERT INTO public.audit_logs" in s for s in statements)


def test_create_returns_all_validation_errors(client, fake_conn, sales_agent, monkeypatch):
    def fail_insert(conn, *, agent_id, req):  # pragma: no cover
        raise AssertionError("must not insert an invalid sale")

    monkeypatch.setattr(transaction_routes, "insert_transaction", fail_insert, raising=True)

    r = client.post(
        "/v1/transactions",
        json={**AIRTIME, "amount": 0, "recipient_phone": "0911234567"},
        headers=sales_agent.headers,
    )
    assert r.status_code == 400, r.text
    body = r.json()
    assert body["success"] is False
    assert "Amount must be at least 0.01" in body["errors"]
    assert "Phone number must start with 092 or +21192 for MTN" in body["errors"]


def test_create_invalid_json(client, fake_conn, sales_agent):
    r = client.post(
        "/v1/transactions",
        content=b"{not json",
        headers={**sales_agent.headers, "Content-Type": "application/json"},
    )
    assert r.status_code == 400, r.text
    assert r.json() == {"success": False, "errors": ["Invalid JSON body"]}


def test_create_db_failure_is_opaque_500(client, fake_conn, sales_agent, monkeypatch):
    def boom(conn, *, agent_id, req):
        raise RuntimeError("SOME_RANDOM_DB_BLOWUP_123")

    monkeypatch.setattr(transaction_routes, "insert_transaction", boom, raising=True)

    r = client.post("/v1/transactions", json=AIRTIME, headers=sales_agent.headers)
    assert r.status_code == 500, r.text
    assert r.json() == {"success": False, "errors": ["An unexpected error occurred"]}
    assert "SOME_RANDOM_DB_BLOWUP_123" not in r.text


def test_list_is_paginated(client, fake_conn, sales_agent, monkeypatch):
    rows = [_record(sales_agent.user_id) for _ in range(23)]
    monkeypatch.setattr(
        transaction_routes,
        "list_agent_transactions",
        lambda conn, *, agent_id: rows,
        raising=True,
    )

    r = client.get("/v1/transactions?page=3&page_size=10", headers=sales_agent.headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert len(body["data"]) == 3
    assert body["data"][0]["id"] == str(rows[20]["id"])
    assert body["pagination"]["total_pages"] == 3
    assert body["pagination"]["current_page"] == 3
    assert body["pagination"]["can_go_next"] is False


def test_list_clamps_page(client, fake_conn, sales_agent, monkeypatch):
    monkeypatch.setattr(
        transaction_routes,
        "list_agent_transactions",
        lambda conn, *, agent_id: [],
        raising=True,
    )

    r = client.get("/v1/transactions?page=9", headers=sales_agent.headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["data"] == []
    assert body["pagination"]["current_page"] == 1
    assert body["pagination"]["total_pages"] == 0


# ---------------------------
# Approval queue
# ---------------------------

def _audit_entries(fake_conn, action):
    return [params for sql, params in fake_conn.executed if "INSERT INTO public.audit_logs" in sql and params[1] == action]


def _queue(monkeypatch, record):
    monkeypatch.setattr(
        transaction_routes,
        "get_transaction_for_update",
        lambda conn, *, transaction_id: record,
        raising=True,
    )


def test_approve_stores_commission_at_prior_tier(client, fake_conn, super_agent, monkeypatch):
    agent_id = str(uuid.uuid4())
    record = _record(agent_id)
    _queue(monkeypatch, record)
    monkeypatch.setattr(
        transaction_routes,
        "approved_volume",
        lambda conn, *, agent_id: Decimal("2500000"),
        raising=True,
    )
    captured = {}

    def fake_approve(conn, *, transaction_id, reviewer_id, commission_amount):
        captured.update(transaction_id=transaction_id, reviewer_id=str(reviewer_id), commission=commission_amount)
        return _record(
            agent_id,
            id=transaction_id,
            status="approved",
            approval_status="approved",
            commission_amount=commission_amount,
            approved_by=uuid.UUID(str(reviewer_id)),
        )

    monkeypatch.setattr(transaction_routes, "approve_transaction", fake_approve, raising=True)

    r = client.post(f"/v1/transactions/{record['id']}/approve", headers=super_agent.headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["message"] == "Request approved successfully"
    assert body["data"]["approval_status"] == "approved"
    assert body["data"]["status"] == "approved"
    assert body["data"]["commission_amount"] == 2.25
    assert body["data"]["approved_by"] == super_agent.user_id

    # 150 SSP at the 1.5% tier
    assert captured["commission"] == Decimal("2.25")
    assert captured["transaction_id"] == record["id"]
    assert captured["reviewer_id"] == super_agent.user_id

    (audit,) = _audit_entries(fake_conn, "transaction.approve")
    assert audit[4].adapted == {"approval_status": "pending", "status": "pending"}
    assert audit[5].adapted["service"] == "Airtime"
    assert audit[5].adapted["commission_amount"] == Decimal("2.25")


def test_approve_non_airtime_has_no_commission(client, fake_conn, sales_assistant, monkeypatch):
    record = _record(str(uuid.uuid4()), transaction_type="mtn_momo", currency="USD")
    _queue(monkeypatch, record)

    def no_volume(conn, *, agent_id):  # pragma: no cover
        raise AssertionError("volume only matters for SSP airtime")

    captured = {}

    def fake_approve(conn, *, transaction_id, reviewer_id, commission_amount):
        captured["commission"] = commission_amount
        return {**record, "status": "approved", "approval_status": "approved"}

    monkeypatch.setattr(transaction_routes, "approved_volume", no_volume, raising=True)
    monkeypatch.setattr(transaction_routes, "approve_transaction", fake_approve, raising=True)

    r = client.post(f"/v1/transactions/{record['id']}/approve", headers=sales_assistant.headers)
    assert r.status_code == 200, r.text
    assert captured["commission"] is None
    (audit,) = _audit_entries(fake_conn, "transaction.approve")
    assert audit[5].adapted["service"] == "MTN MoMo"


def test_sales_agent_cannot_approve(client, fake_conn, sales_agent):
    r = client.post(f"/v1/transactions/{uuid.uuid4()}/approve", headers=sales_agent.headers)
    assert r.status_code == 403, r.text
    assert r.json() == {"success": False, "errors": ["Insufficient permissions"]}


def test_approve_unknown_sale(client, fake_conn, super_agent, monkeypatch):
    _queue(monkeypatch, None)
    r = client.post(f"/v1/transactions/{uuid.uuid4()}/approve", headers=super_agent.headers)
    assert r.status_code == 404, r.text
    assert r.json() == {"success": False, "errors": ["Transaction not found"]}


@pytest.mark.parametrize("approval_status", ["approved", "rejected"])
def test_decided_sale_cannot_be_reviewed_again(client, fake_conn, super_agent, monkeypatch, approval_status):
    record = _record(str(uuid.uuid4()), approval_status=approval_status, status=approval_status)
    _queue(monkeypatch, record)

    def fail(*args, **kwargs):  # pragma: no cover
        raise AssertionError("a decided sale must not be updated")

    monkeypatch.setattr(transaction_routes, "approve_transaction", fail, raising=True)
    monkeypatch.setattr(transaction_routes, "reject_transaction", fail, raising=True)

    r = client.post(f"/v1/transactions/{record['id']}/approve", headers=super_agent.headers)
    assert r.status_code == 409, r.text
    assert r.json() == {"success": False, "errors": ["Only pending transactions can be reviewed"]}

    r = client.post(
        f"/v1/transactions/{record['id']}/reject",
        json={"reason": "duplicate"},
        headers=super_agent.headers,
    )
    assert r.status_code == 409, r.text
    assert not _audit_entries(fake_conn, "transaction.reject")


def test_reject_requires_reason(client, fake_conn, super_agent, monkeypatch):
    def fail(conn, *, transaction_id):  # pragma: no cover
        raise AssertionError("must not load the sale for an invalid body")

    monkeypatch.setattr(transaction_routes, "get_transaction_for_update", fail, raising=True)

    r = client.post(f"/v1/transactions/{uuid.uuid4()}/reject", json={}, headers=super_agent.headers)
    assert r.status_code == 400, r.text
    assert r.json() == {"success": False, "errors": ["Reason is required"]}


def test_reject_records_reason(client, fake_conn, sales_assistant, monkeypatch):
    record = _record(str(uuid.uuid4()))
    _queue(monkeypatch, record)
    captured = {}

    def fake_reject(conn, *, transaction_id, reviewer_id, reason):
        captured["reason"] = reason
        return {**record, "status": "rejected", "approval_status": "rejected", "rejection_reason": reason}

    monkeypatch.setattr(transaction_routes, "reject_transaction", fake_reject, raising=True)

    r = client.post(
        f"/v1/transactions/{record['id']}/reject",
        json={"reason": " Recipient number not in service "},
        headers=sales_assistant.headers,
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["message"] == "Request rejected"
    assert body["data"]["status"] == "rejected"
    assert body["data"]["rejection_reason"] == "Recipient number not in service"
    assert captured["reason"] == "Recipient number not in service"
    assert len(_audit_entries(fake_conn, "transaction.reject")) == 1


def test_escalate_keeps_sale_pending(client, fake_conn, sales_assistant, monkeypatch):
    record = _record(str(uuid.uuid4()))
    _queue(monkeypatch, record)
    captured = {}

    def fake_escalate(conn, *, transaction_id, escalated_by, reason):
        captured.update(escalated_by=str(escalated_by), reason=reason)
        return {**record, "approval_status": "escalated", "escalation_reason": reason}

    monkeypatch.setattr(transaction_routes, "escalate_transaction", fake_escalate, raising=True)

    r = client.post(
        f"/v1/transactions/{record['id']}/escalate",
        json={"reason": "Amount above my limit"},
        headers=sales_assistant.headers,
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["data"]["approval_status"] == "escalated"
    assert body["data"]["status"] == "pending"
    assert captured == {"escalated_by": sales_assistant.user_id, "reason": "Amount above my limit"}
    (audit,) = _audit_entries(fake_conn, "transaction.escalate")
    assert audit[5].adapted["status"] == "pending"


def test_only_sales_assistants_escalate(client, fake_conn, super_agent):
    r = client.post(f"/v1/transactions/{uuid.uuid4()}/escalate", headers=super_agent.headers)
    assert r.status_code == 403, r.text


def test_escalated_sale_is_decided_by_super_agent(client, fake_conn, sales_assistant, super_agent, monkeypatch):
    record = _record(str(uuid.uuid4()), approval_status="escalated")
    _queue(monkeypatch, record)
    monkeypatch.setattr(
        transaction_routes,
        "approved_volume",
        lambda conn, *, agent_id: Decimal("0"),
        raising=True,
    )
    monkeypatch.setattr(
        transaction_routes,
        "approve_transaction",
        lambda conn, *, transaction_id, reviewer_id, commission_amount: {
            **record,
            "status": "approved",
            "approval_status": "approved",
            "commission_amount": commission_amount,
        },
        raising=True,
    )

    r = client.post(f"/v1/transactions/{record['id']}/approve", headers=sales_assistant.headers)
    assert r.status_code == 403, r.text
    assert r.json()["errors"] == ["Insufficient permissions"]

    r = client.post(f"/v1/transactions/{record['id']}/approve", headers=super_agent.headers)
    assert r.status_code == 200, r.text
    assert r.json()["data"]["commission_amount"] == 1.5
