from contextlib import contextmanager

import routes.health as health_routes


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert body["data"]["ok"] is True


def test_readyz_ready(client, fake_conn):
    fake_conn.rows = [(1,), ("alembic_version",), ("0002_transaction_approval",)]
    r = client.get("/readyz")
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["ready"] is True
    assert data["db_ok"] is True
    assert data["migrations_ok"] is True
    assert data["migration_revision"] == "0002_transaction_approval"


def test_readyz_without_migrations(client, fake_conn):
    fake_conn.rows = [(1,), (None,)]
    r = client.get("/readyz")
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["ready"] is False
    assert data["db_ok"] is True
    assert data["migrations_ok"] is False


def test_readyz_db_down(client, monkeypatch):
    @contextmanager
    def broken():
        raise RuntimeError("connection refused")
        yield  # pragma: no cover

    monkeypatch.setattr(health_routes, "get_conn", broken, raising=True)
    r = client.get("/readyz")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is False
    assert body["data"]["db_ok"] is False
    assert body["data"]["db_error"] == "RuntimeError"
    assert "connection refused" not in r.text
