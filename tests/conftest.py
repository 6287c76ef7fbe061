# tests/conftest.py

import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

import deps.roles as roles_deps
import routes.auth as auth_routes
import routes.commission as commission_routes
import routes.health as health_routes
import routes.transactions as transaction_routes
import routes.users as user_routes
import routes.wallets as wallet_routes
from app.catalog.roles import AppRole
from main import create_app
from security import create_access_token


@dataclass
class AuthedUser:
    user_id: str
    token: str
    role: Optional[AppRole]

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


# ---------------------------
# Fake DB
# ---------------------------

class FakeCursor:
    """Records statements; reads return whatever the test queued on the connection."""

    def __init__(self, conn: "FakeConn"):
        self.conn = conn

    @property
    def description(self):
        return [(name,) for name in self.conn.columns]

    def execute(self, sql: str, params: Any = None) -> None:
        self.conn.executed.append((sql, params))

    def fetchone(self):
        return self.conn.rows.pop(0) if self.conn.rows else None

    def fetchall(self):
        rows, self.conn.rows = self.conn.rows, []
        return rows

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class FakeConn:
    def __init__(self):
        self.executed: List[tuple] = []
        self.rows: List[tuple] = []
        self.columns: List[str] = []

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def statements(self) -> List[str]:
        return [" ".join(sql.split()) for sql, _ in self.executed]


_CONN_MODULES = (
    roles_deps,
    auth_routes,
    commission_routes,
    health_routes,
    transaction_routes,
    user_routes,
    wallet_routes,
)


@pytest.fixture()
def fake_conn(monkeypatch) -> FakeConn:
    conn = FakeConn()

    @contextmanager
    def _get_conn():
        yield conn

    for module in _CONN_MODULES:
        monkeypatch.setattr(module, "get_conn", _get_conn, raising=True)
    return conn


# ---------------------------
# Client + Auth Helpers
# ---------------------------

@pytest.fixture()
def client() -> TestClient:
    # Needed so tests can assert 500s instead of pytest re-raising server exceptions
    return TestClient(create_app(), raise_server_exceptions=False)


@pytest.fixture()
def login_as(monkeypatch, fake_conn):
    """Mint a real token and make the role lookup answer with `role`."""
    roles: Dict[str, Optional[AppRole]] = {}

    def _get_user_role(conn, user_id):
        return roles.get(str(user_id))

    monkeypatch.setattr(roles_deps, "get_user_role", _get_user_role, raising=True)

    def _login(role: Optional[AppRole]) -> AuthedUser:
        user_id = str(uuid.uuid4())
        roles[user_id] = role
        return AuthedUser(user_id=user_id, token=create_access_token(sub=user_id), role=role)

    return _login


@pytest.fixture()
def sales_agent(login_as) -> AuthedUser:
    return login_as(AppRole.SALES_AGENT)


@pytest.fixture()
def super_agent(login_as) -> AuthedUser:
    return login_as(AppRole.SUPER_AGENT)


@pytest.fixture()
def hr_finance(login_as) -> AuthedUser:
    return login_as(AppRole.HR_FINANCE)


@pytest.fixture()
def sales_assistant(login_as) -> AuthedUser:
    return login_as(AppRole.SALES_ASSISTANT)
