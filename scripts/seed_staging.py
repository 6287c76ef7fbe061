import os
import sys

from app.catalog.roles import AppRole
from app.users.repository import create_user, get_user_by_email
from app.users.validator import validate_create_user_input
from db import get_conn


def die(message, code=1):
    print(message)
    sys.exit(code)


def _get_env(name, default=None):
    return os.getenv(name, default)


def _ensure_user(conn, *, email, password, full_name, role):
    existing = get_user_by_email(conn, email)
    if existing:
        return existing[0], False

    result = validate_create_user_input(
        {"email": email, "password": password, "full_name": full_name, "role": role.value}
    )
    if not result.valid:
        die(f"invalid seed user {email}: {'; '.join(result.errors)}")

    created = create_user(conn, result.data)
    return created["id"], True


def main():
    admin_email = _get_env("STAGING_ADMIN_EMAIL", "super-agent@agency.co")
    admin_password = _get_env("STAGING_ADMIN_PASSWORD", "ChangeMe123!")

    agent_email = _get_env("STAGING_AGENT_EMAIL", "sales-agent@agency.co")
    agent_password = _get_env("STAGING_AGENT_PASSWORD", "ChangeMe123!")

    with get_conn() as conn:
        admin_id, admin_created = _ensure_user(
            conn,
            email=admin_email,
            password=admin_password,
            full_name="Staging Super Agent",
            role=AppRole.SUPER_AGENT,
        )
        agent_id, agent_created = _ensure_user(
            conn,
            email=agent_email,
            password=agent_password,
            full_name="Staging Sales Agent",
            role=AppRole.SALES_AGENT,
        )

    print("Super agent:")
    if admin_created:
        print(f"  created email={admin_email} user_id={admin_id}")
    else:
        print(f"  exists email={admin_email} user_id={admin_id}")

    print("Sales agent:")
    if agent_created:
        print(f"  created email={agent_email} user_id={agent_id}")
    else:
        print(f"  exists email={agent_email} user_id={agent_id}")


if __name__ == "__main__":
    main()
