from __future__ import annotations

from enum import Enum


class AppRole(str, Enum):
    SUPER_AGENT = "super_agent"
    SALES_ASSISTANT = "sales_assistant"
    SALES_AGENT = "sales_agent"
    HR_FINANCE = "hr_finance"
    MARKETING = "marketing"


# who may move money into wallets and approve or reject sales
FLOAT_MANAGERS = frozenset({AppRole.SUPER_AGENT, AppRole.SALES_ASSISTANT})

# who may create accounts
USER_CREATORS = frozenset({AppRole.SUPER_AGENT, AppRole.HR_FINANCE})


def parse_role(value: str | None) -> AppRole | None:
    try:
        return AppRole((value or "").strip().lower())
    except ValueError:
        return None


def role_values() -> list[str]:
    return [r.value for r in AppRole]
