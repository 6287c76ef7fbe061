from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MobileOperator(str, Enum):
    MTN = "mtn"
    DIGITEL = "digitel"
    ZAIN = "zain"


@dataclass(frozen=True)
class OperatorPrefix:
    local: str
    international: str
    label: str


# South Sudan numbering: +211 9X XXX XXXX, local 09X XXX XXXX
LOCAL_PHONE_LENGTH = 10
INTERNATIONAL_PHONE_LENGTH = 13

OPERATOR_PREFIXES: dict[MobileOperator, OperatorPrefix] = {
    MobileOperator.MTN: OperatorPrefix(local="092", international="+21192", label="MTN"),
    MobileOperator.DIGITEL: OperatorPrefix(local="098", international="+21198", label="Digitel"),
    MobileOperator.ZAIN: OperatorPrefix(local="091", international="+21191", label="Zain"),
}


def operator_values() -> list[str]:
    return [o.value for o in MobileOperator]


def parse_operator(value: str | None) -> MobileOperator | None:
    try:
        return MobileOperator(value)
    except ValueError:
        return None
