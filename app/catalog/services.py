from __future__ import annotations

from enum import Enum


class TransactionType(str, Enum):
    AIRTIME = "airtime"
    MTN_MOMO = "mtn_momo"
    DIGICASH = "digicash"
    M_GURUSH = "m_gurush"
    MPESA_KENYA = "mpesa_kenya"
    UGANDA_MOBILE_MONEY = "uganda_mobile_money"


class Currency(str, Enum):
    USD = "USD"
    SSP = "SSP"
    KES = "KES"
    UGX = "UGX"


SERVICE_LABELS: dict[TransactionType, str] = {
    TransactionType.AIRTIME: "Airtime",
    TransactionType.MTN_MOMO: "MTN MoMo",
    TransactionType.DIGICASH: "DigiCash",
    TransactionType.M_GURUSH: "m-Gurush",
    TransactionType.MPESA_KENYA: "M-Pesa Kenya",
    TransactionType.UGANDA_MOBILE_MONEY: "Uganda Mobile Money",
}


def transaction_type_values() -> list[str]:
    return [t.value for t in TransactionType]


def currency_values() -> list[str]:
    return [c.value for c in Currency]


def parse_transaction_type(value: str | None) -> TransactionType | None:
    try:
        return TransactionType(value)
    except ValueError:
        return None


def parse_currency(value: str | None) -> Currency | None:
    try:
        return Currency(value)
    except ValueError:
        return None
