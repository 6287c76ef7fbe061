from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence, Union

Number = Union[int, float, Decimal]

HUNDRED = Decimal("100")


def _dec(value: Number | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


@dataclass(frozen=True)
class CommissionTier:
    threshold: Decimal
    rate: Decimal  # percent
    label: str

    def to_dict(self) -> dict[str, Any]:
        return {"threshold": self.threshold, "rate": self.rate, "label": self.label}


@dataclass(frozen=True)
class TierProgress:
    current_tier: CommissionTier
    next_tier: Optional[CommissionTier]
    progress: Decimal  # 0-100
    remaining: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_tier": self.current_tier.to_dict(),
            "next_tier": self.next_tier.to_dict() if self.next_tier else None,
            "progress": self.progress,
            "remaining": self.remaining,
        }


def tier(threshold: Number, rate: Number, label: str) -> CommissionTier:
    return CommissionTier(threshold=_dec(threshold), rate=_dec(rate), label=label)


# Airtime sold in SSP, by cumulative volume
AIRTIME_COMMISSION_TIERS_SSP: tuple[CommissionTier, ...] = (
    tier(0, 1, "Up to 2M SSP"),
    tier(2_000_001, "1.5", "2M - 5M SSP"),
    tier(5_000_000, 2, "5M - 7.5M SSP"),
    tier(7_500_000, 3, "7.5M - 10M SSP"),
    tier(10_000_000, 5, "Above 10M SSP"),
)


def validate_tier_table(tiers: Sequence[CommissionTier]) -> None:
    if not tiers:
        raise ValueError("commission tier table is empty")
    if tiers[0].threshold != 0:
        raise ValueError("first commission tier must start at 0")
    for prev, cur in zip(tiers, tiers[1:]):
        if cur.threshold <= prev.threshold:
            raise ValueError(
                f"commission tier thresholds must be strictly increasing: "
                f"{prev.threshold} -> {cur.threshold}"
            )


def _volume(volume: Number) -> Decimal:
    try:
        v = _dec(volume)
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"cumulative volume must be a non-negative number, got {volume!r}") from None
    if v.is_nan() or v < 0:
        raise ValueError(f"cumulative volume must be a non-negative number, got {volume!r}")
    return v


def _tier_index(volume: Decimal, tiers: Sequence[CommissionTier]) -> int:
    # last tier whose threshold <= volume; a volume on a threshold selects that tier
    idx = 0
    for i, t in enumerate(tiers):
        if t.threshold <= volume:
            idx = i
        else:
            break
    return idx


def tier_for_volume(
    volume: Number,
    tiers: Sequence[CommissionTier] = AIRTIME_COMMISSION_TIERS_SSP,
) -> CommissionTier:
    validate_tier_table(tiers)
    return tiers[_tier_index(_volume(volume), tiers)]


def commission_rate(
    volume: Number,
    tiers: Sequence[CommissionTier] = AIRTIME_COMMISSION_TIERS_SSP,
) -> Decimal:
    return tier_for_volume(volume, tiers).rate


def commission_for_amount(
    amount: Number,
    volume: Number,
    tiers: Sequence[CommissionTier] = AIRTIME_COMMISSION_TIERS_SSP,
) -> Decimal:
    return _dec(amount) * commission_rate(volume, tiers) / HUNDRED


def tier_progress(
    volume: Number,
    tiers: Sequence[CommissionTier] = AIRTIME_COMMISSION_TIERS_SSP,
) -> TierProgress:
    validate_tier_table(tiers)
    v = _volume(volume)
    idx = _tier_index(v, tiers)
    current = tiers[idx]

    if idx == len(tiers) - 1:
        return TierProgress(current_tier=current, next_tier=None, progress=HUNDRED, remaining=Decimal(0))

    nxt = tiers[idx + 1]
    span = nxt.threshold - current.threshold
    progress = (v - current.threshold) / span * HUNDRED
    progress = max(Decimal(0), min(progress, HUNDRED))

    return TierProgress(
        current_tier=current,
        next_tier=nxt,
        progress=progress,
        remaining=nxt.threshold - v,
    )
