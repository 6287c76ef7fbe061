# routes/commission.py
from __future__ import annotations

import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query

from app.commission.tiers import AIRTIME_COMMISSION_TIERS_SSP, tier_progress
from app.transactions.repository import approved_volume
from db import get_conn
from deps.auth import CurrentUser, get_current_user
from schemas import (
    CommissionTierItem,
    CommissionTierListResponse,
    TierProgressData,
    TierProgressResponse,
)
from services.db_errors import raise_http_from_db_error

logger = logging.getLogger("agency")
router = APIRouter(prefix="/v1/commission", tags=["commission"])


def _progress_payload(volume: Decimal) -> TierProgressResponse:
    p = tier_progress(volume, AIRTIME_COMMISSION_TIERS_SSP)
    return TierProgressResponse(
        data=TierProgressData(
            volume=volume,
            current_tier=CommissionTierItem(**p.current_tier.to_dict()),
            next_tier=CommissionTierItem(**p.next_tier.to_dict()) if p.next_tier else None,
            progress=p.progress,
            remaining=p.remaining,
        )
    )


@router.get("/tiers", response_model=CommissionTierListResponse)
def list_tiers(user: CurrentUser = Depends(get_current_user)):
    return CommissionTierListResponse(
        data=[CommissionTierItem(**t.to_dict()) for t in AIRTIME_COMMISSION_TIERS_SSP]
    )


@router.get("/progress", response_model=TierProgressResponse)
def progress_for_volume(
    volume: Decimal = Query(..., ge=0),
    user: CurrentUser = Depends(get_current_user),
):
    return _progress_payload(volume)


@router.get("/me", response_model=TierProgressResponse)
def my_progress(user: CurrentUser = Depends(get_current_user)):
    try:
        with get_conn() as conn:
            volume = approved_volume(conn, agent_id=user.user_id)
    except HTTPException:
        raise
    except Exception as e:
        raise_http_from_db_error(e)

    logger.info("commission progress: user_id=%s volume=%s", user.user_id, volume)
    return _progress_payload(volume)
