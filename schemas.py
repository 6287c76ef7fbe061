# schemas.py
from __future__ import annotations

from pydantic import BaseModel, EmailStr
from uuid import UUID
from datetime import datetime
from typing import Any, Optional, List


# -------- ENVELOPE --------
class ErrorResponse(BaseModel):
    success: bool = False
    errors: List[str]


# -------- AUTH --------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    user_id: UUID


class MeResponse(BaseModel):
    success: bool = True
    user_id: UUID
    role: Optional[str] = None


# -------- PAGINATION --------
class PageInfo(BaseModel):
    current_page: int
    page_size: int
    total_pages: int
    total_items: int
    start_index: int
    end_index: int
    can_go_next: bool
    can_go_prev: bool


# -------- TRANSACTIONS --------
class TransactionRecord(BaseModel):
    id: UUID
    agent_id: Optional[UUID] = None
    transaction_type: str
    amount: float
    currency: str
    recipient_phone: Optional[str] = None
    recipient_name: Optional[str] = None
    status: str
    approval_status: str
    commission_amount: Optional[float] = None
    metadata: dict[str, Any] = {}
    approved_by: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    escalated_by: Optional[UUID] = None
    escalated_at: Optional[datetime] = None
    escalation_reason: Optional[str] = None
    created_at: datetime


class TransactionCreatedResponse(BaseModel):
    success: bool = True
    data: TransactionRecord


class TransactionReviewResponse(BaseModel):
    success: bool = True
    message: str
    data: TransactionRecord


class TransactionPageResponse(BaseModel):
    success: bool = True
    data: List[TransactionRecord]
    pagination: PageInfo


# -------- WALLETS / FLOAT --------
class WalletRecord(BaseModel):
    id: UUID
    user_id: UUID
    currency: str
    balance: float
    updated_at: Optional[datetime] = None


class WalletResponse(BaseModel):
    success: bool = True
    data: WalletRecord


class FloatAllocationRecord(BaseModel):
    id: UUID
    agent_id: UUID
    amount: float
    currency: str
    allocated_by: Optional[UUID] = None
    notes: Optional[str] = None
    created_at: datetime


class FloatAllocationData(BaseModel):
    allocation: FloatAllocationRecord
    wallet: Optional[WalletRecord] = None


class FloatAllocationResponse(BaseModel):
    success: bool = True
    message: str = "Float allocated successfully"
    data: FloatAllocationData


# -------- USERS --------
class UserRecord(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    role: str
    created_at: datetime


class UserCreatedResponse(BaseModel):
    success: bool = True
    data: UserRecord


# -------- COMMISSION --------
class CommissionTierItem(BaseModel):
    threshold: float
    rate: float
    label: str


class CommissionTierListResponse(BaseModel):
    success: bool = True
    data: List[CommissionTierItem]


class TierProgressData(BaseModel):
    volume: float
    current_tier: CommissionTierItem
    next_tier: Optional[CommissionTierItem] = None
    progress: float
    remaining: float


class TierProgressResponse(BaseModel):
    success: bool = True
    data: TierProgressData
