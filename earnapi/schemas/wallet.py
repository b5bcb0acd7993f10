from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from earnapi.models.wallet import WalletKind


class WalletBalanceResponse(BaseModel):
    """지갑 잔액 응답"""

    user_id: int
    income_wallet: Decimal = Field(..., description="수입 지갑 잔액")
    personal_wallet: Decimal = Field(..., description="개인 지갑 잔액")


class WalletLedgerEntry(BaseModel):
    """지갑 원장 항목"""

    id: int = Field(..., description="원장 항목 ID")
    wallet: WalletKind = Field(..., description="지갑 종류")
    delta: Decimal = Field(..., description="변동량")
    balance_after: Decimal = Field(..., description="거래 후 잔액")
    reason: str = Field(..., description="거래 사유")
    ref_id: str = Field(..., description="참조 ID")
    created_at: Optional[datetime] = Field(None, description="생성 시간")

    class Config:
        from_attributes = True


class WalletLedgerResponse(BaseModel):
    """지갑 원장 조회 응답"""

    balance: WalletBalanceResponse
    entries: List[WalletLedgerEntry]
    total_count: int
    has_next: bool


class WalletCreditResult(BaseModel):
    """지갑 적립 결과"""

    user_id: int
    wallet: WalletKind
    delta: Decimal
    balance_after: Decimal
    transaction_id: Optional[int] = None
    duplicate: bool = Field(False, description="이미 처리된 ref_id (멱등 처리)")


class WalletIntegrityCheckResponse(BaseModel):
    """지갑 정합성 검증 응답 (원장 델타 합계 vs 현재 잔액)"""

    status: str = Field(..., description="검증 상태 (OK, MISMATCH)")
    user_id: int
    wallet: WalletKind
    ledger_total: Decimal
    recorded_balance: Decimal
    entry_count: int
    verified_at: str
