from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from earnapi.models.commission import CommissionLevel


class CommissionRecord(BaseModel):
    """커미션 기록 - 응답 필수 필드: level, percentage, amount_earned, beneficiary_user_id"""

    id: int
    beneficiary_user_id: int = Field(..., description="수당 수령자")
    downline_user_id: int = Field(..., description="수당 발생 하위 회원")
    level: CommissionLevel
    percentage: Decimal
    amount_earned: Decimal
    source_task_id: Optional[int] = None
    source_membership_level: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CommissionListResponse(BaseModel):
    commissions: List[CommissionRecord]
    total_count: int
    has_next: bool


class CommissionLevelSummary(BaseModel):
    level: CommissionLevel
    count: int
    total_amount: Decimal


class CommissionSummaryResponse(BaseModel):
    """레벨별 커미션 합계"""

    beneficiary_user_id: int
    levels: List[CommissionLevelSummary]
    total_amount: Decimal


class CommissionTrigger(BaseModel):
    """커미션 발생 이벤트 (작업 완료 또는 멤버십 구매)"""

    model_config = ConfigDict(frozen=True)

    downline_user_id: int
    trigger_level: str = Field(..., description="작업: 현재 등급 / 구매: 구매 등급")
    amount: Decimal = Field(..., description="작업 수입 또는 등급 가격")
    membership_purchase: bool = False
    source_task_id: Optional[int] = None
    source_membership_level: Optional[str] = None

    @property
    def ref_prefix(self) -> str:
        """지갑 원장 ref_id 접두사 (이벤트당 고정)"""
        if self.membership_purchase:
            return f"commission:membership:{self.downline_user_id}:{self.source_membership_level}"
        return f"commission:task:{self.source_task_id}"
