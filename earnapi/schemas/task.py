from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from earnapi.models.membership import MembershipLevel
from earnapi.schemas.commission import CommissionRecord


class TaskCompletion(BaseModel):
    id: int
    user_id: int
    task_ref: str
    earnings_amount: Decimal
    membership_level: MembershipLevel
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TaskCompleteRequest(BaseModel):
    task_ref: str = Field(..., min_length=1, max_length=100, description="작업 식별자")


class TaskCompletionResult(BaseModel):
    """작업 완료 처리 결과 (본인 수입 + 상위 커미션)"""

    completion: TaskCompletion
    earnings_amount: Decimal
    new_balance: Decimal
    commissions: List[CommissionRecord]
