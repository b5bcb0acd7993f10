from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

NO_RULE_APPLIED = "No rule applied"


class SalaryBreakdown(BaseModel):
    """하위 조직 인원 집계 + 적용된 규칙"""

    a_level: int = Field(0, description="자격을 갖춘 직접 추천 인원")
    b_level: int = Field(0, description="자격을 갖춘 2단계 인원")
    c_level: int = Field(0, description="자격을 갖춘 3단계 인원")
    total: int = Field(0, description="A+B+C")
    rule_applied: str = NO_RULE_APPLIED

    class Config:
        from_attributes = True


class SalaryCalculation(BaseModel):
    """급여 계산 결과 (부수효과 없음)"""

    user_id: int
    amount: Decimal
    breakdown: SalaryBreakdown


class SalaryRecord(BaseModel):
    id: int
    user_id: int
    amount: Decimal
    month: int
    year: int
    breakdown: SalaryBreakdown
    rule_applied: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SalaryPayoutResponse(BaseModel):
    """단건 지급 결과 - 이미 지급됐거나 지급액이 0이면 paid=False"""

    user_id: int
    paid: bool
    record: Optional[SalaryRecord] = None
    message: str


class SalaryBatchResult(BaseModel):
    """일일 급여 배치 처리 결과"""

    processed_count: int = 0
    paid_count: int = 0
    total_paid: Decimal = Decimal("0")
    failed_user_ids: List[int] = Field(default_factory=list)
    started_at: datetime
    finished_at: Optional[datetime] = None
