"""
커미션 원장 데이터 모델

하위 회원(downline)의 작업 완료/멤버십 구매로 발생한 상위 추천인(A/B/C) 수당 기록.
지갑 적립과 같은 트랜잭션에서만 생성되며 수정/삭제되지 않습니다.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from earnapi.models.base import BigIntId, LedgerModel, Money


class CommissionLevel(str, Enum):
    """추천 거리: A=직접, B=2단계, C=3단계"""

    A = "A"
    B = "B"
    C = "C"

    @property
    def depth(self) -> int:
        return ["A", "B", "C"].index(self.value) + 1

    @classmethod
    def from_depth(cls, depth: int) -> "CommissionLevel":
        return list(cls)[depth - 1]


class CommissionRecord(LedgerModel):
    __tablename__ = "commissions"
    __table_args__ = (
        Index("idx_commissions_beneficiary_created", "beneficiary_user_id", "created_at"),
        Index("idx_commissions_downline", "downline_user_id"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    # 수당을 받는 상위 추천인
    beneficiary_user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id"), nullable=False
    )
    # 수당을 발생시킨 하위 회원
    downline_user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id"), nullable=False)
    level: Mapped[str] = mapped_column(String(1), nullable=False)
    percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    amount_earned: Mapped[Decimal] = mapped_column(Money, nullable=False)
    source_task_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("task_completions.id"), nullable=True
    )
    source_membership_level: Mapped[Optional[str]] = mapped_column(
        String(20), nullable=True
    )

    def __repr__(self):
        return (
            f"<CommissionRecord(beneficiary={self.beneficiary_user_id}, "
            f"downline={self.downline_user_id}, level={self.level}, amount={self.amount_earned})>"
        )
