"""
멤버십 등급 데이터 모델

Intern(0) ~ Rank 10(10)까지 11개 등급의 가격과 권한을 저장합니다.
등급 순서(ordinal)는 커미션/급여 자격 판정("하위 등급은 상위 등급에게만 수당 발생")의
유일한 기준입니다.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from sqlalchemy import Boolean, Integer, String, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from earnapi.models.base import BaseModel, Money


class MembershipLevel(str, Enum):
    """멤버십 등급 (값은 저장 문자열, 순서는 기본 ordinal)"""

    INTERN = "Intern"
    RANK_1 = "Rank 1"
    RANK_2 = "Rank 2"
    RANK_3 = "Rank 3"
    RANK_4 = "Rank 4"
    RANK_5 = "Rank 5"
    RANK_6 = "Rank 6"
    RANK_7 = "Rank 7"
    RANK_8 = "Rank 8"
    RANK_9 = "Rank 9"
    RANK_10 = "Rank 10"

    @classmethod
    def default_ordinal(cls, level: Union[str, "MembershipLevel"]) -> int:
        """시드 기본 순서 (Intern=0, Rank N=N)"""
        return list(cls).index(cls(level))

    @classmethod
    def is_intern(cls, level: Union[str, "MembershipLevel", None]) -> bool:
        if level is None:
            return False
        if isinstance(level, cls):
            level = level.value
        return level == cls.INTERN.value


class MembershipTier(BaseModel):
    __tablename__ = "membership_tiers"
    __table_args__ = (
        UniqueConstraint("level", name="uq_membership_tiers_level"),
        UniqueConstraint("ordinal", name="uq_membership_tiers_ordinal"),
        CheckConstraint("price >= 0", name="ck_membership_tiers_price_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    level: Mapped[str] = mapped_column(String(20), nullable=False)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    ordinal: Mapped[int] = mapped_column(Integer, nullable=False)
    can_withdraw: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    can_use_transaction_password: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    hidden: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # 가입 가능한 사용자 번호 구간 (관리자 설정, 없으면 제한 없음)
    restricted_range_start: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    restricted_range_end: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    def __repr__(self):
        return f"<MembershipTier(level={self.level}, ordinal={self.ordinal}, price={self.price})>"
