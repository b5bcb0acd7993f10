"""
지갑 원장 데이터 모델

사용자 지갑(income / personal)의 모든 잔액 변동을 기록하는 원장(Ledger) 테이블입니다.
지갑 잔액 컬럼(users.income_wallet 등)의 변경은 반드시 이 테이블의 레코드와
같은 트랜잭션 안에서 함께 반영됩니다.
"""

from decimal import Decimal
from enum import Enum

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from earnapi.models.base import BigIntId, LedgerModel, Money


class WalletKind(str, Enum):
    """지급 대상 지갑 종류"""

    INCOME = "income"
    PERSONAL = "personal"


class WalletTransaction(LedgerModel):
    """
    지갑 원장 테이블 - 모든 지갑 거래 내역을 저장

    이 테이블은 다음 원칙을 따릅니다:
    1. 불변성(Immutable): 한번 생성된 레코드는 수정되지 않음
    2. 멱등성(Idempotent): ref_id를 통해 중복 적립 방지
    3. 정합성(Integrity): balance_after 필드로 거래 직후 잔액 추적
    """

    __tablename__ = "wallet_transactions"
    __table_args__ = (
        UniqueConstraint("ref_id", name="uq_wallet_transactions_ref_id"),
        Index("idx_wallet_transactions_user", "user_id", "wallet"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )

    # 변동이 발생한 지갑 (income / personal)
    wallet: Mapped[str] = mapped_column(String(20), nullable=False)

    # 변동량 - 양수면 적립, 음수면 차감
    delta: Mapped[Decimal] = mapped_column(Money, nullable=False)

    # 거래 후 잔액
    balance_after: Mapped[Decimal] = mapped_column(Money, nullable=False)

    # 거래 사유 (예: "A-level commission from user 12")
    reason: Mapped[str] = mapped_column(Text, nullable=False)

    # 중복 처리 방지용 고유 식별자
    # 형식 예시: "commission:task:15:A", "salary:7:2026-10"
    ref_id: Mapped[str] = mapped_column(String(120), nullable=False)
