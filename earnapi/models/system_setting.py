"""
시스템 설정 싱글톤 모델

커미션 비율, 추천 인원 제한, 급여 기준, 지급 지갑 설정을 저장합니다.
엔진은 매 호출마다 이 레코드를 새로 읽어 EngineSettings 스냅샷으로 사용합니다.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from earnapi.models.base import BaseModel, Money
from earnapi.models.wallet import WalletKind

Percent = Numeric(5, 2)

# 운영 기본값 (관리자 화면 기본값과 동일)
DEFAULT_SYSTEM_SETTINGS = {
    "commission_percent_a": Decimal("10"),
    "commission_percent_b": Decimal("5"),
    "commission_percent_c": Decimal("2"),
    "upgrade_commission_percent_a": Decimal("10"),
    "upgrade_commission_percent_b": Decimal("5"),
    "upgrade_commission_percent_c": Decimal("2"),
    "max_referrals_per_user": 0,
    "salary_direct10_threshold": 10,
    "salary_direct10_amount": Decimal("10000"),
    "salary_direct15_threshold": 15,
    "salary_direct15_amount": Decimal("15000"),
    "salary_direct20_threshold": 20,
    "salary_direct20_amount": Decimal("20000"),
    "salary_network40_threshold": 40,
    "salary_network40_amount": Decimal("48000"),
    "commission_wallet": WalletKind.INCOME.value,
    "salary_wallet": WalletKind.INCOME.value,
    "task_wallet": WalletKind.INCOME.value,
}


class SystemSetting(BaseModel):
    __tablename__ = "system_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # 작업 완료 커미션 비율 (%)
    commission_percent_a: Mapped[Decimal] = mapped_column(Percent, nullable=False)
    commission_percent_b: Mapped[Decimal] = mapped_column(Percent, nullable=False)
    commission_percent_c: Mapped[Decimal] = mapped_column(Percent, nullable=False)

    # 멤버십 구매 커미션 비율 (%) - NULL이면 작업 커미션 비율 사용
    upgrade_commission_percent_a: Mapped[Optional[Decimal]] = mapped_column(
        Percent, nullable=True
    )
    upgrade_commission_percent_b: Mapped[Optional[Decimal]] = mapped_column(
        Percent, nullable=True
    )
    upgrade_commission_percent_c: Mapped[Optional[Decimal]] = mapped_column(
        Percent, nullable=True
    )

    # 0 = 무제한
    max_referrals_per_user: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )

    salary_direct10_threshold: Mapped[int] = mapped_column(Integer, nullable=False)
    salary_direct10_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    salary_direct15_threshold: Mapped[int] = mapped_column(Integer, nullable=False)
    salary_direct15_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    salary_direct20_threshold: Mapped[int] = mapped_column(Integer, nullable=False)
    salary_direct20_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    salary_network40_threshold: Mapped[int] = mapped_column(Integer, nullable=False)
    salary_network40_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)

    commission_wallet: Mapped[str] = mapped_column(
        String(20), nullable=False, default=WalletKind.INCOME.value
    )
    salary_wallet: Mapped[str] = mapped_column(
        String(20), nullable=False, default=WalletKind.INCOME.value
    )
    task_wallet: Mapped[str] = mapped_column(
        String(20), nullable=False, default=WalletKind.INCOME.value
    )
