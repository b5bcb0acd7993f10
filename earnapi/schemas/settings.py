from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from earnapi.models.commission import CommissionLevel
from earnapi.models.wallet import WalletKind


class SalaryRule(BaseModel):
    """급여 규칙 하나 (기준 인원 / 지급액)"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="규칙 이름 (지급 기록의 rule_applied)")
    scope: str = Field(..., description="'network' (A+B+C) 또는 'direct' (A)")
    threshold: int = Field(..., description="필요 인원")
    amount: Decimal = Field(..., description="월 지급액")

    @property
    def enabled(self) -> bool:
        return self.threshold > 0 and self.amount > 0


class EngineSettings(BaseModel):
    """
    커미션/급여 엔진에 전달되는 불변 설정 스냅샷

    엔진 호출마다 SystemSetting 레코드에서 새로 생성되어 계산 함수들에
    인자로 전달됩니다 (전역 상태로 읽지 않음).
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    commission_percent_a: Decimal
    commission_percent_b: Decimal
    commission_percent_c: Decimal
    upgrade_commission_percent_a: Optional[Decimal] = None
    upgrade_commission_percent_b: Optional[Decimal] = None
    upgrade_commission_percent_c: Optional[Decimal] = None
    max_referrals_per_user: int = 0
    salary_direct10_threshold: int
    salary_direct10_amount: Decimal
    salary_direct15_threshold: int
    salary_direct15_amount: Decimal
    salary_direct20_threshold: int
    salary_direct20_amount: Decimal
    salary_network40_threshold: int
    salary_network40_amount: Decimal
    commission_wallet: WalletKind = WalletKind.INCOME
    salary_wallet: WalletKind = WalletKind.INCOME
    task_wallet: WalletKind = WalletKind.INCOME

    def commission_percent(
        self, level: CommissionLevel, membership_purchase: bool = False
    ) -> Decimal:
        """레벨별 커미션 비율. 멤버십 구매는 upgrade 비율 우선, 없으면 작업 비율"""
        suffix = CommissionLevel(level).value.lower()
        task_percent = {
            "a": self.commission_percent_a,
            "b": self.commission_percent_b,
            "c": self.commission_percent_c,
        }[suffix]
        if not membership_purchase:
            return task_percent

        upgrade_percent = {
            "a": self.upgrade_commission_percent_a,
            "b": self.upgrade_commission_percent_b,
            "c": self.upgrade_commission_percent_c,
        }[suffix]
        return task_percent if upgrade_percent is None else upgrade_percent

    def salary_rules(self) -> List[SalaryRule]:
        """평가 순서: 전체 네트워크 → 직접 추천 (큰 기준부터)"""
        return [
            SalaryRule(
                name=f"{self.salary_network40_threshold} total network users",
                scope="network",
                threshold=self.salary_network40_threshold,
                amount=self.salary_network40_amount,
            ),
            SalaryRule(
                name=f"{self.salary_direct20_threshold} direct A-level users",
                scope="direct",
                threshold=self.salary_direct20_threshold,
                amount=self.salary_direct20_amount,
            ),
            SalaryRule(
                name=f"{self.salary_direct15_threshold} direct A-level users",
                scope="direct",
                threshold=self.salary_direct15_threshold,
                amount=self.salary_direct15_amount,
            ),
            SalaryRule(
                name=f"{self.salary_direct10_threshold} direct A-level users",
                scope="direct",
                threshold=self.salary_direct10_threshold,
                amount=self.salary_direct10_amount,
            ),
        ]


class SystemSettingResponse(EngineSettings):
    """관리자 설정 조회 응답"""

    id: int


class SystemSettingUpdate(BaseModel):
    """
    관리자 설정 부분 수정 요청

    전달되지 않은 필드는 변경하지 않음. upgrade_commission_percent_*에 null을
    명시하면 작업 커미션 비율을 따르도록 초기화됨.
    """

    commission_percent_a: Optional[Decimal] = Field(None, ge=0, le=100)
    commission_percent_b: Optional[Decimal] = Field(None, ge=0, le=100)
    commission_percent_c: Optional[Decimal] = Field(None, ge=0, le=100)
    upgrade_commission_percent_a: Optional[Decimal] = Field(None, ge=0, le=100)
    upgrade_commission_percent_b: Optional[Decimal] = Field(None, ge=0, le=100)
    upgrade_commission_percent_c: Optional[Decimal] = Field(None, ge=0, le=100)
    max_referrals_per_user: Optional[int] = Field(None, ge=0)
    salary_direct10_threshold: Optional[int] = Field(None, ge=0)
    salary_direct10_amount: Optional[Decimal] = Field(None, ge=0)
    salary_direct15_threshold: Optional[int] = Field(None, ge=0)
    salary_direct15_amount: Optional[Decimal] = Field(None, ge=0)
    salary_direct20_threshold: Optional[int] = Field(None, ge=0)
    salary_direct20_amount: Optional[Decimal] = Field(None, ge=0)
    salary_network40_threshold: Optional[int] = Field(None, ge=0)
    salary_network40_amount: Optional[Decimal] = Field(None, ge=0)
    commission_wallet: Optional[WalletKind] = None
    salary_wallet: Optional[WalletKind] = None
    task_wallet: Optional[WalletKind] = None

    @field_validator(
        "commission_percent_a",
        "commission_percent_b",
        "commission_percent_c",
        "upgrade_commission_percent_a",
        "upgrade_commission_percent_b",
        "upgrade_commission_percent_c",
    )
    @classmethod
    def percent_precision(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v.as_tuple().exponent < -2:
            raise ValueError("Percentages support at most 2 decimal places")
        return v
