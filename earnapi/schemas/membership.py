from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from earnapi.models.membership import MembershipLevel


class MembershipTier(BaseModel):
    """멤버십 등급 정보"""

    id: int
    level: MembershipLevel
    price: Decimal
    ordinal: int
    can_withdraw: bool = False
    can_use_transaction_password: bool = False
    hidden: bool = False
    restricted_range_start: Optional[int] = None
    restricted_range_end: Optional[int] = None

    class Config:
        from_attributes = True

    @property
    def is_intern(self) -> bool:
        return self.level == MembershipLevel.INTERN


class MembershipTierIncome(MembershipTier):
    """등급 정보 + 파생 수입 (일 수입, 영상당 수입, 4일 수입)"""

    daily_income: Decimal = Field(..., description="일 수입")
    per_video_income: Decimal = Field(..., description="영상 1건당 수입")
    four_day_income: Decimal = Field(..., description="4일 수입")


class MembershipTierUpdate(BaseModel):
    """관리자 등급 수정 요청"""

    price: Optional[Decimal] = Field(None, ge=0)
    can_withdraw: Optional[bool] = None
    can_use_transaction_password: Optional[bool] = None
    hidden: Optional[bool] = None
    restricted_range_start: Optional[int] = Field(None, ge=0)
    restricted_range_end: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def range_is_ordered(self) -> "MembershipTierUpdate":
        start, end = self.restricted_range_start, self.restricted_range_end
        if start is not None and end is not None and start > end:
            raise ValueError("restricted_range_start must not exceed restricted_range_end")
        return self


class MembershipUpgradeRequest(BaseModel):
    """결제 확인 후 등급 상향 요청 (관리자 승인 흐름에서 호출)"""

    user_id: int = Field(..., gt=0)
    level: MembershipLevel


class MembershipUpgradeResponse(BaseModel):
    user_id: int
    previous_level: MembershipLevel
    new_level: MembershipLevel
    membership_activated_at: datetime
    commissions_created: int
    commission_total: Decimal


class MembershipTierListResponse(BaseModel):
    tiers: List[MembershipTierIncome]
    total_count: int
