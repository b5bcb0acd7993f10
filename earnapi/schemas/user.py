from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
from typing import Optional

from earnapi.models.membership import MembershipLevel
from earnapi.models.user import UserRole


class User(BaseModel):
    id: int
    phone: str
    role: UserRole = UserRole.USER
    is_active: bool = True
    membership_level: MembershipLevel = MembershipLevel.INTERN
    referrer_id: Optional[int] = None
    income_wallet: Decimal = Decimal("0")
    personal_wallet: Decimal = Decimal("0")
    membership_activated_at: Optional[datetime] = None
    last_salary_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def is_admin(self) -> bool:
        """Backward compatibility property"""
        return UserRole.is_admin(self.role)
