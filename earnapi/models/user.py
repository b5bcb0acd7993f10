from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from earnapi.models.base import BaseModel, BigIntId, Money
from earnapi.models.membership import MembershipLevel
from earnapi.models.wallet import WalletKind

"""User role enumeration for role-based access control."""


class UserRole(str, Enum):
    """사용자 역할 정의"""

    USER = "user"  # 일반 회원
    ADMIN = "admin"  # 관리자
    SUPER_ADMIN = "superadmin"  # 최고 관리자

    @classmethod
    def get_hierarchy_level(cls, role: Union[str, "UserRole"]) -> int:
        """역할의 계층 레벨을 반환 (숫자가 높을수록 높은 권한)"""
        if isinstance(role, cls):
            role = role.value

        hierarchy = {
            cls.USER.value: 1,
            cls.ADMIN.value: 2,
            cls.SUPER_ADMIN.value: 3,
        }
        return hierarchy.get(str(role), 0)

    @classmethod
    def is_admin(cls, role: Union[str, "UserRole"]) -> bool:
        """관리자 권한 확인"""
        if isinstance(role, cls):
            role = role.value
        return role in [cls.ADMIN.value, cls.SUPER_ADMIN.value]


class User(BaseModel):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("income_wallet >= 0", name="ck_users_income_wallet"),
        CheckConstraint("personal_wallet >= 0", name="ck_users_personal_wallet"),
        Index("idx_users_referrer", "referrer_id"),
        Index("idx_users_membership_level", "membership_level"),
        Index("idx_users_role", "role"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    phone: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), default=UserRole.USER.value, nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    membership_level: Mapped[str] = mapped_column(
        String(20), default=MembershipLevel.INTERN.value, nullable=False
    )
    # 추천인 (self-referential). 순환은 UserRepository.assign_referrer에서 차단
    referrer_id: Mapped[Optional[int]] = mapped_column(
        BigIntId, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    income_wallet: Mapped[Decimal] = mapped_column(
        Money, default=Decimal("0"), nullable=False
    )
    personal_wallet: Mapped[Decimal] = mapped_column(
        Money, default=Decimal("0"), nullable=False
    )
    membership_activated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_salary_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self):
        return (
            f"<User(id={self.id}, phone={self.phone}, level={self.membership_level})>"
        )

    @property
    def is_admin(self) -> bool:
        return UserRole.is_admin(str(self.role))

    def get_wallet_balance(self, kind: WalletKind) -> Decimal:
        """지갑 종류에 해당하는 잔액"""
        kind = WalletKind(kind)
        if kind is WalletKind.INCOME:
            return self.income_wallet or Decimal("0")
        if kind is WalletKind.PERSONAL:
            return self.personal_wallet or Decimal("0")
        raise ValueError(f"Unknown wallet kind: {kind}")

    def set_wallet_balance(self, kind: WalletKind, balance: Decimal) -> None:
        kind = WalletKind(kind)
        if kind is WalletKind.INCOME:
            self.income_wallet = balance
        elif kind is WalletKind.PERSONAL:
            self.personal_wallet = balance
        else:
            raise ValueError(f"Unknown wallet kind: {kind}")
