# Model registry - 모든 테이블을 Base.metadata에 등록

from .base import Base
from .membership import MembershipLevel, MembershipTier
from .wallet import WalletKind, WalletTransaction
from .user import User, UserRole
from .task import TaskCompletion
from .commission import CommissionLevel, CommissionRecord
from .salary import SalaryRecord
from .system_setting import SystemSetting, DEFAULT_SYSTEM_SETTINGS

__all__ = [
    "Base",
    "MembershipLevel",
    "MembershipTier",
    "WalletKind",
    "WalletTransaction",
    "User",
    "UserRole",
    "TaskCompletion",
    "CommissionLevel",
    "CommissionRecord",
    "SalaryRecord",
    "SystemSetting",
    "DEFAULT_SYSTEM_SETTINGS",
]
