from .user import User
from .membership import MembershipTier
from .settings import EngineSettings, SystemSettingResponse
from .commission import CommissionRecord
from .salary import SalaryCalculation, SalaryRecord
from .wallet import WalletBalanceResponse, WalletLedgerEntry
from .task import TaskCompletion
