from fastapi import Depends
from sqlalchemy.orm import Session

from earnapi.database.session import get_db

# Services
from earnapi.services.commission_service import CommissionService
from earnapi.services.membership_service import MembershipService
from earnapi.services.salary_service import SalaryService
from earnapi.services.settings_service import SettingsService
from earnapi.services.task_service import TaskService
from earnapi.services.wallet_service import WalletService


def get_settings_service(db: Session = Depends(get_db)) -> SettingsService:
    return SettingsService(db=db)


def get_wallet_service(db: Session = Depends(get_db)) -> WalletService:
    return WalletService(db=db)


def get_membership_service(db: Session = Depends(get_db)) -> MembershipService:
    return MembershipService(db=db)


def get_commission_service(db: Session = Depends(get_db)) -> CommissionService:
    return CommissionService(db=db)


def get_salary_service(db: Session = Depends(get_db)) -> SalaryService:
    return SalaryService(db=db)


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    return TaskService(db=db)
