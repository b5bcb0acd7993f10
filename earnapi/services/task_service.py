import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from earnapi.core.exceptions import (
    ConcurrencyConflictError,
    ConflictError,
    NotFoundError,
)
from earnapi.database.session import atomic
from earnapi.repositories.membership_repository import MembershipRepository
from earnapi.repositories.task_repository import TaskRepository
from earnapi.repositories.user_repository import UserRepository
from earnapi.schemas.task import TaskCompletionResult
from earnapi.services.commission_service import CommissionService
from earnapi.services.membership_service import per_video_income
from earnapi.services.settings_service import SettingsService
from earnapi.services.wallet_service import WalletService

logger = logging.getLogger(__name__)


class TaskService:
    """작업 완료 처리 - 본인 수입 적립 + 상위 추천인 커미션"""

    def __init__(self, db: Session):
        self.db = db
        self.task_repo = TaskRepository(db)
        self.user_repo = UserRepository(db)
        self.membership_repo = MembershipRepository(db)
        self.settings_service = SettingsService(db)
        self.wallet_service = WalletService(db)
        self.commission_service = CommissionService(db)

    def complete_task(self, user_id: int, task_ref: str) -> TaskCompletionResult:
        """
        작업 완료 기록

        Intern도 고정 수입(영상당 10)을 받지만 커미션은 발생시키지 않습니다.
        같은 task_ref는 사용자당 한 번만 처리됩니다.

        Args:
            user_id: 작업을 완료한 사용자
            task_ref: 작업 식별자

        Returns:
            TaskCompletionResult: 완료 기록, 적립 후 잔액, 생성된 커미션
        """
        user = self.user_repo.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        if self.task_repo.get_by_task_ref(user_id, task_ref) is not None:
            raise ConflictError(
                f"Task {task_ref} already completed",
                details={"user_id": user_id, "task_ref": task_ref},
            )

        tier = self.membership_repo.require_tier(user.membership_level)
        earnings = per_video_income(tier)

        try:
            with atomic(self.db):
                completion = self.task_repo.create(
                    commit=False,
                    user_id=user_id,
                    task_ref=task_ref,
                    earnings_amount=earnings,
                    membership_level=tier.level.value,
                )
                engine_settings = self.settings_service.get_engine_settings()
                new_balance = self.wallet_service.credit_wallet(
                    user_id=user_id,
                    wallet_kind=engine_settings.task_wallet,
                    amount=earnings,
                    reason=f"Task {task_ref} earnings",
                    ref_id=f"task:{completion.id}",
                )
                commissions = self.commission_service.calculate_and_create_commissions(
                    completion, earnings, commit=False
                )
        except IntegrityError as e:
            raise ConcurrencyConflictError(
                details={"user_id": user_id, "task_ref": task_ref, "error": str(e.orig)}
            )

        logger.info(
            f"User {user_id} completed task {task_ref}: earned {earnings}, "
            f"{len(commissions)} upline commissions"
        )
        return TaskCompletionResult(
            completion=completion,
            earnings_amount=earnings,
            new_balance=new_balance,
            commissions=commissions,
        )
