"""
급여 엔진

하위 조직(3단계)의 자격 인원을 집계하여 월 급여를 계산하고,
사용자당 한 달에 한 번만 지급합니다.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from earnapi.config import settings
from earnapi.core.eligibility import qualifies_for_salary, select_salary
from earnapi.core.exceptions import (
    ConcurrencyConflictError,
    MembershipConfigurationError,
    NotFoundError,
)
from earnapi.database.session import atomic
from earnapi.repositories.membership_repository import MembershipRepository
from earnapi.repositories.salary_repository import SalaryRepository
from earnapi.repositories.user_repository import MAX_REFERRAL_DEPTH, UserRepository
from earnapi.schemas.salary import (
    SalaryBatchResult,
    SalaryBreakdown,
    SalaryCalculation,
    SalaryPayoutResponse,
    SalaryRecord,
)
from earnapi.schemas.user import User
from earnapi.services.settings_service import SettingsService
from earnapi.services.wallet_service import WalletService
from earnapi.utils.timezone_utils import get_utc_now, salary_period

logger = logging.getLogger(__name__)


class SalaryService:
    """월 급여 계산 및 지급"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)
        self.membership_repo = MembershipRepository(db)
        self.salary_repo = SalaryRepository(db)
        self.settings_service = SettingsService(db)
        self.wallet_service = WalletService(db)

    def calculate_monthly_salary(self, user_id: int) -> SalaryCalculation:
        """
        급여 계산 (부수효과 없음)

        A = 직접 추천, B = 자격 있는 A의 추천, C = 자격 있는 B의 추천.
        자격은 항상 급여 대상자 본인의 등급과 비교하며, 자격 없는 회원의
        하위 조직은 집계하지 않습니다.
        """
        user = self.user_repo.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        engine_settings = self.settings_service.get_engine_settings()
        ordinals = self.membership_repo.ordinal_map()
        root_level = user.membership_level.value
        if root_level not in ordinals:
            raise MembershipConfigurationError(root_level)
        root_ordinal = ordinals[root_level]

        counts = []
        visited = {user.id}
        frontier = [user.id]
        for _ in range(MAX_REFERRAL_DEPTH):
            if not frontier:
                counts.append(0)
                continue
            children = [
                child
                for child in self.user_repo.find_by_referrer_ids(frontier)
                if child.id not in visited
            ]
            visited.update(child.id for child in children)
            qualifying = [
                child
                for child in children
                if qualifies_for_salary(
                    child.membership_level.value, ordinals, root_ordinal
                )
            ]
            counts.append(len(qualifying))
            frontier = [child.id for child in qualifying]

        a_level, b_level, c_level = counts
        total = a_level + b_level + c_level
        amount, rule_applied = select_salary(engine_settings, a_level, total)

        return SalaryCalculation(
            user_id=user.id,
            amount=amount,
            breakdown=SalaryBreakdown(
                a_level=a_level,
                b_level=b_level,
                c_level=c_level,
                total=total,
                rule_applied=rule_applied,
            ),
        )

    def process_salary_for_user(
        self, user: User, now: Optional[datetime] = None
    ) -> Optional[SalaryRecord]:
        """
        월 급여 지급 - 이번 달 이미 지급됐거나 지급액이 0이면 None

        사용자 행 잠금 → 월 지급 여부 확인 → 적립 → 기록을 한 트랜잭션에서 수행.
        동시 지급으로 (user_id, month, year) 유니크 제약에 걸리면
        ConcurrencyConflictError (재시도 시 기존 기록을 보고 None 반환).
        """
        now = now or get_utc_now()
        month, year = salary_period(now)

        try:
            with atomic(self.db):
                locked = self.user_repo.get_for_update(user.id)
                if locked is None:
                    raise NotFoundError(f"User {user.id} not found")

                if self.salary_repo.exists_for_month(user.id, month, year):
                    logger.debug(f"Salary for user {user.id} already paid for {year}-{month:02d}")
                    return None

                calculation = self.calculate_monthly_salary(user.id)
                if calculation.amount <= 0:
                    return None

                engine_settings = self.settings_service.get_engine_settings()
                self.wallet_service.credit_wallet(
                    user_id=user.id,
                    wallet_kind=engine_settings.salary_wallet,
                    amount=calculation.amount,
                    reason=f"Monthly salary {year}-{month:02d} ({calculation.breakdown.rule_applied})",
                    ref_id=f"salary:{user.id}:{year}-{month:02d}",
                )
                record = self.salary_repo.create(
                    commit=False,
                    user_id=user.id,
                    amount=calculation.amount,
                    month=month,
                    year=year,
                    breakdown=calculation.breakdown.model_dump(),
                    rule_applied=calculation.breakdown.rule_applied,
                )
                locked.last_salary_date = now
                self.db.flush()
        except IntegrityError as e:
            logger.warning(
                f"Concurrent salary payout detected for user {user.id} ({year}-{month:02d})"
            )
            raise ConcurrencyConflictError(
                details={"user_id": user.id, "month": month, "year": year, "error": str(e.orig)}
            )

        logger.info(
            f"Salary {record.amount} paid to user {user.id} for {year}-{month:02d} ({record.rule_applied})"
        )
        return record

    def process_salary_for_user_id(
        self, user_id: int, now: Optional[datetime] = None
    ) -> SalaryPayoutResponse:
        """관리자 단건 지급"""
        user = self.user_repo.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        record = self.process_salary_for_user(user, now=now)
        if record is None:
            return SalaryPayoutResponse(
                user_id=user_id,
                paid=False,
                message="Already paid this month or not eligible",
            )
        return SalaryPayoutResponse(
            user_id=user_id, paid=True, record=record, message="Salary paid"
        )

    def process_all_salaries(self, now: Optional[datetime] = None) -> SalaryBatchResult:
        """
        일일 급여 배치 - 활성 일반 회원 전체

        한 사용자의 실패는 기록 후 다음 사용자로 진행.
        """
        now = now or get_utc_now()
        result = SalaryBatchResult(started_at=now)

        user_ids = self.user_repo.list_salary_candidate_ids(
            limit=settings.SALARY_BATCH_LIMIT
        )
        logger.info(f"Salary batch started for {len(user_ids)} users")

        for user_id in user_ids:
            result.processed_count += 1
            try:
                user = self.user_repo.get_user(user_id)
                record = self.process_salary_for_user(user, now=now)
            except Exception as e:
                logger.error(f"Salary processing failed for user {user_id}: {str(e)}")
                result.failed_user_ids.append(user_id)
                continue

            if record is not None:
                result.paid_count += 1
                result.total_paid += record.amount

        result.finished_at = get_utc_now()
        logger.info(
            f"Salary batch finished: processed={result.processed_count} "
            f"paid={result.paid_count} total={result.total_paid} "
            f"failed={len(result.failed_user_ids)}"
        )
        return result

    def list_salaries(self, user_id: int, limit: int = 24) -> List[SalaryRecord]:
        return self.salary_repo.list_by_user(user_id, limit=limit)
