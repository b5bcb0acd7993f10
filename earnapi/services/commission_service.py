"""
커미션 엔진

하위 회원의 작업 완료 / 멤버십 구매 이벤트에 대해 상위 추천인(A/B/C)에게
수당을 계산하여 지갑에 적립하고 커미션 원장에 기록합니다.

- 레벨별 자격은 독립적으로 판정 (A가 제외되어도 B/C는 계속 평가)
- A 레벨만 직접 추천 수 상한(max_referrals_per_user)을 적용
- 지갑 적립과 커미션 레코드는 하나의 작업 단위로 커밋/롤백
"""

import logging
from decimal import Decimal
from typing import Dict, List

from sqlalchemy.orm import Session

from earnapi.core.eligibility import (
    commission_amount,
    exceeds_referral_cap,
    is_eligible,
)
from earnapi.core.exceptions import MembershipConfigurationError, NotFoundError
from earnapi.database.session import atomic
from earnapi.models.commission import CommissionLevel
from earnapi.models.membership import MembershipLevel
from earnapi.repositories.commission_repository import CommissionRepository
from earnapi.repositories.membership_repository import MembershipRepository
from earnapi.repositories.user_repository import UserRepository
from earnapi.schemas.commission import (
    CommissionListResponse,
    CommissionRecord,
    CommissionSummaryResponse,
    CommissionTrigger,
)
from earnapi.schemas.membership import MembershipTier
from earnapi.schemas.task import TaskCompletion
from earnapi.schemas.user import User
from earnapi.services.settings_service import SettingsService
from earnapi.services.wallet_service import WalletService

logger = logging.getLogger(__name__)


def _ordinal_of(ordinals: Dict[str, int], level: str) -> int:
    ordinal = ordinals.get(level)
    if ordinal is None:
        raise MembershipConfigurationError(level)
    return ordinal


class CommissionService:
    """A/B/C 레벨 커미션 계산 및 지급"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)
        self.membership_repo = MembershipRepository(db)
        self.commission_repo = CommissionRepository(db)
        self.settings_service = SettingsService(db)
        self.wallet_service = WalletService(db)

    def calculate_and_create_commissions(
        self,
        task_completion: TaskCompletion,
        earnings_amount: Decimal,
        commit: bool = True,
    ) -> List[CommissionRecord]:
        """작업 완료 커미션 - 이벤트 등급은 작업자의 현재 등급"""
        user = self.user_repo.get_user(task_completion.user_id)
        if user is None:
            raise NotFoundError(f"User {task_completion.user_id} not found")

        trigger = CommissionTrigger(
            downline_user_id=user.id,
            trigger_level=user.membership_level.value,
            amount=Decimal(str(earnings_amount)),
            source_task_id=task_completion.id,
        )
        return self._distribute(trigger, commit=commit)

    def calculate_and_create_membership_commissions(
        self,
        user: User,
        purchased_tier: MembershipTier,
        commit: bool = True,
    ) -> List[CommissionRecord]:
        """멤버십 구매 커미션 - 이벤트 등급은 구매한 등급, 금액은 등급 가격"""
        trigger = CommissionTrigger(
            downline_user_id=user.id,
            trigger_level=purchased_tier.level.value,
            amount=purchased_tier.price,
            membership_purchase=True,
            source_membership_level=purchased_tier.level.value,
        )
        return self._distribute(trigger, commit=commit)

    def _distribute(
        self, trigger: CommissionTrigger, commit: bool
    ) -> List[CommissionRecord]:
        """
        커미션 분배 공통 로직

        Args:
            trigger: 커미션 발생 이벤트
            commit: True면 자체 트랜잭션 커밋, False면 호출자 트랜잭션의 SAVEPOINT

        Returns:
            생성된 커미션 레코드 (없으면 빈 리스트)

        Raises:
            MembershipConfigurationError: 이벤트/추천인의 등급이 등급 테이블에 없음
        """
        try:
            with atomic(self.db, commit=commit):
                return self._distribute_in_transaction(trigger)
        except Exception as e:
            logger.error(
                f"Commission distribution failed for user {trigger.downline_user_id} "
                f"({trigger.ref_prefix}): {str(e)}"
            )
            raise

    def _distribute_in_transaction(
        self, trigger: CommissionTrigger
    ) -> List[CommissionRecord]:
        engine_settings = self.settings_service.get_engine_settings()
        ordinals = self.membership_repo.ordinal_map()
        trigger_ordinal = _ordinal_of(ordinals, trigger.trigger_level)

        if MembershipLevel.is_intern(trigger.trigger_level):
            logger.debug(
                f"No commissions for intern event from user {trigger.downline_user_id}"
            )
            return []

        ancestors = self.user_repo.get_referrer_chain(trigger.downline_user_id)
        if not ancestors:
            return []

        records = []
        for depth, ancestor in enumerate(ancestors, start=1):
            level = CommissionLevel.from_depth(depth)
            ancestor_ordinal = _ordinal_of(ordinals, ancestor.membership_level.value)

            if level is CommissionLevel.A and exceeds_referral_cap(
                self.user_repo.count_direct_referrals(ancestor.id),
                engine_settings.max_referrals_per_user,
            ):
                logger.debug(
                    f"Skip A-level commission for user {ancestor.id}: referral cap exceeded"
                )
                continue

            if not is_eligible(trigger.trigger_level, trigger_ordinal, ancestor_ordinal):
                logger.debug(
                    f"Skip {level.value}-level commission for user {ancestor.id}: "
                    f"{trigger.trigger_level} outranks {ancestor.membership_level.value}"
                )
                continue

            percentage = engine_settings.commission_percent(
                level, membership_purchase=trigger.membership_purchase
            )
            amount = commission_amount(trigger.amount, percentage)
            if amount <= 0:
                continue

            source = (
                f"{trigger.source_membership_level} purchase"
                if trigger.membership_purchase
                else f"task {trigger.source_task_id}"
            )
            credit = self.wallet_service.apply(
                user_id=ancestor.id,
                wallet_kind=engine_settings.commission_wallet,
                amount=amount,
                reason=f"{level.value}-level commission from user {trigger.downline_user_id} ({source})",
                ref_id=f"{trigger.ref_prefix}:{level.value}",
            )
            if credit.duplicate:
                continue

            records.append(
                {
                    "beneficiary_user_id": ancestor.id,
                    "downline_user_id": trigger.downline_user_id,
                    "level": level.value,
                    "percentage": percentage,
                    "amount_earned": amount,
                    "source_task_id": trigger.source_task_id,
                    "source_membership_level": trigger.source_membership_level,
                }
            )
            logger.info(
                f"{level.value}-level commission {amount} credited to user {ancestor.id} "
                f"from user {trigger.downline_user_id}"
            )

        return self.commission_repo.bulk_create(records)

    def list_commissions(
        self, beneficiary_id: int, limit: int = 50, offset: int = 0
    ) -> CommissionListResponse:
        if limit > 100:
            limit = 100
        commissions, total_count = self.commission_repo.list_by_beneficiary(
            beneficiary_id, limit=limit, offset=offset
        )
        return CommissionListResponse(
            commissions=commissions,
            total_count=total_count,
            has_next=offset + limit < total_count,
        )

    def get_commission_summary(self, beneficiary_id: int) -> CommissionSummaryResponse:
        levels = self.commission_repo.summarize_by_level(beneficiary_id)
        return CommissionSummaryResponse(
            beneficiary_user_id=beneficiary_id,
            levels=levels,
            total_amount=sum((item.total_amount for item in levels), Decimal("0")),
        )
