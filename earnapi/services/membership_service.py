import logging
from decimal import Decimal, ROUND_DOWN
from typing import Dict, List, Union

from sqlalchemy.orm import Session

from earnapi.core.exceptions import NotFoundError, ValidationError
from earnapi.database.session import atomic
from earnapi.models.membership import MembershipLevel
from earnapi.repositories.membership_repository import MembershipRepository
from earnapi.repositories.user_repository import UserRepository
from earnapi.schemas.membership import (
    MembershipTier,
    MembershipTierIncome,
    MembershipTierUpdate,
    MembershipUpgradeResponse,
)
from earnapi.services.commission_service import CommissionService
from earnapi.utils.timezone_utils import get_utc_now

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# Intern은 가격과 무관하게 고정 수입
INTERN_DAILY_INCOME = Decimal("50")
INTERN_PER_VIDEO_INCOME = Decimal("10")
INCOME_DAYS_PER_MONTH = 30
VIDEOS_PER_DAY = 5

DEFAULT_MEMBERSHIP_TIERS = [
    {"level": MembershipLevel.INTERN, "price": Decimal("0"), "can_withdraw": False},
    {"level": MembershipLevel.RANK_1, "price": Decimal("3300"), "can_withdraw": True},
    {"level": MembershipLevel.RANK_2, "price": Decimal("9600"), "can_withdraw": True},
    {"level": MembershipLevel.RANK_3, "price": Decimal("27000"), "can_withdraw": True},
    {"level": MembershipLevel.RANK_4, "price": Decimal("78000"), "can_withdraw": True},
    {"level": MembershipLevel.RANK_5, "price": Decimal("220000"), "can_withdraw": True},
    {"level": MembershipLevel.RANK_6, "price": Decimal("590000"), "can_withdraw": True},
    {"level": MembershipLevel.RANK_7, "price": Decimal("1280000"), "can_withdraw": True},
    {"level": MembershipLevel.RANK_8, "price": Decimal("2530000"), "can_withdraw": True},
    {"level": MembershipLevel.RANK_9, "price": Decimal("5000000"), "can_withdraw": True},
    {"level": MembershipLevel.RANK_10, "price": Decimal("9800000"), "can_withdraw": True},
]


def daily_income(tier: MembershipTier) -> Decimal:
    """일 수입: 가격 / 30 (Intern 고정 50)"""
    if tier.is_intern:
        return INTERN_DAILY_INCOME
    return (Decimal(tier.price) / INCOME_DAYS_PER_MONTH).quantize(CENT, rounding=ROUND_DOWN)


def per_video_income(tier: MembershipTier) -> Decimal:
    """영상 1건당 수입: 일 수입 / 5 (Intern 고정 10)"""
    if tier.is_intern:
        return INTERN_PER_VIDEO_INCOME
    raw = Decimal(tier.price) / INCOME_DAYS_PER_MONTH / VIDEOS_PER_DAY
    return raw.quantize(CENT, rounding=ROUND_DOWN)


def four_day_income(tier: MembershipTier) -> Decimal:
    return daily_income(tier) * 4


class MembershipService:
    """멤버십 등급 조회/관리 및 등급 상향"""

    def __init__(self, db: Session):
        self.db = db
        self.membership_repo = MembershipRepository(db)
        self.user_repo = UserRepository(db)
        self.commission_service = CommissionService(db)

    def _with_income(self, tier: MembershipTier) -> MembershipTierIncome:
        return MembershipTierIncome(
            **tier.model_dump(),
            daily_income=daily_income(tier),
            per_video_income=per_video_income(tier),
            four_day_income=four_day_income(tier),
        )

    def list_tiers(self, include_hidden: bool = False) -> List[MembershipTierIncome]:
        return [
            self._with_income(tier)
            for tier in self.membership_repo.list_tiers(include_hidden=include_hidden)
        ]

    def get_tier(self, level: Union[str, MembershipLevel]) -> MembershipTierIncome:
        try:
            tier = self.membership_repo.get_by_level(level)
        except ValueError:
            raise NotFoundError(f"Unknown membership level: {level}")
        if tier is None:
            raise NotFoundError(f"Membership level {level} not found")
        return self._with_income(tier)

    def ordinal_map(self) -> Dict[str, int]:
        return self.membership_repo.ordinal_map()

    def seed_default_tiers(self) -> int:
        """기본 등급 생성 (이미 있는 등급은 유지). 생성 건수 반환"""
        tiers = [
            {
                **tier,
                "level": tier["level"].value,
                "ordinal": MembershipLevel.default_ordinal(tier["level"]),
            }
            for tier in DEFAULT_MEMBERSHIP_TIERS
        ]
        with atomic(self.db):
            created = self.membership_repo.seed(tiers, commit=False)
        logger.info(f"Seeded {created} membership tiers")
        return created

    def update_tier(
        self, level: Union[str, MembershipLevel], payload: MembershipTierUpdate
    ) -> MembershipTierIncome:
        """관리자 등급 수정 - Intern 가격은 항상 0"""
        current = self.get_tier(level)
        changes = payload.model_dump(exclude_unset=True)
        changes = {
            key: value
            for key, value in changes.items()
            if value is not None
            or key in ("restricted_range_start", "restricted_range_end")
        }

        if current.is_intern and changes.get("price", Decimal("0")) != 0:
            raise ValidationError(
                "Intern membership price must remain 0",
                details={"level": current.level.value},
            )

        start = changes.get("restricted_range_start", current.restricted_range_start)
        end = changes.get("restricted_range_end", current.restricted_range_end)
        if start is not None and end is not None and start > end:
            raise ValidationError(
                "restricted_range_start must not exceed restricted_range_end"
            )

        with atomic(self.db):
            updated = self.membership_repo.update_tier(
                current.level, commit=False, **changes
            )
        logger.info(f"Membership tier {current.level.value} updated: {sorted(changes)}")
        return self._with_income(updated)

    def upgrade_membership(
        self, user_id: int, level: Union[str, MembershipLevel]
    ) -> MembershipUpgradeResponse:
        """
        등급 상향 (결제 확인 이후 호출)

        사용자 등급 변경, 활성화 시각 기록, 상위 추천인 커미션 지급을
        하나의 트랜잭션으로 처리합니다. 현재보다 높은 등급으로만 변경 가능.
        """
        user = self.user_repo.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        target = self.get_tier(level)
        current = self.membership_repo.require_tier(user.membership_level)
        if target.ordinal <= current.ordinal:
            raise ValidationError(
                "Can only upgrade to a higher membership level",
                details={
                    "current_level": current.level.value,
                    "requested_level": target.level.value,
                },
            )

        activated_at = get_utc_now()
        with atomic(self.db):
            updated_user = self.user_repo.update_membership(
                user_id, target.level.value, activated_at, commit=False
            )
            commissions = (
                self.commission_service.calculate_and_create_membership_commissions(
                    updated_user, target, commit=False
                )
            )

        commission_total = sum(
            (record.amount_earned for record in commissions), Decimal("0")
        )
        logger.info(
            f"User {user_id} upgraded {current.level.value} -> {target.level.value}, "
            f"{len(commissions)} commissions ({commission_total})"
        )
        return MembershipUpgradeResponse(
            user_id=user_id,
            previous_level=current.level,
            new_level=target.level,
            membership_activated_at=activated_at,
            commissions_created=len(commissions),
            commission_total=commission_total,
        )
