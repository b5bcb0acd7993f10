from decimal import Decimal
from unittest.mock import patch

import pytest

from earnapi.core.exceptions import MembershipConfigurationError
from earnapi.models.membership import MembershipLevel, MembershipTier
from earnapi.models.wallet import WalletTransaction
from earnapi.repositories.membership_repository import MembershipRepository
from earnapi.repositories.user_repository import UserRepository
from earnapi.services.commission_service import CommissionService

L = MembershipLevel


def income_of(db, user_id) -> Decimal:
    return UserRepository(db).get_user(user_id).income_wallet


@pytest.fixture
def commission_service(db_session):
    return CommissionService(db_session)


class TestTaskCommissions:
    """작업 완료 커미션 테스트"""

    def test_direct_referrer_of_higher_rank_is_credited(
        self, db_session, commission_service, make_user, make_task_completion
    ):
        """Rank 2 추천인이 Rank 1 회원의 100 ETB 작업에서 10 ETB를 받음"""
        # Given
        referrer = make_user(L.RANK_2)
        user = make_user(L.RANK_1, referrer_id=referrer)
        task = make_task_completion(user, "100")

        # When
        records = commission_service.calculate_and_create_commissions(task, Decimal("100"))

        # Then
        assert len(records) == 1
        assert records[0].level.value == "A"
        assert records[0].beneficiary_user_id == referrer
        assert records[0].amount_earned == Decimal("10.00")
        assert records[0].percentage == Decimal("10")
        assert records[0].source_task_id == task.id
        assert income_of(db_session, referrer) == Decimal("10.00")

        ledger = db_session.query(WalletTransaction).filter_by(user_id=referrer).one()
        assert ledger.ref_id == f"commission:task:{task.id}:A"
        assert ledger.balance_after == Decimal("10.00")

    def test_float_earnings_are_not_truncated_by_binary_error(
        self, db_session, commission_service, make_user, make_task_completion
    ):
        referrer = make_user(L.RANK_2)
        user = make_user(L.RANK_1, referrer_id=referrer)
        task = make_task_completion(user, "0.30")

        records = commission_service.calculate_and_create_commissions(task, 0.3)

        assert records[0].amount_earned == Decimal("0.03")
        assert income_of(db_session, referrer) == Decimal("0.03")

    def test_lower_ranked_referrer_gets_nothing(
        self, db_session, commission_service, make_user, make_task_completion
    ):
        referrer = make_user(L.INTERN)
        user = make_user(L.RANK_1, referrer_id=referrer)
        task = make_task_completion(user, "100")

        records = commission_service.calculate_and_create_commissions(task, Decimal("100"))

        assert records == []
        assert income_of(db_session, referrer) == Decimal("0")

    def test_intern_task_generates_no_commission(
        self, db_session, commission_service, make_user, make_task_completion
    ):
        referrer = make_user(L.RANK_5)
        user = make_user(L.INTERN, referrer_id=referrer)
        task = make_task_completion(user, "10", level=L.INTERN)

        records = commission_service.calculate_and_create_commissions(task, Decimal("10"))

        assert records == []
        assert income_of(db_session, referrer) == Decimal("0")

    def test_user_without_referrer(self, commission_service, make_user, make_task_completion):
        user = make_user(L.RANK_1)
        task = make_task_completion(user, "100")

        assert commission_service.calculate_and_create_commissions(task, Decimal("100")) == []

    def test_chain_stops_after_three_levels(
        self, db_session, commission_service, make_user, make_task_completion
    ):
        """A/B/C 세 단계까지만 지급 (4단계 상위는 제외)"""
        d = make_user(L.RANK_3)
        c = make_user(L.RANK_3, referrer_id=d)
        b = make_user(L.RANK_3, referrer_id=c)
        a = make_user(L.RANK_3, referrer_id=b)
        user = make_user(L.RANK_1, referrer_id=a)
        task = make_task_completion(user, "100")

        records = commission_service.calculate_and_create_commissions(task, Decimal("100"))

        assert [(r.level.value, r.beneficiary_user_id, r.amount_earned) for r in records] == [
            ("A", a, Decimal("10.00")),
            ("B", b, Decimal("5.00")),
            ("C", c, Decimal("2.00")),
        ]
        assert income_of(db_session, d) == Decimal("0")

    def test_levels_are_evaluated_independently(
        self, db_session, commission_service, make_user, make_task_completion
    ):
        """A가 자격 미달이어도 B는 자신의 등급으로 다시 판정"""
        b = make_user(L.RANK_2)
        a = make_user(L.RANK_1, referrer_id=b)
        user = make_user(L.RANK_2, referrer_id=a)
        task = make_task_completion(user, "100", level=L.RANK_2)

        records = commission_service.calculate_and_create_commissions(task, Decimal("100"))

        assert [(r.level.value, r.beneficiary_user_id) for r in records] == [("B", b)]
        assert income_of(db_session, a) == Decimal("0")
        assert income_of(db_session, b) == Decimal("5.00")

    def test_referral_cap_skips_only_a_level(
        self, db_session, commission_service, make_user, make_task_completion, update_settings
    ):
        """직접 추천 수가 상한을 초과하면 A만 제외, B는 계속 지급"""
        update_settings(max_referrals_per_user=1)
        b = make_user(L.RANK_3)
        a = make_user(L.RANK_3, referrer_id=b)
        make_user(L.RANK_1, referrer_id=a)
        user = make_user(L.RANK_1, referrer_id=a)
        task = make_task_completion(user, "100")

        records = commission_service.calculate_and_create_commissions(task, Decimal("100"))

        assert [r.level.value for r in records] == ["B"]
        assert income_of(db_session, a) == Decimal("0")

    def test_referral_cap_reached_but_not_exceeded(
        self, commission_service, make_user, make_task_completion, update_settings
    ):
        update_settings(max_referrals_per_user=2)
        a = make_user(L.RANK_3)
        make_user(L.RANK_1, referrer_id=a)
        user = make_user(L.RANK_1, referrer_id=a)
        task = make_task_completion(user, "100")

        records = commission_service.calculate_and_create_commissions(task, Decimal("100"))

        assert [r.level.value for r in records] == ["A"]

    def test_settings_change_applies_to_next_calculation(
        self, db_session, commission_service, make_user, make_task_completion, update_settings
    ):
        a = make_user(L.RANK_3)
        user = make_user(L.RANK_1, referrer_id=a)

        commission_service.calculate_and_create_commissions(
            make_task_completion(user, "100"), Decimal("100")
        )
        update_settings(commission_percent_a=Decimal("12.5"))
        records = commission_service.calculate_and_create_commissions(
            make_task_completion(user, "100"), Decimal("100")
        )

        assert records[0].amount_earned == Decimal("12.50")
        assert income_of(db_session, a) == Decimal("22.50")

    def test_same_task_is_not_paid_twice(
        self, db_session, commission_service, make_user, make_task_completion
    ):
        a = make_user(L.RANK_3)
        user = make_user(L.RANK_1, referrer_id=a)
        task = make_task_completion(user, "100")

        commission_service.calculate_and_create_commissions(task, Decimal("100"))
        second = commission_service.calculate_and_create_commissions(task, Decimal("100"))

        assert second == []
        assert income_of(db_session, a) == Decimal("10.00")

    def test_failure_rolls_back_every_credit(
        self, db_session, commission_service, make_user, make_task_completion
    ):
        """커미션 레코드 저장 실패 시 지갑 적립도 모두 취소"""
        b = make_user(L.RANK_3)
        a = make_user(L.RANK_3, referrer_id=b)
        user = make_user(L.RANK_1, referrer_id=a)
        task = make_task_completion(user, "100")

        with patch.object(
            commission_service.commission_repo,
            "bulk_create",
            side_effect=RuntimeError("insert failed"),
        ):
            with pytest.raises(RuntimeError):
                commission_service.calculate_and_create_commissions(task, Decimal("100"))

        assert income_of(db_session, a) == Decimal("0")
        assert income_of(db_session, b) == Decimal("0")
        assert db_session.query(WalletTransaction).count() == 0

    def test_missing_tier_is_a_configuration_error(
        self, db_session, commission_service, make_user, make_task_completion
    ):
        a = make_user(L.RANK_9)
        user = make_user(L.RANK_1, referrer_id=a)
        task = make_task_completion(user, "100")
        db_session.query(MembershipTier).filter(MembershipTier.level == "Rank 9").delete()
        db_session.commit()

        with pytest.raises(MembershipConfigurationError):
            commission_service.calculate_and_create_commissions(task, Decimal("100"))

        assert db_session.query(WalletTransaction).count() == 0


class TestMembershipCommissions:
    """멤버십 구매 커미션 테스트"""

    def test_purchase_price_is_commission_base(
        self, db_session, commission_service, make_user
    ):
        a = make_user(L.RANK_2)
        user_id = make_user(L.RANK_1, referrer_id=a)
        user = UserRepository(db_session).get_user(user_id)
        tier = MembershipRepository(db_session).require_tier(L.RANK_1)

        records = commission_service.calculate_and_create_membership_commissions(user, tier)

        assert len(records) == 1
        assert records[0].amount_earned == Decimal("330.00")
        assert records[0].source_membership_level == "Rank 1"
        assert records[0].source_task_id is None

    def test_upgrade_percentages_override_task_percentages(
        self, db_session, commission_service, make_user, update_settings
    ):
        update_settings(upgrade_commission_percent_a=Decimal("20"))
        a = make_user(L.RANK_2)
        user = UserRepository(db_session).get_user(make_user(L.RANK_1, referrer_id=a))
        tier = MembershipRepository(db_session).require_tier(L.RANK_1)

        records = commission_service.calculate_and_create_membership_commissions(user, tier)

        assert records[0].percentage == Decimal("20")
        assert records[0].amount_earned == Decimal("660.00")

    def test_cleared_upgrade_percentage_uses_task_percentage(
        self, db_session, commission_service, make_user, update_settings
    ):
        update_settings(commission_percent_a=Decimal("8"), upgrade_commission_percent_a=None)
        a = make_user(L.RANK_2)
        user = UserRepository(db_session).get_user(make_user(L.RANK_1, referrer_id=a))
        tier = MembershipRepository(db_session).require_tier(L.RANK_1)

        records = commission_service.calculate_and_create_membership_commissions(user, tier)

        assert records[0].percentage == Decimal("8")
        assert records[0].amount_earned == Decimal("264.00")

    def test_purchase_above_referrer_rank_pays_nothing(
        self, db_session, commission_service, make_user
    ):
        a = make_user(L.RANK_1)
        user = UserRepository(db_session).get_user(make_user(L.RANK_1, referrer_id=a))
        tier = MembershipRepository(db_session).require_tier(L.RANK_2)

        records = commission_service.calculate_and_create_membership_commissions(user, tier)

        assert records == []
        assert income_of(db_session, a) == Decimal("0")


class TestCommissionQueries:
    def test_list_and_summary(
        self, commission_service, make_user, make_task_completion
    ):
        b = make_user(L.RANK_3)
        a = make_user(L.RANK_3, referrer_id=b)
        first = make_user(L.RANK_1, referrer_id=a)
        second_level = make_user(L.RANK_1, referrer_id=first)

        commission_service.calculate_and_create_commissions(
            make_task_completion(first, "100"), Decimal("100")
        )
        commission_service.calculate_and_create_commissions(
            make_task_completion(second_level, "200"), Decimal("200")
        )

        listing = commission_service.list_commissions(a)
        summary = commission_service.get_commission_summary(a)

        assert listing.total_count == 2
        assert listing.has_next is False
        by_level = {item.level.value: item for item in summary.levels}
        assert by_level["A"].total_amount == Decimal("10.00")
        assert by_level["B"].total_amount == Decimal("10.00")
        assert by_level["C"].count == 0
        assert summary.total_amount == Decimal("20.00")
