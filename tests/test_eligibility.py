from decimal import Decimal

import pytest
from pydantic import ValidationError

from earnapi.core.eligibility import (
    commission_amount,
    exceeds_referral_cap,
    is_eligible,
    qualifies_for_salary,
    select_salary,
)
from earnapi.core.exceptions import MembershipConfigurationError
from earnapi.models.system_setting import DEFAULT_SYSTEM_SETTINGS
from earnapi.schemas.salary import NO_RULE_APPLIED
from earnapi.schemas.settings import EngineSettings

ORDINALS = {"Intern": 0, "Rank 1": 1, "Rank 2": 2, "Rank 3": 3}


def make_settings(**overrides) -> EngineSettings:
    return EngineSettings(**{**DEFAULT_SYSTEM_SETTINGS, **overrides})


class TestCommissionEligibility:
    """커미션 자격 판정 테스트"""

    def test_same_rank_is_eligible(self):
        assert is_eligible("Rank 2", 2, 2) is True

    def test_lower_ranked_downline_is_eligible(self):
        assert is_eligible("Rank 1", 1, 3) is True

    def test_downline_outranking_ancestor_is_not_eligible(self):
        assert is_eligible("Rank 2", 2, 1) is False

    def test_intern_event_never_generates_commission(self):
        """Intern 이벤트는 상위 등급과 무관하게 제외"""
        assert is_eligible("Intern", 0, 10) is False

    @pytest.mark.parametrize(
        "count,cap,expected",
        [(100, 0, False), (5, 5, False), (6, 5, True)],
    )
    def test_referral_cap_only_when_exceeded(self, count, cap, expected):
        assert exceeds_referral_cap(count, cap) is expected


class TestCommissionAmount:
    def test_percentage_of_amount(self):
        assert commission_amount(Decimal("100"), Decimal("10")) == Decimal("10.00")

    def test_rounds_down_to_cents(self):
        # 33.33 * 5% = 1.6665
        assert commission_amount(Decimal("33.33"), Decimal("5")) == Decimal("1.66")

    def test_tiny_amount_rounds_to_zero(self):
        assert commission_amount(Decimal("0.10"), Decimal("2")) == Decimal("0.00")

    def test_float_amount_uses_decimal_text(self):
        # Decimal(0.3) == 0.29999...
        assert commission_amount(0.3, Decimal("10")) == Decimal("0.03")


class TestSalaryQualification:
    def test_compares_against_root_rank(self):
        assert qualifies_for_salary("Rank 2", ORDINALS, root_ordinal=2) is True
        assert qualifies_for_salary("Rank 3", ORDINALS, root_ordinal=2) is False

    def test_intern_never_qualifies(self):
        assert qualifies_for_salary("Intern", ORDINALS, root_ordinal=3) is False

    def test_unknown_level_is_a_configuration_error(self):
        with pytest.raises(MembershipConfigurationError):
            qualifies_for_salary("Rank 9", ORDINALS, root_ordinal=3)


class TestSalaryRuleSelection:
    """급여 규칙 선택 - 가장 큰 지급액"""

    def test_network_rule_wins_with_larger_amount(self):
        amount, rule = select_salary(make_settings(), direct_count=20, network_count=41)

        assert amount == Decimal("48000")
        assert rule == "40 total network users"

    def test_highest_direct_rule_applies(self):
        amount, rule = select_salary(make_settings(), direct_count=15, network_count=15)

        assert amount == Decimal("15000")
        assert rule == "15 direct A-level users"

    def test_direct_rule_beats_smaller_network_rule(self):
        settings = make_settings(salary_network40_amount=Decimal("5000"))

        amount, rule = select_salary(settings, direct_count=20, network_count=45)

        assert amount == Decimal("20000")
        assert rule == "20 direct A-level users"

    def test_equal_amount_keeps_first_rule(self):
        settings = make_settings(salary_network40_amount=Decimal("20000"))

        amount, rule = select_salary(settings, direct_count=20, network_count=40)

        assert amount == Decimal("20000")
        assert rule == "40 total network users"

    def test_no_rule_met(self):
        amount, rule = select_salary(make_settings(), direct_count=9, network_count=39)

        assert amount == Decimal("0")
        assert rule == NO_RULE_APPLIED

    def test_disabled_rule_is_skipped(self):
        """기준 인원 0인 규칙은 비활성"""
        settings = make_settings(salary_direct10_threshold=0)

        amount, rule = select_salary(settings, direct_count=3, network_count=3)

        assert amount == Decimal("0")
        assert rule == NO_RULE_APPLIED


class TestEngineSettings:
    def test_upgrade_percent_falls_back_to_task_percent(self):
        settings = make_settings(
            upgrade_commission_percent_a=None,
            upgrade_commission_percent_b=Decimal("7"),
        )

        assert settings.commission_percent("A", membership_purchase=True) == Decimal("10")
        assert settings.commission_percent("B", membership_purchase=True) == Decimal("7")
        assert settings.commission_percent("B") == Decimal("5")

    def test_snapshot_is_immutable(self):
        settings = make_settings()

        with pytest.raises(ValidationError):
            settings.commission_percent_a = Decimal("50")
