"""
커미션/급여 자격 판정 (순수 함수)

DB나 설정 저장소에 접근하지 않고, 호출자가 전달한 등급 순서와
EngineSettings 스냅샷만으로 계산합니다.
"""

from decimal import Decimal, ROUND_DOWN
from typing import Mapping, Optional, Tuple

from earnapi.core.exceptions import MembershipConfigurationError
from earnapi.models.membership import MembershipLevel
from earnapi.schemas.salary import NO_RULE_APPLIED
from earnapi.schemas.settings import EngineSettings, SalaryRule

CENT = Decimal("0.01")


def is_eligible(
    trigger_level: str, trigger_ordinal: int, beneficiary_ordinal: int
) -> bool:
    """
    하위 회원 이벤트로 상위 회원이 수당을 받을 수 있는지

    Intern이 발생시킨 이벤트는 항상 제외. 그 외에는 이벤트 등급이
    수령자 등급보다 높지 않아야 함.
    """
    if MembershipLevel.is_intern(trigger_level):
        return False
    return trigger_ordinal <= beneficiary_ordinal


def exceeds_referral_cap(direct_referral_count: int, max_referrals: int) -> bool:
    """0 = 무제한. 직접 추천 수가 상한을 '초과'할 때만 True"""
    return max_referrals > 0 and direct_referral_count > max_referrals


def commission_amount(amount: Decimal, percentage: Decimal) -> Decimal:
    """amount * percentage / 100, 센트 단위 절사"""
    raw = Decimal(str(amount)) * Decimal(str(percentage)) / Decimal(100)
    return raw.quantize(CENT, rounding=ROUND_DOWN)


def qualifies_for_salary(
    level: str, ordinals: Mapping[str, int], root_ordinal: int
) -> bool:
    """
    급여 집계용 하위 회원 자격 - 항상 급여 대상자(root)의 등급과 비교

    Raises:
        MembershipConfigurationError: 등급 테이블에 없는 등급
    """
    if MembershipLevel.is_intern(level):
        return False
    ordinal = ordinals.get(level)
    if ordinal is None:
        raise MembershipConfigurationError(level)
    return ordinal <= root_ordinal


def select_salary(
    settings: EngineSettings, direct_count: int, network_count: int
) -> Tuple[Decimal, str]:
    """
    적용 가능한 규칙 중 지급액이 가장 큰 규칙 선택

    평가 순서는 EngineSettings.salary_rules() 순서이며, 이후 규칙은
    지급액이 더 클 때만 현재 선택을 대체합니다.
    """
    best: Optional[SalaryRule] = None
    for rule in settings.salary_rules():
        if not rule.enabled:
            continue
        count = network_count if rule.scope == "network" else direct_count
        if count < rule.threshold:
            continue
        if best is None or rule.amount > best.amount:
            best = rule

    if best is None:
        return Decimal("0"), NO_RULE_APPLIED
    return best.amount, best.name
