from fastapi import APIRouter, Depends, Query

from earnapi.core.security import admin_required, get_current_user
from earnapi.deps import get_membership_service
from earnapi.models.membership import MembershipLevel
from earnapi.schemas.membership import (
    MembershipTierIncome,
    MembershipTierListResponse,
    MembershipTierUpdate,
    MembershipUpgradeRequest,
    MembershipUpgradeResponse,
)
from earnapi.schemas.user import User as UserSchema
from earnapi.services.membership_service import MembershipService

router = APIRouter(prefix="/memberships", tags=["memberships"])


@router.get("", response_model=MembershipTierListResponse)
def list_memberships(
    include_hidden: bool = Query(False, description="숨김 등급 포함 (관리자만)"),
    current_user: UserSchema = Depends(get_current_user),
    membership_service: MembershipService = Depends(get_membership_service),
) -> MembershipTierListResponse:
    """등급 목록 + 일/영상당/4일 수입"""
    tiers = membership_service.list_tiers(
        include_hidden=include_hidden and current_user.is_admin
    )
    return MembershipTierListResponse(tiers=tiers, total_count=len(tiers))


@router.put("/{level}", response_model=MembershipTierIncome)
def update_membership(
    level: MembershipLevel,
    payload: MembershipTierUpdate,
    _: UserSchema = Depends(admin_required),
    membership_service: MembershipService = Depends(get_membership_service),
) -> MembershipTierIncome:
    """등급 가격 / 권한 / 노출 수정 (관리자, Intern 가격은 0 고정)"""
    return membership_service.update_tier(level, payload)


@router.post("/upgrade", response_model=MembershipUpgradeResponse)
def upgrade_membership(
    payload: MembershipUpgradeRequest,
    _: UserSchema = Depends(admin_required),
    membership_service: MembershipService = Depends(get_membership_service),
) -> MembershipUpgradeResponse:
    """
    결제가 확인된 사용자의 등급 상향 (관리자 승인)

    상위 추천인 멤버십 커미션이 같은 트랜잭션에서 지급됩니다.
    """
    return membership_service.upgrade_membership(payload.user_id, payload.level)
