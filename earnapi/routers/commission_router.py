from fastapi import APIRouter, Depends, Query

from earnapi.core.security import get_current_user
from earnapi.deps import get_commission_service
from earnapi.schemas.commission import CommissionListResponse, CommissionSummaryResponse
from earnapi.schemas.user import User as UserSchema
from earnapi.services.commission_service import CommissionService

router = APIRouter(prefix="/commissions", tags=["commissions"])


@router.get("/me", response_model=CommissionListResponse)
def list_my_commissions(
    limit: int = Query(50, ge=1, le=100, description="페이지 크기"),
    offset: int = Query(0, ge=0, description="오프셋"),
    current_user: UserSchema = Depends(get_current_user),
    commission_service: CommissionService = Depends(get_commission_service),
) -> CommissionListResponse:
    """내가 받은 커미션 목록 (최신순)"""
    return commission_service.list_commissions(
        current_user.id, limit=limit, offset=offset
    )


@router.get("/me/summary", response_model=CommissionSummaryResponse)
def get_my_commission_summary(
    current_user: UserSchema = Depends(get_current_user),
    commission_service: CommissionService = Depends(get_commission_service),
) -> CommissionSummaryResponse:
    """A/B/C 레벨별 커미션 합계"""
    return commission_service.get_commission_summary(current_user.id)
