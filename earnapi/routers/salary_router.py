from typing import List

from fastapi import APIRouter, Depends, Path

from earnapi.core.security import admin_required, get_current_user
from earnapi.deps import get_salary_service
from earnapi.schemas.salary import SalaryCalculation, SalaryPayoutResponse, SalaryRecord
from earnapi.schemas.user import User as UserSchema
from earnapi.services.salary_service import SalaryService

router = APIRouter(prefix="/salaries", tags=["salaries"])


@router.get("/me/preview", response_model=SalaryCalculation)
def preview_my_salary(
    current_user: UserSchema = Depends(get_current_user),
    salary_service: SalaryService = Depends(get_salary_service),
) -> SalaryCalculation:
    """이번 달 예상 급여와 하위 조직 집계 (지급하지 않음)"""
    return salary_service.calculate_monthly_salary(current_user.id)


@router.get("/me", response_model=List[SalaryRecord])
def list_my_salaries(
    current_user: UserSchema = Depends(get_current_user),
    salary_service: SalaryService = Depends(get_salary_service),
) -> List[SalaryRecord]:
    return salary_service.list_salaries(current_user.id)


@router.post("/admin/process/{user_id}", response_model=SalaryPayoutResponse)
def process_salary_for_user(
    user_id: int = Path(..., gt=0),
    _: UserSchema = Depends(admin_required),
    salary_service: SalaryService = Depends(get_salary_service),
) -> SalaryPayoutResponse:
    """특정 사용자 급여 즉시 지급 (관리자). 이번 달 이미 지급됐으면 paid=False"""
    return salary_service.process_salary_for_user_id(user_id)
