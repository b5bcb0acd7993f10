import logging

from fastapi import APIRouter, Depends

from earnapi.core.security import admin_required
from earnapi.deps import get_salary_service
from earnapi.schemas.salary import SalaryBatchResult
from earnapi.schemas.user import User as UserSchema
from earnapi.services.salary_service import SalaryService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/batch",
    tags=["batch"],
)


@router.post("/salaries", response_model=SalaryBatchResult)
def run_salary_batch(
    current_user: UserSchema = Depends(admin_required),
    salary_service: SalaryService = Depends(get_salary_service),
) -> SalaryBatchResult:
    """
    일일 급여 배치 (외부 스케줄러가 하루 한 번 호출)

    이미 이번 달 지급된 사용자는 건너뛰므로 여러 번 호출해도 안전합니다.
    """
    logger.info(f"Salary batch triggered by admin {current_user.id}")
    return salary_service.process_all_salaries()
