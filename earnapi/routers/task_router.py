from fastapi import APIRouter, Depends

from earnapi.core.security import get_current_user
from earnapi.deps import get_task_service
from earnapi.schemas.task import TaskCompleteRequest, TaskCompletionResult
from earnapi.schemas.user import User as UserSchema
from earnapi.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("/complete", response_model=TaskCompletionResult)
def complete_task(
    payload: TaskCompleteRequest,
    current_user: UserSchema = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> TaskCompletionResult:
    """
    작업 완료 보고

    본인 수입 적립과 상위 추천인 커미션 지급이 한 트랜잭션으로 처리됩니다.
    같은 task_ref를 다시 보내면 409.
    """
    return task_service.complete_task(current_user.id, payload.task_ref)
