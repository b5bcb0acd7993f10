from typing import Optional

from sqlalchemy.orm import Session

from earnapi.models.task import TaskCompletion as TaskCompletionModel
from earnapi.repositories.base import BaseRepository
from earnapi.schemas.task import TaskCompletion


class TaskRepository(BaseRepository[TaskCompletionModel, TaskCompletion]):
    def __init__(self, db: Session):
        super().__init__(TaskCompletionModel, TaskCompletion, db)

    def get_by_task_ref(self, user_id: int, task_ref: str) -> Optional[TaskCompletion]:
        instance = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.user_id == user_id,
                self.model_class.task_ref == task_ref,
            )
            .first()
        )
        return self._to_schema(instance)

    def count_for_user(self, user_id: int) -> int:
        return self.count(filters={"user_id": user_id})
