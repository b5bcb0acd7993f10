from typing import List

from sqlalchemy import desc
from sqlalchemy.orm import Session

from earnapi.models.salary import SalaryRecord as SalaryModel
from earnapi.repositories.base import BaseRepository
from earnapi.schemas.salary import SalaryRecord


class SalaryRepository(BaseRepository[SalaryModel, SalaryRecord]):
    """월 급여 지급 기록 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(SalaryModel, SalaryRecord, db)

    def exists_for_month(self, user_id: int, month: int, year: int) -> bool:
        return self.exists({"user_id": user_id, "month": month, "year": year})

    def list_by_user(self, user_id: int, limit: int = 24) -> List[SalaryRecord]:
        """최신 지급 순"""
        self._ensure_clean_session()
        model_instances = (
            self.db.query(self.model_class)
            .filter(self.model_class.user_id == user_id)
            .order_by(desc(self.model_class.year), desc(self.model_class.month))
            .limit(limit)
            .all()
        )
        return self._to_schemas(model_instances)
