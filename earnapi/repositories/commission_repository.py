from decimal import Decimal
from typing import List, Tuple

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from earnapi.models.commission import CommissionLevel, CommissionRecord as CommissionModel
from earnapi.repositories.base import BaseRepository
from earnapi.schemas.commission import CommissionLevelSummary, CommissionRecord


class CommissionRepository(BaseRepository[CommissionModel, CommissionRecord]):
    """커미션 원장 리포지토리 (append-only)"""

    def __init__(self, db: Session):
        super().__init__(CommissionModel, CommissionRecord, db)

    def bulk_create(self, records: List[dict]) -> List[CommissionRecord]:
        """
        커미션 레코드 일괄 추가 - 커밋하지 않음

        지갑 적립과 같은 작업 단위 안에서 호출되어 함께 커밋/롤백됩니다.
        """
        if not records:
            return []
        instances = [self.model_class(**record) for record in records]
        self.db.add_all(instances)
        self.db.flush()
        for instance in instances:
            self.db.refresh(instance)
        return self._to_schemas(instances)

    def list_by_beneficiary(
        self, beneficiary_user_id: int, limit: int = 50, offset: int = 0
    ) -> Tuple[List[CommissionRecord], int]:
        self._ensure_clean_session()
        query = self.db.query(self.model_class).filter(
            self.model_class.beneficiary_user_id == beneficiary_user_id
        )
        total_count = query.count()
        model_instances = (
            query.order_by(desc(self.model_class.id)).limit(limit).offset(offset).all()
        )
        return self._to_schemas(model_instances), total_count

    def summarize_by_level(
        self, beneficiary_user_id: int
    ) -> List[CommissionLevelSummary]:
        """레벨별 건수/합계 (기록이 없는 레벨은 0)"""
        self._ensure_clean_session()
        rows = (
            self.db.query(
                self.model_class.level,
                func.count(self.model_class.id),
                func.coalesce(func.sum(self.model_class.amount_earned), 0),
            )
            .filter(self.model_class.beneficiary_user_id == beneficiary_user_id)
            .group_by(self.model_class.level)
            .all()
        )
        by_level = {level: (count, total) for level, count, total in rows}

        summaries = []
        for level in CommissionLevel:
            count, total = by_level.get(level.value, (0, 0))
            summaries.append(
                CommissionLevelSummary(
                    level=level,
                    count=count,
                    total_amount=Decimal(str(total)).quantize(Decimal("0.01")),
                )
            )
        return summaries
