from typing import Dict, Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from earnapi.core.exceptions import MembershipConfigurationError
from earnapi.models.membership import MembershipLevel, MembershipTier as TierModel
from earnapi.schemas.membership import MembershipTier as TierSchema
from earnapi.repositories.base import BaseRepository


class MembershipRepository(BaseRepository[TierModel, TierSchema]):
    """멤버십 등급 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(TierModel, TierSchema, db)

    def get_by_level(
        self, level: Union[str, MembershipLevel]
    ) -> Optional[TierSchema]:
        self._ensure_clean_session()
        level_value = MembershipLevel(level).value
        instance = (
            self.db.query(self.model_class)
            .filter(self.model_class.level == level_value)
            .first()
        )
        return self._to_schema(instance)

    def require_tier(self, level: Union[str, MembershipLevel]) -> TierSchema:
        """등급 조회 - 등록되지 않은 등급이면 MembershipConfigurationError"""
        try:
            tier = self.get_by_level(level)
        except ValueError:
            # enum에 없는 저장값
            raise MembershipConfigurationError(str(level))
        if tier is None:
            raise MembershipConfigurationError(MembershipLevel(level).value)
        return tier

    def list_tiers(self, include_hidden: bool = False) -> List[TierSchema]:
        """ordinal 오름차순 등급 목록"""
        self._ensure_clean_session()
        query = self.db.query(self.model_class)
        if not include_hidden:
            query = query.filter(self.model_class.hidden.is_(False))
        return self._to_schemas(query.order_by(self.model_class.ordinal).all())

    def ordinal_map(self) -> Dict[str, int]:
        """{level 문자열: ordinal} - 자격 판정용 (호출마다 새로 조회)"""
        self._ensure_clean_session()
        rows = self.db.query(self.model_class.level, self.model_class.ordinal).all()
        return {level: ordinal for level, ordinal in rows}

    def seed(self, tiers: Iterable[dict], commit: bool = True) -> int:
        """없는 등급만 추가 (기존 등급은 변경하지 않음). 추가된 건수 반환"""
        self._ensure_clean_session()
        existing = {
            level for (level,) in self.db.query(self.model_class.level).all()
        }
        created = 0
        for tier in tiers:
            level = MembershipLevel(tier["level"]).value
            if level in existing:
                continue
            self.db.add(self.model_class(**{**tier, "level": level}))
            created += 1

        try:
            self.db.flush()
            if commit:
                self.db.commit()
        except Exception:
            if commit:
                self.db.rollback()
            raise
        return created

    def update_tier(
        self, level: Union[str, MembershipLevel], commit: bool = True, **fields
    ) -> TierSchema:
        tier = self.require_tier(level)
        return self.update(tier.id, commit=commit, **fields)
