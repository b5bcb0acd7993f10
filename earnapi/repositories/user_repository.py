from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_
from datetime import datetime

from earnapi.core.exceptions import NotFoundError, ReferralCycleError
from earnapi.models.user import User as UserModel, UserRole
from earnapi.schemas.user import User as UserSchema
from earnapi.repositories.base import BaseRepository

# 추천 트리 탐색 최대 깊이 (A/B/C)
MAX_REFERRAL_DEPTH = 3


class UserRepository(BaseRepository[UserModel, UserSchema]):
    """사용자 리포지토리 - 추천 트리 / 지갑 행 잠금"""

    def __init__(self, db: Session):
        super().__init__(UserModel, UserSchema, db)

    def get_user(self, user_id: int) -> Optional[UserSchema]:
        return self.get_by_id(user_id)

    def get_for_update(self, user_id: int) -> Optional[UserModel]:
        """
        사용자 행을 잠그고 (SELECT ... FOR UPDATE) 최신 값으로 로드

        지갑 read-increment-write는 반드시 이 메서드로 얻은 인스턴스에서 수행.
        """
        return (
            self.db.query(self.model_class)
            .filter(self.model_class.id == user_id)
            .populate_existing()
            .with_for_update()
            .first()
        )

    def create_user(
        self,
        phone: str,
        referrer_id: Optional[int] = None,
        membership_level: str = "Intern",
        role: str = UserRole.USER.value,
        commit: bool = True,
    ) -> UserSchema:
        """사용자 생성 (추천인이 있으면 존재 여부 확인)"""
        if referrer_id is not None and self.get_by_id(referrer_id) is None:
            raise NotFoundError(f"Referrer {referrer_id} not found")
        return self.create(
            commit=commit,
            phone=phone,
            referrer_id=referrer_id,
            membership_level=membership_level,
            role=role,
            is_active=True,
        )

    def get_referrer_chain(
        self, user_id: int, max_depth: int = MAX_REFERRAL_DEPTH
    ) -> List[UserSchema]:
        """
        상위 추천인 목록 [A, B, C] (가까운 순)

        추천인이 없거나 순환이 감지되면 그 지점에서 멈춤.
        """
        self._ensure_clean_session()
        chain: List[UserSchema] = []
        visited = {user_id}

        current = self.db.get(self.model_class, user_id)
        while current is not None and len(chain) < max_depth:
            referrer_id = current.referrer_id
            if referrer_id is None or referrer_id in visited:
                break
            visited.add(referrer_id)
            current = self.db.get(self.model_class, referrer_id)
            if current is not None:
                chain.append(self._to_schema(current))
        return chain

    def count_direct_referrals(self, user_id: int) -> int:
        return self.count(filters={"referrer_id": user_id})

    def find_by_referrer_ids(self, referrer_ids: Iterable[int]) -> List[UserSchema]:
        """주어진 사용자들의 직접 추천 회원 목록"""
        ids = list(referrer_ids)
        if not ids:
            return []
        self._ensure_clean_session()
        model_instances = (
            self.db.query(self.model_class)
            .filter(self.model_class.referrer_id.in_(ids))
            .order_by(self.model_class.id)
            .all()
        )
        return self._to_schemas(model_instances)

    def list_salary_candidate_ids(self, limit: int = 0) -> List[int]:
        """급여 배치 대상 - 활성 일반 회원 ID (관리자 제외)"""
        self._ensure_clean_session()
        query = (
            self.db.query(self.model_class.id)
            .filter(
                and_(
                    self.model_class.is_active.is_(True),
                    self.model_class.role == UserRole.USER.value,
                )
            )
            .order_by(self.model_class.id)
        )
        if limit:
            query = query.limit(limit)
        return [user_id for (user_id,) in query.all()]

    def assign_referrer(
        self, user_id: int, referrer_id: Optional[int], commit: bool = True
    ) -> UserSchema:
        """
        추천인 지정 - 자기 자신 추천 및 순환 추천 거부

        새 추천인의 상위 체인을 끝까지 따라가며 user_id가 나타나면 순환.
        """
        if self.get_by_id(user_id) is None:
            raise NotFoundError(f"User {user_id} not found")

        if referrer_id is not None:
            if referrer_id == user_id:
                raise ReferralCycleError(user_id, referrer_id)

            seen = set()
            cursor = self.db.get(self.model_class, referrer_id)
            if cursor is None:
                raise NotFoundError(f"Referrer {referrer_id} not found")
            while cursor is not None and cursor.referrer_id is not None:
                if cursor.referrer_id == user_id or cursor.referrer_id in seen:
                    raise ReferralCycleError(user_id, referrer_id)
                seen.add(cursor.referrer_id)
                cursor = self.db.get(self.model_class, cursor.referrer_id)

        return self.update(user_id, commit=commit, referrer_id=referrer_id)

    def update_membership(
        self,
        user_id: int,
        membership_level: str,
        activated_at: datetime,
        commit: bool = True,
    ) -> Optional[UserSchema]:
        return self.update(
            user_id,
            commit=commit,
            membership_level=membership_level,
            membership_activated_at=activated_at,
        )
