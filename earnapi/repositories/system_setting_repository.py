from sqlalchemy.orm import Session

from earnapi.models.system_setting import (
    DEFAULT_SYSTEM_SETTINGS,
    SystemSetting as SystemSettingModel,
)
from earnapi.repositories.base import BaseRepository
from earnapi.schemas.settings import SystemSettingResponse


class SystemSettingRepository(BaseRepository[SystemSettingModel, SystemSettingResponse]):
    """시스템 설정 싱글톤 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(SystemSettingModel, SystemSettingResponse, db)

    def get_or_create(self, commit: bool = True) -> SystemSettingResponse:
        """
        설정 레코드 조회 - 없으면 기본값으로 생성

        캐시하지 않음. 관리자 변경은 다음 호출부터 즉시 반영됩니다.
        """
        self._ensure_clean_session()
        instance = (
            self.db.query(self.model_class).order_by(self.model_class.id).first()
        )
        if instance is not None:
            return self._to_schema(instance)
        return self.create(commit=commit, **DEFAULT_SYSTEM_SETTINGS)

    def update_settings(self, commit: bool = True, **fields) -> SystemSettingResponse:
        current = self.get_or_create(commit=commit)
        return self.update(current.id, commit=commit, **fields)
