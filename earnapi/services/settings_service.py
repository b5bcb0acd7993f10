import logging

from sqlalchemy.orm import Session

from earnapi.database.session import atomic
from earnapi.repositories.system_setting_repository import SystemSettingRepository
from earnapi.schemas.settings import (
    EngineSettings,
    SystemSettingResponse,
    SystemSettingUpdate,
)

logger = logging.getLogger(__name__)

# null 지정 시 작업 커미션 비율로 대체되는 필드
NULLABLE_SETTING_FIELDS = {
    "upgrade_commission_percent_a",
    "upgrade_commission_percent_b",
    "upgrade_commission_percent_c",
}


class SettingsService:
    """시스템 설정 조회/수정 서비스"""

    def __init__(self, db: Session):
        self.db = db
        self.settings_repo = SystemSettingRepository(db)

    def get_settings(self, commit: bool = True) -> SystemSettingResponse:
        """
        설정 레코드 조회 (없으면 기본값으로 생성)

        commit=False면 호출자의 트랜잭션 안에서 SAVEPOINT로 실행.
        """
        with atomic(self.db, commit=commit):
            return self.settings_repo.get_or_create(commit=False)

    def get_engine_settings(self) -> EngineSettings:
        """엔진 계산용 불변 스냅샷 - 호출마다 새로 읽음"""
        current = self.get_settings(commit=False)
        return EngineSettings.model_validate(current.model_dump(exclude={"id"}))

    def update_settings(self, payload: SystemSettingUpdate) -> SystemSettingResponse:
        """
        설정 부분 수정

        전달된 필드만 반영. null은 upgrade_commission_percent_*에서만 의미가 있고
        (작업 커미션 비율 사용), 다른 필드의 null은 무시됩니다.
        """
        changes = {
            key: value
            for key, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_SETTING_FIELDS
        }
        for key, value in changes.items():
            if hasattr(value, "value"):
                changes[key] = value.value

        with atomic(self.db):
            updated = self.settings_repo.update_settings(commit=False, **changes)

        logger.info(f"System settings updated: {sorted(changes)}")
        return updated
