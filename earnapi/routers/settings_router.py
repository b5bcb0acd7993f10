from fastapi import APIRouter, Depends

from earnapi.core.security import admin_required
from earnapi.deps import get_settings_service
from earnapi.schemas.settings import SystemSettingResponse, SystemSettingUpdate
from earnapi.schemas.user import User as UserSchema
from earnapi.services.settings_service import SettingsService

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=SystemSettingResponse)
def get_settings(
    _: UserSchema = Depends(admin_required),
    settings_service: SettingsService = Depends(get_settings_service),
) -> SystemSettingResponse:
    """커미션 비율 / 급여 기준 / 지급 지갑 설정 조회 (관리자)"""
    return settings_service.get_settings()


@router.put("", response_model=SystemSettingResponse)
def update_settings(
    payload: SystemSettingUpdate,
    _: UserSchema = Depends(admin_required),
    settings_service: SettingsService = Depends(get_settings_service),
) -> SystemSettingResponse:
    """
    설정 부분 수정 (관리자)

    변경 사항은 다음 커미션/급여 계산부터 즉시 반영됩니다.
    """
    return settings_service.update_settings(payload)
