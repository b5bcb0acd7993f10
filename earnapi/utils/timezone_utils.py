"""
타임존 유틸리티

급여 월 경계는 서비스 운영 지역 시간(SALARY_TIMEZONE) 기준으로 계산합니다.
"""

from datetime import datetime, timezone
from typing import Optional, Tuple

import pytz

from earnapi.config import settings


def get_business_timezone(name: Optional[str] = None):
    """운영 타임존 (기본: settings.SALARY_TIMEZONE)"""
    return pytz.timezone(name or settings.SALARY_TIMEZONE)


def get_utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_business_time(dt: datetime, tz_name: Optional[str] = None) -> datetime:
    """UTC 또는 다른 타임존의 datetime을 운영 타임존으로 변환합니다."""
    if dt.tzinfo is None:
        # naive datetime은 UTC로 가정
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(get_business_timezone(tz_name))


def salary_period(
    now: Optional[datetime] = None, tz_name: Optional[str] = None
) -> Tuple[int, int]:
    """
    급여 기준 (month, year)

    Args:
        now: 기준 시각 (None이면 현재 시각)
        tz_name: 타임존 이름 (None이면 settings.SALARY_TIMEZONE)
    """
    local = to_business_time(now or get_utc_now(), tz_name)
    return local.month, local.year
