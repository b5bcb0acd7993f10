"""
기본 데이터 시드 스크립트
멤버십 등급 (Intern ~ Rank 10)과 시스템 설정 기본값을 생성
"""

import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from earnapi.database.connection import SessionLocal
from earnapi.services.membership_service import MembershipService
from earnapi.services.settings_service import SettingsService


def seed():
    db = SessionLocal()
    try:
        created = MembershipService(db).seed_default_tiers()
        print(f"Membership tiers created: {created}")

        current = SettingsService(db).get_settings()
        print(
            "System settings: "
            f"A/B/C = {current.commission_percent_a}/{current.commission_percent_b}/{current.commission_percent_c}%, "
            f"referral cap = {current.max_referrals_per_user or 'unlimited'}"
        )
    except Exception as e:
        print(f"Seeding failed: {str(e)}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed()
