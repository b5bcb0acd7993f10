import os

# 앱 모듈이 import 시점에 엔진을 만들므로 가장 먼저 설정
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret")

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from earnapi.database.connection import enable_sqlite_savepoints
from earnapi.models import Base
from earnapi.models.membership import MembershipLevel
from earnapi.repositories.task_repository import TaskRepository
from earnapi.repositories.user_repository import UserRepository
from earnapi.schemas.settings import SystemSettingUpdate
from earnapi.services.membership_service import MembershipService
from earnapi.services.settings_service import SettingsService


@pytest.fixture
def engine():
    """테스트용 인메모리 SQLite 엔진 (단일 커넥션 공유)"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )


@pytest.fixture
def db_session(session_factory):
    """기본 등급(Intern ~ Rank 10)과 설정 레코드가 준비된 세션"""
    db = session_factory()
    MembershipService(db).seed_default_tiers()
    SettingsService(db).get_settings()
    yield db
    db.close()


@pytest.fixture
def make_user(db_session):
    """사용자 생성 헬퍼 - 생성된 user_id 반환"""
    counter = {"n": 0}

    def _make_user(level=MembershipLevel.INTERN, referrer_id=None, role="user"):
        counter["n"] += 1
        user = UserRepository(db_session).create_user(
            phone=f"+2519{counter['n']:08d}",
            referrer_id=referrer_id,
            membership_level=MembershipLevel(level).value,
            role=role,
        )
        return user.id

    return _make_user


@pytest.fixture
def make_task_completion(db_session):
    """작업 완료 기록만 생성 (지갑 적립/커미션 없이)"""
    counter = {"n": 0}

    def _make(user_id, amount="100", level=MembershipLevel.RANK_1):
        counter["n"] += 1
        return TaskRepository(db_session).create(
            user_id=user_id,
            task_ref=f"video:test:{counter['n']}",
            earnings_amount=Decimal(amount),
            membership_level=MembershipLevel(level).value,
        )

    return _make


@pytest.fixture
def update_settings(db_session):
    """설정 일부 변경 헬퍼"""

    def _update(**fields):
        return SettingsService(db_session).update_settings(SystemSettingUpdate(**fields))

    return _update
