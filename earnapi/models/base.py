from decimal import Decimal

from sqlalchemy import BigInteger, Column, DateTime, Integer, Numeric, func
from sqlalchemy.orm import declarative_base, declared_attr

Base = declarative_base()

# 모든 금액 컬럼 공통 정밀도 (ETB, 소수 둘째 자리)
Money = Numeric(18, 2)
ZERO = Decimal("0")

# SQLite는 INTEGER PRIMARY KEY만 자동 증가하므로 variant 사용
BigIntId = BigInteger().with_variant(Integer, "sqlite")


class TimestampMixin:
    """타임스탬프 필드를 위한 믹스인"""

    @declared_attr
    def created_at(cls):
        return Column(DateTime(timezone=True), server_default=func.now())

    @declared_attr
    def updated_at(cls):
        return Column(
            DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
        )


class CreatedAtMixin:
    """원장성 테이블용 - 생성 시각만 기록 (수정되지 않는 레코드)"""

    @declared_attr
    def created_at(cls):
        return Column(DateTime(timezone=True), server_default=func.now())


class BaseModel(Base, TimestampMixin):
    """모든 모델의 베이스 클래스"""

    __abstract__ = True


class LedgerModel(Base, CreatedAtMixin):
    """Append-only 원장 모델의 베이스 클래스"""

    __abstract__ = True
