from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from earnapi.config import settings


def build_engine(url: str, **kwargs):
    """DB URL에 맞는 엔진 생성 (PostgreSQL 운영 / SQLite 로컬·테스트)"""
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=settings.DEBUG,
            **kwargs,
        )
        enable_sqlite_savepoints(engine)
        return engine

    return create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,  # 연결 유효성 검사
        pool_recycle=3600,  # 1시간마다 연결 재생성
        echo=settings.DEBUG,  # 디버그 모드에서 SQL 로깅
        **kwargs,
    )


def enable_sqlite_savepoints(engine) -> None:
    """pysqlite 드라이버가 BEGIN을 직접 내보내도록 설정 (SAVEPOINT 지원)"""

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


engine = build_engine(settings.database_url)

# Use expire_on_commit=False to avoid DetachedInstanceError when accessing
# attributes after commit within the same request scope (common FastAPI pattern).
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)
