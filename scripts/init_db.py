import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from earnapi.database.connection import engine
from earnapi.models import Base


def init_db():
    """데이터베이스 테이블 생성 (마이그레이션 도구 없이 로컬/테스트 환경용)"""
    try:
        Base.metadata.create_all(bind=engine)
        print(f"Database initialized: {len(Base.metadata.tables)} tables")
    except Exception as e:
        print(f"Database initialization failed: {str(e)}")
        raise


if __name__ == "__main__":
    init_db()
