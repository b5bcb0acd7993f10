from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from earnapi.database.connection import SessionLocal


def get_db():
    db = SessionLocal()
    try:
        yield db
    except Exception:
        if db.in_transaction():
            db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def atomic(db: Session, commit: bool = True) -> Iterator[Session]:
    """
    하나의 작업 단위(Unit of Work)를 원자적으로 실행

    Args:
        db: 사용 중인 세션
        commit: True면 이 블록이 트랜잭션 소유자 (성공 시 commit, 실패 시 rollback).
                False면 호출자의 트랜잭션 안에서 SAVEPOINT로 실행되고
                최종 commit은 호출자가 담당.

    지갑 적립과 원장 기록이 항상 함께 반영되거나 함께 취소되도록 보장합니다.
    """
    if commit:
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        return

    savepoint = db.begin_nested()
    try:
        yield db
        savepoint.commit()
    except Exception:
        if savepoint.is_active:
            savepoint.rollback()
        raise
