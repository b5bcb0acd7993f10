from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from earnapi.config import settings
from earnapi.core.exceptions import AuthorizationError
from earnapi.database.session import get_db
from earnapi.repositories.user_repository import UserRepository
from earnapi.schemas.user import User


# Security scheme
security = HTTPBearer()


class TokenPayload(BaseModel):
    user_id: int
    sub: str  # subject, 외부 인증 서비스의 사용자 식별자 (전화번호)


def verify_token(credentials: HTTPAuthorizationCredentials = Depends(security)) -> int:
    """외부 인증 서비스가 발급한 JWT를 검증하고 user_id를 반환합니다."""
    token = credentials.credentials
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        token_data = TokenPayload.model_validate(payload)
        return token_data.user_id
    except (JWTError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user(
    user_id: int = Depends(verify_token), db: Session = Depends(get_db)
) -> User:
    """현재 인증된 사용자 정보 조회"""
    user_repo = UserRepository(db)
    user = user_repo.get_by_id(user_id)
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )
    return user


def admin_required(current_user: User = Depends(get_current_user)) -> User:
    """관리자 권한 확인"""
    if not current_user.is_admin:
        raise AuthorizationError("Admin privileges required")
    return current_user
