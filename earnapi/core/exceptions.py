from fastapi import HTTPException, status
from typing import Optional, Dict, Any

class BaseAPIException(HTTPException):
    """Base exception for API errors"""
    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error": {
                    "code": error_code,
                    "message": message,
                    "details": self.details
                }
            }
        )

    def __str__(self) -> str:  # Ensure str(e) returns the human message
        return self.message

class AuthenticationError(BaseAPIException):
    """Authentication related errors"""
    def __init__(self, message: str = "Authentication failed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTH_001",
            message=message,
            details=details
        )

class AuthorizationError(BaseAPIException):
    """Authorization related errors"""
    def __init__(self, message: str = "Access forbidden", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="AUTH_002",
            message=message,
            details=details
        )

class ValidationError(BaseAPIException):
    """Validation errors"""
    def __init__(self, message: str = "Validation failed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="VALIDATION_001",
            message=message,
            details=details
        )

class NotFoundError(BaseAPIException):
    """Resource not found errors"""
    def __init__(self, message: str = "Resource not found", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND_001",
            message=message,
            details=details
        )

class ConflictError(BaseAPIException):
    """Resource conflict errors"""
    def __init__(self, message: str = "Resource conflict", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="CONFLICT_001",
            message=message,
            details=details
        )

class ConcurrencyConflictError(BaseAPIException):
    """Lock timeout / unique guard violation - safe for the caller to retry"""
    def __init__(self, message: str = "Concurrent update conflict, retry the request", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="CONFLICT_002",
            message=message,
            details=details
        )

class InternalServerError(BaseAPIException):
    """Internal server errors"""
    def __init__(self, message: str = "Internal server error", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="INTERNAL_001",
            message=message,
            details=details
        )

class MembershipConfigurationError(BaseAPIException):
    """Membership tier referenced by a user or event is missing from the tier table"""
    def __init__(self, level: str, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="CONFIG_001",
            message=f"Membership tier '{level}' is not configured",
            details={"level": level, **(details or {})}
        )

class NegativeBalanceError(BaseAPIException):
    """A wallet mutation would leave a negative balance"""
    def __init__(self, user_id: int, wallet: str, balance: Any, delta: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="BALANCE_002",
            message=f"Wallet '{wallet}' of user {user_id} would become negative",
            details={
                "user_id": user_id,
                "wallet": wallet,
                "balance": str(balance),
                "delta": str(delta),
            }
        )

class ReferralCycleError(BaseAPIException):
    """Assigning the referrer would create a loop in the referral tree"""
    def __init__(self, user_id: int, referrer_id: int):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="REFERRAL_001",
            message=f"User {referrer_id} cannot refer user {user_id}",
            details={"user_id": user_id, "referrer_id": referrer_id}
        )
