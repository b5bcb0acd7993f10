from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from earnapi.config import settings
from earnapi.database.session import get_db
from earnapi.schemas.health import HealthCheckResponse

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(db: Session = Depends(get_db)) -> HealthCheckResponse:
    """Health check endpoint."""
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        return HealthCheckResponse(
            status="degraded",
            database="unavailable",
            environment=settings.ENVIRONMENT,
            error=str(e),
        )
    return HealthCheckResponse(environment=settings.ENVIRONMENT)
