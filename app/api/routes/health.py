from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.api.dependencies import get_database
from app.db.database import Database
from app.models.health.responses import HealthResponse
from app.models.provider import Provider
from app.settings import settings

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check(database: Database = Depends(get_database)) -> HealthResponse:
    """Unauthenticated liveness check; never calls a provider"""
    database_ok = database.is_healthy()
    return HealthResponse(
        status="ok" if database_ok else "degraded",
        version=settings.app_version,
        timestamp=datetime.now(timezone.utc),
        database=database_ok,
        providers=list(Provider),
    )
