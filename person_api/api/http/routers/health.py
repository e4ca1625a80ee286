"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from person_api.api.http.deps import get_database_service
from person_api.core.services import DbSessionService

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe: 200 as long as the process is running."""
    return {"status": "healthy", "service": "person-api"}


@router.get("/ready", response_model=None)
async def readiness(
    database_service: DbSessionService = Depends(get_database_service),
) -> dict[str, Any] | JSONResponse:
    """Readiness probe: 503 when the database cannot be reached."""
    db_healthy = database_service.health_check()
    body = {
        "status": "ready" if db_healthy else "not_ready",
        "checks": {"database": {"status": "healthy" if db_healthy else "unhealthy"}},
    }
    if not db_healthy:
        return JSONResponse(status_code=503, content=body)
    return body
