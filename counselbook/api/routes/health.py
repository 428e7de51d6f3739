# counselbook/api/routes/health.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from counselbook.core.config import get_settings
from counselbook.db.session import get_db


router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """
    Response schema for the health endpoints.
    """

    status: str = Field(
        ...,
        description="`ok` when the probe succeeded.",
        examples=["ok"],
    )
    app_name: str = Field(..., examples=["Counselbook"])
    environment: str = Field(
        ...,
        description="Current deployment environment (local/dev/stage/prod).",
        examples=["local"],
    )
    timestamp_utc: datetime = Field(
        ...,
        description="Server-side timestamp (UTC) at which the probe ran.",
    )


def _health(status: str) -> HealthResponse:
    settings = get_settings()
    return HealthResponse(
        status=status,
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        timestamp_utc=datetime.now(tz=timezone.utc),
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
    description=(
        "Answers without touching the database, so it stays green while the "
        "store is degraded. Use `/health/ready` for readiness."
    ),
)
async def health_check() -> HealthResponse:
    return _health("ok")


@router.get(
    "/health/ready",
    response_model=HealthResponse,
    summary="Readiness probe",
    description=(
        "Runs a trivial query against the store. A store failure surfaces as "
        "`503 StoreUnavailable` through the shared error handler."
    ),
)
async def readiness_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    await db.execute(text("SELECT 1"))
    return _health("ok")
