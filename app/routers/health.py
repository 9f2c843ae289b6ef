# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Per-dependency status: healthy, unhealthy: <reason> or not_configured."""
    database: str
    object_storage: str
    email: str
    payments: str


class ReadinessResponse(BaseModel):
    status: str
    checks: ChecksResponse
    timestamp: str


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic liveness answer for load balancers."""
    return HealthResponse(
        status="healthy",
        timestamp=utc_now_iso(),
        environment=settings.ENVIRONMENT,
        version="1.0.0",
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Readiness check.

    Only the database is probed; the other services are reported by
    whether their credentials are set, so a missing optional integration
    doesn't mark the API as degraded.
    """
    checks = ChecksResponse(
        database="unknown",
        object_storage="configured" if settings.r2_configured else "not_configured",
        email="configured" if settings.ses_configured else "not_configured",
        payments="configured" if settings.STRIPE_SECRET_KEY else "not_configured",
    )

    try:
        client = SupabaseClient.get_client()
        client.table("profiles").select("id").limit(1).execute()
        checks.database = "healthy"
    except Exception as e:
        checks.database = f"unhealthy: {str(e)[:50]}"

    return ReadinessResponse(
        status="ready" if checks.database == "healthy" else "degraded",
        checks=checks,
        timestamp=utc_now_iso(),
    )
