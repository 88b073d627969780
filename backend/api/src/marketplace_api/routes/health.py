"""Health check endpoint."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

router = APIRouter(tags=["health"])

SERVICE_NAME = "marketplace-api"


@router.get("/ping", summary="Health check")
async def ping() -> dict[str, Any]:
    """Liveness probe for API Gateway and CloudFront (/api/ping)."""
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": SERVICE_NAME,
    }
