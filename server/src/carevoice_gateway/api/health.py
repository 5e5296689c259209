"""Liveness and upstream-reachability probes."""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from carevoice_gateway import __version__
from carevoice_gateway.api.dependencies import Upstream, enforce_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/health",
    tags=["health"],
    dependencies=[Depends(enforce_rate_limit)],
)


def _now() -> str:
    return datetime.now(UTC).isoformat()


@router.get("")
async def health() -> dict:
    """Health check endpoint."""
    return {
        "success": True,
        "message": "CareVoiceOS Demo API is running",
        "timestamp": _now(),
        "version": __version__,
    }


@router.get("/carevoice")
async def carevoice_health(client: Upstream) -> JSONResponse:
    """Check that CareVoiceOS accepts our client credentials."""
    result = await client.fetch_server_token()
    if result.success:
        return JSONResponse(
            content={
                "success": True,
                "message": "CareVoiceOS API is accessible",
                "latencyMs": result.latency_ms,
                "timestamp": _now(),
            }
        )

    logger.warning(f"CareVoiceOS health check failed: {result.error!r}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "success": False,
            "message": "CareVoiceOS API is not accessible",
            "error": result.error,
            "timestamp": _now(),
        },
    )
