"""
Health Check API Routes

Liveness and Prometheus metrics exposition.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from stageflow import __version__

router = APIRouter()


@router.get("/health", summary="Service liveness")
async def get_health_status() -> dict[str, str]:
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/metrics", summary="Prometheus metrics", include_in_schema=False)
async def get_metrics() -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
