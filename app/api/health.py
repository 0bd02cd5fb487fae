"""
Health check endpoints.
/health always returns 200; sink connectivity is reported, not enforced.
"""

from fastapi import APIRouter, Depends

from app.config import settings
from app.dependencies import get_result_sink
from app.storage.base import ResultSink

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(sink: ResultSink = Depends(get_result_sink)):
    """
    Liveness: the API is running. Reports whether the result sink answers.
    """
    sink_ok = await sink.health_check()

    return {
        "status": "healthy" if sink_ok else "degraded",
        "version": settings.APP_VERSION,
        "ruleset_version": settings.RULESET_VERSION,
        "result_sink": sink.sink_name,
        "sink_status": "connected" if sink_ok else "unreachable",
    }


@router.get("/health/ready")
async def readiness_check(sink: ResultSink = Depends(get_result_sink)):
    """Readiness probe: ready only when the sink is reachable."""
    return {"ready": await sink.health_check()}
