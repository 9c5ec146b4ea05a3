# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: System endpoints — health, readiness, metrics.
Pure HTTP layer — no business logic.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from app.core.config import settings
from app.core.dependencies import get_volunteer_repo

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    """Liveness check for Docker and orchestration."""
    repo = get_volunteer_repo()
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "volunteers_count": repo.count(),
    }


@router.get("/health/ready")
def readiness_check():
    """Readiness check: the roster has been loaded from its mirror."""
    repo = get_volunteer_repo()
    return {
        "status": "ready" if repo.loaded else "loading",
        "service": settings.SERVICE_NAME,
        "data_file": str(repo.path),
        "volunteers_loaded": repo.loaded,
        "load_error": repo.load_error,
    }


@router.get("/metrics")
def prometheus_metrics():
    """Expose Prometheus metrics in OpenMetrics format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
