# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: liveness, readiness and Prometheus scrape endpoints.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from reviewer_assignment.core.config import settings
from reviewer_assignment.core.dependencies import get_repo
from reviewer_assignment.core.logging import get_logger
from reviewer_assignment.repositories import StorageGateway

logger = get_logger(__name__)

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    """Liveness: the process answers. Storage is not touched."""
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "storage": settings.STORAGE_BACKEND,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/ready")
def readiness_check(repo: StorageGateway = Depends(get_repo)):
    """Readiness: the storage backend answers a trivial query."""
    try:
        repo.verify_connection()
    except Exception as exc:
        logger.warning("Readiness check failed: %s", exc)
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "storage": settings.STORAGE_BACKEND, "error": str(exc)},
        )
    return {"status": "ready", "storage": settings.STORAGE_BACKEND}


@router.get("/metrics")
def prometheus_metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
