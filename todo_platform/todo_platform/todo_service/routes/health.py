"""
Liveness and readiness checks for deployments of the todo service.
"""
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, status

from ..db import check_db_connection

router = APIRouter(tags=["health"])


def _now() -> str:
    return datetime.utcnow().isoformat()


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    return {"status": "healthy", "timestamp": _now()}


@router.get("/ready")
def readiness_check() -> Dict[str, Any]:
    """The service is ready once the todo and user tables are reachable; 503 otherwise."""
    if not check_db_connection():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"status": "not_ready", "database": "disconnected", "timestamp": _now()},
        )
    return {"status": "ready", "database": "connected", "timestamp": _now()}
