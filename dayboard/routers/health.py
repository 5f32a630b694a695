"""
Health check endpoints.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..health import get_health_monitor
from ..schemas import (
    HealthResponse,
    DetailedHealthResponse,
    ServiceCheckResponse,
    SuccessResponse,
)

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health():
    """
    Basic health check endpoint.

    Returns minimal health info for load balancers and uptime monitors.
    Use /api/health/detailed for full diagnostics.
    """
    monitor = get_health_monitor()
    return HealthResponse(
        status="healthy",
        version=monitor.VERSION,
        timestamp=datetime.utcnow().isoformat()
    )


@router.get("/detailed", response_model=DetailedHealthResponse)
async def health_detailed(request: Request, db: Session = Depends(get_db)):
    """
    Detailed health check with service status.

    Checks database connectivity, AI configuration and whether any days are
    currently held in memory only. Also returns uptime and recent errors.
    """
    monitor = get_health_monitor()
    report = monitor.get_health_report(db, transient_count=len(request.app.state.transient_days))

    services = {
        name: ServiceCheckResponse(
            name=check.name,
            status=check.status.value,
            message=check.message,
            latency_ms=check.latency_ms
        )
        for name, check in report.services.items()
    }

    return DetailedHealthResponse(
        status=report.status.value,
        version=report.version,
        uptime_seconds=report.uptime_seconds,
        started_at=report.started_at,
        timestamp=report.timestamp,
        services=services,
        recent_errors=report.recent_errors
    )


@router.post("/errors/clear", response_model=SuccessResponse)
async def clear_errors():
    """Clear the error history."""
    get_health_monitor().clear_errors()
    return SuccessResponse(success=True)
