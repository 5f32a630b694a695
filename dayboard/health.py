"""
Dayboard Health Monitoring

Tracks uptime, keeps recent errors and reports on the store and AI service.
"""

import time
from datetime import datetime
from typing import Optional, List, Dict, Any
from dataclasses import dataclass, field
from enum import Enum
from collections import deque

from sqlalchemy.orm import Session

from .config import settings
from .errors import BackendUnavailable
from .stores import SqlDayStore


class ServiceStatus(Enum):
    """Status of a service check."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


@dataclass
class ServiceCheck:
    """Result of a service health check."""
    name: str
    status: ServiceStatus
    message: str
    latency_ms: Optional[float] = None
    last_checked: datetime = field(default_factory=datetime.utcnow)


@dataclass
class HealthReport:
    """Complete health report for the system."""
    status: ServiceStatus
    version: str
    uptime_seconds: float
    started_at: str
    timestamp: str
    services: Dict[str, ServiceCheck]
    recent_errors: List[Dict[str, Any]]


class HealthMonitor:
    """
    Monitors system health and tracks errors.

    Store outages absorbed by day resolution are recorded here, so the
    detailed health report shows when the dashboard is serving transient days.
    """

    VERSION = "0.1.0"
    MAX_ERRORS = 100  # Keep last 100 errors

    def __init__(self):
        self._start_time = datetime.utcnow()
        self._errors: deque = deque(maxlen=self.MAX_ERRORS)

    @property
    def uptime_seconds(self) -> float:
        """Get uptime in seconds."""
        delta = datetime.utcnow() - self._start_time
        return delta.total_seconds()

    @property
    def started_at(self) -> str:
        """Get start time as ISO string."""
        return self._start_time.isoformat()

    def record_error(
        self,
        error_type: str,
        message: str,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Record an error.

        Args:
            error_type: Category of error (e.g., 'store', 'ai')
            message: Error message
            context: Additional context
        """
        self._errors.append({
            "type": error_type,
            "message": message,
            "context": context or {},
            "timestamp": datetime.utcnow().isoformat()
        })

    def get_recent_errors(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Get recent errors."""
        errors = list(self._errors)
        return errors[-limit:]

    def clear_errors(self):
        """Clear error history."""
        self._errors.clear()

    def check_database(self, db: Session) -> ServiceCheck:
        """Check database connectivity."""
        start = time.perf_counter()
        try:
            SqlDayStore(db).ping()
            latency = (time.perf_counter() - start) * 1000
            return ServiceCheck(
                name="database",
                status=ServiceStatus.HEALTHY,
                message="Connected",
                latency_ms=round(latency, 2)
            )
        except BackendUnavailable as e:
            latency = (time.perf_counter() - start) * 1000
            self.record_error("store", str(e))
            return ServiceCheck(
                name="database",
                status=ServiceStatus.UNHEALTHY,
                message=f"Connection failed: {str(e)[:100]}",
                latency_ms=round(latency, 2)
            )

    def check_ai(self) -> ServiceCheck:
        """Check AI service status."""
        if not settings.get_ai_api_key():
            return ServiceCheck(
                name="ai",
                status=ServiceStatus.UNKNOWN,
                message="Not configured"
            )
        return ServiceCheck(
            name="ai",
            status=ServiceStatus.HEALTHY,
            message=f"Configured ({settings.litellm_model})"
        )

    def check_transient_days(self, transient_count: int) -> ServiceCheck:
        """Days served from memory mean edits are not being persisted."""
        if transient_count:
            return ServiceCheck(
                name="transient_days",
                status=ServiceStatus.DEGRADED,
                message=f"{transient_count} day(s) held in memory only"
            )
        return ServiceCheck(
            name="transient_days",
            status=ServiceStatus.HEALTHY,
            message="None"
        )

    def get_health_report(self, db: Session, transient_count: int = 0) -> HealthReport:
        """
        Generate a complete health report.

        Args:
            db: Database session
            transient_count: Number of transient days currently cached

        Returns:
            HealthReport with all service statuses
        """
        services = {
            "database": self.check_database(db),
            "ai": self.check_ai(),
            "transient_days": self.check_transient_days(transient_count)
        }

        statuses = [check.status for check in services.values()]
        if services["database"].status != ServiceStatus.HEALTHY:
            overall = ServiceStatus.UNHEALTHY
        elif ServiceStatus.DEGRADED in statuses:
            overall = ServiceStatus.DEGRADED
        else:
            overall = ServiceStatus.HEALTHY

        return HealthReport(
            status=overall,
            version=self.VERSION,
            uptime_seconds=self.uptime_seconds,
            started_at=self.started_at,
            timestamp=datetime.utcnow().isoformat(),
            services=services,
            recent_errors=self.get_recent_errors()
        )


# Singleton instance
_monitor: Optional[HealthMonitor] = None


def get_health_monitor() -> HealthMonitor:
    """Get or create the health monitor singleton."""
    global _monitor
    if _monitor is None:
        _monitor = HealthMonitor()
    return _monitor
