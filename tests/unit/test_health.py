"""
Unit tests for health monitoring.
"""

from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError, ProgrammingError

from dayboard.health import HealthMonitor, ServiceStatus


class TestErrorTracking:
    """Tests for error recording."""

    def test_records_and_limits(self):
        monitor = HealthMonitor()
        for i in range(15):
            monitor.record_error("store", f"failure {i}")

        recent = monitor.get_recent_errors()

        assert len(recent) == 10
        assert recent[-1]["message"] == "failure 14"

    def test_caps_history(self):
        monitor = HealthMonitor()
        for i in range(HealthMonitor.MAX_ERRORS + 5):
            monitor.record_error("store", str(i))

        assert len(monitor.get_recent_errors(limit=1000)) == HealthMonitor.MAX_ERRORS

    def test_clear(self):
        monitor = HealthMonitor()
        monitor.record_error("ai", "boom")

        monitor.clear_errors()

        assert monitor.get_recent_errors() == []


class TestHealthReport:
    """Tests for the health report."""

    def test_healthy_database(self, db):
        report = HealthMonitor().get_health_report(db)

        assert report.services["database"].status == ServiceStatus.HEALTHY
        assert report.services["transient_days"].status == ServiceStatus.HEALTHY
        assert report.status in (ServiceStatus.HEALTHY, ServiceStatus.DEGRADED)

    def test_transient_days_degrade(self, db):
        report = HealthMonitor().get_health_report(db, transient_count=2)

        assert report.services["transient_days"].status == ServiceStatus.DEGRADED
        assert report.status == ServiceStatus.DEGRADED

    def test_unreachable_database_is_unhealthy(self):
        monitor = HealthMonitor()
        db = MagicMock()
        db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("could not connect"))

        report = monitor.get_health_report(db)

        assert report.services["database"].status == ServiceStatus.UNHEALTHY
        assert report.status == ServiceStatus.UNHEALTHY
        assert monitor.get_recent_errors()[-1]["type"] == "store"

    def test_rejected_ping_is_unhealthy(self):
        """Any driver error on the ping marks the database unhealthy."""
        monitor = HealthMonitor()
        db = MagicMock()
        db.execute.side_effect = ProgrammingError("SELECT 1", {}, Exception("permission denied"))

        report = monitor.get_health_report(db)

        assert report.services["database"].status == ServiceStatus.UNHEALTHY
        db.rollback.assert_called_once()
