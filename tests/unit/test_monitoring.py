"""Unit tests for FetchMonitor."""

import pytest

from volatility_scanner.core.enums import ErrorKind
from volatility_scanner.monitoring.monitor import FetchMonitor


class TestFetchMonitor:
    def setup_method(self):
        self.monitor = FetchMonitor(
            max_response_ms=1000,
            max_consecutive_failures=3,
        )

    def test_success_updates_latency(self):
        self.monitor.record_success(100.0)
        health = self.monitor.record_success(300.0)

        assert health.is_healthy is True
        assert health.last_response_ms == 300.0
        assert health.avg_response_ms == pytest.approx(200.0)
        assert health.last_check is not None

    def test_slow_response_is_unhealthy(self):
        self.monitor.record_success(1500.0)
        assert self.monitor.healthy is False

    def test_degraded_after_consecutive_failures(self):
        for _ in range(3):
            self.monitor.record_failure(ErrorKind.TIMEOUT, "slow")
        assert self.monitor.healthy is False
        assert self.monitor.get_health().consecutive_failures == 3

    def test_recovers_after_success(self):
        for _ in range(3):
            self.monitor.record_failure(ErrorKind.CONNECTION, "reset")
        self.monitor.record_success(50.0)

        assert self.monitor.healthy is True
        assert self.monitor.get_health().consecutive_failures == 0

    def test_failures_classified_by_kind(self):
        self.monitor.record_failure(ErrorKind.TIMEOUT, "a")
        self.monitor.record_failure(ErrorKind.TIMEOUT, "b")
        self.monitor.record_failure(ErrorKind.MALFORMED_RESPONSE, "c")

        counts = self.monitor.get_failure_counts()
        assert counts[ErrorKind.TIMEOUT] == 2
        assert counts[ErrorKind.MALFORMED_RESPONSE] == 1
        assert counts[ErrorKind.GENERIC] == 0

        recent = self.monitor.get_recent_failures(2)
        assert [r.message for r in recent] == ["b", "c"]

    def test_summary(self):
        self.monitor.record_success(10.0)
        self.monitor.record_failure(ErrorKind.API_ERROR, "retCode=10006", 20.0)

        summary = self.monitor.summary()

        assert summary["total_fetches"] == 2
        assert summary["total_failures"] == 1
        assert summary["failures_by_kind"] == {"api_error": 1}

    def test_transport_kinds(self):
        assert ErrorKind.TIMEOUT.is_transport
        assert ErrorKind.CONNECTION.is_transport
        assert not ErrorKind.MALFORMED_RESPONSE.is_transport
        assert not ErrorKind.GENERIC.is_transport
