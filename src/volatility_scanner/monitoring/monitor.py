"""Fetch health monitoring for the ticker source."""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from ..core.enums import ErrorKind

logger = logging.getLogger(__name__)


@dataclass
class FetchHealthStatus:
    """Ticker source health metrics."""
    is_healthy: bool = True
    last_response_ms: float = 0.0
    avg_response_ms: float = 0.0
    consecutive_failures: int = 0
    total_fetches: int = 0
    total_failures: int = 0
    last_check: Optional[datetime] = None


@dataclass
class FetchFailureRecord:
    """Record of one failed fetch."""
    kind: ErrorKind
    message: str
    elapsed_ms: float
    timestamp: datetime = field(default_factory=datetime.now)


class FetchMonitor:
    """Tracks fetch latency and classifies failures.

    Health degrades when responses are slower than ``max_response_ms`` or
    after ``max_consecutive_failures`` failures in a row.
    """

    def __init__(
        self,
        max_response_ms: float = 5000.0,
        max_consecutive_failures: int = 3,
        response_history_size: int = 60,
        failure_history_size: int = 100,
    ):
        self.max_response_ms = max_response_ms
        self.max_consecutive_failures = max_consecutive_failures

        self._health = FetchHealthStatus()
        self._response_times: deque = deque(maxlen=response_history_size)
        self._failures: deque = deque(maxlen=failure_history_size)
        self._failure_counts: Dict[ErrorKind, int] = {kind: 0 for kind in ErrorKind}

        logger.info("Fetch monitor initialized")

    def record_success(self, elapsed_ms: float) -> FetchHealthStatus:
        self._response_times.append(elapsed_ms)
        self._health.last_response_ms = elapsed_ms
        self._health.avg_response_ms = (
            sum(self._response_times) / len(self._response_times)
        )
        self._health.consecutive_failures = 0
        self._health.total_fetches += 1
        self._health.is_healthy = elapsed_ms <= self.max_response_ms
        self._health.last_check = datetime.now()

        if not self._health.is_healthy:
            logger.warning(f"Slow ticker response: {elapsed_ms:.0f}ms")
        return self._health

    def record_failure(self, kind: ErrorKind, message: str, elapsed_ms: float = 0.0) -> FetchHealthStatus:
        self._failures.append(FetchFailureRecord(kind=kind, message=message, elapsed_ms=elapsed_ms))
        self._failure_counts[kind] += 1
        self._health.consecutive_failures += 1
        self._health.total_fetches += 1
        self._health.total_failures += 1
        self._health.last_response_ms = elapsed_ms
        self._health.last_check = datetime.now()
        self._health.is_healthy = (
            self._health.consecutive_failures < self.max_consecutive_failures
        )
        return self._health

    @property
    def healthy(self) -> bool:
        return self._health.is_healthy

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_health(self) -> FetchHealthStatus:
        return self._health

    def get_failure_counts(self) -> Dict[ErrorKind, int]:
        return dict(self._failure_counts)

    def get_recent_failures(self, last_n: int = 10) -> List[FetchFailureRecord]:
        return list(self._failures)[-last_n:]

    def summary(self) -> Dict:
        """JSON-friendly health summary."""
        return {
            "healthy": self._health.is_healthy,
            "last_response_ms": round(self._health.last_response_ms, 1),
            "avg_response_ms": round(self._health.avg_response_ms, 1),
            "consecutive_failures": self._health.consecutive_failures,
            "total_fetches": self._health.total_fetches,
            "total_failures": self._health.total_failures,
            "failures_by_kind": {
                kind.value: count for kind, count in self._failure_counts.items() if count
            },
        }
