"""Presentation-side result store fed by published results."""

import logging
import time
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional

from ..core.models import PerformerResult

logger = logging.getLogger(__name__)


class ResultStore:
    """Holds the current result and a trailing history for the HTTP layer.

    Updated only through ``on_result``; the scanner never reads it.
    Each stored entry carries a millisecond timestamp that strictly
    increases, so pollers can ask for anything newer than what they saw.
    """

    def __init__(
        self,
        history_window: timedelta = timedelta(hours=24),
        clock: Callable[[], float] = time.time,
    ):
        self.history_window = history_window
        self._clock = clock
        self._current: Optional[Dict[str, Any]] = None
        self._history: List[Dict[str, Any]] = []
        self._last_timestamp = 0

    def on_result(self, result: PerformerResult) -> None:
        """Subscriber callback for the result publisher."""
        if result.symbol is None or result.has_error:
            return

        timestamp = max(int(self._clock() * 1000), self._last_timestamp + 1)
        self._last_timestamp = timestamp

        entry = dict(result.to_payload(), timestamp=timestamp)
        self._current = entry
        self._history.insert(0, entry)
        self._trim(timestamp)
        logger.debug(f"Stored result {entry['symbol']} at {timestamp}")

    def _trim(self, now_ms: int) -> None:
        cutoff = now_ms - int(self.history_window.total_seconds() * 1000)
        self._history = [e for e in self._history if e["timestamp"] > cutoff]

    def updates_since(self, last_seen: int) -> Optional[Dict[str, Any]]:
        """Latest entry if newer than *last_seen* (ms), else None."""
        if self._current is not None and self._current["timestamp"] > last_seen:
            return dict(self._current)
        return None

    def snapshot(self) -> Dict[str, Any]:
        """Current entry plus history, newest first."""
        self._trim(int(self._clock() * 1000))
        return {
            "current": dict(self._current) if self._current else None,
            "history": [dict(e) for e in self._history],
        }

    @property
    def current(self) -> Optional[Dict[str, Any]]:
        return dict(self._current) if self._current else None

    @property
    def last_timestamp(self) -> int:
        return self._last_timestamp
