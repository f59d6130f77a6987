"""One-way publication of finalized minute results."""

import logging
from typing import Callable, List

from ..core.models import PerformerResult

logger = logging.getLogger(__name__)

ResultCallback = Callable[[PerformerResult], None]


class ResultPublisher:
    """Delivers each published result to every subscriber.

    Results are frozen, so subscribers cannot alter scanner state through
    them. A failing subscriber is logged and skipped.
    """

    def __init__(self):
        self._subscribers: List[ResultCallback] = []
        self._published_count = 0

    def subscribe(self, callback: ResultCallback) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: ResultCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def publish(self, result: PerformerResult) -> None:
        self._published_count += 1
        logger.info(f"Best performer: {result.symbol} ({result.moves} moves)")

        for callback in list(self._subscribers):
            try:
                callback(result)
            except Exception as e:
                logger.error(f"Result subscriber {callback!r} failed: {e}")

    @property
    def published_count(self) -> int:
        return self._published_count
