"""Ingests ticker snapshots into the price history."""

import logging
import time
from datetime import datetime
from typing import Optional

from ..core.accumulator import MinuteAccumulator
from ..core.models import TickerEntry
from ..monitoring.monitor import FetchMonitor
from .connector import TickerConnector, TickerFetchError
from .history import PriceHistoryStore

logger = logging.getLogger(__name__)


class TickerFetcher:
    """Pulls one snapshot per tick and appends it to the history store.

    Failures never propagate: they set the minute's error flag, are
    classified on the monitor, and the tick continues with no new data.
    """

    def __init__(
        self,
        connector: TickerConnector,
        history: PriceHistoryStore,
        monitor: FetchMonitor,
    ):
        self.connector = connector
        self.history = history
        self.monitor = monitor

    async def fetch_and_ingest(self, accumulator: MinuteAccumulator, now: datetime) -> bool:
        """Fetch a snapshot and record one sample per symbol.

        Returns True if the snapshot was ingested.
        """
        start = time.monotonic()
        try:
            snapshot = await self.connector.fetch_snapshot()
        except TickerFetchError as e:
            elapsed_ms = (time.monotonic() - start) * 1000
            accumulator.mark_error()
            self.monitor.record_failure(e.kind, str(e), elapsed_ms)
            if e.kind.is_transport:
                logger.error(f"Connection timeout or network error: {e}")
            else:
                logger.error(f"Error scanning tickers: {e}")
            return False

        self.monitor.record_success((time.monotonic() - start) * 1000)

        for symbol, entry in snapshot.entries.items():
            self.history.record(symbol, entry.last_price, entry.turnover_24h, now)
        accumulator.last_snapshot = snapshot

        logger.debug(f"Ingested {len(snapshot)} tickers at {now:%H:%M:%S}")
        return True

    async def lookup(self, symbol: str) -> Optional[TickerEntry]:
        """Read one more snapshot and return *symbol*'s row, or None on failure."""
        start = time.monotonic()
        try:
            snapshot = await self.connector.fetch_snapshot()
        except TickerFetchError as e:
            self.monitor.record_failure(e.kind, str(e), (time.monotonic() - start) * 1000)
            logger.error(f"Error looking up ticker for {symbol}: {e}")
            return None

        self.monitor.record_success((time.monotonic() - start) * 1000)
        return snapshot.get(symbol)
