"""Pytest configuration and fixtures."""

import pytest
from datetime import datetime
from typing import Dict, List, Tuple, Union

from volatility_scanner.core.models import TickerEntry, TickerSnapshot
from volatility_scanner.data.connector import TickerConnector
from volatility_scanner.data.fetcher import TickerFetcher
from volatility_scanner.data.history import PriceHistoryStore
from volatility_scanner.monitoring.monitor import FetchMonitor
from volatility_scanner.publishing.publisher import ResultPublisher
from volatility_scanner.scanner.cycle import MinuteCycleScheduler
from volatility_scanner.scanner.selector import PerformerSelector
from volatility_scanner.scanner.volatility import VolatilityEstimator


def make_snapshot(
    rows: Dict[str, Tuple[float, float, float]],
    fetched_at: datetime = datetime(2024, 1, 1, 12, 0, 0),
) -> TickerSnapshot:
    """Build a snapshot from {symbol: (last_price, turnover_24h, funding_rate)}."""
    entries = {
        symbol: TickerEntry(
            symbol=symbol,
            last_price=price,
            turnover_24h=turnover,
            funding_rate=funding,
        )
        for symbol, (price, turnover, funding) in rows.items()
    }
    return TickerSnapshot(entries=entries, fetched_at=fetched_at)


class FakeConnector(TickerConnector):
    """Serves queued snapshots or raises queued errors, then repeats the default."""

    def __init__(self, default: Union[TickerSnapshot, Exception, None] = None):
        self.queue: List[Union[TickerSnapshot, Exception]] = []
        self.default = default if default is not None else make_snapshot({})
        self.calls = 0
        self.closed = False

    async def fetch_snapshot(self) -> TickerSnapshot:
        self.calls += 1
        item = self.queue.pop(0) if self.queue else self.default
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self):
        self.closed = True


@pytest.fixture
def base_time():
    """Start of a minute."""
    return datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def history():
    return PriceHistoryStore()


@pytest.fixture
def monitor():
    return FetchMonitor()


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def fetcher(connector, history, monitor):
    return TickerFetcher(connector, history, monitor)


@pytest.fixture
def publisher():
    return ResultPublisher()


@pytest.fixture
def published(publisher):
    """List receiving every published result."""
    results = []
    publisher.subscribe(results.append)
    return results


@pytest.fixture
def scheduler(fetcher, history, publisher):
    return MinuteCycleScheduler(
        fetcher,
        history,
        VolatilityEstimator(),
        PerformerSelector(),
        publisher,
    )


@pytest.fixture
def snapshot_factory():
    return make_snapshot
