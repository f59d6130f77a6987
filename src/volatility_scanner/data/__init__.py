"""Market data module."""

from .connector import TickerConnector, BybitTickerConnector, TickerFetchError
from .history import PriceHistoryStore
from .fetcher import TickerFetcher

__all__ = [
    "TickerConnector",
    "BybitTickerConnector",
    "TickerFetchError",
    "PriceHistoryStore",
    "TickerFetcher",
]
