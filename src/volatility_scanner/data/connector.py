"""Ticker snapshot connector interface and Bybit implementation."""

from abc import ABC, abstractmethod
from typing import Dict, Optional
import asyncio
import logging
from datetime import datetime

import aiohttp
from pydantic import ValidationError

from ..core.enums import ErrorKind
from ..core.models import TickerEntry, TickerEnvelope, TickerSnapshot

logger = logging.getLogger(__name__)

TICKERS_PATH = "/v5/market/tickers"


class TickerFetchError(Exception):
    """Raised when a ticker snapshot cannot be fetched or parsed."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind

    def __str__(self) -> str:
        return f"[{self.kind.value}] {super().__str__()}"


class TickerConnector(ABC):
    """Abstract source of ticker snapshots."""

    @abstractmethod
    async def fetch_snapshot(self) -> TickerSnapshot:
        """Fetch one snapshot of every accepted instrument.

        Raises:
            TickerFetchError: on any transport, HTTP, API or parse failure.
        """
        pass

    @abstractmethod
    async def close(self):
        """Close connection."""
        pass


class BybitTickerConnector(TickerConnector):
    """Reads the public Bybit v5 tickers endpoint with aiohttp."""

    def __init__(
        self,
        config: Optional[Dict] = None,
        session: Optional[aiohttp.ClientSession] = None,
        clock=datetime.now,
    ):
        """Initialize Bybit connector."""
        self.config = config or {}
        self.base_url = self.config.get('base_url', 'https://api.bybit.com').rstrip('/')
        self.category = self.config.get('category', 'linear')
        self.quote_currency = self.config.get('quote_currency', 'USDT')
        self.timeout = self.config.get('timeout', 10)
        self._session = session
        self._owns_session = session is None
        self._clock = clock
        logger.info(
            f"Initialized Bybit ticker connector ({self.base_url}, "
            f"category={self.category}, quote={self.quote_currency})"
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self._session

    async def fetch_snapshot(self) -> TickerSnapshot:
        """Fetch all linear tickers and keep the quote-currency ones."""
        session = await self._get_session()
        url = f"{self.base_url}{TICKERS_PATH}"

        try:
            async with session.get(url, params={'category': self.category}) as response:
                response.raise_for_status()
                data = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise TickerFetchError(ErrorKind.TIMEOUT, f"Request timed out: {e}") from e
        except aiohttp.ClientResponseError as e:
            raise TickerFetchError(ErrorKind.HTTP_STATUS, f"HTTP {e.status}: {e.message}") from e
        except aiohttp.ClientConnectionError as e:
            raise TickerFetchError(ErrorKind.CONNECTION, f"Connection error: {e}") from e
        except aiohttp.ClientError as e:
            raise TickerFetchError(ErrorKind.GENERIC, f"Client error: {e}") from e
        except ValueError as e:
            raise TickerFetchError(ErrorKind.MALFORMED_RESPONSE, f"Invalid JSON: {e}") from e

        snapshot = self._parse_snapshot(data)
        logger.debug(f"Fetched {len(snapshot)} {self.quote_currency} tickers")
        return snapshot

    def _parse_snapshot(self, data) -> TickerSnapshot:
        """Validate a decoded response into a snapshot."""
        if not isinstance(data, dict):
            raise TickerFetchError(ErrorKind.MALFORMED_RESPONSE, "Response body is not an object")

        try:
            envelope = TickerEnvelope.model_validate(data)
        except ValidationError as e:
            raise TickerFetchError(ErrorKind.MALFORMED_RESPONSE, f"Bad envelope: {e}") from e

        if envelope.ret_code != 0:
            raise TickerFetchError(
                ErrorKind.API_ERROR,
                f"retCode={envelope.ret_code} retMsg={envelope.ret_msg}"
            )

        entries: Dict[str, TickerEntry] = {}
        for row in envelope.result['list']:
            symbol = row.get('symbol') if isinstance(row, dict) else None
            if not isinstance(symbol, str):
                raise TickerFetchError(ErrorKind.MALFORMED_RESPONSE, f"Ticker row without symbol: {row!r}")
            if not symbol.endswith(self.quote_currency):
                continue
            try:
                entries[symbol] = TickerEntry.model_validate(row)
            except ValidationError as e:
                raise TickerFetchError(ErrorKind.MALFORMED_RESPONSE, f"Bad ticker {symbol}: {e}") from e

        return TickerSnapshot(entries=entries, fetched_at=self._clock())

    async def close(self):
        """Close the HTTP session if this connector created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            logger.info("Closed Bybit ticker connector")
