"""Integration test: a full minute from ticks to the HTTP layer."""

import pytest
from datetime import timedelta
from aiohttp.test_utils import TestClient, TestServer

from volatility_scanner.core.enums import ErrorKind
from volatility_scanner.data.connector import TickerFetchError
from volatility_scanner.publishing.store import ResultStore
from volatility_scanner.server.web import create_app


def _rows(second):
    """Three liquid symbols with different movement and one thin, jumpy one."""
    wobble = 1 if second % 2 else -1
    return {
        "BTCUSDT": (60000.0 + 30 * wobble, 5e9, 0.0001),
        "ETHUSDT": (3000.0 + 6 * wobble, 2e9, 0.00005),
        "DOGEUSDT": (0.1, 3e8, 0.0002),
        "THINUSDT": (1.0 + 0.2 * wobble, 9e6, 0.001),
    }


class TestFullMinute:
    @pytest.mark.asyncio
    async def test_minute_publishes_to_store_and_http(
        self, scheduler, connector, publisher, snapshot_factory, base_time
    ):
        store = ResultStore()
        publisher.subscribe(store.on_result)

        for second in range(60):
            now = base_time + timedelta(seconds=second)
            if 1 <= second <= 58:
                connector.queue.append(snapshot_factory(_rows(second)))
            await scheduler.process_tick(now)

        # Seconds 0 and 59 do not fetch
        assert connector.calls == 58

        current = store.current
        # ETH moves 12/3000 per tick (0.4%), BTC 60/60000 (0.1%); THIN is illiquid
        assert current["symbol"] == "ETHUSDT"
        assert current["turnover"] == 2000.0
        assert current["fundingRate"] == 0.005
        assert current["moves"] == scheduler.last_result.moves

        async with TestClient(TestServer(create_app(store))) as client:
            resp = await client.get("/api/updates?lastUpdate=0")
            assert resp.status == 200
            assert (await resp.json())["symbol"] == "ETHUSDT"

    @pytest.mark.asyncio
    async def test_errored_minute_then_clean_minute(
        self, scheduler, connector, publisher, snapshot_factory, base_time
    ):
        store = ResultStore()
        publisher.subscribe(store.on_result)

        for second in range(60):
            if second == 30:
                connector.queue.append(TickerFetchError(ErrorKind.TIMEOUT, "timed out"))
            elif 1 <= second <= 58:
                connector.queue.append(snapshot_factory(_rows(second)))
            await scheduler.process_tick(base_time + timedelta(seconds=second))

        assert store.current is None

        next_minute = base_time + timedelta(minutes=1)
        for second in range(60):
            if 1 <= second <= 58:
                connector.queue.append(snapshot_factory(_rows(second)))
            await scheduler.process_tick(next_minute + timedelta(seconds=second))

        assert store.current["symbol"] == "ETHUSDT"
        assert publisher.published_count == 1
