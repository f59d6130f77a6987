"""Main scanner application."""

import asyncio
import logging
import signal
import sys
from datetime import timedelta
from typing import Dict, Optional
import os

from aiohttp import web
from dotenv import load_dotenv

load_dotenv()

from .core.enums import DeliveryMode
from .data.connector import BybitTickerConnector
from .data.fetcher import TickerFetcher
from .data.history import PriceHistoryStore
from .monitoring.monitor import FetchMonitor
from .publishing.publisher import ResultPublisher
from .publishing.store import ResultStore
from .scanner.cycle import MinuteCycleScheduler
from .scanner.selector import PerformerSelector
from .scanner.volatility import VolatilityEstimator
from .server.web import create_app

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('volatility_scanner.log'),
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


class ScannerApp:
    """Wires the scanner core to the HTTP delivery layer."""

    def __init__(self, config: Optional[Dict] = None):
        """Initialize scanner application."""
        defaults = self._default_config()
        if config:
            for key, val in config.items():
                if isinstance(val, dict) and key in defaults and isinstance(defaults[key], dict):
                    defaults[key].update(val)
                else:
                    defaults[key] = val
        self.config = defaults
        self._stopped = asyncio.Event()
        self._runner: Optional[web.AppRunner] = None
        self._stop_task: Optional[asyncio.Task] = None

        self._init_components()

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        logger.info("Scanner application initialized")

    def _default_config(self) -> Dict:
        """Default configuration."""
        return {
            'exchange': {
                'base_url': 'https://api.bybit.com',
                'category': 'linear',
                'timeout': 10,
            },
            'scanner': {
                'quote_currency': 'USDT',
                'min_turnover': 10_000_000,
                'volatility_window': 60,
                'retention': 120,
                'tie_epsilon': 0.0001,
                'finalize_snapshot': 'reuse',
            },
            'server': {
                'host': '0.0.0.0',
                'port': 3000,
                'delivery_mode': 'poll',
                'history_hours': 24,
            },
        }

    def _init_components(self):
        """Initialize all scanner components."""
        exchange_cfg = dict(self.config['exchange'])
        scanner_cfg = self.config['scanner']
        server_cfg = self.config['server']

        exchange_cfg['quote_currency'] = scanner_cfg['quote_currency']
        self.connector = BybitTickerConnector(exchange_cfg)
        self.history = PriceHistoryStore()
        self.monitor = FetchMonitor()
        self.fetcher = TickerFetcher(self.connector, self.history, self.monitor)
        self.estimator = VolatilityEstimator(
            window=timedelta(seconds=scanner_cfg['volatility_window'])
        )
        self.selector = PerformerSelector({
            'min_turnover': scanner_cfg['min_turnover'],
            'tie_epsilon': scanner_cfg['tie_epsilon'],
        })
        self.publisher = ResultPublisher()
        self.scheduler = MinuteCycleScheduler(
            self.fetcher,
            self.history,
            self.estimator,
            self.selector,
            self.publisher,
            config={
                'retention': scanner_cfg['retention'],
                'finalize_snapshot': scanner_cfg['finalize_snapshot'],
            },
        )

        # Presentation state lives outside the core and is fed by events only
        self.store = ResultStore(history_window=timedelta(hours=server_cfg['history_hours']))
        self.publisher.subscribe(self.store.on_result)

        self.app = create_app(
            self.store,
            DeliveryMode(server_cfg['delivery_mode']),
            status_provider=self.get_status,
        )
        logger.info("All components initialized successfully")

    async def start(self):
        """Start scanning and serving until stopped."""
        server_cfg = self.config['server']
        try:
            logger.info("Starting scanner application...")

            self._runner = web.AppRunner(self.app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, server_cfg['host'], server_cfg['port'])
            await site.start()
            logger.info(f"Server is running on port {server_cfg['port']}")

            await self.scheduler.start()
            await self._stopped.wait()

        except Exception as e:
            logger.error(f"Error starting scanner application: {e}")
            raise

    async def stop(self):
        """Stop the scanner and the HTTP server."""
        try:
            logger.info("Stopping scanner application...")
            await self.scheduler.stop()
            if self._runner:
                await self._runner.cleanup()
                self._runner = None
            await self.connector.close()
            logger.info("Scanner application stopped")
        except Exception as e:
            logger.error(f"Error stopping scanner application: {e}")
        finally:
            self._stopped.set()

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down...")
        self._stop_task = asyncio.get_running_loop().create_task(self.stop())

    def get_status(self) -> Dict:
        """Get application status."""
        return {
            'scanner': self.scheduler.get_status(),
            'fetch_health': self.monitor.summary(),
            'published_results': self.publisher.published_count,
            'delivery_mode': self.config['server']['delivery_mode'],
        }


def _config_from_env() -> Dict:
    """Build config dict from environment variables."""
    config: Dict = {}

    # Exchange
    base_url = os.getenv('EXCHANGE_BASE_URL', '').strip()
    timeout = os.getenv('EXCHANGE_TIMEOUT', '').strip()
    if base_url or timeout:
        config['exchange'] = {}
        if base_url:
            config['exchange']['base_url'] = base_url
        if timeout:
            config['exchange']['timeout'] = float(timeout)

    # Scanner
    quote = os.getenv('SCANNER_QUOTE_CURRENCY', '').strip()
    min_turnover = os.getenv('SCANNER_MIN_TURNOVER', '').strip()
    finalize_snapshot = os.getenv('SCANNER_FINALIZE_SNAPSHOT', '').strip().lower()
    if quote or min_turnover or finalize_snapshot:
        config['scanner'] = {}
        if quote:
            config['scanner']['quote_currency'] = quote.upper()
        if min_turnover:
            config['scanner']['min_turnover'] = float(min_turnover)
        if finalize_snapshot:
            config['scanner']['finalize_snapshot'] = finalize_snapshot

    # Server
    host = os.getenv('HOST', '').strip()
    port = os.getenv('PORT', '').strip()
    mode = os.getenv('DELIVERY_MODE', '').strip().lower()
    if host or port or mode:
        config['server'] = {}
        if host:
            config['server']['host'] = host
        if port:
            config['server']['port'] = int(port)
        if mode:
            config['server']['delivery_mode'] = mode

    return config


async def main():
    """Main entry point."""
    config = _config_from_env()

    app = ScannerApp(config if config else None)

    try:
        await app.start()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
    finally:
        await app.stop()


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
