"""Minute-aligned scheduling cycle: reset, accumulate, finalize."""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Dict, Optional

from ..core.accumulator import MinuteAccumulator
from ..core.enums import CyclePhase, FinalizeSnapshot, SchedulerState
from ..core.models import PerformerResult, PerformerSelection, TickerEntry
from ..core.state_lock import TickGuard
from ..data.fetcher import TickerFetcher
from ..data.history import PriceHistoryStore
from ..publishing.publisher import ResultPublisher
from .selector import PerformerSelector
from .volatility import VolatilityEstimator

logger = logging.getLogger(__name__)


class MinuteCycleScheduler:
    """
    Drives the scanner once per wall-clock second.

    Second 0 resets the minute, seconds 1-58 fetch and rescore, second 59
    selects and publishes. A tick that arrives while the previous one is
    still running is dropped. A tick from a minute the accumulator has not
    been reset for resets first, so a restart or a dropped second-0 tick
    yields a partial minute rather than a mixed one.
    """

    def __init__(
        self,
        fetcher: TickerFetcher,
        history: PriceHistoryStore,
        estimator: VolatilityEstimator,
        selector: PerformerSelector,
        publisher: ResultPublisher,
        config: Optional[Dict] = None,
        clock=datetime.now,
    ):
        defaults = self._default_config()
        if config:
            defaults.update(config)
        self.config = defaults

        self.fetcher = fetcher
        self.history = history
        self.estimator = estimator
        self.selector = selector
        self.publisher = publisher
        self._clock = clock

        self.retention = timedelta(seconds=self.config["retention"])
        self.finalize_snapshot = FinalizeSnapshot(self.config["finalize_snapshot"])

        self.accumulator = MinuteAccumulator()
        self.state = SchedulerState.IDLE
        self.last_result: Optional[PerformerResult] = None

        self._guard = TickGuard("minute_cycle")
        self._task: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Task] = None
        self._last_tick_key: Optional[datetime] = None

    @staticmethod
    def _default_config() -> Dict:
        return {
            "retention": 120,
            "finalize_snapshot": FinalizeSnapshot.REUSE.value,
        }

    @staticmethod
    def phase_for(second: int) -> CyclePhase:
        if second == 0:
            return CyclePhase.RESET
        if second >= 59:
            return CyclePhase.FINALIZE
        return CyclePhase.ACCUMULATE

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self):
        """Start the 1 Hz driver."""
        if self.state is SchedulerState.RUNNING:
            return
        self.state = SchedulerState.RUNNING
        self._task = asyncio.create_task(self._run())
        logger.info("Symbol scanning started")

    async def stop(self):
        """Stop the driver and cancel any in-flight tick."""
        if self.state is SchedulerState.IDLE:
            return
        self.state = SchedulerState.IDLE

        for task in (self._task, self._inflight):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._task = None
        self._inflight = None
        logger.info("Symbol scanning stopped")

    async def _run(self):
        while self.state is SchedulerState.RUNNING:
            now = self._clock()
            # Land just past the next whole second
            await asyncio.sleep(1.0 - now.microsecond / 1_000_000 + 0.005)
            if self.state is not SchedulerState.RUNNING:
                break

            now = self._clock()
            tick_key = now.replace(microsecond=0)
            if tick_key == self._last_tick_key:
                continue
            self._last_tick_key = tick_key
            self.dispatch_tick(now)

    def dispatch_tick(self, now: Optional[datetime] = None) -> bool:
        """Schedule a tick unless one is already running."""
        now = now or self._clock()
        if not self._guard.try_enter():
            logger.warning(f"Tick at {now:%H:%M:%S} dropped: previous tick still running")
            return False
        self._inflight = asyncio.create_task(self._guarded_tick(now))
        return True

    async def _guarded_tick(self, now: datetime):
        with self._guard.held():
            try:
                await self.process_tick(now)
            except Exception as e:
                logger.error(f"Error in scanner tick at {now:%H:%M:%S}: {e}")

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    async def process_tick(self, now: datetime) -> Optional[PerformerResult]:
        """Run the cycle step for *now*. Returns the result if one was published."""
        minute = now.replace(second=0, microsecond=0)
        phase = self.phase_for(now.second)

        if phase is CyclePhase.RESET:
            self.reset(minute, now)
            return None

        if not self.accumulator.belongs_to(minute):
            logger.info(f"Resynchronizing to minute {minute:%H:%M} at second {now.second}")
            self.reset(minute, now)

        if phase is CyclePhase.ACCUMULATE:
            await self.accumulate(now)
            return None
        return await self.finalize(now)

    def reset(self, minute: datetime, now: datetime) -> None:
        """Start a new minute. Price history is pruned by age, not cleared."""
        self.accumulator.reset(minute)
        self.history.prune(self.retention, now)
        logger.info("Starting new minute")

    async def accumulate(self, now: datetime) -> None:
        await self.fetcher.fetch_and_ingest(self.accumulator, now)
        self.accumulator.scores = self.estimator.compute(self.history, now)
        self.accumulator.ticks += 1

    async def finalize(self, now: datetime) -> Optional[PerformerResult]:
        selection = self.selector.select(self.accumulator.scores, self.history.volumes())
        if not selection.has_winner:
            return None

        if self.accumulator.has_error:
            logger.warning(
                f"Suppressing result {selection.symbol} for {self.accumulator.minute:%H:%M}: "
                f"fetch errors this minute"
            )
            return None

        entry = await self._winner_ticker(selection)
        if entry is None:
            logger.warning(f"No ticker data for winner {selection.symbol}; result dropped")
            return None

        result = PerformerResult(
            symbol=selection.symbol,
            moves=selection.moves,
            has_error=False,
            turnover=round(entry.turnover_24h / 1_000_000, 2),
            funding_rate=round(entry.funding_rate * 100, 4),
        )
        self.last_result = result
        self.publisher.publish(result)
        return result

    async def _winner_ticker(self, selection: PerformerSelection) -> Optional[TickerEntry]:
        snapshot = self.accumulator.last_snapshot
        if self.finalize_snapshot is FinalizeSnapshot.REUSE and snapshot is not None:
            return snapshot.get(selection.symbol)
        return await self.fetcher.lookup(selection.symbol)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def dropped_ticks(self) -> int:
        return self._guard.dropped_count()

    def get_status(self) -> Dict:
        """Get scheduler status."""
        minute = self.accumulator.minute
        return {
            "state": self.state.value,
            "minute": minute.isoformat() if minute else None,
            "has_error": self.accumulator.has_error,
            "scored_symbols": len(self.accumulator.scores),
            "tracked_symbols": len(self.history.symbols()),
            "ticks_run": self._guard.entered_count(),
            "dropped_ticks": self._guard.dropped_count(),
            "last_result": self.last_result.to_payload() if self.last_result else None,
        }
