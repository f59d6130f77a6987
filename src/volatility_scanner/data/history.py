"""Rolling per-symbol price history."""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from ..core.models import PriceSample, SymbolState

logger = logging.getLogger(__name__)


class PriceHistoryStore:
    """Append-only per-symbol sample log with windowed reads and pruning.

    Samples are appended in observation order, so insertion order is time
    order. Only the scheduler timeline writes to the store.
    """

    def __init__(self):
        self._states: Dict[str, SymbolState] = {}

    def record(self, symbol: str, price: float, volume: float, observed_at: datetime) -> None:
        """Append a sample and overwrite the symbol's latest volume."""
        state = self._states.get(symbol)
        if state is None:
            state = SymbolState()
            self._states[symbol] = state
        state.samples.append(PriceSample(price=price, observed_at=observed_at))
        state.latest_volume = volume

    def windowed(self, symbol: str, duration: timedelta, now: datetime) -> List[PriceSample]:
        """Samples of *symbol* observed at or after ``now - duration``."""
        state = self._states.get(symbol)
        if state is None:
            return []
        cutoff = now - duration
        return [s for s in state.samples if s.observed_at >= cutoff]

    def prune(self, max_age: timedelta, now: datetime) -> int:
        """Drop samples older than *max_age*. Returns the number removed."""
        cutoff = now - max_age
        removed = 0
        for symbol in list(self._states):
            state = self._states[symbol]
            kept = [s for s in state.samples if s.observed_at >= cutoff]
            removed += len(state.samples) - len(kept)
            if kept:
                state.samples = kept
            else:
                del self._states[symbol]

        if removed:
            logger.debug(f"Pruned {removed} samples older than {max_age.total_seconds():.0f}s")
        return removed

    def volume(self, symbol: str) -> Optional[float]:
        state = self._states.get(symbol)
        return state.latest_volume if state else None

    def volumes(self) -> Dict[str, float]:
        return {symbol: state.latest_volume for symbol, state in self._states.items()}

    def symbols(self) -> List[str]:
        return list(self._states)

    def sample_count(self, symbol: Optional[str] = None) -> int:
        """Total samples held, or samples for one symbol."""
        if symbol is not None:
            state = self._states.get(symbol)
            return len(state.samples) if state else 0
        return sum(len(state.samples) for state in self._states.values())

    def clear(self) -> None:
        self._states.clear()

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._states
