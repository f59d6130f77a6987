"""Normalized-movement volatility estimator."""

import logging
from datetime import datetime, timedelta
from typing import Dict, Optional, Sequence

import numpy as np

from ..core.models import VolatilityScore
from ..data.history import PriceHistoryStore

logger = logging.getLogger(__name__)


class VolatilityEstimator:
    """Scores each symbol by total absolute price movement over its window.

    score = sum(|p[i] - p[i-1]|) / mean(p) * 100

    This is a movement proxy, not a variance model. Symbols with fewer than
    two samples in the window get no score.
    """

    def __init__(self, window: timedelta = timedelta(seconds=60)):
        self.window = window

    @staticmethod
    def score_prices(prices: Sequence[float]) -> Optional[float]:
        """Score a price series, or None if it cannot be scored."""
        if len(prices) < 2:
            return None

        arr = np.asarray(prices, dtype=float)
        avg_price = arr.mean()
        if avg_price <= 0:
            return None

        total_movement = np.abs(np.diff(arr)).sum()
        return float(total_movement / avg_price * 100)

    def compute(self, history: PriceHistoryStore, now: datetime) -> Dict[str, VolatilityScore]:
        """Build a fresh score map from the trailing window at *now*."""
        scores: Dict[str, VolatilityScore] = {}
        for symbol in history.symbols():
            samples = history.windowed(symbol, self.window, now)
            score = self.score_prices([s.price for s in samples])
            if score is not None:
                scores[symbol] = VolatilityScore(symbol=symbol, score=score)

        logger.debug(f"Scored {len(scores)} symbols")
        return scores
