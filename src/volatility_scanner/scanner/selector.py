"""Performer selection: liquidity floor and tie-aware ranking."""

import logging
import math
from typing import Dict, List, Optional

from ..core.models import PerformerSelection, VolatilityScore

logger = logging.getLogger(__name__)


class PerformerSelector:
    """
    Picks the single best performing symbol of the minute.

    Ranking: the top score wins, but every symbol within ``tie_epsilon``
    (absolute percentage points) of it is tied with it; ties go to the higher 24h
    turnover, then to the alphabetically first symbol.
    """

    def __init__(self, config: Optional[Dict] = None):
        defaults = self._default_config()
        if config:
            defaults.update(config)
        self.config = defaults

    @staticmethod
    def _default_config() -> Dict:
        return {
            "min_turnover": 10_000_000,
            "tie_epsilon": 0.0001,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def select(
        self,
        scores: Dict[str, VolatilityScore],
        volumes: Dict[str, float],
    ) -> PerformerSelection:
        """Return the rank-1 symbol, or a no-winner selection."""
        liquid = self._filter_liquid(scores, volumes)
        if not liquid:
            logger.info("No symbol passed the turnover floor")
            return PerformerSelection(symbol=None)

        best = self._pick(liquid, volumes)
        return PerformerSelection(
            symbol=best.symbol,
            score=best.score,
            moves=self.to_moves(best.score),
            volume=volumes[best.symbol],
        )

    def rank(
        self,
        scores: Dict[str, VolatilityScore],
        volumes: Dict[str, float],
    ) -> List[VolatilityScore]:
        """All liquid symbols in rank order.

        Each position goes to the winner among the symbols still unranked,
        so the order does not depend on dict iteration order.
        """
        remaining = self._filter_liquid(scores, volumes)
        ranked = []
        while remaining:
            best = self._pick(remaining, volumes)
            ranked.append(best)
            remaining = [s for s in remaining if s.symbol != best.symbol]
        return ranked

    def _pick(self, candidates: List[VolatilityScore], volumes: Dict[str, float]) -> VolatilityScore:
        # Tie band is anchored on the top score, never chained
        top = max(s.score for s in candidates)
        tied = [s for s in candidates if top - s.score <= self.config["tie_epsilon"]]
        return min(tied, key=lambda s: (-volumes[s.symbol], s.symbol))

    @staticmethod
    def to_moves(score: float) -> int:
        """Integer encoding of a score, rounded half up."""
        return int(math.floor(score * 100 + 0.5))

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def _filter_liquid(
        self,
        scores: Dict[str, VolatilityScore],
        volumes: Dict[str, float],
    ) -> List[VolatilityScore]:
        floor = self.config["min_turnover"]
        result = [
            s for symbol, s in scores.items()
            if volumes.get(symbol) is not None and volumes[symbol] >= floor
        ]
        logger.debug(f"{len(result)} of {len(scores)} scored symbols pass turnover floor {floor:,.0f}")
        return result
