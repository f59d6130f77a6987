"""Volatility scanner: estimation, ranking and the minute cycle."""

from .volatility import VolatilityEstimator
from .selector import PerformerSelector
from .cycle import MinuteCycleScheduler

__all__ = ["VolatilityEstimator", "PerformerSelector", "MinuteCycleScheduler"]
