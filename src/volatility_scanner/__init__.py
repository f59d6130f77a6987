"""
Minute Volatility Scanner

Samples every USDT linear ticker once per second, scores short-window
price movement per symbol and publishes the most volatile liquid symbol
of each minute.
"""

__version__ = "0.1.0"
__author__ = "Volatility Scanner Team"

from .core.models import PriceSample, VolatilityScore, PerformerResult
from .core.enums import ErrorKind, SchedulerState, DeliveryMode
from .data.history import PriceHistoryStore
from .scanner.volatility import VolatilityEstimator
from .scanner.selector import PerformerSelector
from .scanner.cycle import MinuteCycleScheduler

__all__ = [
    "PriceSample",
    "VolatilityScore",
    "PerformerResult",
    "ErrorKind",
    "SchedulerState",
    "DeliveryMode",
    "PriceHistoryStore",
    "VolatilityEstimator",
    "PerformerSelector",
    "MinuteCycleScheduler",
]
