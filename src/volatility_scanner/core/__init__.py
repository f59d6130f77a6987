"""Core module for the volatility scanner."""

from .models import (
    PriceSample, SymbolState, VolatilityScore, TickerEntry,
    TickerSnapshot, PerformerSelection, PerformerResult
)
from .enums import (
    ErrorKind, CyclePhase, SchedulerState, DeliveryMode, FinalizeSnapshot
)
from .state_lock import TickGuard
from .accumulator import MinuteAccumulator

__all__ = [
    "PriceSample",
    "SymbolState",
    "VolatilityScore",
    "TickerEntry",
    "TickerSnapshot",
    "PerformerSelection",
    "PerformerResult",
    "ErrorKind",
    "CyclePhase",
    "SchedulerState",
    "DeliveryMode",
    "FinalizeSnapshot",
    "TickGuard",
    "MinuteAccumulator",
]
