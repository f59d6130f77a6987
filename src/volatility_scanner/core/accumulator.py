"""Per-minute accumulator state."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from .models import TickerSnapshot, VolatilityScore


@dataclass
class MinuteAccumulator:
    """Derived state of the current minute.

    Lifecycle: reset -> accumulate -> finalize. After ``reset`` the score map
    and last snapshot are empty and ``has_error`` is False; ``has_error`` then
    stays True for the rest of the minute once any fetch fails.
    """
    minute: Optional[datetime] = None
    scores: Dict[str, VolatilityScore] = field(default_factory=dict)
    has_error: bool = False
    last_snapshot: Optional[TickerSnapshot] = None
    ticks: int = 0

    def reset(self, minute: datetime) -> None:
        self.minute = minute
        self.scores = {}
        self.has_error = False
        self.last_snapshot = None
        self.ticks = 0

    def mark_error(self) -> None:
        self.has_error = True

    def belongs_to(self, minute: datetime) -> bool:
        return self.minute == minute
