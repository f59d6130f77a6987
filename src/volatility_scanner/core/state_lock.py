"""Tick guard that keeps scheduler ticks from overlapping."""

import logging
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class TickGuard:
    """Non-blocking guard for the single scheduling timeline.

    Entry is synchronous so that two dispatches in the same loop iteration
    cannot both succeed. A refused entry is counted as a dropped tick.
    """

    def __init__(self, name: str):
        """Initialize tick guard."""
        self.name = name
        self._busy = False
        self._entered_count = 0
        self._dropped_count = 0
        logger.debug(f"Tick guard '{name}' created")

    def try_enter(self) -> bool:
        """Enter the guard, or return False if already held."""
        if self._busy:
            self._dropped_count += 1
            logger.debug(f"Tick guard '{self.name}' busy (dropped: {self._dropped_count})")
            return False
        self._busy = True
        self._entered_count += 1
        return True

    def exit(self) -> None:
        """Release the guard."""
        self._busy = False

    @contextmanager
    def held(self):
        """Context manager releasing the guard on exit.

        The guard must already be entered via ``try_enter``.
        """
        try:
            yield
        finally:
            self.exit()

    @property
    def busy(self) -> bool:
        return self._busy

    def entered_count(self) -> int:
        """Get number of ticks that ran."""
        return self._entered_count

    def dropped_count(self) -> int:
        """Get number of ticks dropped because the guard was held."""
        return self._dropped_count
