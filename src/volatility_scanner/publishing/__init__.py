"""Result publication and presentation-side storage."""

from .publisher import ResultPublisher
from .store import ResultStore

__all__ = ["ResultPublisher", "ResultStore"]
