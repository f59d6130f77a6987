"""Fetch health monitoring."""

from .monitor import FetchMonitor, FetchHealthStatus, FetchFailureRecord

__all__ = ["FetchMonitor", "FetchHealthStatus", "FetchFailureRecord"]
