"""Core enumerations for the volatility scanner."""

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of ticker fetch failures."""
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    HTTP_STATUS = "http_status"
    API_ERROR = "api_error"
    MALFORMED_RESPONSE = "malformed_response"
    GENERIC = "generic"

    @property
    def is_transport(self) -> bool:
        return self in (ErrorKind.TIMEOUT, ErrorKind.CONNECTION)


class CyclePhase(str, Enum):
    """Phase of the minute cycle a tick falls into."""
    RESET = "reset"
    ACCUMULATE = "accumulate"
    FINALIZE = "finalize"


class SchedulerState(str, Enum):
    """Scheduler lifecycle states."""
    IDLE = "idle"
    RUNNING = "running"


class DeliveryMode(str, Enum):
    """How the HTTP layer hands results to clients."""
    POLL = "poll"
    SNAPSHOT = "snapshot"


class FinalizeSnapshot(str, Enum):
    """Where finalize reads the winner's turnover and funding rate from."""
    REUSE = "reuse"
    REFETCH = "refetch"
