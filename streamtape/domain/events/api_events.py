"""Domain Events emitted by the request layer.

One event per lifecycle step of an API call: initiated, succeeded,
retry scheduled, failed definitively.
"""

from dataclasses import dataclass, field
import time
from typing import Optional


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


@dataclass
class ApiCallInitiated(DomainEvent):
    """An attempt is about to be sent."""
    method: str
    path: str
    attempt_number: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallSucceeded(DomainEvent):
    """The call returned a valid envelope."""
    method: str
    path: str
    latency_ms: float
    attempts: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryScheduled(DomainEvent):
    """A failed attempt will be retried after ``delay_seconds``."""
    method: str
    path: str
    attempt_number: int
    delay_seconds: float
    status: Optional[int] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallFailed(DomainEvent):
    """The call failed definitively (non-retryable or retries exhausted)."""
    method: str
    path: str
    error_kind: str
    error_message: str
    status: Optional[int] = None
    attempts: int = 1
    timestamp: float = field(default_factory=time.time)
