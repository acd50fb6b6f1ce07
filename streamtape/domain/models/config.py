"""Configuration value objects for the StreamTape client.

Defaults are applied once, at construction. Explicit zeros and empty
collections are kept as given.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable

from streamtape.domain.models.api import DEFAULT_BASE_URL

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY_SECONDS = 1.0
DEFAULT_MAX_DELAY_SECONDS = 5.0
DEFAULT_RETRYABLE_STATUS_CODES: FrozenSet[int] = frozenset({429, 503})


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy of the request layer.

    Attributes:
        max_retries: Retries after the first attempt. 0 disables retrying.
        base_delay: Delay in seconds before the first retry; doubles per attempt.
        max_delay: Upper bound in seconds of the exponential part of the delay.
        retryable_status_codes: Status codes that trigger a retry. Empty disables retrying.
    """
    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BASE_DELAY_SECONDS
    max_delay: float = DEFAULT_MAX_DELAY_SECONDS
    retryable_status_codes: FrozenSet[int] = DEFAULT_RETRYABLE_STATUS_CODES

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("base_delay and max_delay must be >= 0")
        # Accept any iterable of ints (e.g. a list from YAML) but store a frozenset
        codes: Iterable[int] = self.retryable_status_codes
        object.__setattr__(self, "retryable_status_codes", frozenset(int(c) for c in codes))


@dataclass(frozen=True)
class ClientConfig:
    """Everything needed to build a client: credentials, endpoint and policies."""
    login: str
    key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    retry: RetryConfig = field(default_factory=RetryConfig)

    def __post_init__(self) -> None:
        if not self.login or not self.key:
            raise ValueError("StreamTape login and key are required.")

    def __repr__(self) -> str:
        # Keep the API key out of logs
        return (
            f"ClientConfig(login={self.login!r}, key='***', base_url={self.base_url!r}, "
            f"timeout={self.timeout!r}, retry={self.retry!r})"
        )
