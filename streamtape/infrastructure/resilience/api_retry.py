"""Service for executing StreamTape API calls with automatic retries.

Injects the account credentials into every request, validates the response
envelope, classifies failures into typed errors and retries the retryable
ones with exponential backoff plus jitter.
"""

import asyncio
import logging
import random
import time
from typing import Any, Callable, Dict, Optional

from streamtape.domain.errors import StreamTapeError
from streamtape.domain.events.api_events import (
    ApiCallFailed,
    ApiCallInitiated,
    ApiCallSucceeded,
    DomainEvent,
    RetryScheduled,
)
from streamtape.domain.interfaces.transport import (
    Transport,
    TransportConnectionError,
    TransportStatusError,
)
from streamtape.domain.models.api import ApiEnvelope, HttpStatus, QueryValue, RequestDescriptor
from streamtape.domain.models.config import RetryConfig

logger = logging.getLogger(__name__)

# Upper bound (exclusive) of the random delay added to every backoff, in seconds
JITTER_SECONDS = 0.1

EventHandler = Callable[[DomainEvent], None]


def _body_message(body: Any, default: str) -> str:
    if isinstance(body, dict) and body.get("msg"):
        return str(body["msg"])
    return default


def classify_error(error: BaseException) -> StreamTapeError:
    """Converts any failure raised while performing a call into a StreamTapeError.

    Args:
        error: Exception raised by the transport or by envelope validation.

    Returns:
        The typed error; StreamTapeErrors are returned unchanged.
    """
    if isinstance(error, StreamTapeError):
        return error

    if isinstance(error, TransportStatusError):
        status, body = error.status, error.body
        if status == HttpStatus.BAD_REQUEST:
            return StreamTapeError.validation(
                _body_message(body, "Invalid request parameters"), status=status, response=body
            )
        if status == HttpStatus.FORBIDDEN:
            return StreamTapeError.authentication(status=status, response=body)
        if status == HttpStatus.NOT_FOUND:
            return StreamTapeError.not_found(status=status, response=body)
        if status == HttpStatus.BANDWIDTH_EXCEEDED:
            return StreamTapeError.rate_limit(status=status, response=body)
        return StreamTapeError.api_request(_body_message(body, "API request failed"), status, body)

    if isinstance(error, TransportConnectionError):
        return StreamTapeError.network()

    wrapped = StreamTapeError.generic(str(error) or "Unknown error occurred")
    wrapped.__cause__ = error
    return wrapped


def validate_envelope(body: Any) -> Any:
    """Raises an API_REQUEST error when the envelope reports a non-OK status.

    Bodies without a status (or with an empty one) are returned as is.
    """
    if isinstance(body, dict):
        status = body.get("status")
        if status and status != HttpStatus.OK:
            raise StreamTapeError.api_request(
                _body_message(body, "API request failed"), int(status), body
            )
    return body


class ApiRetryService:
    """Resilient request layer: credentials, envelope checks, retries."""

    def __init__(
        self,
        transport: Transport,
        login: str,
        key: str,
        retry_config: Optional[RetryConfig] = None,
        event_handler: Optional[EventHandler] = None,
    ):
        """Initializes the ApiRetryService.

        Args:
            transport: Transport performing the HTTP exchanges.
            login: API login, sent with every request.
            key: API key, sent with every request.
            retry_config: Retry policy; defaults to RetryConfig().
            event_handler: Optional callable receiving the domain events of every call.
        """
        self.transport = transport
        self.retry_config = retry_config if retry_config is not None else RetryConfig()
        self._credentials: Dict[str, str] = {"login": login, "key": key}
        self._event_handler = event_handler

        logger.info(
            f"ApiRetryService initialized: max_retries={self.retry_config.max_retries}, "
            f"base_delay={self.retry_config.base_delay}s, max_delay={self.retry_config.max_delay}s, "
            f"retryable={sorted(self.retry_config.retryable_status_codes)}"
        )

    def _dispatch_event(self, event: DomainEvent) -> None:
        logger.debug(f"EVENT: {event}")
        if self._event_handler is not None:
            self._event_handler(event)

    def _build_params(self, descriptor: RequestDescriptor) -> Dict[str, QueryValue]:
        params: Dict[str, QueryValue] = dict(descriptor.params)
        # Credentials always win over descriptor parameters
        params.update(self._credentials)
        return params

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        """Decides whether a failed attempt is retried.

        Only non-2xx answers reported by the transport are retried, when their
        HTTP status is in the retryable set and attempts remain. Envelope
        failures on an HTTP 200 answer and connection failures are final.

        Args:
            error: The exception raised by the attempt, before classification.
            attempt: Zero-based number of the failed attempt.
        """
        if attempt >= self.retry_config.max_retries:
            return False
        if not isinstance(error, TransportStatusError):
            return False
        return error.status in self.retry_config.retryable_status_codes

    def calculate_retry_delay(self, attempt: int) -> float:
        """Exponential backoff capped at max_delay, plus up to JITTER_SECONDS of jitter."""
        delay = min(self.retry_config.base_delay * (2 ** attempt), self.retry_config.max_delay)
        return delay + random.random() * JITTER_SECONDS

    async def _attempt(self, descriptor: RequestDescriptor) -> ApiEnvelope:
        body = await self.transport.send(descriptor.method, descriptor.path, self._build_params(descriptor))
        return validate_envelope(body)

    async def execute(self, descriptor: RequestDescriptor) -> ApiEnvelope:
        """Executes one API call with retries.

        Args:
            descriptor: The request to perform.

        Returns:
            The decoded response envelope.

        Raises:
            StreamTapeError: The classified error of the last attempt.
        """
        last_error: Optional[StreamTapeError] = None
        attempt = 0
        method, path = descriptor.method, descriptor.path

        while attempt <= self.retry_config.max_retries:
            self._dispatch_event(ApiCallInitiated(method=method, path=path, attempt_number=attempt + 1))
            start_time = time.perf_counter()
            try:
                envelope = await self._attempt(descriptor)
            except Exception as e:
                last_error = classify_error(e)

                if self.should_retry(e, attempt):
                    delay = self.calculate_retry_delay(attempt)
                    logger.warning(
                        f"Retryable error on {method} {path} (attempt {attempt + 1}/"
                        f"{self.retry_config.max_retries + 1}): {last_error.kind.value} "
                        f"status={last_error.status}. Waiting {delay:.2f}s..."
                    )
                    self._dispatch_event(RetryScheduled(
                        method=method, path=path, attempt_number=attempt + 1,
                        delay_seconds=delay, status=last_error.status,
                    ))
                    await asyncio.sleep(delay)
                    attempt += 1
                    continue

                logger.error(
                    f"{method} {path} failed after {attempt + 1} attempt(s): "
                    f"{last_error.kind.value} status={last_error.status}: {last_error.message}"
                )
                self._dispatch_event(ApiCallFailed(
                    method=method, path=path, error_kind=last_error.kind.value,
                    error_message=last_error.message, status=last_error.status, attempts=attempt + 1,
                ))
                if last_error is e:
                    raise
                raise last_error from e

            latency_ms = (time.perf_counter() - start_time) * 1000
            self._dispatch_event(ApiCallSucceeded(
                method=method, path=path, latency_ms=latency_ms, attempts=attempt + 1,
            ))
            return envelope

        raise last_error or StreamTapeError.network()

    async def close(self) -> None:
        await self.transport.close()
