"""Error taxonomy for the StreamTape client.

A single exception type carries an ErrorKind discriminator, so callers
branch on ``error.kind`` instead of on exception classes.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Closed set of failure kinds raised by the client."""
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"
    NOT_FOUND = "not_found"
    API_REQUEST = "api_request"
    NETWORK = "network"
    GENERIC = "generic"


class StreamTapeError(Exception):
    """Typed failure raised by the request layer and the services.

    Attributes:
        kind: Which failure this is.
        status: HTTP or envelope status code, when one was received.
        response: Raw decoded response body, when one was received.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.GENERIC,
        status: Optional[int] = None,
        response: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status = status
        self.response = response

    def __repr__(self) -> str:
        return (
            f"StreamTapeError(kind={self.kind.value!r}, status={self.status!r}, "
            f"message={self.message!r})"
        )

    @classmethod
    def authentication(
        cls,
        message: str = "Authentication failed. Please check your login and key.",
        status: Optional[int] = None,
        response: Any = None,
    ) -> "StreamTapeError":
        return cls(message, ErrorKind.AUTHENTICATION, status, response)

    @classmethod
    def validation(cls, message: str, status: Optional[int] = None, response: Any = None) -> "StreamTapeError":
        return cls(message, ErrorKind.VALIDATION, status, response)

    @classmethod
    def rate_limit(
        cls,
        message: str = "Rate limit exceeded. Please try again later.",
        status: Optional[int] = None,
        response: Any = None,
    ) -> "StreamTapeError":
        return cls(message, ErrorKind.RATE_LIMIT, status, response)

    @classmethod
    def not_found(
        cls,
        message: str = "The requested resource was not found.",
        status: Optional[int] = None,
        response: Any = None,
    ) -> "StreamTapeError":
        return cls(message, ErrorKind.NOT_FOUND, status, response)

    @classmethod
    def api_request(cls, message: str, status: int, response: Any = None) -> "StreamTapeError":
        return cls(message, ErrorKind.API_REQUEST, status, response)

    @classmethod
    def network(cls, message: str = "Network request failed. Please check your connection.") -> "StreamTapeError":
        return cls(message, ErrorKind.NETWORK)

    @classmethod
    def generic(cls, message: str = "Unknown error occurred") -> "StreamTapeError":
        return cls(message, ErrorKind.GENERIC)


class RemoteUploadTimeout(StreamTapeError, TimeoutError):
    """Raised when polling a remote upload outlives the caller's timeout."""

    def __init__(self, upload_id: str, timeout: float):
        super().__init__(
            f"Timeout waiting for remote upload {upload_id} to complete (after {timeout}s)",
            ErrorKind.GENERIC,
        )
        self.upload_id = upload_id
        self.timeout = timeout
