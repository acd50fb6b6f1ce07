"""Interface for the HTTP transport used by the request layer.

Implementations perform one HTTP exchange and report failures with the two
transport errors below, so the request layer can classify them without
knowing the HTTP library in use.
"""

import abc
from typing import Any, BinaryIO, Mapping, NamedTuple, Optional

from streamtape.domain.models.api import QueryValue
from streamtape.domain.models.common import UploadProgressCallback


class TransportError(Exception):
    """Base class for failures raised by a Transport."""


class TransportStatusError(TransportError):
    """The server answered with a non-2xx status."""

    def __init__(self, status: int, body: Any = None, message: Optional[str] = None):
        super().__init__(message or f"HTTP {status}")
        self.status = status
        self.body = body


class TransportConnectionError(TransportError):
    """No response was received (connection refused, DNS failure, timeout...)."""


class MultipartResponse(NamedTuple):
    """HTTP status and decoded body of a successful multipart post."""
    status: int
    body: Any


class Transport(abc.ABC):
    """Abstract Base Class for HTTP transports."""

    @abc.abstractmethod
    async def send(self, method: str, path: str, params: Mapping[str, QueryValue]) -> Any:
        """Sends one request and returns the decoded response body.

        Args:
            method: HTTP method.
            path: Path relative to the configured base URL.
            params: Query string parameters.

        Raises:
            TransportStatusError: On a non-2xx response.
            TransportConnectionError: When no response was received.
        """
        pass

    @abc.abstractmethod
    async def post_multipart(
        self,
        url: str,
        field_name: str,
        filename: str,
        stream: BinaryIO,
        on_progress: Optional[UploadProgressCallback] = None,
    ) -> MultipartResponse:
        """Posts ``stream`` as a multipart form field to an absolute URL.

        Returns:
            The 2xx status code together with the decoded response body.

        Raises:
            TransportStatusError: On a non-2xx response.
            TransportConnectionError: When no response was received.
        """
        pass

    @abc.abstractmethod
    async def close(self) -> None:
        """Releases the underlying connections."""
        pass
