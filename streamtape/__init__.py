"""Async Python client and CLI for the StreamTape file-hosting API."""

from streamtape.client import StreamTape
from streamtape.domain.errors import ErrorKind, RemoteUploadTimeout, StreamTapeError
from streamtape.domain.models.config import ClientConfig, RetryConfig

__version__ = "1.0.0"

__all__ = [
    "StreamTape",
    "ClientConfig",
    "RetryConfig",
    "StreamTapeError",
    "ErrorKind",
    "RemoteUploadTimeout",
]
