"""Concrete implementation of the Transport interface using httpx.

Hides the specifics of the httpx library and translates its failures into
the transport errors the request layer understands.
"""

import logging
from typing import Any, BinaryIO, Mapping, Optional

import httpx

from streamtape.domain.interfaces.transport import (
    MultipartResponse,
    Transport,
    TransportConnectionError,
    TransportStatusError,
)
from streamtape.domain.models.api import QueryValue
from streamtape.domain.models.common import UploadProgressCallback

logger = logging.getLogger(__name__)


def _decode_body(response: httpx.Response) -> Any:
    """Returns the JSON body of a response, or its text when it is not JSON."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ProgressReader:
    """File wrapper that reports how much of the stream has been read.

    httpx reads file fields chunk by chunk while sending the multipart body,
    so the fraction of bytes read tracks the upload progress.
    """

    def __init__(self, stream: BinaryIO, total: int, on_progress: UploadProgressCallback):
        self._stream = stream
        self._total = total
        self._on_progress = on_progress
        self._read = 0

    def read(self, size: int = -1) -> bytes:
        chunk = self._stream.read(size)
        if chunk:
            self._read += len(chunk)
            if self._total:
                self._on_progress(min(self._read / self._total, 1.0))
        return chunk

    def fileno(self) -> int:
        return self._stream.fileno()

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._stream.seek(offset, whence)

    def tell(self) -> int:
        return self._stream.tell()


def _stream_length(stream: BinaryIO) -> int:
    position = stream.tell()
    length = stream.seek(0, 2)
    stream.seek(position)
    return length - position


class HttpxTransport(Transport):
    """httpx.AsyncClient based transport."""

    def __init__(
        self,
        base_url: str,
        timeout: float,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initializes the transport.

        Args:
            base_url: Root URL all relative paths are resolved against.
            timeout: Per-request timeout in seconds.
            client: Pre-built AsyncClient (tests inject one with a MockTransport).
        """
        self.base_url = base_url
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )
        logger.info(f"HttpxTransport initialized: base_url={base_url}, timeout={timeout}s")

    async def send(self, method: str, path: str, params: Mapping[str, QueryValue]) -> Any:
        logger.debug(f"{method} {path} params={sorted(k for k in params if k != 'key')}")
        try:
            response = await self._client.request(method, path, params=dict(params))
        except httpx.TransportError as e:
            # Connect/read/write/pool timeouts and network failures: no response
            logger.warning(f"No response for {method} {path}: {type(e).__name__}: {e}")
            raise TransportConnectionError(str(e) or type(e).__name__) from e
        return self._handle_response(response)

    async def post_multipart(
        self,
        url: str,
        field_name: str,
        filename: str,
        stream: BinaryIO,
        on_progress: Optional[UploadProgressCallback] = None,
    ) -> MultipartResponse:
        body: Any = stream
        if on_progress is not None:
            body = ProgressReader(stream, _stream_length(stream), on_progress)
        logger.debug(f"POST multipart '{field_name}' ({filename}) to upload server")
        try:
            # No timeout for the upload body
            response = await self._client.post(
                url,
                files={field_name: (filename, body, "application/octet-stream")},
                timeout=None,
            )
        except httpx.TransportError as e:
            logger.warning(f"Upload of {filename} got no response: {type(e).__name__}: {e}")
            raise TransportConnectionError(str(e) or type(e).__name__) from e
        return MultipartResponse(response.status_code, self._handle_response(response))

    def _handle_response(self, response: httpx.Response) -> Any:
        body = _decode_body(response)
        if response.is_success:
            return body
        logger.debug(f"HTTP {response.status_code} from {response.request.url.path}")
        raise TransportStatusError(response.status_code, body)

    async def close(self) -> None:
        if not self._client.is_closed:
            await self._client.aclose()
            logger.debug("HttpxTransport closed.")
