"""Core service for direct and remote uploads.

Direct uploads ask the API for a one-off upload URL and post the file there
as multipart form data. Remote uploads let the server fetch a URL itself;
their progress can be polled until they finish.
"""

import asyncio
import logging
import re
import time
from pathlib import Path
from typing import Any, Optional

from streamtape.domain.errors import RemoteUploadTimeout, StreamTapeError
from streamtape.domain.interfaces.file_source import FileSource
from streamtape.domain.interfaces.transport import MultipartResponse, TransportError
from streamtape.domain.models.api import Endpoints, HttpStatus, RequestDescriptor
from streamtape.domain.models.common import (
    FileId,
    FilePath,
    RemoteUpload,
    RemoteUploadId,
    RemoteUploadProgressCallback,
    RemoteUploadStatus,
    RemoteUploadStatusMap,
    UploadProgressCallback,
    UploadUrl,
)
from streamtape.infrastructure.resilience.api_retry import ApiRetryService, classify_error

logger = logging.getLogger(__name__)

UPLOAD_FIELD_NAME = "file1"
FILE_ID_PATTERN = re.compile(r"/v/([^/]+)")

DEFAULT_POLL_INTERVAL_SECONDS = 5.0
DEFAULT_REMOTE_UPLOAD_TIMEOUT_SECONDS = 3600.0


class UploadService:
    """Upload endpoints of the API."""

    def __init__(self, api_retry_service: ApiRetryService, file_source: FileSource):
        """Initializes the UploadService.

        Args:
            api_retry_service: Request layer; its transport also posts the file bodies.
            file_source: Reader supplying the bytes of local files.
        """
        self.api_retry_service = api_retry_service
        self.file_source = file_source

    async def _result(self, descriptor: RequestDescriptor) -> Any:
        envelope = await self.api_retry_service.execute(descriptor)
        return envelope["result"]

    async def get_upload_url(
        self,
        folder_id: Optional[str] = None,
        sha256: Optional[str] = None,
        http_only: bool = False,
    ) -> UploadUrl:
        """Gets a one-off URL for a direct file upload.

        Args:
            folder_id: Target folder (root when not given).
            sha256: Expected SHA-256 of the file; the server rejects mismatches.
            http_only: Request a plain-HTTP upload URL.
        """
        return await self._result(
            RequestDescriptor.get(
                Endpoints.FILE_UPLOAD,
                folder=folder_id,
                sha256=sha256,
                httponly=True if http_only else None,
            )
        )

    async def upload_file(
        self,
        file_path: FilePath,
        folder_id: Optional[str] = None,
        sha256: Optional[str] = None,
        http_only: bool = False,
        on_progress: Optional[UploadProgressCallback] = None,
    ) -> FileId:
        """Uploads a local file and returns the id of the new remote file.

        Args:
            file_path: Path of the local file.
            folder_id: Target folder (root when not given).
            sha256: Expected SHA-256 of the file.
            http_only: Request a plain-HTTP upload URL.
            on_progress: Called with the fraction (0.0..1.0) of bytes sent.

        Raises:
            FileNotFoundError: If the local file does not exist.
            StreamTapeError: VALIDATION when the upload server's answer is
                unusable; other kinds for request failures.
        """
        if not await self.file_source.file_exists(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")

        upload_url = await self.get_upload_url(folder_id=folder_id, sha256=sha256, http_only=http_only)
        filename = Path(file_path).name
        logger.info(f"Uploading {filename} to upload server...")

        stream = await self.file_source.open_upload_stream(file_path)
        try:
            response = await self.api_retry_service.transport.post_multipart(
                upload_url["url"], UPLOAD_FIELD_NAME, filename, stream, on_progress
            )
        except TransportError as e:
            raise classify_error(e) from e
        finally:
            stream.close()

        file_id = self._extract_file_id(response)
        logger.info(f"Uploaded {filename} as file {file_id}")
        return file_id

    @staticmethod
    def _extract_file_id(response: MultipartResponse) -> FileId:
        """Reads the new file id from the upload server's answer.

        Only an HTTP 200 answer carrying ``result.url`` counts as a completed
        upload; the envelope status of that answer is not consulted.
        """
        body = response.body
        result = body.get("result") if isinstance(body, dict) else None
        url = result.get("url") if isinstance(result, dict) else None
        if response.status != HttpStatus.OK or not url:
            logger.error(f"Unexpected upload server response: HTTP {response.status} {body!r}")
            raise StreamTapeError.validation("Upload failed: Invalid response from server", response=body)

        match = FILE_ID_PATTERN.search(str(url))
        if not match:
            raise StreamTapeError.validation(
                "Upload failed: Could not extract file ID from response", response=body
            )
        return FileId(match.group(1))

    async def add_remote_upload(
        self,
        url: str,
        folder_id: Optional[str] = None,
        headers: Optional[str] = None,
        name: Optional[str] = None,
    ) -> RemoteUpload:
        """Asks the server to fetch ``url`` and store it as a new file.

        Args:
            url: Remote URL to fetch.
            folder_id: Target folder.
            headers: Extra HTTP headers the server sends when fetching.
            name: Name for the stored file.
        """
        return await self._result(
            RequestDescriptor.get(
                Endpoints.REMOTE_UPLOAD_ADD, url=url, folder=folder_id, headers=headers, name=name
            )
        )

    async def remove_remote_upload(self, upload_id: RemoteUploadId) -> bool:
        """Removes a remote upload job, or every job when ``upload_id`` is ``"all"``."""
        return await self._result(RequestDescriptor.get(Endpoints.REMOTE_UPLOAD_REMOVE, id=upload_id))

    async def check_remote_upload_status(self, upload_id: RemoteUploadId) -> RemoteUploadStatusMap:
        return await self._result(RequestDescriptor.get(Endpoints.REMOTE_UPLOAD_STATUS, id=upload_id))

    async def wait_for_remote_upload(
        self,
        upload_id: RemoteUploadId,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        timeout: float = DEFAULT_REMOTE_UPLOAD_TIMEOUT_SECONDS,
        on_progress: Optional[RemoteUploadProgressCallback] = None,
    ) -> RemoteUploadStatus:
        """Polls a remote upload until it produced a file link or failed.

        The timeout is checked between polls; a slow status request is not
        interrupted.

        Args:
            upload_id: Id returned by add_remote_upload.
            poll_interval: Seconds between two status checks.
            timeout: Seconds after which polling gives up.
            on_progress: Called with every status record received.

        Returns:
            The final status record (check ``status == "error"`` for failures).

        Raises:
            StreamTapeError: VALIDATION when the upload is unknown to the server.
            RemoteUploadTimeout: When the upload is still running after ``timeout``.
        """
        start_time = time.monotonic()

        while True:
            statuses = await self.check_remote_upload_status(upload_id)
            upload_status = statuses.get(upload_id) if statuses else None
            if not upload_status:
                raise StreamTapeError.validation("Remote upload not found")

            if on_progress is not None:
                on_progress(upload_status)

            if upload_status.get("url") or upload_status.get("status") == "error":
                logger.info(f"Remote upload {upload_id} ended with status '{upload_status.get('status')}'")
                return upload_status

            if time.monotonic() - start_time >= timeout:
                raise RemoteUploadTimeout(upload_id, timeout)

            logger.debug(f"Remote upload {upload_id} is '{upload_status.get('status')}', polling again in {poll_interval}s")
            await asyncio.sleep(poll_interval)
