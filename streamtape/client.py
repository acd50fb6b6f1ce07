"""StreamTape API client.

Wires the transport, the resilient request layer and the four endpoint
services together from a ClientConfig.

Example:
    async with StreamTape.from_credentials("login", "key") as client:
        info = await client.account.get_account_info()
"""

import logging
from typing import Any, Optional

from streamtape.core.services.account_service import AccountService
from streamtape.core.services.download_service import DownloadService
from streamtape.core.services.file_service import FileService
from streamtape.core.services.upload_service import UploadService
from streamtape.domain.interfaces.file_source import FileSource
from streamtape.domain.interfaces.transport import Transport
from streamtape.domain.models.config import ClientConfig
from streamtape.infrastructure.filesystem.local_fs import LocalFileSystem
from streamtape.infrastructure.http.httpx_transport import HttpxTransport
from streamtape.infrastructure.resilience.api_retry import ApiRetryService, EventHandler

logger = logging.getLogger(__name__)


class StreamTape:
    """Entry point of the library.

    Attributes:
        account: Account operations.
        file: File and folder operations.
        download: Download ticket and link operations.
        upload: Direct and remote upload operations.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[Transport] = None,
        file_source: Optional[FileSource] = None,
        event_handler: Optional[EventHandler] = None,
    ):
        """Creates a client.

        Args:
            config: Credentials, base URL, timeout and retry policy.
            transport: Custom transport; defaults to HttpxTransport.
            file_source: Custom reader for uploads; defaults to LocalFileSystem.
            event_handler: Optional callable receiving request layer events.
        """
        self.config = config
        self.transport = transport or HttpxTransport(base_url=config.base_url, timeout=config.timeout)
        self.api_retry_service = ApiRetryService(
            transport=self.transport,
            login=config.login,
            key=config.key,
            retry_config=config.retry,
            event_handler=event_handler,
        )

        self.account = AccountService(self.api_retry_service)
        self.file = FileService(self.api_retry_service)
        self.download = DownloadService(self.api_retry_service)
        self.upload = UploadService(self.api_retry_service, file_source or LocalFileSystem())
        logger.debug(f"StreamTape client created: {config!r}")

    @classmethod
    def from_credentials(cls, login: str, key: str, **overrides: Any) -> "StreamTape":
        """Creates a client from credentials; ``overrides`` are other ClientConfig fields."""
        return cls(ClientConfig(login=login, key=key, **overrides))

    async def close(self) -> None:
        await self.api_retry_service.close()

    async def __aenter__(self) -> "StreamTape":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
