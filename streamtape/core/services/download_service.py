"""Core service for download-ticket issuance and link exchange."""

import asyncio
import logging
from typing import Optional

from streamtape.domain.models.api import Endpoints, RequestDescriptor
from streamtape.domain.models.common import DownloadLink, DownloadTicket, DownloadTicketToken
from streamtape.infrastructure.resilience.api_retry import ApiRetryService

logger = logging.getLogger(__name__)


class DownloadService:
    """Download endpoints of the API."""

    def __init__(self, api_retry_service: ApiRetryService):
        self.api_retry_service = api_retry_service

    async def get_download_ticket(self, file_id: str) -> DownloadTicket:
        """Requests a download ticket for a file.

        The ticket only becomes valid after its ``wait_time`` (seconds).
        """
        envelope = await self.api_retry_service.execute(
            RequestDescriptor.get(Endpoints.FILE_DL_TICKET, file=file_id)
        )
        return envelope["result"]

    async def get_download_link(
        self,
        file_id: str,
        ticket: DownloadTicketToken,
        captcha_response: Optional[str] = None,
    ) -> DownloadLink:
        """Exchanges a download ticket for a direct download link.

        Raises:
            StreamTapeError: VALIDATION when the server asks for a captcha
                response; callers may prompt for one and call again.
        """
        envelope = await self.api_retry_service.execute(
            RequestDescriptor.get(
                Endpoints.FILE_DL,
                file=file_id,
                ticket=ticket,
                captcha_response=captcha_response,
            )
        )
        return envelope["result"]

    async def get_direct_download_link(
        self,
        file_id: str,
        captcha_response: Optional[str] = None,
    ) -> DownloadLink:
        """Gets a ticket, waits until it is valid, then exchanges it for a link."""
        ticket = await self.get_download_ticket(file_id)

        wait_time = ticket.get("wait_time") or 0
        if wait_time > 0:
            logger.info(f"Download ticket for {file_id} valid in {wait_time}s, waiting...")
            await asyncio.sleep(wait_time)

        return await self.get_download_link(file_id, DownloadTicketToken(ticket["ticket"]), captcha_response)
