"""Core service for account-related operations."""

import logging

from streamtape.domain.models.api import Endpoints, RequestDescriptor
from streamtape.domain.models.common import AccountInfo
from streamtape.infrastructure.resilience.api_retry import ApiRetryService

logger = logging.getLogger(__name__)


class AccountService:
    """Account endpoints of the API."""

    def __init__(self, api_retry_service: ApiRetryService):
        self.api_retry_service = api_retry_service

    async def get_account_info(self) -> AccountInfo:
        """Gets information about the authenticated account.

        Raises:
            StreamTapeError: AUTHENTICATION on bad credentials, or any request failure.
        """
        envelope = await self.api_retry_service.execute(RequestDescriptor.get(Endpoints.ACCOUNT_INFO))
        return envelope["result"]
