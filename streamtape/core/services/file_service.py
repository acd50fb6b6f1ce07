"""Core service for file and folder management.

Each method maps one API endpoint: it builds the request descriptor,
delegates to the request layer and unwraps the envelope's ``result``.
"""

import logging
from typing import Iterable, List, Optional, Union

from streamtape.domain.models.api import Endpoints, RequestDescriptor, join_ids
from streamtape.domain.models.common import (
    ConvertStatus,
    FileInfoMap,
    FolderContent,
    FolderId,
    Thumbnail,
)
from streamtape.infrastructure.resilience.api_retry import ApiRetryService

logger = logging.getLogger(__name__)


class FileService:
    """File and folder endpoints of the API."""

    def __init__(self, api_retry_service: ApiRetryService):
        self.api_retry_service = api_retry_service

    async def _result(self, descriptor: RequestDescriptor):
        envelope = await self.api_retry_service.execute(descriptor)
        return envelope["result"]

    async def get_file_info(self, file_ids: Union[str, Iterable[str]]) -> FileInfoMap:
        """Gets information about one or several files (at most 100 per call).

        Args:
            file_ids: A single file id or an iterable of ids.

        Returns:
            A mapping from file id to its FileInfo.
        """
        files = join_ids(file_ids)
        logger.debug(f"Fetching file info for: {files}")
        return await self._result(RequestDescriptor.get(Endpoints.FILE_INFO, file=files))

    async def list_folder(self, folder_id: Optional[str] = None) -> FolderContent:
        """Lists folders and files in a folder (the root folder when not given)."""
        return await self._result(RequestDescriptor.get(Endpoints.FILE_LIST_FOLDER, folder=folder_id))

    async def create_folder(self, name: str, parent_id: Optional[str] = None) -> FolderId:
        """Creates a folder and returns its id."""
        result = await self._result(
            RequestDescriptor.get(Endpoints.FILE_CREATE_FOLDER, name=name, pid=parent_id)
        )
        logger.info(f"Created folder '{name}' with id {result['folderid']}")
        return FolderId(result["folderid"])

    async def rename_folder(self, folder_id: str, new_name: str) -> bool:
        return await self._result(
            RequestDescriptor.get(Endpoints.FILE_RENAME_FOLDER, folder=folder_id, name=new_name)
        )

    async def delete_folder(self, folder_id: str) -> bool:
        """Deletes a folder together with all its subfolders and files."""
        return await self._result(RequestDescriptor.get(Endpoints.FILE_DELETE_FOLDER, folder=folder_id))

    async def rename_file(self, file_id: str, new_name: str) -> bool:
        return await self._result(RequestDescriptor.get(Endpoints.FILE_RENAME, file=file_id, name=new_name))

    async def move_file(self, file_id: str, target_folder_id: str) -> bool:
        return await self._result(
            RequestDescriptor.get(Endpoints.FILE_MOVE, file=file_id, folder=target_folder_id)
        )

    async def delete_file(self, file_id: str) -> bool:
        return await self._result(RequestDescriptor.get(Endpoints.FILE_DELETE, file=file_id))

    async def get_running_converts(self) -> List[ConvertStatus]:
        return await self._result(RequestDescriptor.get(Endpoints.FILE_RUNNING_CONVERTS))

    async def get_failed_converts(self) -> List[ConvertStatus]:
        return await self._result(RequestDescriptor.get(Endpoints.FILE_FAILED_CONVERTS))

    async def get_thumbnail(self, file_id: str) -> str:
        """Returns the URL of a file's splash image."""
        result: Thumbnail = await self._result(RequestDescriptor.get(Endpoints.FILE_GET_SPLASH, file=file_id))
        return result["url"]
