"""Interface for reading local files to upload.

Keeps the upload service independent of where file bytes come from.
"""

import abc
from typing import BinaryIO

from streamtape.domain.models.common import FilePath


class FileSource(abc.ABC):
    """Abstract Base Class for the bulk-data reader used by uploads."""

    @abc.abstractmethod
    async def file_exists(self, file_path: FilePath) -> bool:
        """Checks if a regular file exists asynchronously."""
        pass

    @abc.abstractmethod
    async def file_size(self, file_path: FilePath) -> int:
        """Returns the size of a file in bytes.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        pass

    @abc.abstractmethod
    async def sha256(self, file_path: FilePath) -> str:
        """Computes the hex SHA-256 digest of a file asynchronously.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        pass

    @abc.abstractmethod
    async def open_upload_stream(self, file_path: FilePath) -> BinaryIO:
        """Opens a file for reading as a binary stream.

        The caller owns the returned stream and must close it.

        Raises:
            FileNotFoundError: If the file does not exist.
            PermissionError: If read permissions are denied.
        """
        pass
