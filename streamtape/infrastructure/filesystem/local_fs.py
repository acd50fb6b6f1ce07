"""Concrete implementation of the FileSource interface for the local disk.

Uses `pathlib` for metadata and `aiofiles` for async reads.
"""

import asyncio
import hashlib
import logging
from pathlib import Path
from typing import BinaryIO

import aiofiles
import aiofiles.os

from streamtape.domain.interfaces.file_source import FileSource
from streamtape.domain.models.common import FilePath

logger = logging.getLogger(__name__)

HASH_CHUNK_SIZE = 1024 * 1024


class LocalFileSystem(FileSource):
    """Implementation of FileSource for the local disk."""

    def __init__(self):
        logger.info("LocalFileSystem initialized.")

    async def file_exists(self, file_path: FilePath) -> bool:
        """Checks if a regular file exists asynchronously."""
        exists = await aiofiles.os.path.isfile(file_path)
        logger.debug(f"Checked existence for {file_path}: {exists}")
        return exists

    async def file_size(self, file_path: FilePath) -> int:
        if not await self.file_exists(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")
        stat_result = await aiofiles.os.stat(file_path)
        return stat_result.st_size

    async def sha256(self, file_path: FilePath) -> str:
        """Hashes the file in chunks without loading it into memory."""
        path = Path(file_path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {file_path}")

        digest = hashlib.sha256()
        try:
            async with aiofiles.open(path, mode='rb') as f:
                while True:
                    chunk = await f.read(HASH_CHUNK_SIZE)
                    if not chunk:
                        break
                    digest.update(chunk)
        except PermissionError as e:
            logger.error(f"Permission denied reading file: {path}")
            raise PermissionError(f"Permission denied: {file_path}") from e
        logger.debug(f"SHA-256 of {path}: {digest.hexdigest()}")
        return digest.hexdigest()

    async def open_upload_stream(self, file_path: FilePath) -> BinaryIO:
        """Opens the file for the multipart encoder, which reads it synchronously."""
        path = Path(file_path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {file_path}")
        try:
            return await asyncio.to_thread(path.open, 'rb')
        except PermissionError as e:
            logger.error(f"Permission denied reading file: {path}")
            raise PermissionError(f"Permission denied: {file_path}") from e
