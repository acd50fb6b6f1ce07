import hashlib

import pytest

from streamtape.domain.models.common import FilePath
from streamtape.infrastructure.filesystem.local_fs import LocalFileSystem


@pytest.fixture
def local_fs():
    return LocalFileSystem()


@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "movie.mp4"
    path.write_bytes(b"not really a video" * 100)
    return path


@pytest.mark.asyncio
async def test_file_exists(local_fs, video_file, tmp_path):
    assert await local_fs.file_exists(FilePath(str(video_file)))
    assert not await local_fs.file_exists(FilePath(str(tmp_path / "missing.mp4")))
    assert not await local_fs.file_exists(FilePath(str(tmp_path)))


@pytest.mark.asyncio
async def test_file_size(local_fs, video_file):
    assert await local_fs.file_size(FilePath(str(video_file))) == 1800


@pytest.mark.asyncio
async def test_sha256_matches_hashlib(local_fs, video_file):
    expected = hashlib.sha256(video_file.read_bytes()).hexdigest()
    assert await local_fs.sha256(FilePath(str(video_file))) == expected


@pytest.mark.asyncio
async def test_open_upload_stream_reads_bytes(local_fs, video_file):
    stream = await local_fs.open_upload_stream(FilePath(str(video_file)))
    try:
        assert stream.read() == video_file.read_bytes()
    finally:
        stream.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("operation", ["file_size", "sha256", "open_upload_stream"])
async def test_missing_file_raises(local_fs, tmp_path, operation):
    with pytest.raises(FileNotFoundError):
        await getattr(local_fs, operation)(FilePath(str(tmp_path / "missing.mp4")))
