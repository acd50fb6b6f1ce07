import pytest

from streamtape.core.services.upload_service import UploadService
from streamtape.domain.errors import ErrorKind, RemoteUploadTimeout, StreamTapeError
from streamtape.domain.interfaces.transport import TransportConnectionError, TransportStatusError
from streamtape.domain.models.common import FilePath
from streamtape.infrastructure.filesystem.local_fs import LocalFileSystem
from tests.fakes import envelope

UPLOAD_URL = {"url": "https://upload.test/ul/xyz", "valid_until": "2024-01-01 10:00:00"}
UPLOADED = {"status": 200, "msg": "OK", "result": {"url": "https://streamtape.com/v/abc123/movie.mp4"}}


@pytest.fixture
def upload_service(api_retry_service):
    return UploadService(api_retry_service, LocalFileSystem())


@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "movie.mp4"
    path.write_bytes(b"frames")
    return FilePath(str(path))


def _status(upload_id="r1", **fields):
    record = {"id": upload_id, "status": "downloading", "url": False, "bytes_loaded": 10, "bytes_total": 100}
    record.update(fields)
    return envelope({upload_id: record})


# --- Direct uploads ---

@pytest.mark.asyncio
async def test_get_upload_url_optional_params(upload_service, fake_transport):
    fake_transport.queue(envelope(UPLOAD_URL), envelope(UPLOAD_URL))

    await upload_service.get_upload_url()
    params = fake_transport.calls[0]["params"]
    assert fake_transport.calls[0]["path"] == "/file/ul"
    assert not {"folder", "sha256", "httponly"} & set(params)

    await upload_service.get_upload_url(folder_id="f1", sha256="abc", http_only=True)
    params = fake_transport.calls[1]["params"]
    assert (params["folder"], params["sha256"], params["httponly"]) == ("f1", "abc", True)


@pytest.mark.asyncio
async def test_upload_file_returns_file_id(upload_service, fake_transport, video_file):
    fake_transport.queue(envelope(UPLOAD_URL))
    fake_transport.upload_response = UPLOADED
    progress = []

    file_id = await upload_service.upload_file(video_file, folder_id="f1", on_progress=progress.append)

    assert file_id == "abc123"
    assert fake_transport.calls[0]["params"]["folder"] == "f1"
    upload = fake_transport.uploads[0]
    assert upload["url"] == UPLOAD_URL["url"]
    assert upload["field_name"] == "file1"
    assert upload["filename"] == "movie.mp4"
    assert upload["data"] == b"frames"
    assert progress == [1.0]


@pytest.mark.asyncio
async def test_upload_missing_file_raises_before_any_request(upload_service, fake_transport, tmp_path):
    with pytest.raises(FileNotFoundError):
        await upload_service.upload_file(FilePath(str(tmp_path / "missing.mp4")))
    assert fake_transport.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("body, message", [
    ({"status": 200, "result": {}}, "Invalid response"),
    ("not json", "Invalid response"),
    ({"status": 200, "result": {"url": "https://streamtape.com/e/abc"}}, "Could not extract file ID"),
])
async def test_upload_rejects_unusable_server_answers(upload_service, fake_transport, video_file, body, message):
    fake_transport.queue(envelope(UPLOAD_URL))
    fake_transport.upload_response = body

    with pytest.raises(StreamTapeError) as exc_info:
        await upload_service.upload_file(video_file)

    assert exc_info.value.kind is ErrorKind.VALIDATION
    assert message in exc_info.value.message


@pytest.mark.asyncio
async def test_upload_accepts_http_200_without_envelope_status(upload_service, fake_transport, video_file):
    fake_transport.queue(envelope(UPLOAD_URL))
    fake_transport.upload_response = {"result": {"url": "https://streamtape.com/v/abc/a.mp4"}}

    assert await upload_service.upload_file(video_file) == "abc"


@pytest.mark.asyncio
@pytest.mark.parametrize("http_status", [201, 204])
async def test_upload_rejects_success_statuses_other_than_200(upload_service, fake_transport, video_file, http_status):
    fake_transport.queue(envelope(UPLOAD_URL))
    fake_transport.upload_status = http_status
    fake_transport.upload_response = UPLOADED

    with pytest.raises(StreamTapeError) as exc_info:
        await upload_service.upload_file(video_file)

    assert exc_info.value.kind is ErrorKind.VALIDATION
    assert "Invalid response" in exc_info.value.message


@pytest.mark.asyncio
async def test_upload_transport_failures_are_classified(upload_service, fake_transport, video_file):
    fake_transport.queue(envelope(UPLOAD_URL), envelope(UPLOAD_URL))

    fake_transport.upload_response = TransportStatusError(403, None)
    with pytest.raises(StreamTapeError) as exc_info:
        await upload_service.upload_file(video_file)
    assert exc_info.value.kind is ErrorKind.AUTHENTICATION

    fake_transport.upload_response = TransportConnectionError("reset")
    with pytest.raises(StreamTapeError) as exc_info:
        await upload_service.upload_file(video_file)
    assert exc_info.value.kind is ErrorKind.NETWORK


# --- Remote uploads ---

@pytest.mark.asyncio
async def test_add_remote_upload(upload_service, fake_transport):
    fake_transport.queue(envelope({"id": "r1", "folderid": "f1"}))

    remote = await upload_service.add_remote_upload("https://source.test/a.mp4", folder_id="f1", name="a.mp4")

    assert remote["id"] == "r1"
    assert fake_transport.calls[0]["path"] == "/remotedl/add"
    params = fake_transport.calls[0]["params"]
    assert (params["url"], params["folder"], params["name"]) == ("https://source.test/a.mp4", "f1", "a.mp4")
    assert "headers" not in params


@pytest.mark.asyncio
async def test_remove_and_check_remote_upload(upload_service, fake_transport):
    fake_transport.queue(envelope(True), _status())

    assert await upload_service.remove_remote_upload("all") is True
    statuses = await upload_service.check_remote_upload_status("r1")

    assert statuses["r1"]["status"] == "downloading"
    assert [c["path"] for c in fake_transport.calls] == ["/remotedl/remove", "/remotedl/status"]
    assert fake_transport.calls[0]["params"]["id"] == "all"


@pytest.mark.asyncio
async def test_wait_for_remote_upload_polls_until_url(upload_service, fake_transport, no_sleep):
    fake_transport.queue(
        _status(),
        _status(bytes_loaded=50),
        _status(status="finished", url="https://streamtape.com/v/new1/a.mp4"),
    )
    seen = []

    final = await upload_service.wait_for_remote_upload("r1", poll_interval=2.0, on_progress=seen.append)

    assert final["url"] == "https://streamtape.com/v/new1/a.mp4"
    assert len(seen) == 3
    assert [c.args[0] for c in no_sleep.await_args_list] == [2.0, 2.0]


@pytest.mark.asyncio
async def test_wait_for_remote_upload_returns_on_error_status(upload_service, fake_transport, no_sleep):
    fake_transport.queue(_status(status="error"))

    final = await upload_service.wait_for_remote_upload("r1")

    assert final["status"] == "error"
    no_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_wait_for_remote_upload_unknown_id(upload_service, fake_transport):
    fake_transport.queue(envelope({}))

    with pytest.raises(StreamTapeError) as exc_info:
        await upload_service.wait_for_remote_upload("r1")

    assert exc_info.value.kind is ErrorKind.VALIDATION
    assert exc_info.value.message == "Remote upload not found"


@pytest.mark.asyncio
async def test_wait_for_remote_upload_zero_timeout_raises_on_first_check(upload_service, fake_transport, no_sleep):
    fake_transport.queue(_status())

    with pytest.raises(RemoteUploadTimeout) as exc_info:
        await upload_service.wait_for_remote_upload("r1", timeout=0)

    assert exc_info.value.upload_id == "r1"
    assert len(fake_transport.calls) == 1
    no_sleep.assert_not_awaited()
