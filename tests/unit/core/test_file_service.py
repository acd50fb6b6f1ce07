import pytest

from streamtape.core.services.file_service import FileService
from streamtape.domain.errors import ErrorKind, StreamTapeError
from streamtape.domain.interfaces.transport import TransportStatusError
from tests.fakes import TEST_KEY, TEST_LOGIN, envelope


@pytest.fixture
def file_service(api_retry_service):
    return FileService(api_retry_service)


def _query(fake_transport, index=-1):
    """Returns the last request's parameters without the credentials."""
    params = dict(fake_transport.calls[index]["params"])
    assert params.pop("login") == TEST_LOGIN
    assert params.pop("key") == TEST_KEY
    return params


@pytest.mark.asyncio
async def test_get_file_info_joins_ids(file_service, fake_transport):
    result = {"a": {"id": "a", "name": "one.mp4"}, "b": {"id": "b", "name": "two.mp4"}}
    fake_transport.queue(envelope(result))

    assert await file_service.get_file_info(["a", "b"]) == result
    assert fake_transport.calls[0]["path"] == "/file/info"
    assert _query(fake_transport) == {"file": "a,b"}


@pytest.mark.asyncio
async def test_get_file_info_single_id(file_service, fake_transport):
    fake_transport.queue(envelope({}))
    await file_service.get_file_info("a")
    assert _query(fake_transport) == {"file": "a"}


@pytest.mark.asyncio
async def test_list_folder_omits_absent_folder(file_service, fake_transport):
    content = {"folders": [{"id": "f1", "name": "Movies"}], "files": []}
    fake_transport.queue(envelope(content), envelope(content))

    assert await file_service.list_folder() == content
    assert _query(fake_transport) == {}

    await file_service.list_folder("f1")
    assert _query(fake_transport) == {"folder": "f1"}


@pytest.mark.asyncio
async def test_create_folder_returns_folder_id(file_service, fake_transport):
    fake_transport.queue(envelope({"folderid": "new123"}))

    folder_id = await file_service.create_folder("Series", parent_id="root1")

    assert folder_id == "new123"
    assert fake_transport.calls[0]["path"] == "/file/createfolder"
    assert _query(fake_transport) == {"name": "Series", "pid": "root1"}


@pytest.mark.asyncio
@pytest.mark.parametrize("method, args, path, params", [
    ("rename_folder", ("f1", "New"), "/file/renamefolder", {"folder": "f1", "name": "New"}),
    ("delete_folder", ("f1",), "/file/deletefolder", {"folder": "f1"}),
    ("rename_file", ("abc", "movie.mp4"), "/file/rename", {"file": "abc", "name": "movie.mp4"}),
    ("move_file", ("abc", "f2"), "/file/move", {"file": "abc", "folder": "f2"}),
    ("delete_file", ("abc",), "/file/delete", {"file": "abc"}),
])
async def test_boolean_operations(file_service, fake_transport, method, args, path, params):
    fake_transport.queue(envelope(True))

    assert await getattr(file_service, method)(*args) is True
    assert fake_transport.calls[0]["path"] == path
    assert _query(fake_transport) == params


@pytest.mark.asyncio
async def test_rename_file_sends_empty_name(file_service, fake_transport):
    fake_transport.queue(envelope(None, status=400, msg="Invalid name"))

    with pytest.raises(StreamTapeError) as exc_info:
        await file_service.rename_file("abc", "")

    assert _query(fake_transport) == {"file": "abc", "name": ""}
    assert exc_info.value.status == 400


@pytest.mark.asyncio
async def test_converts(file_service, fake_transport):
    running = [{"name": "a.mkv", "status": "converting", "progress": 42.0}]
    fake_transport.queue(envelope(running), envelope([]))

    assert await file_service.get_running_converts() == running
    assert await file_service.get_failed_converts() == []
    assert [c["path"] for c in fake_transport.calls] == ["/file/runningconverts", "/file/failedconverts"]


@pytest.mark.asyncio
async def test_get_thumbnail_returns_url(file_service, fake_transport):
    fake_transport.queue(envelope({"url": "https://thumb.test/abc.jpg"}))

    assert await file_service.get_thumbnail("abc") == "https://thumb.test/abc.jpg"
    assert fake_transport.calls[0]["path"] == "/file/getsplash"


@pytest.mark.asyncio
async def test_missing_file_is_not_found(file_service, fake_transport):
    fake_transport.queue(TransportStatusError(404, {"status": 404, "msg": "File not found"}))

    with pytest.raises(StreamTapeError) as exc_info:
        await file_service.delete_file("gone")

    assert exc_info.value.kind is ErrorKind.NOT_FOUND
    assert len(fake_transport.calls) == 1
