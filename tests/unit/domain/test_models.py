import pytest

from streamtape.domain.errors import ErrorKind, StreamTapeError
from streamtape.domain.models.api import DEFAULT_BASE_URL, Endpoints, RequestDescriptor, join_ids
from streamtape.domain.models.config import ClientConfig, RetryConfig


# --- RequestDescriptor ---

def test_descriptor_drops_absent_optional_params():
    descriptor = RequestDescriptor.get(Endpoints.FILE_LIST_FOLDER, folder=None, page=0, flag=False)
    assert descriptor.method == "GET"
    assert dict(descriptor.params) == {"page": 0, "flag": False}


def test_descriptor_keeps_empty_strings():
    descriptor = RequestDescriptor.get(Endpoints.FILE_RENAME, file="abc", name="")
    assert dict(descriptor.params) == {"file": "abc", "name": ""}


def test_descriptor_params_are_read_only():
    descriptor = RequestDescriptor.get(Endpoints.FILE_INFO, file="abc")
    with pytest.raises(TypeError):
        descriptor.params["file"] = "other"


def test_descriptor_rejects_empty_path():
    with pytest.raises(StreamTapeError) as exc_info:
        RequestDescriptor.get("")
    assert exc_info.value.kind is ErrorKind.VALIDATION
    assert exc_info.value.status is None


def test_descriptor_rejects_non_primitive_values():
    with pytest.raises(StreamTapeError) as exc_info:
        RequestDescriptor.get(Endpoints.FILE_INFO, file=["a", "b"])
    assert exc_info.value.kind is ErrorKind.VALIDATION


def test_join_ids():
    assert join_ids(["a", "b", "c"]) == "a,b,c"
    assert join_ids("single") == "single"
    assert join_ids(iter(["x"])) == "x"


# --- Config ---

def test_retry_config_defaults():
    config = RetryConfig()
    assert config.max_retries == 3
    assert config.base_delay == 1.0
    assert config.max_delay == 5.0
    assert config.retryable_status_codes == frozenset({429, 503})


def test_retry_config_keeps_explicit_zero_and_empty_set():
    config = RetryConfig(max_retries=0, base_delay=0, retryable_status_codes=[])
    assert config.max_retries == 0
    assert config.base_delay == 0
    assert config.retryable_status_codes == frozenset()


def test_retry_config_normalizes_codes_to_frozenset():
    config = RetryConfig(retryable_status_codes=[500, "502"])
    assert config.retryable_status_codes == frozenset({500, 502})


def test_retry_config_rejects_negative_values():
    with pytest.raises(ValueError):
        RetryConfig(max_retries=-1)
    with pytest.raises(ValueError):
        RetryConfig(base_delay=-0.5)


def test_client_config_defaults_and_masked_repr():
    config = ClientConfig(login="me", key="secret")
    assert config.base_url == DEFAULT_BASE_URL
    assert config.timeout == 30.0
    assert config.retry == RetryConfig()
    assert "secret" not in repr(config)


def test_client_config_requires_credentials():
    with pytest.raises(ValueError):
        ClientConfig(login="", key="secret")
