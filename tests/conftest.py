import io
from typing import Any, List
from unittest.mock import AsyncMock

import httpx
import pytest
from typer.testing import CliRunner

from streamtape.domain.models.config import RetryConfig
from streamtape.infrastructure.config import settings
from streamtape.infrastructure.resilience.api_retry import ApiRetryService

from tests.fakes import TEST_BASE_URL, TEST_KEY, TEST_LOGIN, FakeTransport


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def events() -> List[Any]:
    """Collects the domain events dispatched by the request layer."""
    return []


@pytest.fixture
def api_retry_service(fake_transport: FakeTransport, events: List[Any]) -> ApiRetryService:
    return ApiRetryService(
        transport=fake_transport,
        login=TEST_LOGIN,
        key=TEST_KEY,
        retry_config=RetryConfig(),
        event_handler=events.append,
    )


@pytest.fixture
def no_sleep(mocker) -> AsyncMock:
    """Replaces asyncio.sleep so backoff and polling waits return immediately."""
    return mocker.patch("asyncio.sleep", new_callable=AsyncMock)


@pytest.fixture
def in_memory_stream():
    def _make(data: bytes = b"video-bytes") -> io.BytesIO:
        return io.BytesIO(data)
    return _make


@pytest.fixture
def mock_http_client():
    """Builds an httpx.AsyncClient whose requests are answered by ``handler``."""
    def _make(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=TEST_BASE_URL, transport=httpx.MockTransport(handler))
    return _make


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keeps tests away from the user's real configuration and credentials."""
    for name in (
        "STREAMTAPE_LOGIN",
        "STREAMTAPE_KEY",
        "STREAMTAPE_BASE_URL",
        "STREAMTAPE_TIMEOUT",
        "STREAMTAPE_RETRY_MAX_RETRIES",
        "STREAMTAPE_RETRY_BASE_DELAY",
        "STREAMTAPE_RETRY_MAX_DELAY",
        "STREAMTAPE_RETRY_RETRYABLE_STATUS_CODES",
        "LOGGING_LEVEL",
        "LOGGING_FILE",
        "LOGGING_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings, "DEFAULT_CONFIG_FILE", tmp_path / "missing.yaml")
    monkeypatch.chdir(tmp_path)
    settings.reset_configuration()
    settings.clear_test_config()
    yield
    settings.reset_configuration()
    settings.clear_test_config()
