import io
import logging
from collections.abc import Callable

import httpx
import pytest

from reportdeck.core.config import Settings


# Fixture factory to create dummy upload files with filename and content
@pytest.fixture
def make_dummy_upload():
    def _make_dummy_upload(filename: str, content: bytes, content_type: str = ""):
        class DummyFile:
            def __init__(self):
                self.filename = filename
                self.content_type = content_type
                self._content = content
                self.file = io.BytesIO(content)

            async def seek(self, offset: int):
                self.file.seek(offset)

            async def read(self):
                return self.file.read()

        return DummyFile()

    return _make_dummy_upload


@pytest.fixture
def export_settings() -> Settings:
    """Settings with a fake export key, no proxy prefix and fast polling."""
    return Settings(
        gamma_api_key="gamma-test-key",
        gamma_base_url="https://export.test/v1.0",
        cors_proxy_url="",
        export_poll_interval=0,
        export_max_attempts=30,
        catalog_page_size=2,
        catalog_max_pages=10,
        _env_file=None,
    )


@pytest.fixture
def mock_transport() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.MockTransport]:
    """Build an httpx MockTransport that records every request it serves."""

    def _factory(handler):
        def _recording(request: httpx.Request) -> httpx.Response:
            _recording.requests.append(request)
            return handler(request)

        _recording.requests = []
        transport = httpx.MockTransport(_recording)
        transport.requests = _recording.requests
        return transport

    return _factory



@pytest.fixture
def app_logs(caplog, monkeypatch):
    """caplog that also sees reportdeck records once the app's dictConfig has run."""
    monkeypatch.setattr(logging.getLogger("reportdeck"), "propagate", True)
    return caplog
