from collections.abc import Callable
from typing import Any

import httpx
import pytest

from ui import log_utils


class RecordingLogger:
    """RequestLogger that keeps every call for assertions."""

    def __init__(self):
        self.forwards: list[tuple[str, str, list[tuple[str, str]]]] = []
        self.responses: list[tuple[str, str, int]] = []
        self.errors: list[tuple[str, int, str]] = []
        self.skipped: list[tuple[str, str]] = []
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def log_forward(self, method, url, headers):
        self.forwards.append((method, url, headers))

    def log_response(self, method, url, status):
        self.responses.append((method, url, status))

    def log_error(self, kind, status, message):
        self.errors.append((kind, status, message))

    def log_skipped_header(self, direction, name):
        self.skipped.append((direction, name))

    def log_event(self, level, message, **extra):
        self.events.append((level, message, extra))


@pytest.fixture(autouse=True)
def isolated_logs(tmp_path, monkeypatch):
    """Keep log files out of the working directory."""
    monkeypatch.setattr(log_utils, "LOG_ROOT", tmp_path / "logs")
    monkeypatch.setattr(log_utils, "CLI_LOG_FILE", tmp_path / "logs" / "proxy.log")
    return tmp_path / "logs"


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], Any]], httpx.AsyncClient]:
    """Build an AsyncClient whose outbound traffic goes to a handler."""

    def factory(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory
