"""Shared protocol definitions."""

from typing import Any, Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard)."""

    def log_forward(self, method: str, url: str, headers: list[tuple[str, str]]) -> None: ...
    def log_response(self, method: str, url: str, status: int) -> None: ...
    def log_error(self, kind: str, status: int, message: str) -> None: ...
    def log_skipped_header(self, direction: str, name: str) -> None: ...
    def log_event(self, level: str, message: str, **extra: Any) -> None: ...
