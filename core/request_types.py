"""Shared request data types."""

from dataclasses import dataclass, field
from enum import Enum

HeaderList = list[tuple[str, str]]


class ForwardMethod(str, Enum):
    """HTTP methods that are forwarded as-is."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def from_inbound(cls, method: str) -> "ForwardMethod":
        """Map an inbound method; anything outside the set is sent as GET."""
        try:
            return cls(method)
        except ValueError:
            return cls.GET


@dataclass(frozen=True)
class TranslatedHeaders:
    """Result of a header translation pass."""

    headers: HeaderList
    skipped: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class OutboundRequest:
    """Prepared data for an outbound request."""

    method: ForwardMethod
    url: str
    headers: HeaderList
    body: bytes | None = None


@dataclass(frozen=True)
class RelayedResponse:
    """Outbound response ready to be returned to the caller."""

    status_code: int
    headers: HeaderList
    body: bytes
