"""Upstream (forward) proxy specification parsing.

Accepted forms::

    host:port
    username:password@host:port
"""

import re
from dataclasses import dataclass

from core.exceptions import InvalidAuthFormat, InvalidPort, MissingPort

EXPECTED_FORMAT = "username:password@host:port or host:port"

_PORT_RE = re.compile(r"\+?[0-9]+")
_MAX_PORT = 65535


@dataclass(frozen=True)
class UpstreamProxy:
    """Parsed upstream proxy descriptor."""

    host: str
    port: int
    username: str | None = None
    password: str | None = None

    def __post_init__(self) -> None:
        if (self.username is None) != (self.password is None):
            raise ValueError("username and password must be given together")

    @property
    def auth(self) -> tuple[str, str] | None:
        if self.username is None or self.password is None:
            return None
        return self.username, self.password

    @property
    def url(self) -> str:
        """Proxy URL for the outbound transport (credentials excluded)."""
        host = self.host
        if ":" in host and not host.startswith("["):
            host = f"[{host}]"
        return f"http://{host}:{self.port}"

    def __str__(self) -> str:
        if self.username is not None:
            return f"{self.username}:***@{self.host}:{self.port}"
        return f"{self.host}:{self.port}"


def parse_upstream_proxy(value: str) -> UpstreamProxy:
    """Parse an upstream proxy string into an UpstreamProxy.

    The last '@' separates credentials from the address, the first ':' inside
    the credentials separates username from password, and the last ':' of the
    address separates host from port. The host is taken verbatim.

    Raises:
        InvalidAuthFormat: credentials present without ':'
        MissingPort: address has no ':'
        InvalidPort: port is not an unsigned 16-bit integer
    """
    auth, at, hostport = value.rpartition("@")

    username = password = None
    if at:
        username, colon, password = auth.partition(":")
        if not colon:
            raise InvalidAuthFormat()

    host, colon, port_text = hostport.rpartition(":")
    if not colon:
        raise MissingPort()

    return UpstreamProxy(
        host=host,
        port=_parse_port(port_text),
        username=username,
        password=password,
    )


def _parse_port(text: str) -> int:
    if not _PORT_RE.fullmatch(text):
        raise InvalidPort(text)
    port = int(text)
    if port > _MAX_PORT:
        raise InvalidPort(text)
    return port
