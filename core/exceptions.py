"""Custom exception hierarchy for the salt proxier."""


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class ProxySpecError(ConfigurationError):
    """Raised when the upstream proxy string cannot be parsed."""


class InvalidAuthFormat(ProxySpecError):
    """Credentials segment has no ':' separator."""

    def __init__(self) -> None:
        super().__init__("Invalid auth format, expected username:password")


class MissingPort(ProxySpecError):
    """Host segment has no ':' separator."""

    def __init__(self) -> None:
        super().__init__("Port is required, expected host:port")


class InvalidPort(ProxySpecError):
    """Port segment is not an unsigned 16-bit integer."""

    def __init__(self, port: str) -> None:
        super().__init__(f"Invalid port number: {port!r}")
        self.port = port


class ForwardingError(ProxyError):
    """Raised when a single request cannot be forwarded.

    Attributes:
        message: Caller-facing error message
        status_code: HTTP status returned to the caller
    """

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingTargetHost(ForwardingError):
    """Inbound request carries no usable Salt-Host header."""

    status_code = 400

    def __init__(self, header: str = "Salt-Host") -> None:
        super().__init__(f"Missing required header: {header}")
        self.header = header


class BodyReadError(ForwardingError):
    """Inbound request body could not be read."""

    status_code = 500

    def __init__(self) -> None:
        super().__init__("Failed to read request body")


class RequestTooLarge(ForwardingError):
    """Request body exceeds size limit."""

    status_code = 413

    def __init__(self, limit: int) -> None:
        super().__init__(f"Request body too large (limit: {limit} bytes)")
        self.limit = limit


class RequestFailed(ForwardingError):
    """Outbound transport failed (DNS, connect, TLS, timeout)."""

    status_code = 502

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to send request: {reason}")
        self.reason = reason


class ResponseReadError(ForwardingError):
    """Outbound response body could not be read."""

    status_code = 502

    def __init__(self) -> None:
        super().__init__("Failed to read response body")


class ResponseBuildError(ForwardingError):
    """Outbound response could not be turned into an inbound one."""

    status_code = 500

    def __init__(self) -> None:
        super().__init__("Failed to build response")
