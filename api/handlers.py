"""FastAPI route handlers."""

from urllib.parse import quote

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from core.exceptions import ForwardingError, ResponseBuildError
from core.protocols import RequestLogger
from core.request_types import RelayedResponse

# Reserved and unreserved characters plus "%", so existing escapes survive
_PATH_SAFE = "/%!$&'()*+,;=:@-._~"
_QUERY_SAFE = _PATH_SAFE + "?"


def _raw_path(request: Request) -> str:
    """Inbound path as received, percent-encoding intact."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return quote(raw_path.partition(b"?")[0], safe=_PATH_SAFE)
    return quote(request.scope.get("path", "/"))


def _query_string(request: Request) -> str:
    """Inbound query string with non-ASCII bytes percent-encoded."""
    return quote(request.scope.get("query_string", b""), safe=_QUERY_SAFE)


def build_response(relayed: RelayedResponse) -> Response:
    """Assemble the caller-facing response from a relayed one."""
    if not 100 <= relayed.status_code <= 999:
        raise ResponseBuildError()
    try:
        response = Response(content=relayed.body, status_code=relayed.status_code)
        # Multimap: repeated headers such as set-cookie must all survive
        response.raw_headers.extend(
            (key.lower().encode("latin-1"), value.encode("latin-1"))
            for key, value in relayed.headers
        )
    except (UnicodeEncodeError, TypeError, ValueError) as e:
        raise ResponseBuildError() from e
    return response


async def handle_forward(request: Request) -> Response:
    """Forward any request to the host named by its Salt-Host header."""
    forwarding_service = request.app.state.forwarding_service
    upstream = request.app.state.upstream_client

    outbound = await forwarding_service.prepare(
        request.method,
        _raw_path(request),
        _query_string(request),
        request.headers.items(),
        request.stream(),
    )
    relayed = await upstream.forward(outbound)
    return build_response(relayed)


def make_error_handler(logger: RequestLogger):
    """Create the handler that turns ForwardingError into an error response."""

    async def handle_forwarding_error(request: Request, exc: ForwardingError) -> Response:
        logger.log_error(type(exc).__name__, exc.status_code, exc.message)
        return JSONResponse(
            content={"error": exc.message},
            status_code=exc.status_code,
        )

    return handle_forwarding_error
