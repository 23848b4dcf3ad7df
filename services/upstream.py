"""Outbound transport and response relaying."""

import httpx

from core.config import LimitSettings, UpstreamSettings
from core.exceptions import ProxySpecError, RequestFailed, ResponseReadError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import OutboundRequest, RelayedResponse
from core.upstream_proxy import EXPECTED_FORMAT, parse_upstream_proxy


def _new_client(**kwargs) -> httpx.AsyncClient:
    client = httpx.AsyncClient(**kwargs)
    # Compression is only requested when the caller sends Salt-Accept-Encoding
    del client.headers["Accept-Encoding"]
    del client.headers["User-Agent"]
    return client


def build_http_client(
    upstream: UpstreamSettings,
    limits: LimitSettings,
    logger: RequestLogger,
) -> httpx.AsyncClient:
    """Create the shared outbound client, optionally routed through a proxy.

    Any problem with the upstream proxy falls back to a direct client.
    """
    client_limits = httpx.Limits(
        max_connections=limits.max_connections,
        max_keepalive_connections=limits.max_keepalive_connections,
    )
    timeout = httpx.Timeout(upstream.timeout)

    if not upstream.proxy:
        logger.log_event("INFO", "No upstream proxy configured")
        return _new_client(timeout=timeout, limits=client_limits)

    try:
        proxy_config = parse_upstream_proxy(upstream.proxy)
    except ProxySpecError as e:
        logger.log_event(
            "ERROR",
            f"Failed to parse upstream proxy configuration: {e}",
            expected=EXPECTED_FORMAT,
        )
        return _new_client(timeout=timeout, limits=client_limits)

    if proxy_config.auth:
        logger.log_event("INFO", "Configuring upstream proxy with authentication", proxy=str(proxy_config))
    else:
        logger.log_event("INFO", "Configuring upstream proxy", proxy=str(proxy_config))

    try:
        proxy = httpx.Proxy(proxy_config.url, auth=proxy_config.auth)
        client = _new_client(proxy=proxy, timeout=timeout, limits=client_limits)
    except (httpx.InvalidURL, ValueError) as e:
        logger.log_event("ERROR", f"Failed to create upstream proxy: {e}")
        return _new_client(timeout=timeout, limits=client_limits)

    logger.log_event("INFO", "Upstream proxy configured successfully")
    return client


class UpstreamClient:
    """Send outbound requests and buffer their responses."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        logger: RequestLogger,
        header_builder: HeaderBuilder,
    ) -> None:
        self._client = client
        self._logger = logger
        self._headers = header_builder

    async def forward(self, outbound: OutboundRequest) -> RelayedResponse:
        """Issue exactly one outbound call and relay its response.

        Raises:
            RequestFailed: transport error before a response arrived
            ResponseReadError: response body could not be read
        """
        response = await self._send(outbound)

        # Status and headers are captured before the body is consumed
        status_code = response.status_code
        raw_headers = [
            (key.decode("latin-1"), value.decode("latin-1"))
            for key, value in response.headers.raw
        ]
        body = await self._read_body(response)

        translated = self._headers.build_response_headers(raw_headers)
        for name in translated.skipped:
            self._logger.log_skipped_header("inbound", name)

        self._logger.log_response(outbound.method.value, outbound.url, status_code)
        return RelayedResponse(status_code, translated.headers, body)

    async def _send(self, outbound: OutboundRequest) -> httpx.Response:
        headers = [
            (key.encode("latin-1"), value.encode("latin-1"))
            for key, value in outbound.headers
        ]
        try:
            request = self._client.build_request(
                outbound.method.value,
                outbound.url,
                headers=headers,
                content=outbound.body,
            )
            return await self._client.send(request, stream=True)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise RequestFailed(str(e) or type(e).__name__) from e

    async def _read_body(self, response: httpx.Response) -> bytes:
        """Read the raw body; content encodings are relayed untouched."""
        try:
            # The stream itself, so pre-read responses still yield their raw bytes
            chunks = [chunk async for chunk in response.stream]
        except (httpx.RequestError, httpx.StreamError) as e:
            raise ResponseReadError() from e
        finally:
            await response.aclose()
        return b"".join(chunks)
