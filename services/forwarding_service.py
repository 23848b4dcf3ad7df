"""Request preparation for the outbound leg."""

from collections.abc import AsyncIterable, Iterable

from starlette.requests import ClientDisconnect

from core.exceptions import BodyReadError, MissingTargetHost, RequestTooLarge
from core.headers import TARGET_HEADER, HeaderBuilder, find_target_host
from core.protocols import RequestLogger
from core.request_types import ForwardMethod, OutboundRequest
from core.router import build_target_url


class ForwardingService:
    """Translate inbound requests into outbound ones."""

    def __init__(
        self,
        logger: RequestLogger,
        header_builder: HeaderBuilder,
        max_body_size: int | None = None,
    ) -> None:
        self._logger = logger
        self._headers = header_builder
        self._max_body_size = max_body_size

    async def prepare(
        self,
        method: str,
        path: str,
        query: str,
        headers: Iterable[tuple[str, str]],
        body: AsyncIterable[bytes],
    ) -> OutboundRequest:
        """Build the outbound request for one inbound request.

        Raises:
            MissingTargetHost: no Salt-Host header
            BodyReadError: inbound body could not be read
            RequestTooLarge: body exceeds the configured limit
        """
        headers = list(headers)
        target_host = find_target_host(headers)
        if target_host is None:
            raise MissingTargetHost(TARGET_HEADER)

        url = build_target_url(target_host, path, query)

        translated = self._headers.build_outbound_headers(headers)
        for name in translated.skipped:
            self._logger.log_skipped_header("outbound", name)

        forward_method = ForwardMethod.from_inbound(method)
        if forward_method.value != method:
            self._logger.log_event(
                "INFO",
                "Unsupported method forwarded as GET",
                method=method,
            )

        content = await self._read_body(body)

        outbound = OutboundRequest(
            method=forward_method,
            url=url,
            headers=translated.headers,
            # Empty bodies are not attached
            body=content or None,
        )
        self._logger.log_forward(outbound.method.value, outbound.url, outbound.headers)
        return outbound

    async def _read_body(self, body: AsyncIterable[bytes]) -> bytes:
        """Buffer the whole inbound body."""
        chunks: list[bytes] = []
        size = 0
        try:
            async for chunk in body:
                size += len(chunk)
                if self._max_body_size is not None and size > self._max_body_size:
                    raise RequestTooLarge(self._max_body_size)
                chunks.append(chunk)
        except (ClientDisconnect, OSError) as e:
            raise BodyReadError() from e
        return b"".join(chunks)
