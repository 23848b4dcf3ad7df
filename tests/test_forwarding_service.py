import pytest
from starlette.requests import ClientDisconnect

from core.exceptions import BodyReadError, MissingTargetHost, RequestTooLarge
from core.headers import HeaderBuilder
from core.request_types import ForwardMethod
from services.forwarding_service import ForwardingService


async def _body(*chunks: bytes):
    for chunk in chunks:
        yield chunk


async def _disconnecting_body():
    yield b"partial"
    raise ClientDisconnect()


@pytest.fixture
def service(logger):
    return ForwardingService(logger=logger, header_builder=HeaderBuilder())


@pytest.mark.asyncio
async def test_prepare_builds_url_headers_and_method(service, logger):
    outbound = await service.prepare(
        "GET",
        "/v1/data",
        "q=1",
        [("Salt-Host", "example.com"), ("Salt-X-Api-Key", "abc"), ("Other", "ignored")],
        _body(),
    )

    assert outbound.method is ForwardMethod.GET
    assert outbound.url == "https://example.com/v1/data?q=1"
    assert outbound.headers == [("X-Api-Key", "abc")]
    assert outbound.body is None
    assert logger.forwards == [("GET", "https://example.com/v1/data?q=1", [("X-Api-Key", "abc")])]


@pytest.mark.asyncio
async def test_prepare_missing_target_host(service):
    with pytest.raises(MissingTargetHost) as exc_info:
        await service.prepare("POST", "/", "", [("Host", "example.com")], _body(b"data"))

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_missing_target_host_wins_over_body_errors(service):
    with pytest.raises(MissingTargetHost):
        await service.prepare("POST", "/", "", [], _disconnecting_body())


@pytest.mark.asyncio
async def test_prepare_buffers_body_chunks(service):
    outbound = await service.prepare(
        "POST",
        "/upload",
        "",
        [("salt-host", "http://internal:9090")],
        _body(b"hello ", b"", b"world"),
    )

    assert outbound.method is ForwardMethod.POST
    assert outbound.url == "http://internal:9090/upload"
    assert outbound.body == b"hello world"


@pytest.mark.asyncio
async def test_unsupported_method_is_sent_as_get(service, logger):
    outbound = await service.prepare("PROPFIND", "/dav", "", [("Salt-Host", "dav.example")], _body())

    assert outbound.method is ForwardMethod.GET
    assert logger.events == [("INFO", "Unsupported method forwarded as GET", {"method": "PROPFIND"})]


@pytest.mark.asyncio
async def test_client_disconnect_is_body_read_error(service):
    with pytest.raises(BodyReadError) as exc_info:
        await service.prepare("POST", "/", "", [("Salt-Host", "example.com")], _disconnecting_body())

    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_skipped_headers_are_reported(service, logger):
    await service.prepare(
        "GET",
        "/",
        "",
        [("Salt-Host", "example.com"), ("Salt-Bad", "line\nbreak")],
        _body(),
    )

    assert logger.skipped == [("outbound", "Salt-Bad")]


@pytest.mark.asyncio
async def test_body_limit(logger):
    service = ForwardingService(logger=logger, header_builder=HeaderBuilder(), max_body_size=4)

    with pytest.raises(RequestTooLarge) as exc_info:
        await service.prepare("POST", "/", "", [("Salt-Host", "example.com")], _body(b"abc", b"de"))

    assert exc_info.value.status_code == 413

    outbound = await service.prepare("POST", "/", "", [("Salt-Host", "example.com")], _body(b"abcd"))
    assert outbound.body == b"abcd"
