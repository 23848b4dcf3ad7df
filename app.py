"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.handlers import handle_forward, make_error_handler
from core.config import Config
from core.exceptions import ForwardingError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from services.forwarding_service import ForwardingService
from services.upstream import UpstreamClient, build_http_client


def cors_origins(origin: str) -> list[str]:
    """Allowed origins for a CORS setting: '*' or one explicit origin."""
    if origin == "*":
        return ["*"]
    return [origin]


def create_app(
    config: Config,
    logger: RequestLogger,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``http_client`` replaces the client built from ``config.upstream``; it is
    not closed on shutdown.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = http_client or build_http_client(config.upstream, config.limits, logger)
        header_builder = HeaderBuilder()
        app.state.upstream_client = UpstreamClient(client, logger, header_builder)
        app.state.forwarding_service = ForwardingService(
            logger=logger,
            header_builder=header_builder,
            max_body_size=config.limits.max_body_size,
        )
        try:
            yield
        finally:
            if http_client is None:
                await client.aclose()

    app = FastAPI(
        title="Salt Proxier",
        version="0.1.0",
        lifespan=lifespan,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
    )

    if config.cors.origin == "*":
        logger.log_event("INFO", "CORS: Allowing all origins")
    else:
        logger.log_event("INFO", "CORS: Allowing origin", origin=config.cors.origin)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(config.cors.origin),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ForwardingError, make_error_handler(logger))

    # methods=None accepts every method, including ones forwarded as GET
    app.add_route("/{path:path}", handle_forward, methods=None, include_in_schema=False)

    return app
