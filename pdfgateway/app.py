"""
Application factory - builds the FastAPI app with middleware, error handlers
and routes. The lifespan owns the renderer: it is started before traffic is
accepted and closed on shutdown (uvicorn runs shutdown on SIGINT/SIGTERM).
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pdfgateway import __version__
from pdfgateway.config import Settings, get_settings
from pdfgateway.modules.convert.router import router as convert_router
from pdfgateway.modules.health.router import router as health_router
from pdfgateway.modules.renderer import RendererProcess
from pdfgateway.shared.errors import PdfGatewayError
from pdfgateway.shared.http import BodySizeLimitMiddleware, error_response
from pdfgateway.shared.ids import generate_request_id
from pdfgateway.shared.logging import (
    clear_request_context,
    get_logger,
    set_request_context,
    setup_logging,
)
from pdfgateway.shared.types import RequestContext

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown."""
    settings: Settings = app.state.settings
    renderer: RendererProcess = app.state.renderer

    setup_logging(settings.log_level)
    logger.info("Starting HTML2PDF service...")

    # FatalStartupError propagates: uvicorn aborts startup and exits non-zero
    await renderer.start()

    logger.info(f"HTML2PDF service listening on port {settings.port}")
    logger.info(f"Health check: http://localhost:{settings.port}/health")

    try:
        yield
    finally:
        logger.info("Shutting down HTML2PDF service...")
        await renderer.shutdown()
        logger.info("HTML2PDF service stopped")


def build_app(
    settings: Settings | None = None,
    renderer: RendererProcess | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Optional settings override (useful for testing)
        renderer: Optional renderer override; a new RendererProcess otherwise

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()
    if renderer is None:
        renderer = RendererProcess()

    app = FastAPI(
        title="HTML2PDF Converter",
        description="Converts HTML to PDF using a managed headless Chromium",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.renderer = renderer

    # Last added runs outermost: CORS, then request context, then body limit
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next: Any) -> Response:
        """Attach request context for logging and tracing."""
        ctx = RequestContext(
            request_id=request.headers.get("X-Request-ID") or generate_request_id(),
        )
        set_request_context(ctx)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = ctx.request_id
            return response
        finally:
            clear_request_context()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Processing-Time", "X-Request-ID"],
    )

    @app.exception_handler(PdfGatewayError)
    async def gateway_error_handler(request: Request, exc: PdfGatewayError) -> JSONResponse:
        """Render any gateway error as a consistent JSON body."""
        return error_response(exc)

    app.include_router(health_router, tags=["health"])
    app.include_router(convert_router)

    return app
