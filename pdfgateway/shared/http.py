"""
HTTP helpers shared by the app and its middleware.
"""

from typing import Any

from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .errors import PayloadTooLargeError, PdfGatewayError
from .logging import get_logger, get_request_context

logger = get_logger(__name__)


def error_response(exc: PdfGatewayError) -> JSONResponse:
    """Render a gateway error as the JSON error body."""
    ctx = get_request_context()
    content: dict[str, Any] = exc.to_dict()
    content["request_id"] = ctx.request_id if ctx else None
    return JSONResponse(status_code=exc.http_status, content=content)


class BodySizeLimitMiddleware:
    """
    Reject request bodies larger than ``max_body_bytes`` with a 413.

    A declared Content-Length is checked up front. Bodies without one
    (chunked uploads) are buffered up to the limit before the app sees them,
    so the limit applies to the bytes actually received.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int) -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None and content_length.isdigit():
            if int(content_length) > self.max_body_bytes:
                await self._reject(scope, receive, send, int(content_length))
                return
            # The server holds the client to its declared length
            await self.app(scope, receive, send)
            return

        buffered: list[Message] = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            buffered.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_body_bytes:
                await self._reject(scope, receive, send, received)
                return
            more_body = message.get("more_body", False)

        async def replay() -> Message:
            if buffered:
                return buffered.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, size: int) -> None:
        logger.warning(f"Rejected request body of at least {size} bytes")
        response = error_response(
            PayloadTooLargeError(
                f"Request body of at least {size} bytes exceeds limit of "
                f"{self.max_body_bytes} bytes"
            )
        )
        await response(scope, receive, send)
