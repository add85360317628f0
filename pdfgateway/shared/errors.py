"""
Error hierarchy. Every error carries its HTTP status so the app-level
exception handler can render it without knowing the concrete type.
"""

from typing import Any


class PdfGatewayError(Exception):
    """Base error for the gateway."""

    code: str = "INTERNAL_ERROR"
    http_status: int = 500
    hint: str = "Internal server error during conversion"

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code,
            "message": self.hint,
        }
        if self.details:
            data["details"] = self.details
        return data


class ValidationError(PdfGatewayError):
    """Request payload rejected before any rendering work."""

    code = "VALIDATION_ERROR"
    http_status = 400
    hint = 'Provide the HTML content in the "html" field'


class PayloadTooLargeError(PdfGatewayError):
    code = "PAYLOAD_TOO_LARGE"
    http_status = 413
    hint = "Request body exceeds the configured limit"


class RendererUnavailable(PdfGatewayError):
    """The shared browser process is not in the ready state."""

    code = "RENDERER_UNAVAILABLE"
    hint = "The renderer is not available, retry later"


class RenderError(PdfGatewayError):
    """A single conversion failed; the service keeps running."""

    code = "RENDER_FAILED"


class LoadTimeout(RenderError):
    code = "LOAD_TIMEOUT"


class ExportError(RenderError):
    code = "EXPORT_FAILED"


class FatalStartupError(PdfGatewayError):
    """The browser process could not be launched at boot."""

    code = "RENDERER_START_FAILED"
    hint = "The renderer process failed to start"
