"""Status routes: liveness check and service description."""

from typing import Any

from fastapi import APIRouter, Request

from pdfgateway import __version__
from pdfgateway.shared.time import uptime_seconds, utcnow_iso

from .schemas import HealthResponse

router = APIRouter()

SERVICE_NAME = "HTML2PDF Converter"

SERVICE_INFO: dict[str, Any] = {
    "service": "HTML2PDF Converter Service",
    "version": __version__,
    "endpoints": {
        "convert": "POST /convert",
        "health": "GET /health",
    },
    "usage": {
        "convert": {
            "method": "POST",
            "url": "/convert",
            "body": {
                "html": "string (required) - HTML content to convert",
                "filename": "string (optional) - Output filename",
                "options": {
                    "format": "string (optional) - A4, A3, Letter, etc. (default: A4)",
                    "marginTop": "string (optional) - Top margin (default: 20mm)",
                    "marginRight": "string (optional) - Right margin (default: 20mm)",
                    "marginBottom": "string (optional) - Bottom margin (default: 20mm)",
                    "marginLeft": "string (optional) - Left margin (default: 20mm)",
                    "printBackground": "boolean (optional) - Include backgrounds (default: true)",
                },
            },
        },
    },
}


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    """Liveness check. Always 200; callers inspect ``browser``."""
    renderer = getattr(request.app.state, "renderer", None)
    return HealthResponse(
        service=SERVICE_NAME,
        version=__version__,
        uptime=uptime_seconds(),
        timestamp=utcnow_iso(),
        browser=bool(renderer and renderer.is_ready),
    )


@router.get("/")
async def info() -> dict[str, Any]:
    """Describe the API surface and accepted options."""
    return SERVICE_INFO
