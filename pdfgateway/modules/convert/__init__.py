"""Convert module - HTML to PDF over the shared renderer."""

from .router import router
from .schemas import ConvertOptions, ConvertRequest, PdfArtifact, RenderOptions
from .service import ConversionService

__all__ = [
    "router",
    "ConversionService",
    "ConvertOptions",
    "ConvertRequest",
    "PdfArtifact",
    "RenderOptions",
]
