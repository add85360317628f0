"""Convert service - drives one HTML document through load and PDF export."""

import re
import time
from urllib.parse import quote

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from pdfgateway.modules.renderer import RendererProcess
from pdfgateway.shared.errors import (
    ExportError,
    LoadTimeout,
    PdfGatewayError,
    RenderError,
    ValidationError,
)
from pdfgateway.shared.logging import get_logger
from pdfgateway.shared.time import now_ms

from .schemas import ConvertRequest, PdfArtifact, RenderOptions

logger = get_logger(__name__)


# Only affects how CSS media queries resolve; page size comes from RenderOptions
VIEWPORT = {"width": 1200, "height": 800}
DEVICE_SCALE_FACTOR = 1

# Budget shared by the load event and network quiescence
LOAD_TIMEOUT_MS = 30_000

_UNSAFE_FILENAME_CHARS = re.compile(r'["\\\x00-\x1f\x7f]')


def default_filename() -> str:
    return f"document_{now_ms()}.pdf"


def sanitize_filename(filename: str | None) -> str:
    """Strip characters that would break a Content-Disposition header."""
    cleaned = _UNSAFE_FILENAME_CHARS.sub("", filename or "").strip()
    return cleaned or default_filename()


def content_disposition(filename: str) -> str:
    """
    Build an ``attachment`` Content-Disposition value.

    Non-ASCII names get an ASCII fallback plus an RFC 5987 ``filename*``.
    """
    try:
        filename.encode("ascii")
    except UnicodeEncodeError:
        fallback = filename.encode("ascii", "ignore").decode("ascii").strip() or "document.pdf"
        return (
            f'attachment; filename="{fallback}"; '
            f"filename*=UTF-8''{quote(filename, safe='')}"
        )
    return f'attachment; filename="{filename}"'


class ConversionService:
    """Turns one ConvertRequest into one PdfArtifact using the shared renderer."""

    def __init__(self, renderer: RendererProcess, load_timeout_ms: int = LOAD_TIMEOUT_MS) -> None:
        self.renderer = renderer
        self.load_timeout_ms = load_timeout_ms

    async def convert(self, request: ConvertRequest) -> PdfArtifact:
        """
        Render ``request.html`` to PDF.

        Raises:
            ValidationError: html missing or empty (no renderer call made).
            RendererUnavailable: the browser is not ready.
            LoadTimeout: content did not settle within the load budget.
            ExportError: PDF generation failed.
            RenderError: any other renderer failure.
        """
        started = time.monotonic()
        logger.info("New HTML to PDF conversion request")

        if not request.html:
            raise ValidationError("HTML content is required")

        options = RenderOptions.from_request(request.options)
        logger.info(f"PDF options: {options.to_pdf_kwargs()}")

        try:
            async with self.renderer.new_surface(
                viewport=VIEWPORT,
                device_scale_factor=DEVICE_SCALE_FACTOR,
            ) as page:
                await self._load(page, request.html)
                pdf_bytes = await self._export(page, options)
        except PdfGatewayError as e:
            elapsed = _elapsed_ms(started)
            logger.error(f"Conversion failed after {elapsed}ms: {e.message}")
            raise
        except Exception as e:
            elapsed = _elapsed_ms(started)
            logger.exception(f"Conversion failed after {elapsed}ms")
            raise RenderError(str(e)) from e

        elapsed = _elapsed_ms(started)
        logger.info(f"PDF generated: {len(pdf_bytes)} bytes in {elapsed}ms")

        return PdfArtifact(
            content=pdf_bytes,
            filename=sanitize_filename(request.filename),
            elapsed_ms=elapsed,
        )

    async def _load(self, page: Page, html: str) -> None:
        """Wait for the load event, then for network quiescence."""
        deadline = time.monotonic() + self.load_timeout_ms / 1000
        logger.debug("Loading HTML content...")
        try:
            await page.set_content(html, wait_until="load", timeout=self.load_timeout_ms)

            remaining_ms = int((deadline - time.monotonic()) * 1000)
            # Playwright treats a timeout of 0 as "no timeout"
            if remaining_ms <= 0:
                raise PlaywrightTimeoutError(
                    f"Timeout {self.load_timeout_ms}ms exceeded waiting for network idle"
                )
            await page.wait_for_load_state("networkidle", timeout=remaining_ms)
        except PlaywrightTimeoutError as e:
            raise LoadTimeout(str(e)) from e
        except PlaywrightError as e:
            raise RenderError(f"Failed to load HTML content: {e}") from e

    async def _export(self, page: Page, options: RenderOptions) -> bytes:
        logger.debug("Generating PDF...")
        try:
            return await page.pdf(**options.to_pdf_kwargs())
        except PlaywrightError as e:
            raise ExportError(f"PDF generation failed: {e}") from e


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
