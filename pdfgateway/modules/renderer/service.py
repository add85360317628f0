"""Renderer process - one long-lived headless Chromium shared by all requests."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from playwright.async_api import async_playwright

from pdfgateway.shared.errors import FatalStartupError, RendererUnavailable
from pdfgateway.shared.logging import get_logger
from pdfgateway.shared.types import RendererState

logger = get_logger(__name__)


# Containers usually lack the kernel features Chromium's sandbox needs
CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
]


class RendererProcess:
    """
    Owns the lifecycle of the Chromium process used as rendering backend.

    Each request gets its own surface (a fresh browser context and page) via
    ``new_surface()``; the browser itself is started once and shut down once.
    """

    def __init__(self, launch_args: list[str] | None = None) -> None:
        self.launch_args = list(launch_args or CHROMIUM_ARGS)
        self._state = RendererState.UNINITIALIZED
        self._playwright: Any = None
        self._browser: Any = None
        self._surface_lock = asyncio.Lock()

    @property
    def state(self) -> RendererState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is RendererState.READY

    @property
    def version(self) -> str | None:
        if self._browser is None:
            return None
        return self._browser.version

    async def start(self) -> None:
        """
        Launch Chromium.

        Raises:
            FatalStartupError: if Playwright or the browser cannot be started.
        """
        if self._state is not RendererState.UNINITIALIZED:
            logger.warning(f"Renderer start ignored in state '{self._state.value}'")
            return

        self._state = RendererState.STARTING
        logger.info("Starting Chromium browser process...")

        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=True,
                args=self.launch_args,
            )
        except Exception as e:
            logger.error(f"Failed to start Chromium: {e}")
            await self._release()
            self._state = RendererState.CLOSED
            raise FatalStartupError(f"Could not start renderer: {e}") from e

        self._browser.on("disconnected", self._on_disconnected)
        self._state = RendererState.READY
        logger.info(f"Chromium started ({self._browser.version})")

    @asynccontextmanager
    async def new_surface(
        self,
        viewport: dict[str, int] | None = None,
        device_scale_factor: float = 1,
    ) -> AsyncIterator[Any]:
        """
        Yield a fresh page in its own browser context.

        Nothing (cookies, storage, DOM) is shared with other surfaces. The
        context is closed when the block exits, whatever the outcome.

        Raises:
            RendererUnavailable: if the browser is not ready.
        """
        if not self.is_ready:
            raise RendererUnavailable(
                f"Renderer is not ready (state: {self._state.value})"
            )

        async with self._surface_lock:
            context = await self._browser.new_context(
                viewport=viewport,
                device_scale_factor=device_scale_factor,
            )
            try:
                page = await context.new_page()
            except BaseException:
                await self._close_context(context)
                raise

        try:
            yield page
        finally:
            await self._close_context(context)

    async def shutdown(self) -> None:
        """
        Close the browser and Playwright. Idempotent.

        Also runs after a crash: the handle is already ``closed`` then, but
        the Playwright driver is still alive and must be stopped.
        """
        if self._state is RendererState.SHUTTING_DOWN:
            return
        if self._browser is None and self._playwright is None:
            self._state = RendererState.CLOSED
            return

        self._state = RendererState.SHUTTING_DOWN
        logger.info("Closing Chromium browser...")
        try:
            await self._release()
        finally:
            self._state = RendererState.CLOSED
        logger.info("Chromium closed")

    async def _release(self) -> None:
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None

        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.error(f"Error closing browser: {e}")
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                logger.error(f"Error stopping Playwright: {e}")

    async def _close_context(self, context: Any) -> None:
        try:
            await context.close()
        except Exception as e:
            # Browser may already be gone; nothing left to release
            logger.warning(f"Failed to close browser context: {e}")

    def _on_disconnected(self, *_: Any) -> None:
        if self._state is RendererState.READY:
            logger.error("Chromium disconnected unexpectedly; renderer is now closed")
            self._state = RendererState.CLOSED
