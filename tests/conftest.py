"""
Shared fixtures.

FakeRenderer stands in for Chromium: it hands out FakePage surfaces and
counts acquisitions and releases so tests can check the pipeline's resource
discipline without a real browser.
"""

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from pdfgateway.app import build_app
from pdfgateway.config import Settings, reset_settings
from pdfgateway.shared.errors import RendererUnavailable
from pdfgateway.shared.types import RendererState

# Markers that make FakePage misbehave
PENDING_RESOURCE = '<img src="http://10.255.255.1/never-answers.png">'
BROKEN_EXPORT = "<!-- broken-export -->"


PLAYWRIGHT_PATCH_TARGET = "pdfgateway.modules.renderer.service.async_playwright"


def mock_playwright(make_page: Callable[[], Any] | None = None):
    """
    Build a mocked ``async_playwright`` factory.

    Returns (factory, playwright, browser). Every browser context hands out
    pages from ``make_page`` (plain MagicMocks by default).
    """
    browser = MagicMock()
    browser.version = "131.0.6778.69"
    browser.close = AsyncMock()

    def make_context(**kwargs):
        context = MagicMock()
        context.options = kwargs
        context.new_page = AsyncMock(side_effect=make_page or (lambda: MagicMock(name="page")))
        context.close = AsyncMock()
        return context

    browser.new_context = AsyncMock(side_effect=make_context)

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()

    factory = MagicMock()
    factory.return_value.start = AsyncMock(return_value=playwright)
    return factory, playwright, browser


class FakePage:
    def __init__(self, renderer: "FakeRenderer") -> None:
        self.renderer = renderer
        self.html: str | None = None

    async def set_content(self, html: str, wait_until: str, timeout: int) -> None:
        self.renderer.load_calls.append({"wait_until": wait_until, "timeout": timeout})
        self.html = html

    async def wait_for_load_state(self, state: str, timeout: int) -> None:
        self.renderer.load_calls.append({"state": state, "timeout": timeout})
        if PENDING_RESOURCE in (self.html or ""):
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    async def pdf(self, **kwargs: Any) -> bytes:
        self.renderer.pdf_calls.append(kwargs)
        if BROKEN_EXPORT in (self.html or ""):
            raise PlaywrightError("Printing failed")
        body = f"{sorted(kwargs.items())}{self.html}".encode()
        return b"%PDF-1.7\n" + body + b"\n%%EOF"


class FakeRenderer:
    """Duck-typed replacement for RendererProcess."""

    def __init__(self, fail_start: Exception | None = None) -> None:
        self.state = RendererState.UNINITIALIZED
        self.fail_start = fail_start
        self.acquired = 0
        self.released = 0
        self.surface_args: list[dict[str, Any]] = []
        self.load_calls: list[dict[str, Any]] = []
        self.pdf_calls: list[dict[str, Any]] = []
        self.shutdown_calls = 0

    @property
    def is_ready(self) -> bool:
        return self.state is RendererState.READY

    async def start(self) -> None:
        if self.fail_start is not None:
            self.state = RendererState.CLOSED
            raise self.fail_start
        self.state = RendererState.READY

    async def shutdown(self) -> None:
        self.shutdown_calls += 1
        self.state = RendererState.CLOSED

    @asynccontextmanager
    async def new_surface(
        self, viewport: dict[str, int] | None = None, device_scale_factor: float = 1
    ) -> AsyncIterator[FakePage]:
        if not self.is_ready:
            raise RendererUnavailable(f"Renderer is not ready (state: {self.state.value})")
        self.acquired += 1
        self.surface_args.append(
            {"viewport": viewport, "device_scale_factor": device_scale_factor}
        )
        try:
            yield FakePage(self)
        finally:
            self.released += 1


@pytest.fixture
def settings() -> Settings:
    return Settings(log_level="DEBUG")


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def app(settings: Settings, renderer: FakeRenderer):
    yield build_app(settings, renderer=renderer)
    reset_settings()


@pytest.fixture
def client(app) -> TestClient:
    """Client with the lifespan running, so the renderer is started."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def cold_client(app) -> TestClient:
    """Client without lifespan: the renderer was never started."""
    return TestClient(app)
