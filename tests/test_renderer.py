"""Tests for the renderer process handle, with Playwright mocked out."""

import asyncio
from unittest.mock import patch

import pytest

from pdfgateway.modules.renderer import CHROMIUM_ARGS, RendererProcess
from pdfgateway.shared.errors import FatalStartupError, RendererUnavailable
from pdfgateway.shared.types import RendererState

from .conftest import PLAYWRIGHT_PATCH_TARGET, mock_playwright


class TestRendererLifecycle:

    def test_start_launches_hardened_chromium(self) -> None:
        factory, playwright, browser = mock_playwright()
        renderer = RendererProcess()

        with patch(PLAYWRIGHT_PATCH_TARGET, factory):
            asyncio.run(renderer.start())

        playwright.chromium.launch.assert_awaited_once_with(headless=True, args=CHROMIUM_ARGS)
        assert "--no-sandbox" in CHROMIUM_ARGS
        assert "--disable-gpu" in CHROMIUM_ARGS
        assert renderer.state is RendererState.READY
        assert renderer.is_ready
        assert renderer.version == "131.0.6778.69"

    def test_start_failure_is_fatal(self) -> None:
        factory, playwright, _ = mock_playwright()
        playwright.chromium.launch.side_effect = RuntimeError("Executable doesn't exist")
        renderer = RendererProcess()

        with patch(PLAYWRIGHT_PATCH_TARGET, factory):
            with pytest.raises(FatalStartupError, match="Executable doesn't exist"):
                asyncio.run(renderer.start())

        playwright.stop.assert_awaited_once()
        assert renderer.state is RendererState.CLOSED
        assert not renderer.is_ready

    def test_shutdown_is_idempotent(self) -> None:
        factory, playwright, browser = mock_playwright()
        renderer = RendererProcess()

        async def scenario():
            await renderer.start()
            await renderer.shutdown()
            await renderer.shutdown()

        with patch(PLAYWRIGHT_PATCH_TARGET, factory):
            asyncio.run(scenario())

        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert renderer.state is RendererState.CLOSED

    def test_shutdown_before_start(self) -> None:
        renderer = RendererProcess()

        asyncio.run(renderer.shutdown())

        assert renderer.state is RendererState.CLOSED

    def test_disconnect_marks_closed(self) -> None:
        factory, _, browser = mock_playwright()
        renderer = RendererProcess()

        with patch(PLAYWRIGHT_PATCH_TARGET, factory):
            asyncio.run(renderer.start())

        event, callback = browser.on.call_args.args
        assert event == "disconnected"
        callback(browser)

        assert renderer.state is RendererState.CLOSED

    def test_shutdown_after_crash_stops_driver(self) -> None:
        factory, playwright, browser = mock_playwright()
        renderer = RendererProcess()

        async def scenario():
            await renderer.start()
            _, on_disconnected = browser.on.call_args.args
            on_disconnected(browser)
            await renderer.shutdown()
            await renderer.shutdown()

        with patch(PLAYWRIGHT_PATCH_TARGET, factory):
            asyncio.run(scenario())

        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert renderer.state is RendererState.CLOSED


class TestRendererSurfaces:

    def test_surface_before_start_fails_fast(self) -> None:
        renderer = RendererProcess()

        async def scenario():
            async with renderer.new_surface():
                pass

        with pytest.raises(RendererUnavailable, match="uninitialized"):
            asyncio.run(scenario())

    def test_each_surface_has_own_context(self) -> None:
        factory, _, browser = mock_playwright()
        renderer = RendererProcess()

        async def scenario():
            await renderer.start()
            async with renderer.new_surface(viewport={"width": 1200, "height": 800}):
                pass
            async with renderer.new_surface(viewport={"width": 1200, "height": 800}):
                pass

        with patch(PLAYWRIGHT_PATCH_TARGET, factory):
            asyncio.run(scenario())

        assert browser.new_context.await_count == 2
        browser.new_context.assert_awaited_with(
            viewport={"width": 1200, "height": 800}, device_scale_factor=1
        )

    def test_context_closed_after_use(self) -> None:
        factory, _, browser = mock_playwright()
        created = []
        original = browser.new_context.side_effect

        def tracking(**kwargs):
            ctx = original(**kwargs)
            created.append(ctx)
            return ctx

        browser.new_context.side_effect = tracking
        renderer = RendererProcess()

        async def scenario():
            await renderer.start()
            async with renderer.new_surface():
                pass
            with pytest.raises(RuntimeError):
                async with renderer.new_surface():
                    raise RuntimeError("export failed")

        with patch(PLAYWRIGHT_PATCH_TARGET, factory):
            asyncio.run(scenario())

        assert len(created) == 2
        for ctx in created:
            ctx.close.assert_awaited_once()

    def test_surface_after_shutdown_fails_fast(self) -> None:
        factory, _, browser = mock_playwright()
        renderer = RendererProcess()

        async def scenario():
            await renderer.start()
            await renderer.shutdown()
            async with renderer.new_surface():
                pass

        with patch(PLAYWRIGHT_PATCH_TARGET, factory):
            with pytest.raises(RendererUnavailable, match="closed"):
                asyncio.run(scenario())

        browser.new_context.assert_not_awaited()
