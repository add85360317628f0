"""Renderer module - lifecycle of the shared headless Chromium."""

from .service import CHROMIUM_ARGS, RendererProcess

__all__ = ["CHROMIUM_ARGS", "RendererProcess"]
