"""Health module - liveness and info endpoints."""

from .router import router

__all__ = ["router"]
