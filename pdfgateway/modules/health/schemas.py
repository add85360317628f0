"""Health module schemas."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Liveness payload. ``browser`` tells whether the renderer is ready."""

    status: str = "OK"
    service: str
    version: str
    uptime: float
    timestamp: str
    browser: bool
