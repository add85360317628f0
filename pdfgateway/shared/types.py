"""Shared types."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class RequestContext:
    """Per-request metadata used for logging and response headers."""

    request_id: str


class RendererState(str, Enum):
    """Lifecycle of the shared browser process."""

    UNINITIALIZED = "uninitialized"
    STARTING = "starting"
    READY = "ready"
    SHUTTING_DOWN = "shutting_down"
    CLOSED = "closed"
