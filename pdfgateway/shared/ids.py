"""ID generation."""

import uuid


def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:16]}"


def generate_request_id() -> str:
    return generate_id("req")
