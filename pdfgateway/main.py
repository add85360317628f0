"""
pdfgateway entrypoint - runs uvicorn server.
"""

import uvicorn

from pdfgateway.app import build_app
from pdfgateway.config import get_settings


def main() -> None:
    """Run the HTML2PDF server."""
    settings = get_settings()
    app = build_app(settings)

    print(f"Starting HTML2PDF service on http://{settings.host}:{settings.port}")
    print(f"Convert endpoint: http://{settings.host}:{settings.port}/convert")

    # uvicorn exits non-zero if the lifespan (renderer start) fails
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
