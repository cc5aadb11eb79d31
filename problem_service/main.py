"""Main entry point for problem-service."""

from __future__ import annotations

import sys
from typing import NoReturn


def run_fastapi_server() -> NoReturn:
    """Run the FastAPI application server.

    Uses uvicorn as the ASGI server with settings from configuration.
    """
    import uvicorn

    from problem_service.core.settings import get_app_settings, get_logging_settings

    settings = get_app_settings()
    log_settings = get_logging_settings()

    uvicorn.run(
        "problem_service.app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        access_log=settings.debug,
        log_level=log_settings.level.lower(),
    )
    sys.exit(0)


def main() -> NoReturn:
    """Console script entry point."""
    run_fastapi_server()


if __name__ == "__main__":
    main()
