"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from problem_service.app.exception_handlers import configure_exception_handlers
from problem_service.app.router import setup_routers
from problem_service.core.settings import get_app_settings, get_problem_settings
from problem_service.infra.logging import setup_logging

if TYPE_CHECKING:
    from problem_service.core.settings import AppSettings, ProblemSettings


def create_app(
    app_settings: AppSettings | None = None,
    problem_settings: ProblemSettings | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Settings are loaded once and cached via LRU cache unless explicit
    instances are passed (tests).

    Returns:
        Configured FastAPI application instance.
    """
    app_settings = app_settings or get_app_settings()
    problem_settings = problem_settings or get_problem_settings()

    setup_logging()

    app = FastAPI(
        title=app_settings.title,
        version=app_settings.version,
        debug=app_settings.debug,
    )

    # Configure exception handlers
    configure_exception_handlers(app, problem_settings)

    setup_routers(app)

    return app
