"""Pydantic Settings v2 configuration.

Import settings via cached loaders:
    from problem_service.core.settings import get_problem_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file (development only)
"""

from __future__ import annotations

from .app import AppSettings
from .loader import (
    clear_all_caches,
    get_app_settings,
    get_logging_settings,
    get_problem_settings,
)
from .logs import LoggingSettings
from .problems import ProblemSettings

__all__ = [
    "AppSettings",
    "LoggingSettings",
    "ProblemSettings",
    "clear_all_caches",
    "get_app_settings",
    "get_logging_settings",
    "get_problem_settings",
]
