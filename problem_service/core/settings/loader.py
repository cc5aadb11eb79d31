"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the process.

Testing:
    In tests, clear the cache to force reload:
    get_problem_settings.cache_clear()
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .logs import LoggingSettings
from .problems import ProblemSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings.

    Returns:
        Validated and frozen AppSettings instance.
    """
    return AppSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_problem_settings() -> ProblemSettings:
    """Get cached problem details settings.

    Returns:
        Validated and frozen ProblemSettings instance.
    """
    return ProblemSettings()


def clear_all_caches() -> None:
    """Clear every settings cache (used by tests)."""
    get_app_settings.cache_clear()
    get_logging_settings.cache_clear()
    get_problem_settings.cache_clear()
