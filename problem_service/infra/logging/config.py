"""Logging configuration setup.

All handlers sit on the root logger and application loggers propagate up.
Configuration goes through ``logging.config.dictConfig``.
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from problem_service.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from problem_service.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = {**settings_obj.to_logging_kwargs(), **configure_kwargs}
    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def build_logging_config(
    log_level: str = "INFO",
    json_logs: bool = True,
    include_uvicorn: bool = True,
    service_name: str = "problem-service",
) -> dict[str, Any]:
    """Build the dictConfig mapping.

    Args:
        log_level: Root logger level.
        json_logs: Use the JSONL formatter instead of plain text.
        include_uvicorn: Let Uvicorn loggers propagate to the root handlers.
        service_name: Static ``service`` field added to JSON records.

    Returns:
        Configuration dict accepted by ``logging.config.dictConfig``.
    """
    if json_logs:
        formatter: dict[str, Any] = {
            "()": "problem_service.infra.logging.formatters.JSONFormatter",
            "static": {"service": service_name},
        }
    else:
        formatter = {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"}

    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter},
        "filters": {
            "context": {"()": "problem_service.infra.logging.context.ContextInjectingFilter"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "filters": ["context"],
                "stream": "ext://sys.stderr",
            },
        },
        "root": {"level": log_level.upper(), "handlers": ["console"]},
        "loggers": {},
    }

    if include_uvicorn:
        for name in UVICORN_LOGGERS:
            config["loggers"][name] = {"handlers": [], "propagate": True}

    return config


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    include_uvicorn: bool = True,
    **kwargs: Any,
) -> None:
    """Apply the logging configuration.

    Example:
            from problem_service.core.settings import get_logging_settings
        configure_logging(**get_logging_settings().to_logging_kwargs())
    """
    logging.config.dictConfig(
        build_logging_config(
            log_level=log_level,
            json_logs=json_logs,
            include_uvicorn=include_uvicorn,
            **kwargs,
        )
    )
    logger.debug("Logging configured", extra={"log_level": log_level, "json_logs": json_logs})
