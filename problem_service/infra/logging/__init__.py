"""Logging infrastructure.

Basic usage:
    from problem_service.infra.logging import set_log_context, setup_logging
    import logging

    setup_logging()
    logger = logging.getLogger(__name__)

    set_log_context(request_id="abc-123")
    logger.info("Processing request")  # Includes request_id
"""

from problem_service.infra.logging.config import build_logging_config, configure_logging, setup_logging
from problem_service.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    set_log_context,
)
from problem_service.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "build_logging_config",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "set_log_context",
    "setup_logging",
]
