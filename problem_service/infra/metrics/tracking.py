"""Helper functions for tracking problem response metrics."""

from __future__ import annotations

import logging

from problem_service.infra.metrics import prometheus

logger = logging.getLogger(__name__)


def track_problem(status_code: int, problem_type: str | None, surface: str) -> None:
    """Track an emitted problem response.

    Args:
        status_code: HTTP status code of the response.
        problem_type: Problem type URI, or None when the problem has none.
        surface: Integration surface that produced the response
            ('route', 'handler' or 'direct').

    Example:
            track_problem(404, "https://example.com/probs/not-found", "handler")
    """
    prometheus.problem_responses_total.labels(
        status_code=str(status_code),
        problem_type=problem_type or "about:blank",
        surface=surface,
    ).inc()

    logger.debug(
        "Tracked problem response",
        extra={"status_code": status_code, "problem_type": problem_type, "surface": surface},
    )


def track_unhandled_exception(exception_type: str) -> None:
    """Track an exception that went through the generic fault path.

    Args:
        exception_type: Qualified exception class name.
    """
    prometheus.unhandled_exceptions_total.labels(exception_type=exception_type).inc()


def track_validation_error(field: str) -> None:
    """Track a validation error for a specific field."""
    prometheus.validation_errors_total.labels(field=field).inc()
