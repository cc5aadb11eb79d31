"""Context management for structured logging.

Request-scoped values (such as ``request_id``) are kept in a ContextVar and
copied onto every log record by ``ContextInjectingFilter``, so handlers do
not have to pass them explicitly.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Add key-value pairs to the logging context of the current task."""
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Clear the logging context of the current task."""
    _log_context.set({})


class ContextInjectingFilter(logging.Filter):
    """Logging filter that copies the current log context onto each record.

    Values already present on the record (for example from ``extra=``)
    take precedence over context values.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
