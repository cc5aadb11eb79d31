"""Global exception handlers for FastAPI application.

Every exception that reaches the application boundary is converted into an
RFC 7807 problem response. The same ``ProblemExceptionHandler`` also backs
the per-route interceptor in ``problem_service.app.routing`` so both
surfaces produce identical output for the same fault.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from problem_service.core.dispatcher import ProblemDispatcher
from problem_service.core.exceptions import ProblemException
from problem_service.core.formatters import FormatterRegistry
from problem_service.core.translator import MODEL_STATE_KEY, ProblemTranslator, qualified_type_name
from problem_service.infra.logging import set_log_context
from problem_service.infra.metrics import tracking

if TYPE_CHECKING:
    from fastapi import FastAPI
    from starlette.requests import Request

    from problem_service.core.dispatcher import ProblemResponse
    from problem_service.core.schemas.problem_details import ProblemDetail
    from problem_service.core.settings.problems import ProblemSettings

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"
REQUEST_ID_KEY = "request_id"


def _get_request_id(request: Request) -> str | None:
    """Extract request ID from request state, falling back to the X-Request-ID header.

    Args:
        request: The FastAPI request object.

    Returns:
        Request ID if available, None otherwise.
    """
    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = request.headers.get(REQUEST_ID_HEADER)
    return request_id


class ProblemExceptionHandler:
    """Translate an exception and dispatch it as a problem response.

    Registered for ``Exception`` (and the framework's own error types) it is
    the process-wide fallback; ``ProblemRoute`` calls ``handle`` for faults
    escaping a single route.

    Subclasses may override ``should_handle`` to leave some exceptions to
    the framework. Exceptions listed in ``skip_exceptions`` are re-raised
    untouched.

    Example:
            handler = ProblemExceptionHandler(translator, dispatcher)
        app.add_exception_handler(Exception, handler)
    """

    skip_exceptions: tuple[type[BaseException], ...] = ()

    def __init__(
        self,
        translator: ProblemTranslator,
        dispatcher: ProblemDispatcher,
        *,
        include_request_id: bool = True,
    ) -> None:
        self.translator = translator
        self.dispatcher = dispatcher
        self.include_request_id = include_request_id

    def should_handle(self, request: Request, exc: Exception) -> bool:
        """Decide whether this handler owns the exception."""
        return not isinstance(exc, self.skip_exceptions)

    async def __call__(self, request: Request, exc: Exception) -> ProblemResponse:
        """Starlette exception handler entry point."""
        if request is None:
            msg = "request is required to handle an exception"
            raise ValueError(msg)
        if not self.should_handle(request, exc):
            raise exc
        return self.handle(request, exc, surface="handler")

    def handle(self, request: Request, exc: Exception, *, surface: str) -> ProblemResponse:
        """Translate ``exc`` (unless already translated) and build the response.

        Args:
            request: The request whose handling failed.
            exc: The exception to convert.
            surface: Label of the integration surface, for logs and metrics.

        Returns:
            Problem response negotiated for the request.
        """
        request_id = _get_request_id(request)
        if request_id:
            set_log_context(request_id=request_id)

        problem = self.translator.translate(exc, instance=str(request.url))
        # Problems carried by a ProblemException are sent exactly as raised.
        if self.include_request_id and request_id and not isinstance(exc, ProblemException):
            problem.extensions[REQUEST_ID_KEY] = request_id

        self._log(request, exc, problem, request_id, surface)
        tracking.track_problem(problem.status, problem.type, surface)

        response = self.dispatcher.create_response(request, problem)
        if isinstance(exc, StarletteHTTPException) and exc.headers:
            response.headers.update(exc.headers)
        return response

    def _log(
        self,
        request: Request,
        exc: Exception,
        problem: ProblemDetail,
        request_id: str | None,
        surface: str,
    ) -> None:
        context = {
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "surface": surface,
            "exception_type": qualified_type_name(exc),
            "status_code": problem.status,
            "problem_type": problem.type,
        }

        if isinstance(exc, (RequestValidationError, PydanticValidationError)):
            model_state = problem.extensions.get(MODEL_STATE_KEY, {})
            for field in model_state:
                tracking.track_validation_error(field)
            logger.warning(
                "Request validation failed",
                extra={**context, "error_count": len(model_state)},
            )
        elif isinstance(exc, (ProblemException, StarletteHTTPException)):
            level = logging.ERROR if problem.status >= 500 else logging.WARNING
            logger.log(level, "Problem exception occurred", extra={**context, "detail": problem.detail})
        else:
            tracking.track_unhandled_exception(qualified_type_name(exc))
            logger.error(
                "Unexpected exception occurred",
                extra={**context, "exception_message": str(exc)},
                exc_info=exc,
            )


def build_exception_handler(settings: ProblemSettings | None = None) -> ProblemExceptionHandler:
    """Create the translator, dispatcher and handler from settings.

    Args:
        settings: Problem settings; loaded from the environment when omitted.

    Returns:
        Configured exception handler.
    """
    if settings is None:
        from problem_service.core.settings import get_problem_settings

        settings = get_problem_settings()

    translator = ProblemTranslator(
        type_uri_authority=settings.type_uri_authority,
        validation_type=settings.validation_type,
        expose_exception_detail=settings.expose_exception_detail,
    )
    dispatcher = ProblemDispatcher(FormatterRegistry.default(xml_enabled=settings.xml_enabled))
    return ProblemExceptionHandler(
        translator,
        dispatcher,
        include_request_id=settings.include_request_id,
    )


def get_exception_handler(request: Request) -> ProblemExceptionHandler:
    """Return the handler installed on the request's application.

    Falls back to a handler built from default settings when the
    application was never configured.
    """
    app = request.scope.get("app")
    handler = getattr(app.state, "problem_handler", None) if app is not None else None
    if handler is None:
        handler = build_exception_handler()
    return handler


def configure_exception_handlers(
    app: FastAPI,
    settings: ProblemSettings | None = None,
    handler: ProblemExceptionHandler | None = None,
) -> ProblemExceptionHandler:
    """Configure exception handlers for the FastAPI application.

    Registers one ``ProblemExceptionHandler`` for problem exceptions, the
    framework's HTTP and validation errors, and as the catch-all for any
    other exception. The translator, dispatcher and handler are stored on
    ``app.state`` so the per-route interceptor and the direct builders use
    the same instances.

    Args:
        app: The FastAPI application instance.
        settings: Problem settings; loaded from the environment when omitted.
        handler: Pre-built handler, overriding ``settings``.

    Returns:
        The installed handler.

    Example:
            app = FastAPI()
        configure_exception_handlers(app)
    """
    handler = handler or build_exception_handler(settings)

    app.state.problem_translator = handler.translator
    app.state.problem_dispatcher = handler.dispatcher
    app.state.problem_handler = handler

    app.add_exception_handler(ProblemException, handler)
    app.add_exception_handler(StarletteHTTPException, handler)
    app.add_exception_handler(RequestValidationError, handler)
    app.add_exception_handler(PydanticValidationError, handler)

    # Catch-all for unexpected exceptions
    app.add_exception_handler(Exception, handler)

    logger.info("Exception handlers configured")
    return handler
