"""Translate errors of any origin into a normalized ProblemDetail.

Three origins are recognized:

- an explicit ``ProblemDetail`` (or a ``ProblemException`` carrying one),
  passed through with only the status defaulted;
- a field-validation failure, mapped to 400 with a ``modelState`` member;
- any other exception, mapped to 500 (501 for ``NotImplementedError``)
  with a ``type`` URI derived from the exception class.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from problem_service.core.exceptions import ProblemException, default_title, normalize_status
from problem_service.core.schemas.problem_details import ProblemDetail

if TYPE_CHECKING:
    from collections.abc import Iterable

DEFAULT_TYPE_URI_AUTHORITY = "urn:"
MODEL_STATE_KEY = "modelState"
VALIDATION_TITLE = "One or more validation errors occurred."
FALLBACK_ERROR_MESSAGE = "An error has occurred."

FieldErrors = Mapping[str, str | Sequence[str | None] | None]

logger = logging.getLogger(__name__)


def qualified_type_name(exc: BaseException) -> str:
    """Return ``module.QualifiedName`` for an exception's class."""
    cls = type(exc)
    return f"{cls.__module__}.{cls.__qualname__}"


def build_model_state(errors: FieldErrors) -> dict[str, list[str]]:
    """Normalize a field -> messages mapping.

    Fields without any entry are dropped. Blank or missing messages are
    replaced with a generic fallback so no array holds an empty string.

    Args:
        errors: Field name mapped to one message or a sequence of messages.

    Returns:
        Field name mapped to a non-empty list of non-empty messages.
    """
    model_state: dict[str, list[str]] = {}
    for field, messages in errors.items():
        if messages is None:
            continue
        if isinstance(messages, str):
            messages = [messages]
        normalized = [message if message else FALLBACK_ERROR_MESSAGE for message in messages]
        if normalized:
            model_state[field] = normalized
    return model_state


def field_errors_from_pydantic(errors: Iterable[Mapping[str, Any]]) -> dict[str, list[str]]:
    """Group pydantic error dicts by dotted field location."""
    grouped: dict[str, list[str]] = {}
    for error in errors:
        field = ".".join(str(loc) for loc in error.get("loc", ()))
        grouped.setdefault(field, []).append(error.get("msg") or "")
    return grouped


class ProblemTranslator:
    """Build ProblemDetail instances from errors.

    The type URI authority is injected at construction time; it is read
    from settings once at startup and never consulted globally afterwards.

    Example:
            translator = ProblemTranslator(type_uri_authority="https://example.com/probs/")
        problem = translator.translate(RuntimeError("bad state"), instance="/orders/1")
        # problem.type == "https://example.com/probs/builtins.RuntimeError"
    """

    def __init__(
        self,
        type_uri_authority: str = DEFAULT_TYPE_URI_AUTHORITY,
        *,
        validation_type: str | None = None,
        expose_exception_detail: bool = True,
    ) -> None:
        """Initialize the translator.

        Args:
            type_uri_authority: Prefix for type URIs synthesized from exception names.
            validation_type: Type URI for validation problems; derived from the
                authority when omitted.
            expose_exception_detail: Copy exception messages into ``detail``.
        """
        self.type_uri_authority = type_uri_authority
        self.validation_type = validation_type or f"{type_uri_authority}validation-error"
        self.expose_exception_detail = expose_exception_detail

    def from_problem(self, problem: ProblemDetail) -> ProblemDetail:
        """Pass an explicit problem through, defaulting only its status."""
        return normalize_status(problem)

    def from_exception(self, exc: BaseException, instance: str | None = None) -> ProblemDetail:
        """Translate an arbitrary exception.

        The status is 500, except for ``NotImplementedError`` which maps to 501.

        Args:
            exc: The exception to translate.
            instance: URI of the failing occurrence, usually the request URL.

        Returns:
            Problem with a type URI derived from the exception class.
        """
        status_code = HTTPStatus.INTERNAL_SERVER_ERROR
        if isinstance(exc, NotImplementedError):
            status_code = HTTPStatus.NOT_IMPLEMENTED

        detail = None
        if self.expose_exception_detail:
            detail = str(exc) or None
        return ProblemDetail(
            type=f"{self.type_uri_authority}{qualified_type_name(exc)}",
            status=int(status_code),
            detail=detail,
            instance=instance,
        )

    def from_validation_errors(
        self,
        errors: FieldErrors,
        *,
        type: str | None = None,
        instance: str | None = None,
        detail: str | None = None,
    ) -> ProblemDetail:
        """Translate a field-validation failure map into a 400 problem.

        Args:
            errors: Field name mapped to one or more error messages.
            type: Type URI override.
            instance: URI of the failing occurrence.
            detail: Optional human-readable explanation.

        Returns:
            Problem whose ``modelState`` member lists the messages per field.

        Example:
                translator.from_validation_errors({"email": ["Email is required"], "age": []})
            # extensions == {"modelState": {"email": ["Email is required"]}}
        """
        return ProblemDetail(
            type=type or self.validation_type,
            title=VALIDATION_TITLE,
            status=int(HTTPStatus.BAD_REQUEST),
            detail=detail,
            instance=instance,
            extensions={MODEL_STATE_KEY: build_model_state(errors)},
        )

    def from_pydantic_errors(
        self,
        errors: Iterable[Mapping[str, Any]],
        instance: str | None = None,
    ) -> ProblemDetail:
        """Translate pydantic / FastAPI validation error dicts."""
        return self.from_validation_errors(field_errors_from_pydantic(errors), instance=instance)

    def from_http_exception(
        self,
        exc: StarletteHTTPException,
        instance: str | None = None,
    ) -> ProblemDetail:
        """Treat a Starlette HTTPException as a caller-supplied problem."""
        detail = exc.detail if isinstance(exc.detail, str) else None
        return self.from_problem(
            ProblemDetail(
                title=default_title(exc.status_code),
                status=exc.status_code,
                detail=detail,
                instance=instance,
            )
        )

    def translate(self, exc: BaseException, instance: str | None = None) -> ProblemDetail:
        """Translate any exception, reusing an already-translated problem.

        A ``ProblemException`` returns the problem it already carries,
        untouched, so a fault that passes through several handlers is only
        ever translated once.

        Args:
            exc: The exception to translate.
            instance: URI of the failing occurrence.

        Returns:
            Normalized problem detail.
        """
        if isinstance(exc, ProblemException):
            return exc.problem
        if isinstance(exc, (RequestValidationError, PydanticValidationError)):
            return self.from_pydantic_errors(exc.errors(), instance=instance)
        if isinstance(exc, StarletteHTTPException):
            return self.from_http_exception(exc, instance=instance)

        logger.debug(
            "Translating unclassified exception",
            extra={"exception_type": qualified_type_name(exc)},
        )
        return self.from_exception(exc, instance=instance)
