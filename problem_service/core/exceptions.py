"""Problem-carrying exception classes for the application."""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING

from problem_service.core.schemas.problem_details import ProblemDetail

if TYPE_CHECKING:
    from problem_service.core.schemas.problem_details import ExtensionValue

DEFAULT_STATUS = int(HTTPStatus.INTERNAL_SERVER_ERROR)


def normalize_status(problem: ProblemDetail) -> ProblemDetail:
    """Force an unset or non-positive status to 500 in place.

    Args:
        problem: Problem detail to normalize.

    Returns:
        The same problem instance.
    """
    if problem.status <= 0:
        problem.status = DEFAULT_STATUS
    return problem


def default_title(status_code: int) -> str | None:
    """Get the standard reason phrase for an HTTP status code.

    Args:
        status_code: HTTP status code.

    Returns:
        Reason phrase, or None for codes outside the registry.
    """
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return None


class ProblemException(Exception):
    """Exception that carries an RFC 7807 problem detail.

    Raising one of these from a route is the exception-based way of
    returning a problem response. The per-route interceptor and the
    fallback handler both reuse the carried problem as-is instead of
    translating the exception again.

    Attributes:
        problem: The problem detail owned by this exception.

    Example:
            raise ProblemException(
            ProblemDetail(
                type="https://example.com/probs/out-of-credit",
                title="You do not have enough credit.",
                status=403,
                detail="Your current balance is 30, but that costs 50.",
                instance="/account/12345/msgs/abc",
            )
        )
    """

    def __init__(self, problem: ProblemDetail) -> None:
        """Initialize from a problem detail.

        Args:
            problem: Problem detail; an unset status is normalized to 500.
        """
        self.problem = normalize_status(problem)
        super().__init__(self.message)

    @classmethod
    def from_status(cls, status_code: int) -> ProblemException:
        """Create an exception carrying only a status code.

        The result is a valid problem but says little; flesh out
        ``exc.problem`` before raising unless the status alone is enough.
        """
        return cls(ProblemDetail.from_status(status_code))

    @property
    def message(self) -> str:
        """Detail, falling back to title."""
        return self.problem.detail or self.problem.title or ""

    def __str__(self) -> str:
        return self.message


class _PresetProblem(ProblemException):
    """Base for problem exceptions with a fixed status code."""

    status_code: int = DEFAULT_STATUS

    def __init__(
        self,
        detail: str | None = None,
        type: str | None = None,
        title: str | None = None,
        instance: str | None = None,
        extensions: dict[str, ExtensionValue] | None = None,
    ) -> None:
        """Initialize a preset problem exception.

        Args:
            detail: Human-readable error message.
            type: Problem type URI.
            title: Short summary; defaults to the status reason phrase.
            instance: URI reference identifying this specific occurrence.
            extensions: Additional members for the problem body.
        """
        super().__init__(
            ProblemDetail(
                type=type,
                title=title or default_title(self.status_code),
                status=self.status_code,
                detail=detail,
                instance=instance,
                extensions=extensions or {},
            )
        )


class BadRequestProblem(_PresetProblem):
    """Raised for malformed requests.

    Example:
            raise BadRequestProblem("Invalid request format")
    """

    status_code = 400


class UnauthorizedProblem(_PresetProblem):
    """Raised for authentication failures."""

    status_code = 401


class ForbiddenProblem(_PresetProblem):
    """Raised for authorization failures."""

    status_code = 403


class NotFoundProblem(_PresetProblem):
    """Raised when a resource is not found.

    Example:
            raise NotFoundProblem(
            "User with ID abc123 not found",
            type="https://example.com/probs/user-not-found",
            extensions={"user_id": "abc123"},
        )
    """

    status_code = 404


class ConflictProblem(_PresetProblem):
    """Raised for resource conflicts."""

    status_code = 409


class TooManyRequestsProblem(_PresetProblem):
    """Raised when a rate limit is exceeded.

    A ``retry_after`` value is stored as an extension member and echoed
    in the ``Retry-After`` response header.

    Example:
            raise TooManyRequestsProblem("Too many requests", retry_after=60)
    """

    status_code = 429

    def __init__(
        self,
        detail: str | None = None,
        type: str | None = None,
        instance: str | None = None,
        extensions: dict[str, ExtensionValue] | None = None,
        *,
        retry_after: int | None = None,
    ) -> None:
        final_extensions = dict(extensions or {})
        if retry_after is not None:
            final_extensions["retry_after"] = retry_after
        super().__init__(
            detail=detail,
            type=type,
            instance=instance,
            extensions=final_extensions,
        )


class ServiceUnavailableProblem(_PresetProblem):
    """Raised when a dependency is temporarily unavailable."""

    status_code = 503


__all__ = [
    "BadRequestProblem",
    "ConflictProblem",
    "ForbiddenProblem",
    "NotFoundProblem",
    "ProblemException",
    "ServiceUnavailableProblem",
    "TooManyRequestsProblem",
    "UnauthorizedProblem",
    "default_title",
    "normalize_status",
]
