"""Render problem details into HTTP responses.

``ProblemDispatcher.render`` is the single place where status code,
content type and body bytes are computed. Both response shapes offered to
route code are built from its output, so they can never disagree:

- ``ProblemResponse``: a Starlette response, returned directly;
- ``ProblemResult``: a result value a handler may return instead of raising,
  converted into a ``ProblemResponse`` at the route boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from starlette.responses import Response

from problem_service.core.exceptions import normalize_status
from problem_service.core.formatters import FormatterRegistry
from problem_service.core.negotiation import negotiate_request, select_formatter

if TYPE_CHECKING:
    from starlette.requests import Request

    from problem_service.core.schemas.problem_details import ProblemDetail

CHARSET = "utf-8"


def content_type_for(media_type: str) -> str:
    """Return the exact Content-Type header value for a problem media type."""
    return f"{media_type}; charset={CHARSET}"


class ProblemResponse(Response):
    """Response carrying a rendered problem body."""

    def __init__(
        self,
        body: bytes,
        status_code: int,
        media_type: str,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(
            content=body,
            status_code=status_code,
            headers=headers,
            media_type=content_type_for(media_type),
        )


@dataclass(frozen=True)
class RenderedProblem:
    """Status, media type and body computed for one problem."""

    status_code: int
    media_type: str
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def content_type(self) -> str:
        return content_type_for(self.media_type)

    def to_response(self) -> ProblemResponse:
        return ProblemResponse(
            body=self.body,
            status_code=self.status_code,
            media_type=self.media_type,
            headers=dict(self.headers) or None,
        )


@dataclass(frozen=True)
class ProblemResult:
    """Controller-style result for a problem.

    Handlers routed through ``ProblemRoute`` may return this instead of
    raising; the route converts it with ``to_response``.
    """

    problem: ProblemDetail
    rendered: RenderedProblem

    @property
    def status_code(self) -> int:
        return self.rendered.status_code

    def to_response(self) -> ProblemResponse:
        return self.rendered.to_response()


class ProblemDispatcher:
    """Negotiate, serialize and wrap problem details for a request.

    Example:
            dispatcher = ProblemDispatcher(FormatterRegistry.default())
        response = dispatcher.create_response(request, problem)
    """

    def __init__(self, registry: FormatterRegistry | None = None) -> None:
        self.registry = registry or FormatterRegistry.default()

    def render(self, request: Request, problem: ProblemDetail) -> RenderedProblem:
        """Compute status, content type and body for a problem.

        Args:
            request: The request being answered; its Accept header drives
                the representation.
            problem: Problem to render; an unset status is normalized to 500.

        Returns:
            The rendered problem.

        Raises:
            ValueError: If ``request`` is None.
        """
        if request is None:
            msg = "request is required to render a problem response"
            raise ValueError(msg)

        normalize_status(problem)
        formatter = select_formatter(negotiate_request(request), self.registry)

        headers: dict[str, str] = {}
        retry_after = problem.extensions.get("retry_after")
        if isinstance(retry_after, int) and not isinstance(retry_after, bool):
            headers["Retry-After"] = str(retry_after)

        return RenderedProblem(
            status_code=problem.status,
            media_type=formatter.media_type,
            body=formatter.render(problem),
            headers=headers,
        )

    def create_response(self, request: Request, problem: ProblemDetail) -> ProblemResponse:
        """Build a response object for a problem."""
        return self.render(request, problem).to_response()

    def create_result(self, request: Request, problem: ProblemDetail) -> ProblemResult:
        """Build a controller-style result for a problem."""
        return ProblemResult(problem=problem, rendered=self.render(request, problem))


def get_dispatcher(request: Request) -> ProblemDispatcher:
    """Return the application's dispatcher, or a default one if none is installed."""
    if request is None:
        msg = "request is required to render a problem response"
        raise ValueError(msg)
    app = request.scope.get("app")
    dispatcher = getattr(app.state, "problem_dispatcher", None) if app is not None else None
    if dispatcher is None:
        dispatcher = ProblemDispatcher()
    return dispatcher


def create_problem_response(request: Request, problem: ProblemDetail) -> ProblemResponse:
    """Build a problem response directly from route code.

    Example:
            @router.get("/account/{account_id}/msgs/{msg_id}")
        async def send(request: Request, account_id: str, msg_id: str):
            if balance < cost:
                return create_problem_response(
                    request,
                    ProblemDetail(status=403, title="You do not have enough credit."),
                )
    """
    return get_dispatcher(request).create_response(request, problem)


def create_problem_result(request: Request, problem: ProblemDetail) -> ProblemResult:
    """Build a problem result directly from route code."""
    return get_dispatcher(request).create_result(request, problem)


__all__ = [
    "ProblemDispatcher",
    "ProblemResponse",
    "ProblemResult",
    "RenderedProblem",
    "content_type_for",
    "create_problem_response",
    "create_problem_result",
    "get_dispatcher",
]
