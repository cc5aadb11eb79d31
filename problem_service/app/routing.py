"""Per-route problem interception.

``ProblemRoute`` wraps each endpoint so that a fault escaping it is turned
into a problem response right at the route, before it reaches the
middleware stack. Endpoints on such a route may also return a
``ProblemResult`` instead of raising.

Usage:
    router = APIRouter(route_class=ProblemRoute)

    @router.get("/orders/{order_id}")
    async def get_order(request: Request, order_id: int):
        if order_id not in orders:
            return create_problem_result(request, ProblemDetail(status=404, title="Not Found"))
        return orders[order_id]

Endpoints that may return a ``ProblemResult`` should not annotate it as
their return type; declare ``response_model`` explicitly instead.
"""

from __future__ import annotations

import functools
import inspect
from typing import TYPE_CHECKING, Any

from fastapi.routing import APIRoute

from problem_service.app.exception_handlers import get_exception_handler
from problem_service.core.dispatcher import ProblemResult
from problem_service.infra.metrics import tracking

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine

    from starlette.requests import Request
    from starlette.responses import Response

UNWRAP_MARKER = "__unwraps_problem_results__"


def _as_response(value: Any) -> Any:
    if isinstance(value, ProblemResult):
        tracking.track_problem(value.status_code, value.problem.type, "direct")
        return value.to_response()
    return value


def unwrap_problem_results(endpoint: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap an endpoint so a returned ProblemResult becomes its response.

    The wrapper keeps the sync/async nature of the endpoint. Its signature is
    the endpoint's with annotations already resolved, since FastAPI resolves
    string annotations against the globals of the callable it is given.
    """
    if getattr(endpoint, UNWRAP_MARKER, False):
        return endpoint
    signature = inspect.signature(endpoint, eval_str=True)

    if inspect.iscoroutinefunction(endpoint):

        @functools.wraps(endpoint)
        async def async_endpoint(*args: Any, **kwargs: Any) -> Any:
            return _as_response(await endpoint(*args, **kwargs))

        async_endpoint.__signature__ = signature  # type: ignore[attr-defined]
        setattr(async_endpoint, UNWRAP_MARKER, True)
        return async_endpoint

    @functools.wraps(endpoint)
    def sync_endpoint(*args: Any, **kwargs: Any) -> Any:
        return _as_response(endpoint(*args, **kwargs))

    sync_endpoint.__signature__ = signature  # type: ignore[attr-defined]
    setattr(sync_endpoint, UNWRAP_MARKER, True)
    return sync_endpoint


class ProblemRoute(APIRoute):
    """APIRoute that converts escaping exceptions into problem responses."""

    def __init__(self, path: str, endpoint: Callable[..., Any], **kwargs: Any) -> None:
        super().__init__(path, unwrap_problem_results(endpoint), **kwargs)

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        original_route_handler = super().get_route_handler()

        async def problem_route_handler(request: Request) -> Response:
            try:
                return await original_route_handler(request)
            except Exception as exc:
                handler = get_exception_handler(request)
                return handler.handle(request, exc, surface="route")

        return problem_route_handler
