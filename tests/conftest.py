"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: isolated settings caches and environment
    - Core Fixtures: translator, dispatcher and request builders
    - Application Fixtures: FastAPI app with problem handling and HTTP clients
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable

import pytest
from fastapi import APIRouter, FastAPI, HTTPException, Request
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request as StarletteRequest

from problem_service.app.exception_handlers import configure_exception_handlers
from problem_service.app.routing import ProblemRoute
from problem_service.core.dispatcher import ProblemDispatcher, create_problem_result
from problem_service.core.exceptions import ProblemException
from problem_service.core.formatters import FormatterRegistry
from problem_service.core.schemas.problem_details import ProblemDetail
from problem_service.core.settings import ProblemSettings, clear_all_caches
from problem_service.core.translator import ProblemTranslator

# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch):
    """Reset cached settings and keep tests from reconfiguring root logging."""
    for var in (
        "PROBLEM_TYPE_URI_AUTHORITY",
        "PROBLEM_VALIDATION_TYPE",
        "PROBLEM_XML_ENABLED",
        "PROBLEM_INCLUDE_REQUEST_ID",
        "PROBLEM_EXPOSE_EXCEPTION_DETAIL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("problem_service.infra.logging.config._LOGGING_INITIALIZED", True)
    clear_all_caches()
    yield
    clear_all_caches()


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def translator() -> ProblemTranslator:
    """Translator using the default ``urn:`` authority."""
    return ProblemTranslator()


@pytest.fixture
def dispatcher() -> ProblemDispatcher:
    """Dispatcher with both JSON and XML formatters registered."""
    return ProblemDispatcher(FormatterRegistry.default())


@pytest.fixture
def build_request() -> Callable[..., StarletteRequest]:
    """Factory for minimal ASGI requests.

    Example:
        def test_accept(build_request):
            request = build_request("/orders", accept="application/xml")
    """

    def _build(
        path: str = "/test",
        *,
        accept: str | None = None,
        headers: dict[str, str] | None = None,
        app: FastAPI | None = None,
    ) -> StarletteRequest:
        raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
        if accept is not None:
            raw_headers.append((b"accept", accept.encode()))
        scope = {
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "path": path,
            "root_path": "",
            "headers": raw_headers,
            "query_string": b"",
            "client": ("test", 1234),
            "server": ("test", 80),
        }
        if app is not None:
            scope["app"] = app
        return StarletteRequest(scope)

    return _build


@pytest.fixture
def out_of_credit() -> ProblemDetail:
    """The RFC 7807 example problem."""
    return ProblemDetail(
        type="https://example.com/probs/out-of-credit",
        title="You do not have enough credit.",
        status=403,
        detail="Your current balance is 30, but that costs 50.",
        instance="/account/12345/msgs/abc",
    )


# ============================================================================
# Application Fixtures
# ============================================================================


class InvalidOperationError(Exception):
    """Stand-in for an application fault with no dedicated handling."""


@pytest.fixture
def problem_settings() -> ProblemSettings:
    return ProblemSettings(type_uri_authority="urn:")


@pytest.fixture
def app(problem_settings: ProblemSettings) -> FastAPI:
    """FastAPI app with problem handling and a few failing routes.

    Routes under ``/routed`` use ``ProblemRoute``; routes under ``/plain``
    rely on the process-wide handlers only.
    """
    app = FastAPI()
    configure_exception_handlers(app, problem_settings)

    routed = APIRouter(prefix="/routed", route_class=ProblemRoute)
    plain = APIRouter(prefix="/plain")

    for router in (routed, plain):

        @router.get("/invalid-operation")
        async def invalid_operation() -> None:
            msg = "bad state"
            raise InvalidOperationError(msg)

        @router.get("/not-implemented")
        async def not_implemented() -> None:
            raise NotImplementedError

        @router.get("/items/{item_id}")
        async def get_item(item_id: int) -> dict[str, int]:
            return {"item_id": item_id}

        @router.get("/orders/{order_id}")
        async def get_order(order_id: int) -> None:
            raise HTTPException(status_code=404, detail=f"No order {order_id}")

        @router.get("/sync-boom")
        def sync_boom() -> None:
            msg = "sync failure"
            raise RuntimeError(msg)

        @router.get("/out-of-credit")
        async def out_of_credit_route() -> None:
            raise ProblemException(
                ProblemDetail(
                    type="https://example.com/probs/out-of-credit",
                    title="You do not have enough credit.",
                    status=403,
                    detail="Your current balance is 30, but that costs 50.",
                    instance="/account/12345/msgs/abc",
                )
            )

    @routed.get("/result/{balance}")
    async def result(request: Request, balance: int):
        if balance < 50:
            return create_problem_result(
                request,
                ProblemDetail(
                    type="https://example.com/probs/out-of-credit",
                    title="You do not have enough credit.",
                    status=403,
                    detail=f"Your current balance is {balance}, but that costs 50.",
                    instance=request.url.path,
                ),
            )
        return {"balance": balance}

    app.include_router(routed)
    app.include_router(plain)
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client that returns 500 responses instead of raising.

    Starlette re-raises unhandled exceptions after the fallback handler has
    sent its response; ``raise_app_exceptions=False`` keeps that from
    failing the test.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
