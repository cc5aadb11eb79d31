"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from problem_service.app.routing import ProblemRoute
from problem_service.infra.metrics.prometheus import REGISTRY

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

metrics_router = APIRouter(tags=["observability"], route_class=ProblemRoute)


@metrics_router.get("/metrics")
async def metrics() -> Response:
    """Expose problem response counters in Prometheus text format."""
    data = generate_latest(REGISTRY)
    return Response(
        content=data,
        media_type=CONTENT_TYPE_LATEST,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )


def setup_routers(app: FastAPI) -> None:
    """Register the service routers with the application."""
    app.include_router(metrics_router)
    logger.debug("Routers registered", extra={"routes": len(app.routes)})
