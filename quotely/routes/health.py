"""
Quotely API — Health Check Routes
==================================

What:  Liveness banner (GET /) and dependency health check (GET /health).
Who:   Docker health checks, load balancers and uptime monitors.

Health Check Philosophy:
    The API is only useful if the row-store answers, so the store ping is
    the whole health verdict:
    - healthy:   store ping succeeded
    - unhealthy: store ping failed (still HTTP 200 so monitors can read the body)
"""

import logging
import time

from fastapi import APIRouter, Request

from quotely import __version__
from quotely.exceptions import StoreError
from quotely.schemas.common import HealthResponse, RootResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get("/", response_model=RootResponse, summary="API banner")
async def root() -> RootResponse:
    return RootResponse(message="Quotely API is running", version=__version__)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Pings the row-store and reports overall status and uptime.",
)
async def health_check(request: Request) -> HealthResponse:
    store_status = "connected"
    overall = "healthy"

    store = getattr(request.app.state, "store", None)
    try:
        if store is None:
            raise StoreError(context={"reason": "store not initialized"})
        await store.ping()
    except StoreError as e:
        store_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: store unreachable: %s | %s", e.message, e.context)

    return HealthResponse(
        status=overall,
        version=__version__,
        store=store_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
