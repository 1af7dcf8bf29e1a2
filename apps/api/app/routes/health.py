from __future__ import annotations

from fastapi import APIRouter, Request

from apps.api.app.errors import service_unavailable
from apps.api.app.openapi_examples import error_responses

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness probe")
def health():
    return {"status": "ok"}


@router.get("/ready", summary="Readiness probe", responses=error_responses())
def ready(request: Request):
    service = getattr(request.app.state, "recommender_service", None)
    if not getattr(request.app.state, "is_ready", False) or service is None:
        return service_unavailable(request)

    return {
        "status": "ready",
        "ratings": service.rating_count,
        "catalog": service.catalog_count,
        "cached_users": len(service.cache),
    }
