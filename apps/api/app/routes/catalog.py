"""
HTTP routes for the item catalog used to decorate recommendations.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from apps.api.app.dependencies import get_service
from apps.api.app.openapi_examples import error_responses
from apps.api.app.schemas.ingest import CatalogItemIn, LoadResponse
from apps.api.app.schemas.recommendations import CatalogItemOut
from course_recommender.logging_utils import configure_logger
from course_recommender.service.recommender_service import RecommenderService

logger = configure_logger(__name__)

router = APIRouter(
    prefix="/catalog",
    tags=["catalog"],
)


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    summary="Replace the item catalog",
    response_model=LoadResponse,
    responses=error_responses(400),
)
def load_catalog(
    items: List[CatalogItemIn],
    service: RecommenderService = Depends(get_service),
):
    count = service.load_catalog([item.model_dump() for item in items])

    logger.info(
        "Catalog loaded",
        extra={"event": "catalog.loaded", "count": count},
    )
    return LoadResponse(count=count)


@router.get(
    "/{item_id}",
    status_code=status.HTTP_200_OK,
    summary="Get one catalog item",
    response_model=CatalogItemOut,
    responses=error_responses(404),
)
def get_catalog_item(
    item_id: int,
    service: RecommenderService = Depends(get_service),
):
    item = service.get_catalog_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Catalog item {item_id} not found")

    return CatalogItemOut(id=item.id, title=item.title, category=item.category, tags=list(item.tags))
