"""
HTTP routes for bulk-loading ratings.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from apps.api.app.dependencies import get_service
from apps.api.app.openapi_examples import error_responses
from apps.api.app.schemas.ingest import LoadResponse, RatingIn
from course_recommender.logging_utils import configure_logger
from course_recommender.service.recommender_service import RecommenderService

logger = configure_logger(__name__)

router = APIRouter(
    prefix="/ratings",
    tags=["ratings"],
)


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    summary="Replace every rating",
    response_model=LoadResponse,
    responses=error_responses(400),
)
def load_ratings(
    ratings: List[RatingIn],
    service: RecommenderService = Depends(get_service),
):
    """
    Replace the whole rating store with the posted array, in order.

    Cached recommendation lists are not invalidated; they refresh when their
    TTL lapses.
    """
    count = service.load_ratings([rating.model_dump() for rating in ratings])

    logger.info(
        "Ratings loaded",
        extra={"event": "ratings.loaded", "count": count},
    )
    return LoadResponse(count=count)
