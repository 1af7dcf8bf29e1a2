"""
HTTP routes for recommendation-related operations.
No business logic lives here.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from apps.api.app.dependencies import get_service
from apps.api.app.openapi_examples import error_responses
from apps.api.app.schemas.recommendations import (
    NeighborOut,
    RecommendationOut,
    RecommendationQueryParams,
)
from course_recommender.logging_utils import configure_logger
from course_recommender.service.recommender_service import RecommenderService

logger = configure_logger(__name__)

STRATEGY_HEADER = "X-Recommendation-Strategy"

router = APIRouter(
    prefix="/recommendations",
    tags=["recommendations"],
)


@router.get(
    "/{user_id}",
    status_code=status.HTTP_200_OK,
    summary="Get ranked recommendations for a user",
    response_model=list[RecommendationOut],
    response_model_exclude_none=True,
    responses=error_responses(),
)
def get_recommendations(
    user_id: int,
    response: Response,
    params: RecommendationQueryParams = Depends(),
    service: RecommenderService = Depends(get_service),
):
    """
    Return at most 10 items the user has not rated, best first.

    An empty list is a valid answer (no ratings loaded yet). The
    `X-Recommendation-Strategy` header says whether the list came from
    similar users (`similarity`) or from the popularity fallback
    (`popularity`).
    """
    logger.info(
        "recommendation_request",
        extra={"event": "recommendations.request", "user_id": user_id},
    )

    result = service.get_recommendations_for_user(user_id)
    response.headers[STRATEGY_HEADER] = result.strategy

    if not params.include_metadata:
        return [RecommendationOut(itemId=item.item_id, score=item.score) for item in result.items]

    return [
        RecommendationOut(
            itemId=rec.item_id,
            score=rec.score,
            title=rec.title,
            category=rec.category,
            tags=list(rec.tags) if rec.tags is not None else None,
        )
        for rec in service.decorate(result.items)
    ]


@router.get(
    "/{user_id}/neighbors",
    status_code=status.HTTP_200_OK,
    summary="Get the users most similar to a user",
    response_model=list[NeighborOut],
    responses=error_responses(),
)
def get_neighbors(
    user_id: int,
    limit: int = Query(10, ge=1, le=100),
    service: RecommenderService = Depends(get_service),
):
    neighbors = service.similar_users(user_id, top_k=limit)
    return [NeighborOut(userId=edge.other_user_id, similarity=edge.score) for edge in neighbors]
