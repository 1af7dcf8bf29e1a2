"""
Seed and recommendation routes used by the course platform web client.

Same semantics as the versioned routes; recommendations are keyed by
`courseId` instead of `itemId`.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response

from apps.api.app.dependencies import get_service
from apps.api.app.openapi_examples import error_responses
from apps.api.app.routes.recommendations import STRATEGY_HEADER
from apps.api.app.schemas.ingest import CatalogItemIn, LoadResponse, RatingIn
from apps.api.app.schemas.recommendations import LegacyRecommendationOut
from course_recommender.service.recommender_service import RecommenderService

router = APIRouter(
    prefix="/api",
    tags=["legacy"],
    deprecated=True,
)


@router.post("/seed/ratings", response_model=LoadResponse, responses=error_responses(400))
def seed_ratings(
    ratings: List[RatingIn],
    service: RecommenderService = Depends(get_service),
):
    return LoadResponse(count=service.load_ratings([rating.model_dump() for rating in ratings]))


@router.post("/seed/courses", response_model=LoadResponse, responses=error_responses(400))
def seed_courses(
    courses: List[CatalogItemIn],
    service: RecommenderService = Depends(get_service),
):
    return LoadResponse(count=service.load_catalog([course.model_dump() for course in courses]))


@router.get(
    "/recommendations/{user_id}",
    response_model=list[LegacyRecommendationOut],
    responses=error_responses(),
)
def legacy_recommendations(
    user_id: int,
    response: Response,
    service: RecommenderService = Depends(get_service),
):
    result = service.get_recommendations_for_user(user_id)
    response.headers[STRATEGY_HEADER] = result.strategy
    return [LegacyRecommendationOut(courseId=item.item_id, score=item.score) for item in result.items]
