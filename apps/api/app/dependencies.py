from __future__ import annotations

from fastapi import Request

from course_recommender.bootstrap import get_recommender_service
from course_recommender.service.recommender_service import RecommenderService


def get_service(request: Request) -> RecommenderService:
    """
    Retrieve the recommender service from application state.

    The service is created during application startup and stored on
    `app.state.recommender_service`. When startup hooks did not run (a
    TestClient used without its context manager) a process-wide service
    is bootstrapped on first use.
    """
    service = getattr(request.app.state, "recommender_service", None)
    if service is not None:
        return service
    return get_recommender_service()
