from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from .config import AppConfig, load_app_config
from .logging_utils import configure_logger
from .mongo_loader import load_ratings_and_catalog
from .service.recommender_service import RecommenderService


def bootstrap_service(
    app_config: Optional[AppConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> RecommenderService:
    """
    Build the recommender service from configuration.

    Steps:
        1. Load configuration from the environment (unless given).
        2. Create the service with empty stores.
        3. Seed ratings and catalog from MongoDB when MONGO_URI is configured.
    """
    if app_config is None:
        app_config = load_app_config()

    logger = logger or configure_logger(
        "course_recommender.bootstrap",
        level=logging.getLevelName(app_config.log_level),
    )

    logger.info(
        "Bootstrapping recommender service",
        extra={"event": "bootstrap_start"},
    )

    service = RecommenderService.from_config(app_config)

    if app_config.mongo is not None:
        ratings, catalog = load_ratings_and_catalog(app_config.mongo, logger=logger)
        service.load_ratings(ratings)
        service.load_catalog(catalog)
    else:
        logger.info(
            "No MongoDB URI configured; starting with empty stores",
            extra={"event": "bootstrap_empty_stores"},
        )

    logger.info(
        "Recommender service ready",
        extra={"event": "bootstrap_done", "count": service.rating_count},
    )
    return service


@lru_cache(maxsize=1)
def get_recommender_service() -> RecommenderService:
    """
    Process-wide service for contexts where application startup did not run.
    """
    return bootstrap_service()
