"""
Service layer for the course recommender.

This module defines the high-level service interface consumed by the
FastAPI application, scripts, and tests.

Important:
    - This module does NOT perform any network or disk I/O.
    - This module does NOT own CF logic; that lives in `core`.
    - It owns the rating/catalog stores and the result cache, and is the
      single mutation point for them.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

import pandas as pd

from ..cache import ResultCache
from ..config import AppConfig, CacheConfig, EngineConfig
from ..core.ranking import ScoredItem
from ..core.recommend_for_user import (
    RecommendationResult,
    RecommendParams,
    recommend_for_user,
)
from ..logging_utils import configure_logger
from ..similarity_engine import SimilarityEdge, UserUserCosineSimilarityEngine
from ..stores import CatalogItem, CatalogStore, RatingStore
from ..validators import normalize_ratings_frame
from ..vectors import build_user_vectors


# ---------------------------------------------------------------------
# Typed Return Models
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class Recommendation:
    """
    A ScoredItem decorated with catalog metadata for display.

    Attributes
    ----------
    item_id:
        Recommended item identifier.
    score:
        Score copied verbatim from the ranked result.
    title, category, tags:
        Catalog metadata; None when the item has no catalog entry.
    """

    item_id: int
    score: float
    title: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[Tuple[str, ...]] = None


# ---------------------------------------------------------------------
# Service Layer
# ---------------------------------------------------------------------


class RecommenderService:
    """
    High-level service for recommendation use cases.

    A recommendation request is served from the per-user cache when a live
    entry exists; otherwise the engine runs over the current ratings
    snapshot and the result is cached. Reloading ratings does not
    invalidate cached entries: they stay servable until their TTL lapses.
    """

    def __init__(
        self,
        engine_config: Optional[EngineConfig] = None,
        cache_config: Optional[CacheConfig] = None,
        *,
        clock: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.engine_config = engine_config or EngineConfig()
        self.cache_config = cache_config or CacheConfig()
        self.logger = logger or configure_logger("course_recommender.service")

        self._ratings = RatingStore(logger=self.logger)
        self._catalog = CatalogStore(logger=self.logger)
        self._cache: ResultCache[RecommendationResult] = ResultCache(
            ttl_seconds=self.cache_config.ttl_seconds,
            clock=clock or time.monotonic,
        )
        self._similarity_engine = UserUserCosineSimilarityEngine(logger=self.logger)
        self._params = RecommendParams(
            top_k=self.engine_config.top_k,
            neighbors_k=self.engine_config.max_neighbors,
        )

    # ------------------------------------------------------------
    # Factory Constructor
    # ------------------------------------------------------------
    @classmethod
    def from_config(
        cls,
        app_config: AppConfig,
        *,
        clock: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "RecommenderService":
        return cls(
            engine_config=app_config.engine,
            cache_config=app_config.cache,
            clock=clock,
            logger=logger,
        )

    # ------------------------------------------------------------
    # Bulk Loads
    # ------------------------------------------------------------
    def load_ratings(self, records: Sequence[Mapping[str, Any]]) -> int:
        """
        Replace every rating and return the new record count.

        Raises:
            ValidationError: If the payload is malformed; nothing is replaced.
        """
        return self._ratings.replace(records)

    def load_ratings_frame(self, ratings_df: pd.DataFrame) -> int:
        """Replace every rating with a DataFrame of userId, itemId, rating."""
        return self._ratings.replace_frame(normalize_ratings_frame(ratings_df))

    def load_catalog(self, records: Sequence[Mapping[str, Any]]) -> int:
        """
        Replace the catalog and return the new record count.

        Raises:
            ValidationError: If the payload is malformed; nothing is replaced.
        """
        return self._catalog.replace(records)

    # ------------------------------------------------------------
    # Core Recommendation API
    # ------------------------------------------------------------
    def get_recommendations_for_user(self, user_id: int) -> RecommendationResult:
        cached = self._cache.get(user_id)
        if cached is not None:
            self.logger.info(
                "Recommendations served from cache",
                extra={
                    "event": "service_recommend_for_user_cached",
                    "user_id": user_id,
                    "cache": "hit",
                    "strategy": cached.strategy,
                },
            )
            return cached

        ratings_df = self._ratings.snapshot()

        self.logger.info(
            "Generating recommendations for user",
            extra={
                "event": "service_recommend_for_user_start",
                "user_id": user_id,
                "cache": "miss",
                "shape": ratings_df.shape,
            },
        )

        result = recommend_for_user(
            user_id,
            ratings_df,
            params=self._params,
            similarity_engine=self._similarity_engine,
        )
        self._cache.put(user_id, result)

        self.logger.info(
            "Recommendations generated",
            extra={
                "event": "service_recommend_for_user_done",
                "user_id": user_id,
                "strategy": result.strategy,
                "num_recommendations": len(result.items),
            },
        )
        return result

    def decorate(self, items: Sequence[ScoredItem]) -> List[Recommendation]:
        """
        Attach catalog metadata to ranked items.

        Items missing from the catalog keep only their id and score.
        """
        catalog = self._catalog.snapshot()
        decorated: List[Recommendation] = []
        for item in items:
            meta = catalog.get(item.item_id)
            if meta is None:
                decorated.append(Recommendation(item_id=item.item_id, score=item.score))
                continue
            decorated.append(
                Recommendation(
                    item_id=item.item_id,
                    score=item.score,
                    title=meta.title,
                    category=meta.category,
                    tags=meta.tags,
                )
            )
        return decorated

    # ------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------
    def similar_users(self, user_id: int, top_k: int = 10) -> List[SimilarityEdge]:
        """
        Return the top_k users most similar to `user_id` over the current ratings.

        Not cached; an unknown user simply has no neighbours.
        """
        vectors = build_user_vectors(self._ratings.snapshot())
        neighbors = self._similarity_engine.rank_neighbors(
            user_id,
            vectors.get(user_id, {}),
            vectors,
            max_neighbors=top_k,
        )

        self.logger.info(
            "Similar users fetched",
            extra={
                "event": "service_similar_users",
                "user_id": user_id,
                "num_neighbors": len(neighbors),
            },
        )
        return neighbors

    def get_catalog_item(self, item_id: int) -> Optional[CatalogItem]:
        return self._catalog.get(item_id)

    @property
    def rating_count(self) -> int:
        return len(self._ratings)

    @property
    def catalog_count(self) -> int:
        return len(self._catalog)

    @property
    def cache(self) -> ResultCache[RecommendationResult]:
        return self._cache
