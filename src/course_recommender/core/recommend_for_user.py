"""
User-based collaborative filtering with a popularity fallback.

The whole computation is a pure function of the ratings snapshot it is
given: no I/O, no shared state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Set

import pandas as pd

from ..similarity_engine import SimilarityEdge, UserUserCosineSimilarityEngine
from ..validators import ITEM_COL
from ..vectors import build_user_vectors
from .ranking import RankParams, ScoredItem, rank_scores

Strategy = Literal["similarity", "popularity"]

SIMILARITY: Strategy = "similarity"
POPULARITY: Strategy = "popularity"


@dataclass(frozen=True)
class RecommendParams:
    top_k: int = 10
    neighbors_k: int = 50


@dataclass(frozen=True)
class RecommendationResult:
    """
    Ranked recommendations tagged with the branch that produced them.

    Attributes
    ----------
    strategy:
        "similarity" when neighbours produced at least one candidate item,
        "popularity" when the fallback ranking was used.
    items:
        At most `top_k` ScoredItems, best first.
    neighbors:
        The neighbours used for aggregation (empty for the popularity branch).
    """

    strategy: Strategy
    items: List[ScoredItem] = field(default_factory=list)
    neighbors: List[SimilarityEdge] = field(default_factory=list)


def aggregate_neighbor_scores(
    neighbors: List[SimilarityEdge],
    vectors: Dict[int, Dict[int, float]],
    exclude_items: Set[int],
) -> Dict[int, float]:
    """
    Sum similarity-weighted neighbour ratings per item, skipping excluded items.
    """
    scores: Dict[int, float] = {}
    for edge in neighbors:
        for item_id, rating in vectors.get(edge.other_user_id, {}).items():
            if item_id in exclude_items:
                continue
            scores[item_id] = scores.get(item_id, 0.0) + edge.score * rating
    return scores


def popularity_counts(ratings_df: pd.DataFrame, exclude_items: Set[int]) -> Dict[int, float]:
    """
    Count rating records per item over the whole table, skipping excluded items.

    Duplicate (user, item) records each count.
    """
    if ratings_df.empty:
        return {}

    items = ratings_df[ITEM_COL]
    if exclude_items:
        items = items[~items.isin(list(exclude_items))]

    counts = items.value_counts(sort=False)
    return {int(item_id): float(count) for item_id, count in counts.items()}


def recommend_for_user(
    user_id: int,
    ratings_df: pd.DataFrame,
    params: Optional[RecommendParams] = None,
    similarity_engine: Optional[UserUserCosineSimilarityEngine] = None,
) -> RecommendationResult:
    """
    Recommend items the user has not rated yet.

    Steps:
        1. Build every user's rating vector.
        2. Rank the other users by cosine similarity to the target and keep
           the `neighbors_k` most similar with similarity > 0.
        3. Score unrated items by similarity-weighted neighbour ratings.
        4. If nothing was scored, rank unrated items by rating count instead.

    A user without ratings is not an error: the target vector is empty, no
    neighbour is similar, and the popularity ranking is returned.
    """
    params = params or RecommendParams()
    engine = similarity_engine or UserUserCosineSimilarityEngine()
    rank_params = RankParams(top_k=params.top_k)

    vectors = build_user_vectors(ratings_df)
    target_vector = vectors.get(user_id, {})
    target_items = set(target_vector)

    neighbors = engine.rank_neighbors(
        user_id,
        target_vector,
        vectors,
        max_neighbors=params.neighbors_k,
    )
    scores = aggregate_neighbor_scores(neighbors, vectors, target_items)

    if not scores:
        counts = popularity_counts(ratings_df, target_items)
        return RecommendationResult(strategy=POPULARITY, items=rank_scores(counts, rank_params))

    return RecommendationResult(
        strategy=SIMILARITY,
        items=rank_scores(scores, rank_params),
        neighbors=neighbors,
    )
