from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping

import pandas as pd

from ..validators import ITEM_COL


@dataclass(frozen=True)
class RankParams:
    top_k: int = 10


@dataclass(frozen=True)
class ScoredItem:
    """
    One entry of a ranked recommendation list.

    Attributes
    ----------
    item_id:
        Recommended item.
    score:
        Weighted rating sum (similarity ranking) or rating count
        (popularity ranking). The two scales are not comparable.
    """

    item_id: int
    score: float


def _stable_rank(df: pd.DataFrame) -> pd.DataFrame:
    # score desc; ties keep first-touch order
    if df.empty:
        return df
    return df.sort_values("score", ascending=False, kind="stable").reset_index(drop=True)


def rank_scores(scores: Mapping[int, float], params: RankParams) -> List[ScoredItem]:
    """
    Takes an itemId -> score mapping and returns the ranked top_k as ScoredItems.
    """
    if not scores:
        return []

    scored_df = pd.DataFrame(
        {
            ITEM_COL: list(scores.keys()),
            "score": [float(score) for score in scores.values()],
        }
    )
    ranked = _stable_rank(scored_df).head(params.top_k)

    return [
        ScoredItem(item_id=int(item_id), score=float(score))
        for item_id, score in zip(ranked[ITEM_COL].tolist(), ranked["score"].tolist())
    ]
