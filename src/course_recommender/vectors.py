from __future__ import annotations

from typing import Dict

import pandas as pd

from .validators import ITEM_COL, RATING_COL, USER_COL

UserVector = Dict[int, float]


def build_user_vectors(ratings_df: pd.DataFrame) -> Dict[int, UserVector]:
    """
    Convert the flat ratings table into sparse per-user rating vectors.

    Rows are applied in order, so a later (userId, itemId) duplicate replaces
    an earlier one. Users appear in the result in first-seen order.
    The input DataFrame is not modified.
    """
    vectors: Dict[int, UserVector] = {}
    if ratings_df.empty:
        return vectors

    for user_id, item_id, rating in zip(
        ratings_df[USER_COL].tolist(),
        ratings_df[ITEM_COL].tolist(),
        ratings_df[RATING_COL].tolist(),
    ):
        vectors.setdefault(int(user_id), {})[int(item_id)] = float(rating)

    return vectors
