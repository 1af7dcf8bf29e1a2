from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from scipy.sparse import csr_matrix
from sklearn.metrics.pairwise import cosine_similarity as sk_cosine_similarity

from .logging_utils import configure_logger
from .vectors import UserVector

# Candidates scoring below this in the vectorised pass are certainly not positive.
_PRESELECT_TOLERANCE = 1e-9


@dataclass(frozen=True)
class SimilarityEdge:
    """
    Similarity between the target user and one other user.

    Attributes
    ----------
    other_user_id:
        The neighbouring user.
    score:
        Cosine similarity of the two rating vectors.
    """

    other_user_id: int
    score: float


def cosine_similarity(vec_a: Mapping[int, float], vec_b: Mapping[int, float]) -> float:
    """
    Cosine similarity of two sparse rating vectors.

    Missing keys count as 0. If either vector has zero norm the similarity
    is 0. Sums are exactly rounded, so the result does not depend on
    argument order.
    """
    shared = vec_a.keys() & vec_b.keys()
    dot = math.fsum(vec_a[key] * vec_b[key] for key in shared)
    norm_a = math.fsum(value * value for value in vec_a.values())
    norm_b = math.fsum(value * value for value in vec_b.values())

    if norm_a == 0 or norm_b == 0:
        return 0.0

    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


class UserUserCosineSimilarityEngine:
    """
    Engine for scoring a target user against every other user.

    High-level workflow:
        1. Stack the target vector and all other users' vectors into a
           sparse user-item matrix.
        2. Compute cosine similarity of the target row against the rest.
        3. Re-score candidates with the exact pairwise cosine and keep
           strictly positive similarities, most similar first.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or configure_logger("course_recommender.similarity")

    @staticmethod
    def similarity(vec_a: Mapping[int, float], vec_b: Mapping[int, float]) -> float:
        return cosine_similarity(vec_a, vec_b)

    def prepare_user_item_matrix(
        self,
        target_vector: UserVector,
        other_vectors: Sequence[UserVector],
    ) -> Tuple[csr_matrix, Dict[int, int]]:
        """
        Build a sparse matrix whose row 0 is the target and rows 1.. are the others.

        Rows: users
        Columns: itemId (column index assigned on first sight)
        Values: rating
        """
        item_index: Dict[int, int] = {}
        rows: List[int] = []
        cols: List[int] = []
        data: List[float] = []

        for row, vector in enumerate([target_vector, *other_vectors]):
            for item_id, rating in vector.items():
                col = item_index.setdefault(item_id, len(item_index))
                rows.append(row)
                cols.append(col)
                data.append(float(rating))

        matrix = csr_matrix(
            (data, (rows, cols)),
            shape=(len(other_vectors) + 1, max(len(item_index), 1)),
            dtype=float,
        )
        return matrix, item_index

    def rank_neighbors(
        self,
        target_user_id: int,
        target_vector: UserVector,
        vectors: Dict[int, UserVector],
        max_neighbors: int = 50,
    ) -> List[SimilarityEdge]:
        """
        Return the most similar other users, highest similarity first.

        Only strictly positive similarities are kept. Ties keep the order in
        which users appear in `vectors`.
        """
        other_ids = [user_id for user_id in vectors if user_id != target_user_id]

        if not target_vector or not other_ids:
            return []

        matrix, _ = self.prepare_user_item_matrix(
            target_vector,
            [vectors[user_id] for user_id in other_ids],
        )

        self.logger.debug(
            "Computing user-user cosine similarity",
            extra={"event": "compute_user_user_cosine", "user_id": target_user_id, "shape": matrix.shape},
        )

        scores = sk_cosine_similarity(matrix[0], matrix[1:])[0]

        # The matrix pass only preselects candidates; rounding after row
        # normalisation can turn an exact 0 into a tiny positive value.
        edges = []
        for user_id, approx in zip(other_ids, scores):
            if approx <= -_PRESELECT_TOLERANCE:
                continue
            score = self.similarity(target_vector, vectors[user_id])
            if score > 0:
                edges.append(SimilarityEdge(other_user_id=user_id, score=score))
        edges.sort(key=lambda edge: edge.score, reverse=True)
        neighbors = edges[:max_neighbors]

        self.logger.debug(
            "Neighbours ranked",
            extra={
                "event": "compute_user_user_cosine_success",
                "user_id": target_user_id,
                "num_neighbors": len(neighbors),
            },
        )
        return neighbors
