from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class RecommendationQueryParams(BaseModel):
    include_metadata: bool = Field(
        False,
        description="Decorate each item with catalog title, category and tags when known.",
    )


class RecommendationOut(BaseModel):
    itemId: int
    score: float = Field(
        ...,
        description="Weighted rating sum, or rating count when the popularity fallback was used",
    )
    title: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None


class LegacyRecommendationOut(BaseModel):
    courseId: int
    score: float


class NeighborOut(BaseModel):
    userId: int
    similarity: float


class CatalogItemOut(BaseModel):
    id: int
    title: str
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
