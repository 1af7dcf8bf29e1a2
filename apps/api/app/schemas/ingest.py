"""Request/response payloads for the bulk-load endpoints."""

from __future__ import annotations

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# Identifiers are stored as int64.
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class RatingIn(BaseModel):
    """One (user, item, rating) observation."""

    model_config = ConfigDict(extra="ignore")

    userId: int = Field(..., ge=INT64_MIN, le=INT64_MAX)
    itemId: int = Field(
        ...,
        ge=INT64_MIN,
        le=INT64_MAX,
        validation_alias=AliasChoices("itemId", "courseId"),
        description="Rated item; `courseId` is accepted as an alias.",
    )
    rating: float = Field(..., allow_inf_nan=False)


class CatalogItemIn(BaseModel):
    """Display metadata for one item."""

    model_config = ConfigDict(extra="ignore")

    id: int
    title: str
    category: Optional[str] = None
    tags: Optional[List[str]] = None


class LoadResponse(BaseModel):
    ok: bool = True
    count: int = Field(..., ge=0, description="Number of records now held by the store")
