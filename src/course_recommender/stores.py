"""
In-memory stores for ratings and catalog metadata.

Both stores hold an immutable snapshot that is replaced wholesale on load.
A load fully builds and validates the new snapshot before swapping the
reference, so readers see either the old or the new collection, never a
mix, and a rejected payload leaves the current snapshot untouched.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import pandas as pd

from .logging_utils import configure_logger
from .validators import (
    ValidationError,
    ratings_frame_from_records,
    validate_record_sequence,
)


@dataclass(frozen=True)
class CatalogItem:
    """
    Display metadata for a recommendable item (a course on the platform).

    Attributes
    ----------
    id:
        Item identifier, matching `itemId` in ratings.
    title:
        Human-readable title.
    category:
        Optional category label.
    tags:
        Optional free-form tags.
    """

    id: int
    title: str
    category: Optional[str] = None
    tags: Tuple[str, ...] = ()


def _coerce_int_id(value: Any, position: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Catalog record at position {position} has a non-integer 'id': {value!r}.")
    return value


def catalog_items_from_records(records: Sequence[Mapping[str, Any]]) -> Dict[int, CatalogItem]:
    """
    Build an id -> CatalogItem mapping from raw records.

    Later records with the same id replace earlier ones.
    """
    validate_record_sequence(records, "catalog")

    items: Dict[int, CatalogItem] = {}
    for position, record in enumerate(records):
        if "id" not in record or "title" not in record:
            raise ValidationError(f"Catalog record at position {position} requires 'id' and 'title'.")

        item_id = _coerce_int_id(record["id"], position)
        title = record["title"]
        if not isinstance(title, str):
            raise ValidationError(f"Catalog record at position {position} has a non-string 'title'.")

        category = record.get("category")
        if category is not None and not isinstance(category, str):
            raise ValidationError(f"Catalog record at position {position} has a non-string 'category'.")

        tags = record.get("tags") or ()
        if not isinstance(tags, (list, tuple)) or not all(isinstance(tag, str) for tag in tags):
            raise ValidationError(f"Catalog record at position {position} must have a list of string 'tags'.")

        items[item_id] = CatalogItem(id=item_id, title=title, category=category, tags=tuple(tags))

    return items


class RatingStore:
    """
    Holds the full set of (userId, itemId, rating) observations.

    The snapshot is a DataFrame with columns userId, itemId, rating in load
    order. It is never mutated in place.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or configure_logger("course_recommender.stores")
        self._lock = threading.Lock()
        self._ratings_df: pd.DataFrame = ratings_frame_from_records([])

    def snapshot(self) -> pd.DataFrame:
        """Return the current ratings snapshot."""
        with self._lock:
            return self._ratings_df

    def replace(self, records: Sequence[Mapping[str, Any]]) -> int:
        """
        Replace every rating with `records` and return the new record count.

        Raises:
            ValidationError: If the payload is malformed; the store is unchanged.
        """
        ratings_df = ratings_frame_from_records(records)
        return self.replace_frame(ratings_df)

    def replace_frame(self, ratings_df: pd.DataFrame) -> int:
        """Swap in an already validated ratings DataFrame."""
        with self._lock:
            self._ratings_df = ratings_df

        self.logger.info(
            "Ratings store replaced",
            extra={"event": "ratings_store_replaced", "count": len(ratings_df)},
        )
        return len(ratings_df)

    def __len__(self) -> int:
        return len(self.snapshot())


class CatalogStore:
    """
    Holds item metadata used only to decorate results for display.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or configure_logger("course_recommender.stores")
        self._lock = threading.Lock()
        self._items: Dict[int, CatalogItem] = {}
        self._record_count = 0

    def replace(self, records: Sequence[Mapping[str, Any]]) -> int:
        """
        Replace the catalog with `records` and return the new record count.

        Raises:
            ValidationError: If the payload is malformed; the store is unchanged.
        """
        items = catalog_items_from_records(records)
        with self._lock:
            self._items = items
            self._record_count = len(records)

        self.logger.info(
            "Catalog store replaced",
            extra={"event": "catalog_store_replaced", "count": len(records)},
        )
        return len(records)

    def get(self, item_id: int) -> Optional[CatalogItem]:
        with self._lock:
            items = self._items
        return items.get(item_id)

    def snapshot(self) -> Dict[int, CatalogItem]:
        with self._lock:
            return self._items

    def __len__(self) -> int:
        with self._lock:
            return self._record_count
