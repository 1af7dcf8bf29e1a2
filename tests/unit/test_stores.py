import math
import threading

import pandas as pd
import pytest

from course_recommender.stores import (
    CatalogItem,
    CatalogStore,
    RatingStore,
    catalog_items_from_records,
)
from course_recommender.validators import (
    ValidationError,
    normalize_ratings_frame,
    ratings_frame_from_records,
)


# ---------------------------------------------------------------------------
# Ratings validation
# ---------------------------------------------------------------------------

def test_ratings_frame_has_canonical_columns_and_dtypes():
    df = ratings_frame_from_records([{"userId": 1, "itemId": 2, "rating": 4, "extra": "x"}])

    assert list(df.columns) == ["userId", "itemId", "rating"]
    assert str(df["userId"].dtype) == "int64"
    assert str(df["itemId"].dtype) == "int64"
    assert str(df["rating"].dtype) == "float64"


def test_course_id_is_accepted_as_item_id():
    df = ratings_frame_from_records([{"userId": 1, "courseId": 7, "rating": 4.5}])

    assert df.loc[0, "itemId"] == 7


def test_empty_payload_gives_empty_frame():
    df = ratings_frame_from_records([])

    assert df.empty
    assert list(df.columns) == ["userId", "itemId", "rating"]


@pytest.mark.parametrize("payload", [{"userId": 1}, "ratings", None, 42])
def test_non_sequence_payload_is_rejected(payload):
    with pytest.raises(ValidationError):
        ratings_frame_from_records(payload)


def test_non_mapping_record_is_rejected():
    with pytest.raises(ValidationError, match="position 1"):
        ratings_frame_from_records([{"userId": 1, "itemId": 1, "rating": 1}, [1, 1, 1]])


@pytest.mark.parametrize(
    "records",
    [
        [{"userId": 1, "itemId": 1}],
        [{"userId": 1, "itemId": 1, "rating": 1}, {"userId": 2, "itemId": 2}],
        [{"userId": 1, "itemId": 1, "rating": "five"}],
        [{"userId": "one", "itemId": 1, "rating": 1}],
        [{"userId": 1, "itemId": 1.5, "rating": 1}],
        [{"userId": 1, "itemId": 1, "rating": math.nan}],
        [{"userId": 1, "itemId": 1, "rating": math.inf}],
        [{"userId": 2**63, "itemId": 1, "rating": 1.0}],
        [{"userId": 1, "itemId": 2**63, "rating": 1.0}],
        [{"userId": 2**64, "itemId": 1, "rating": 1.0}],
    ],
)
def test_malformed_ratings_are_rejected(records):
    with pytest.raises(ValidationError):
        ratings_frame_from_records(records)


def test_normalize_ratings_frame_renames_course_id_column():
    df = pd.DataFrame({"userId": [1], "courseId": [2], "rating": [3]})

    normalized = normalize_ratings_frame(df)

    assert list(normalized.columns) == ["userId", "itemId", "rating"]


# ---------------------------------------------------------------------------
# RatingStore
# ---------------------------------------------------------------------------

def test_rating_store_replace_returns_count_and_swaps_snapshot():
    store = RatingStore()
    first = store.snapshot()

    count = store.replace([{"userId": 1, "itemId": 1, "rating": 1}] * 3)

    assert count == 3
    assert len(store) == 3
    assert store.snapshot() is not first
    assert first.empty


def test_rating_store_replaces_rather_than_appends():
    store = RatingStore()
    store.replace([{"userId": 1, "itemId": 1, "rating": 1}] * 3)

    store.replace([{"userId": 2, "itemId": 2, "rating": 2}])

    assert store.snapshot()["userId"].tolist() == [2]


def test_rejected_payload_leaves_store_unchanged():
    store = RatingStore()
    store.replace([{"userId": 1, "itemId": 1, "rating": 1}])
    before = store.snapshot()

    with pytest.raises(ValidationError):
        store.replace([{"userId": 1, "itemId": 1}])

    assert store.snapshot() is before


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

def test_catalog_items_from_records_builds_items():
    items = catalog_items_from_records(
        [
            {"id": 1, "title": "Linear Algebra", "category": "math", "tags": ["vectors"]},
            {"id": 2, "title": "Poetry"},
        ]
    )

    assert items[1] == CatalogItem(id=1, title="Linear Algebra", category="math", tags=("vectors",))
    assert items[2] == CatalogItem(id=2, title="Poetry")


@pytest.mark.parametrize(
    "records",
    [
        [{"title": "no id"}],
        [{"id": 1}],
        [{"id": "1", "title": "string id"}],
        [{"id": 1, "title": 5}],
        [{"id": 1, "title": "t", "category": 3}],
        [{"id": 1, "title": "t", "tags": "not-a-list"}],
        [{"id": 1, "title": "t", "tags": [1, 2]}],
        [{"id": 1, "title": "t", "tags": 5}],
        [{"id": 1, "title": "t", "tags": {"a": "b"}}],
        {"id": 1, "title": "not a list"},
    ],
)
def test_malformed_catalog_is_rejected(records):
    with pytest.raises(ValidationError):
        catalog_items_from_records(records)


def test_catalog_store_counts_records_and_keeps_last_duplicate():
    store = CatalogStore()

    count = store.replace([{"id": 1, "title": "Old"}, {"id": 1, "title": "New"}])

    assert count == 2
    assert len(store) == 2
    assert store.get(1).title == "New"
    assert store.get(2) is None


def test_catalog_store_is_unchanged_after_rejected_load():
    store = CatalogStore()
    store.replace([{"id": 1, "title": "Kept"}])

    with pytest.raises(ValidationError):
        store.replace([{"id": 2}])

    assert store.get(1).title == "Kept"
    assert len(store) == 1


def test_rating_store_rejects_ids_beyond_int64_without_wrapping():
    store = RatingStore()
    store.replace([{"userId": -(2**63), "itemId": 1, "rating": 2.0}])

    with pytest.raises(ValidationError, match="64-bit"):
        store.replace([{"userId": 2**63, "itemId": 1, "rating": 1.0}])

    assert store.snapshot()["userId"].tolist() == [-(2**63)]


def test_int64_boundary_ids_are_kept_exactly():
    df = ratings_frame_from_records([{"userId": 2**63 - 1, "itemId": -(2**63), "rating": 1.0}])

    assert df["userId"].tolist() == [2**63 - 1]
    assert df["itemId"].tolist() == [-(2**63)]


def test_catalog_store_rejects_non_list_tags_through_validation():
    store = CatalogStore()

    with pytest.raises(ValidationError, match="tags"):
        store.replace([{"id": 1, "title": "t", "tags": 5}])

    assert len(store) == 0


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------

def test_concurrent_readers_only_see_whole_snapshots():
    small = [{"userId": 1, "itemId": i, "rating": 1.0} for i in range(3)]
    large = [{"userId": 2, "itemId": i, "rating": 2.0} for i in range(50)]
    expected = {len(small): {1}, len(large): {2}}

    store = RatingStore()
    store.replace(small)

    stop = threading.Event()
    failures = []

    def reader():
        while not stop.is_set():
            snap = store.snapshot()
            users = set(snap["userId"].tolist())
            if expected.get(len(snap)) != users:
                failures.append((len(snap), users))

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for thread in readers:
        thread.start()

    try:
        for round_no in range(200):
            store.replace(large if round_no % 2 == 0 else small)
    finally:
        stop.set()
        for thread in readers:
            thread.join()

    assert failures == []
    assert len(store) == len(small)


def test_concurrent_catalog_readers_see_whole_catalogs():
    first = [{"id": i, "title": "first"} for i in range(5)]
    second = [{"id": i, "title": "second"} for i in range(100, 120)]

    store = CatalogStore()
    store.replace(first)

    stop = threading.Event()
    failures = []

    def reader():
        while not stop.is_set():
            items = store.snapshot()
            titles = {item.title for item in items.values()}
            if (len(items), titles) not in ((5, {"first"}), (20, {"second"})):
                failures.append((len(items), titles))

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for thread in readers:
        thread.start()

    try:
        for round_no in range(200):
            store.replace(second if round_no % 2 == 0 else first)
    finally:
        stop.set()
        for thread in readers:
            thread.join()

    assert failures == []
