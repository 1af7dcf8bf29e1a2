from unittest.mock import MagicMock, patch

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from course_recommender.config import MongoConfig
from course_recommender.logging_utils import configure_logger
from course_recommender.mongo_loader import (
    collection_to_records,
    get_collections,
    load_ratings_and_catalog,
    load_ratings_from_db,
    mongo_client,
)


# ---------------------------------------------------------------------------
# Fake test doubles
# ---------------------------------------------------------------------------

class FakeCollection:
    """Minimal stand-in for MongoDB Collection."""

    def __init__(self, documents):
        self._documents = documents
        self.find_calls = []

    def find(self, query, projection):
        self.find_calls.append((query, projection))
        cleaned = []
        for doc in self._documents:
            d = dict(doc)
            d.pop("_id", None)
            cleaned.append(d)
        return cleaned


class FakeDatabase:
    """Simple dictionary-backed fake DB."""

    def __init__(self, collections):
        self._collections = collections
        self.getitem_calls = []

    def __getitem__(self, name):
        self.getitem_calls.append(name)
        return self._collections[name]


def _config():
    return MongoConfig(uri="mongodb://fake")


def _fake_db():
    return FakeDatabase(
        {
            "ratings": FakeCollection(
                [
                    {"_id": "a", "userId": 1, "courseId": 10, "rating": 5},
                    {"_id": "b", "userId": 2, "courseId": 11, "rating": 3},
                ]
            ),
            "courses": FakeCollection([{"_id": "c", "id": 10, "title": "Algebra"}]),
        }
    )


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------

def test_get_collections_uses_configured_names():
    db = _fake_db()

    ratings, catalog = get_collections(db, _config())

    assert db.getitem_calls == ["ratings", "courses"]
    assert isinstance(ratings, FakeCollection)
    assert isinstance(catalog, FakeCollection)


def test_collection_to_records_drops_object_id():
    collection = FakeCollection([{"_id": 1, "userId": 1, "itemId": 2, "rating": 4.0}])

    records = collection_to_records(collection, "ratings", configure_logger("mongo_loader_test"))

    assert records == [{"userId": 1, "itemId": 2, "rating": 4.0}]
    assert collection.find_calls == [({}, {"_id": 0})]


def test_collection_to_records_empty_collection_is_not_an_error():
    records = collection_to_records(FakeCollection([]), "catalog", configure_logger("mongo_loader_test"))

    assert records == []


def test_load_ratings_from_db_returns_both_record_lists():
    ratings, catalog = load_ratings_from_db(_fake_db(), _config())

    assert [r["courseId"] for r in ratings] == [10, 11]
    assert catalog == [{"id": 10, "title": "Algebra"}]


# ---------------------------------------------------------------------------
# Client lifecycle
# ---------------------------------------------------------------------------

def test_injected_database_skips_client():
    with patch("course_recommender.mongo_loader.MongoClient") as mock_client:
        ratings, catalog = load_ratings_and_catalog(_config(), db=_fake_db())

    mock_client.assert_not_called()
    assert len(ratings) == 2
    assert len(catalog) == 1


def test_client_is_pinged_used_and_closed():
    client = MagicMock()
    client.__getitem__.return_value = _fake_db()

    with patch("course_recommender.mongo_loader.MongoClient", return_value=client) as mock_cls:
        ratings, catalog = load_ratings_and_catalog(_config())

    mock_cls.assert_called_once_with("mongodb://fake", serverSelectionTimeoutMS=10_000)
    client.admin.command.assert_called_once_with("ping")
    client.__getitem__.assert_called_once_with("course_recommender_db")
    client.close.assert_called_once()
    assert len(ratings) == 2
    assert len(catalog) == 1


def test_unreachable_server_raises_and_closes_client():
    client = MagicMock()
    client.admin.command.side_effect = ServerSelectionTimeoutError("no servers")

    with patch("course_recommender.mongo_loader.MongoClient", return_value=client):
        with pytest.raises(ServerSelectionTimeoutError):
            with mongo_client(_config()):
                pass

    client.close.assert_called_once()
