from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from .config import MongoConfig
from .logging_utils import configure_logger


@contextmanager
def mongo_client(config: MongoConfig, logger: Optional[logging.Logger] = None) -> Iterator[MongoClient]:
    """
    Context manager that safely opens and closes a MongoClient.

    Pings the server first so an unreachable database fails fast.
    """
    _logger = logger or configure_logger()
    _logger.info("Opening MongoDB connection", extra={"event": "mongo_connect"})

    client = MongoClient(config.uri, serverSelectionTimeoutMS=10_000)

    try:
        client.admin.command("ping")
        _logger.info("MongoDB connection established", extra={"event": "mongo_connect_success"})
        yield client
    except (ServerSelectionTimeoutError, PyMongoError) as exc:
        _logger.error(
            "Failed to connect to MongoDB",
            extra={"event": "mongo_connect_failure", "exception_type": type(exc).__name__},
            exc_info=True,
        )
        raise
    finally:
        client.close()
        _logger.info("MongoDB connection closed", extra={"event": "mongo_disconnect"})


def get_collections(db: Database, config: MongoConfig) -> Tuple[Collection, Collection]:
    """
    Retrieve ratings and catalog collections from the database.
    """
    return db[config.ratings_collection], db[config.catalog_collection]


def collection_to_records(collection: Collection, name: str, logger: logging.Logger) -> List[Dict[str, Any]]:
    logger.info(f"Loading {name} from MongoDB", extra={"event": f"load_{name}"})
    records = list(collection.find({}, {"_id": 0}))
    logger.info(
        f"{name.capitalize()} loaded",
        extra={"event": f"load_{name}_success", "count": len(records)},
    )
    return records


def load_ratings_from_db(
    db: Database,
    config: MongoConfig,
    logger: Optional[logging.Logger] = None,
) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Read every rating and catalog document of an open database, in natural order.
    """
    _logger = logger or configure_logger()
    ratings_collection, catalog_collection = get_collections(db, config)

    ratings = collection_to_records(ratings_collection, "ratings", _logger)
    catalog = collection_to_records(catalog_collection, "catalog", _logger)
    return ratings, catalog


def load_ratings_and_catalog(
    config: MongoConfig,
    logger: Optional[logging.Logger] = None,
    db: Optional[Database] = None,
) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Load ratings and catalog records from MongoDB.

    When `db` is given it is used directly and no client is opened.
    """
    _logger = logger or configure_logger()

    if db is not None:
        return load_ratings_from_db(db, config, _logger)

    with mongo_client(config=config, logger=_logger) as client:
        return load_ratings_from_db(client[config.db_name], config, _logger)
