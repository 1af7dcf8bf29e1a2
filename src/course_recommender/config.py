from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class MongoConfig:
    """
    Configuration for seeding the stores from MongoDB.

    Attributes:
        uri: Full MongoDB connection string (from environment).
        db_name: Name of the database.
        ratings_collection: Collection name for ratings.
        catalog_collection: Collection name for catalog items (courses).
    """
    uri: str
    db_name: str = "course_recommender_db"
    ratings_collection: str = "ratings"
    catalog_collection: str = "courses"


@dataclass(frozen=True)
class EngineConfig:
    """
    Tuning knobs of the collaborative-filtering engine.

    Attributes:
        max_neighbors: Number of most similar users whose ratings are aggregated.
        top_k: Maximum number of recommendations returned per user.
    """
    max_neighbors: int = 50
    top_k: int = 10


@dataclass(frozen=True)
class CacheConfig:
    """
    Configuration for the per-user result cache.

    Attributes:
        ttl_seconds: Freshness window of a cached recommendation list.
    """
    ttl_seconds: float = 300.0


@dataclass(frozen=True)
class AppConfig:
    """
    Top-level configuration object for the recommender service.

    `mongo` is None when no seeding source is configured.
    """
    engine: EngineConfig
    cache: CacheConfig
    mongo: Optional[MongoConfig] = None
    log_level: str = "INFO"


def _read_positive_int(env_var_name: str, default: int) -> int:
    raw = os.getenv(env_var_name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {env_var_name!r} must be an integer, got {raw!r}.") from exc
    if value <= 0:
        raise ConfigError(f"Environment variable {env_var_name!r} must be positive, got {value}.")
    return value


def _read_positive_float(env_var_name: str, default: float) -> float:
    raw = os.getenv(env_var_name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {env_var_name!r} must be a number, got {raw!r}.") from exc
    if not value > 0:
        raise ConfigError(f"Environment variable {env_var_name!r} must be positive, got {value}.")
    return value


def load_engine_config_from_env() -> EngineConfig:
    """
    Load engine tuning parameters from environment variables.

    Raises:
        ConfigError: If a variable is set but is not a positive integer.
    """
    return EngineConfig(
        max_neighbors=_read_positive_int("RECOMMENDER_MAX_NEIGHBORS", EngineConfig.max_neighbors),
        top_k=_read_positive_int("RECOMMENDER_TOP_K", EngineConfig.top_k),
    )


def load_cache_config_from_env() -> CacheConfig:
    return CacheConfig(
        ttl_seconds=_read_positive_float("RECOMMENDER_CACHE_TTL_SECONDS", CacheConfig.ttl_seconds),
    )


def load_mongo_config_from_env(env_var_name: str = "MONGO_URI") -> Optional[MongoConfig]:
    """
    Load MongoDB configuration from environment variables.

    Seeding is optional: returns None when the URI variable is missing or empty.
    """
    uri = os.getenv(env_var_name)
    if not uri:
        return None

    return MongoConfig(
        uri=uri,
        db_name=os.getenv("MONGO_DB_NAME") or MongoConfig.db_name,
        ratings_collection=os.getenv("MONGO_RATINGS_COLLECTION") or MongoConfig.ratings_collection,
        catalog_collection=os.getenv("MONGO_CATALOG_COLLECTION") or MongoConfig.catalog_collection,
    )


def load_app_config() -> AppConfig:
    """
    Construct and return the full application configuration.

    Reads a local `.env` file first (if present), then the process environment.

    Returns:
        AppConfig
    """
    load_dotenv()

    log_level = (os.getenv("LOG_LEVEL") or "INFO").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"Environment variable 'LOG_LEVEL' is not a valid level: {log_level!r}.")

    return AppConfig(
        engine=load_engine_config_from_env(),
        cache=load_cache_config_from_env(),
        mongo=load_mongo_config_from_env(),
        log_level=log_level,
    )
