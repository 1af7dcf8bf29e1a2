from unittest.mock import patch

from course_recommender.bootstrap import bootstrap_service
from course_recommender.config import AppConfig, CacheConfig, EngineConfig, MongoConfig


def test_bootstrap_without_mongo_starts_empty():
    service = bootstrap_service(AppConfig(engine=EngineConfig(), cache=CacheConfig()))

    assert service.rating_count == 0
    assert service.catalog_count == 0


def test_bootstrap_reads_configuration_from_environment(monkeypatch):
    monkeypatch.setenv("RECOMMENDER_TOP_K", "3")

    service = bootstrap_service()

    assert service.engine_config.top_k == 3


def test_bootstrap_seeds_stores_from_mongo():
    cfg = AppConfig(
        engine=EngineConfig(),
        cache=CacheConfig(),
        mongo=MongoConfig(uri="mongodb://x"),
    )
    ratings = [
        {"userId": 1, "courseId": 10, "rating": 5},
        {"userId": 2, "courseId": 10, "rating": 4},
    ]
    catalog = [{"id": 10, "title": "Statistics"}]

    with patch("course_recommender.bootstrap.load_ratings_and_catalog", return_value=(ratings, catalog)) as loader:
        service = bootstrap_service(cfg)

    loader.assert_called_once()
    assert loader.call_args.args[0] is cfg.mongo
    assert service.rating_count == 2
    assert service.get_catalog_item(10).title == "Statistics"
