import sys
from pathlib import Path

import pytest

# Ensure the package and the API app are importable without installation
PROJECT_ROOT = Path(__file__).resolve().parents[1]
for path in (PROJECT_ROOT, PROJECT_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))


ENV_VARS = (
    "MONGO_URI",
    "MONGO_DB_NAME",
    "MONGO_RATINGS_COLLECTION",
    "MONGO_CATALOG_COLLECTION",
    "RECOMMENDER_CACHE_TTL_SECONDS",
    "RECOMMENDER_MAX_NEIGHBORS",
    "RECOMMENDER_TOP_K",
    "LOG_LEVEL",
)

# Item ids used by the worked examples
ITEM_A, ITEM_B, ITEM_C = 1, 2, 3


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep configuration deterministic regardless of the developer's shell."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def shared_item_ratings():
    """U1 rated A and B; U2 and U3 share A with U1 and both rated C."""
    return [
        {"userId": 1, "itemId": ITEM_A, "rating": 5},
        {"userId": 1, "itemId": ITEM_B, "rating": 3},
        {"userId": 2, "itemId": ITEM_A, "rating": 4},
        {"userId": 2, "itemId": ITEM_C, "rating": 5},
        {"userId": 3, "itemId": ITEM_A, "rating": 5},
        {"userId": 3, "itemId": ITEM_C, "rating": 4},
    ]


@pytest.fixture
def disjoint_ratings():
    """No two users share an item."""
    return [
        {"userId": 1, "itemId": ITEM_A, "rating": 5},
        {"userId": 2, "itemId": ITEM_B, "rating": 5},
        {"userId": 3, "itemId": ITEM_C, "rating": 5},
    ]
