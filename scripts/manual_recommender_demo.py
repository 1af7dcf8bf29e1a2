# scripts/manual_recommender_demo.py

import sys
from pathlib import Path

import pandas as pd

from course_recommender.service.recommender_service import RecommenderService


BASE_DIR = Path(__file__).resolve().parents[1]
RATINGS_PATH = BASE_DIR / "data" / "ratings.csv"
COURSES_PATH = BASE_DIR / "data" / "courses.csv"


def load_and_normalize_ratings(path: Path) -> pd.DataFrame:
    """
    Load the ratings CSV and normalize column names to the schema
    expected by the service: userId, itemId (or courseId), rating.
    """
    df = pd.read_csv(path)

    # Strip whitespace from column names
    df.columns = [c.strip() for c in df.columns]

    rename_map = {
        "user_id": "userId",
        "UserId": "userId",
        "course_id": "courseId",
        "item_id": "itemId",
        "Rating": "rating",
    }
    return df.rename(columns={old: new for old, new in rename_map.items() if old in df.columns})


def load_courses(path: Path) -> list:
    """Catalog records (id, title, optional category) or [] when the file is absent."""
    if not path.exists():
        return []

    df = pd.read_csv(path)
    df.columns = [c.strip() for c in df.columns]
    if "category" in df.columns:
        df["category"] = df["category"].where(df["category"].notna(), None)
    return df[[c for c in ("id", "title", "category") if c in df.columns]].to_dict("records")


def main() -> None:
    print("📥 Loading ratings...")
    ratings_df = load_and_normalize_ratings(RATINGS_PATH)
    print("✅ ratings_df columns:", list(ratings_df.columns))

    service = RecommenderService()
    print("✅ ratings loaded:", service.load_ratings_frame(ratings_df))
    print("✅ catalog loaded:", service.load_catalog(load_courses(COURSES_PATH)))

    if len(sys.argv) > 1:
        user_id = int(sys.argv[1])
    else:
        # Pick a "strong" user automatically: the one with most ratings
        value_counts = ratings_df["userId"].value_counts()
        user_id = int(value_counts.index[0])
        print(f"\n📊 Top user by rating count: userId={user_id} with {int(value_counts.iloc[0])} ratings")

    print(f"\n👥 Most similar users to {user_id}:")
    for edge in service.similar_users(user_id, top_k=5):
        print(f"  user_id={edge.other_user_id}, similarity={edge.score:.4f}")

    result = service.get_recommendations_for_user(user_id)

    print(f"\n🔮 Recommendations for user {user_id} (strategy={result.strategy}):")
    if not result.items:
        print("⚠️ No recommendations returned.")
        return

    for rec in service.decorate(result.items):
        if rec.title:
            print(f"  course_id={rec.item_id}, score={rec.score:.4f}, title={rec.title}")
        else:
            print(f"  course_id={rec.item_id}, score={rec.score:.4f}")


if __name__ == "__main__":
    main()
