from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional

import numpy as np
import pandas as pd


class ValidationError(Exception):
    """Raised when input data fails validation."""


USER_COL = "userId"
ITEM_COL = "itemId"
RATING_COL = "rating"

# Course platform clients key ratings by course.
ITEM_COL_ALIASES = ("courseId",)

REQUIRED_COLUMNS = {USER_COL, ITEM_COL, RATING_COL}

_INT64_MIN = int(np.iinfo(np.int64).min)
_INT64_MAX = int(np.iinfo(np.int64).max)


def validate_required_columns(df: pd.DataFrame, required: set[str]) -> None:
    """
    Validate that DataFrame contains all required columns.
    """
    missing = required - set(df.columns)
    if missing:
        raise ValidationError(f"Missing required columns: {sorted(missing)}")


def validate_record_sequence(records: Any, kind: str) -> None:
    """
    Validate that a bulk-load payload is a sequence of mapping records.
    """
    if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Sequence):
        raise ValidationError(f"Expected a sequence of {kind} records, got {type(records).__name__}.")

    for position, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise ValidationError(
                f"{kind.capitalize()} record at position {position} must be an object, "
                f"got {type(record).__name__}."
            )


def validate_ratings_schema(
    df: pd.DataFrame,
    logger: Optional[logging.Logger] = None,
    step_name: str = "ratings_schema_validation",
) -> None:
    """
    Validate the schema of the ratings DataFrame.

    Checks:
        - required columns exist
        - no missing values
        - user and item identifiers are integers within the int64 range
        - rating column is numeric and finite
    """
    if logger:
        logger.info(
            "Validating ratings schema",
            extra={"event": f"validate_schema_{step_name}"},
        )

    validate_required_columns(df, REQUIRED_COLUMNS)

    if df.empty:
        return

    null_columns = [col for col in (USER_COL, ITEM_COL, RATING_COL) if df[col].isna().any()]
    if null_columns:
        raise ValidationError(f"Columns contain missing values: {null_columns}")

    for col in (USER_COL, ITEM_COL):
        if not pd.api.types.is_integer_dtype(df[col]) or pd.api.types.is_bool_dtype(df[col]):
            raise ValidationError(f"Column {col!r} must contain integer identifiers.")
        if int(df[col].max()) > _INT64_MAX or int(df[col].min()) < _INT64_MIN:
            raise ValidationError(f"Column {col!r} has identifiers outside the 64-bit signed range.")

    if not pd.api.types.is_numeric_dtype(df[RATING_COL]) or pd.api.types.is_bool_dtype(df[RATING_COL]):
        raise ValidationError(f"Column {RATING_COL!r} must be numeric.")

    if not np.isfinite(df[RATING_COL].to_numpy(dtype=float)).all():
        raise ValidationError(f"Column {RATING_COL!r} must contain finite values.")

    if logger:
        logger.info(
            "Ratings schema validated successfully",
            extra={"event": f"validate_schema_{step_name}_success"},
        )


def normalize_ratings_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Validate a ratings DataFrame and reduce it to canonical columns and dtypes:
        - columns: userId, itemId, rating
        - dtypes: userId -> int64, itemId -> int64, rating -> float64

    A `courseId` column is accepted in place of `itemId`.
    """
    if ITEM_COL not in df.columns:
        for alias in ITEM_COL_ALIASES:
            if alias in df.columns:
                df = df.rename(columns={alias: ITEM_COL})
                break

    validate_ratings_schema(df)

    df = df[[USER_COL, ITEM_COL, RATING_COL]].astype(
        {USER_COL: "int64", ITEM_COL: "int64", RATING_COL: "float64"}
    )
    return df.reset_index(drop=True)


def ratings_frame_from_records(records: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    """
    Build a validated ratings DataFrame from a sequence of mapping records.

    Record order is preserved; it decides which duplicate (user, item) wins.
    """
    validate_record_sequence(records, "rating")

    if len(records) == 0:
        return pd.DataFrame(
            {
                USER_COL: pd.Series(dtype="int64"),
                ITEM_COL: pd.Series(dtype="int64"),
                RATING_COL: pd.Series(dtype="float64"),
            }
        )

    return normalize_ratings_frame(pd.DataFrame.from_records(list(records)))
