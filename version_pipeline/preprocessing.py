"""
Feature Engineering Module - Stage 2
====================================

Cleans raw version data and prepares train/test partitions.

Functions:
    - count_missing_values: Total number of missing values
    - columns_missing_values: Missing values per column
    - drop_incomplete_rows: Keep only fully populated rows
    - cast_version_columns: Integer major/minor columns
    - add_cumulative_version: Derived `major + minor / 10` feature
    - split_train_test: Seeded 80/20 random split
"""

import logging
from pathlib import Path
from typing import Dict, Any, Tuple

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

VERSION_COLUMNS = ['major', 'minor']
CUMULATIVE_COLUMN = 'cumulative_version'


def count_missing_values(df: pd.DataFrame) -> int:
    """
    Count missing values across the whole table.

    Reporting only; the table is not modified.

    Args:
        df: DataFrame to inspect

    Returns:
        Total number of missing cells
    """
    num_missing_values = int(df.isna().sum().sum())
    logger.info(f"Number of missing values: {num_missing_values}")
    return num_missing_values


def columns_missing_values(df: pd.DataFrame) -> pd.Series:
    """Number of missing values in each column."""
    return df.isna().sum()


def drop_incomplete_rows(df: pd.DataFrame) -> pd.DataFrame:
    """
    Remove rows that have a missing value in any column.

    Args:
        df: DataFrame to filter

    Returns:
        New DataFrame with complete rows only
    """
    complete = df.dropna(how='any')
    removed = len(df) - len(complete)
    if removed:
        logger.info(f"Removed {removed} rows with missing values")
    return complete.copy()


def cast_version_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Convert the `major` and `minor` columns to integers.

    Fractional values are truncated, not rounded (2.7 becomes 2).
    Integer-like strings are parsed first. Rows must be complete.

    Args:
        df: DataFrame with `major` and `minor` columns

    Returns:
        New DataFrame with integer version columns
    """
    missing = [col for col in VERSION_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"The data frame does not contain a '{missing[0]}' column.")

    result = df.copy()
    for col in VERSION_COLUMNS:
        result[col] = np.trunc(pd.to_numeric(result[col])).astype(np.int64)
    return result


def add_cumulative_version(df: pd.DataFrame) -> pd.DataFrame:
    """
    Add `cumulative_version = major + minor / 10` if not already present.

    This is an affine combination, not a version ordering: (1, 10) and
    (2, 0) both map to 2.0.

    Args:
        df: DataFrame with `major` and `minor` columns

    Returns:
        New DataFrame including the cumulative_version column
    """
    result = df.copy()
    if CUMULATIVE_COLUMN not in result.columns:
        result[CUMULATIVE_COLUMN] = result['major'] + result['minor'] / 10
    return result


def save_dataset(df: pd.DataFrame, output_path: str) -> str:
    """
    Write a DataFrame to CSV without the index, overwriting any prior file.

    Args:
        df: DataFrame to write
        output_path: Destination CSV path

    Returns:
        Path written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False)
    logger.info(f"Saved {len(df)} rows to {output_path}")
    return str(output_path)


def split_train_test(
    df: pd.DataFrame,
    train_fraction: float = 0.8,
    seed: int = 123
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split rows uniformly at random into training and testing sets.

    The training set holds floor(train_fraction * n) rows sampled with a
    fixed seed, so the same input always yields the same partition. No
    stratification is applied.

    Args:
        df: DataFrame to split
        train_fraction: Fraction of rows for training
        seed: Random seed for the row sample

    Returns:
        Tuple of (train_df, test_df)
    """
    n_train = int(train_fraction * len(df))
    positions = pd.Series(np.arange(len(df))).sample(n=n_train, random_state=seed).values

    # Split by position so repeated index labels cannot leak across partitions
    in_train = np.zeros(len(df), dtype=bool)
    in_train[positions] = True
    train_df = df.iloc[positions]
    test_df = df.iloc[np.flatnonzero(~in_train)]

    logger.info(
        f"Train/Test split: {len(train_df)} train rows, {len(test_df)} test rows (seed={seed})"
    )

    return train_df, test_df


def save_train_test(
    train_df: pd.DataFrame,
    test_df: pd.DataFrame,
    training_path: str = "data/preprocessed/training_versions.csv",
    testing_path: str = "data/preprocessed/testing_versions.csv"
) -> Tuple[str, str]:
    """Write the training and testing partitions to their CSV files."""
    return save_dataset(train_df, training_path), save_dataset(test_df, testing_path)


def feature_engineering_pipeline(
    df: pd.DataFrame,
    output_path: str = "data/preprocessed/feature_engineered_versions.csv"
) -> Dict[str, Any]:
    """
    Complete feature engineering for raw version data.

    The missing-value report never blocks the run; filtering and casting
    are applied on every call.

    Args:
        df: Raw DataFrame
        output_path: Where to write the engineered CSV

    Returns:
        Dictionary containing:
            - data: Engineered DataFrame
            - missing_total: Missing values before cleaning
            - missing_by_column: Per-column missing counts before cleaning
            - rows_before / rows_after: Row counts around filtering
            - output_path: CSV path written
    """
    logger.info("=" * 60)
    logger.info("STARTING FEATURE ENGINEERING (Stage 2)")
    logger.info("=" * 60)

    missing_total = count_missing_values(df)
    missing_by_column = columns_missing_values(df)

    cleaned = drop_incomplete_rows(df)
    engineered = cast_version_columns(cleaned)
    written = save_dataset(engineered, output_path)

    result = {
        'data': engineered,
        'missing_total': missing_total,
        'missing_by_column': missing_by_column.to_dict(),
        'rows_before': len(df),
        'rows_after': len(engineered),
        'output_path': written
    }

    logger.info("=" * 60)
    logger.info("FEATURE ENGINEERING COMPLETE")
    logger.info(f"  Rows kept: {len(engineered)} of {len(df)}")
    logger.info("=" * 60)

    return result


def print_feature_engineering_summary(result: Dict[str, Any]) -> None:
    """
    Print a summary of the feature engineering results.

    Args:
        result: Dictionary from feature_engineering_pipeline
    """
    print("\n" + "=" * 50)
    print("FEATURE ENGINEERING SUMMARY")
    print("=" * 50)
    print(f"Number of missing values: {result['missing_total']}")
    for col, count in result['missing_by_column'].items():
        print(f"  {col}: {count}")
    print(f"\nRows before cleaning: {result['rows_before']}")
    print(f"Rows after cleaning: {result['rows_after']}")
    print(f"Output: {result['output_path']}")
    print("=" * 50 + "\n")
