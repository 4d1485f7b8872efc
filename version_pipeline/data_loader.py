"""
Data Loader Module
==================

Handles configuration loading and CSV ingestion of version data.

Functions:
    - load_config: Load YAML configuration file
    - load_dataset: Load a CSV file after resolving and checking its path
    - check_data_structure: First rows of a dataset
    - print_data_summary: Console summary of a dataset
"""

import logging
from pathlib import Path
from typing import Dict, Any

import pandas as pd
import yaml

from .utils import detect_cpu_count

logger = logging.getLogger(__name__)


def load_config(config_path: str = "config/config.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to the configuration file

    Returns:
        Dictionary containing configuration parameters

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is malformed
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}

    logger.info(f"Loaded configuration from {config_path}")
    return config


def load_dataset(data_filepath: str) -> pd.DataFrame:
    """
    Load a dataset from a CSV file with a header row.

    The path is resolved to an absolute path before the existence check so
    that error messages point at the exact file that was looked up.

    Args:
        data_filepath: Path to the CSV file

    Returns:
        DataFrame containing the parsed file

    Raises:
        FileNotFoundError: If the file does not exist
    """
    norm_path = Path(data_filepath).resolve()
    max_threads = detect_cpu_count()
    logger.debug(f"Available processors: {max_threads}")

    if not norm_path.exists():
        raise FileNotFoundError(f"ERROR: '{norm_path}' does not exist.")

    df = pd.read_csv(norm_path)
    logger.info(f"Loaded data from {norm_path}: {df.shape[0]} rows × {df.shape[1]} columns")

    return df


def check_data_structure(df: pd.DataFrame, n: int = 6) -> pd.DataFrame:
    """Return the first `n` rows of the dataset."""
    return df.head(n)


def print_data_summary(df: pd.DataFrame) -> None:
    """
    Print a formatted summary of the dataset to console.

    Args:
        df: DataFrame to summarize
    """
    print("\n" + "=" * 60)
    print("DATASET SUMMARY")
    print("=" * 60)
    print(f"Shape: {df.shape[0]} rows × {df.shape[1]} columns")
    print("\nColumn Information:")
    print("-" * 40)

    for col in df.columns:
        dtype = df[col].dtype
        non_null = df[col].count()
        null_pct = (1 - non_null / len(df)) * 100 if len(df) else 0.0
        print(f"  {col}: {dtype} | {non_null} non-null ({null_pct:.1f}% missing)")

    print("\nFirst rows:")
    print("-" * 40)
    print(check_data_structure(df).to_string())
    print("=" * 60 + "\n")
