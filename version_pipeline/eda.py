"""
Exploratory Data Analysis (EDA) Module - Stage 1
================================================

Summary counts and visualizations of major/minor version data.

Functions:
    - summarize_versions: Row, column and unique-version counts
    - plot_major_distribution: Bar chart of major version counts
    - plot_minor_distribution: Bar chart of minor version counts
    - plot_version_progression: Line chart of version value by row index
    - generate_eda_report: Summary plus all three charts
"""

import logging
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

logger = logging.getLogger(__name__)

# Set style for all plots
plt.style.use('seaborn-v0_8-whitegrid')


class DatasetSummary:
    """
    Precomputed aggregates of a version dataset.

    Built once by `summarize_versions`; every accessor is a plain lookup.
    """

    def __init__(
        self,
        total_rows: int,
        total_columns: int,
        unique_major: int,
        unique_minor: int
    ):
        self._total_rows = total_rows
        self._total_columns = total_columns
        self._unique_major = unique_major
        self._unique_minor = unique_minor

    def total_row_count(self) -> int:
        return self._total_rows

    def total_column_count(self) -> int:
        return self._total_columns

    def unique_major_count(self) -> int:
        logger.info(f"Unique Major Versions: {self._unique_major}")
        return self._unique_major

    def unique_minor_count(self) -> int:
        logger.info(f"Unique Minor Versions: {self._unique_minor}")
        return self._unique_minor

    def to_dict(self) -> Dict[str, int]:
        return {
            'total_rows': self._total_rows,
            'total_columns': self._total_columns,
            'unique_major': self._unique_major,
            'unique_minor': self._unique_minor
        }

    def __repr__(self) -> str:
        return (
            f"DatasetSummary(rows={self._total_rows}, columns={self._total_columns}, "
            f"unique_major={self._unique_major}, unique_minor={self._unique_minor})"
        )


def _require_columns(df: pd.DataFrame, *columns: str) -> None:
    for column in columns:
        if column not in df.columns:
            raise ValueError(f"The data frame does not contain a '{column}' column.")


def summarize_versions(df: pd.DataFrame) -> DatasetSummary:
    """
    Compute overview counts for a version dataset.

    A missing value counts as one distinct value in the unique counts.
    Columns that are absent yield a unique count of 0.

    Args:
        df: DataFrame with `major` and `minor` columns

    Returns:
        DatasetSummary with all counts filled in
    """
    unique_major = df['major'].nunique(dropna=False) if 'major' in df.columns else 0
    unique_minor = df['minor'].nunique(dropna=False) if 'minor' in df.columns else 0

    return DatasetSummary(
        total_rows=len(df),
        total_columns=len(df.columns),
        unique_major=int(unique_major),
        unique_minor=int(unique_minor)
    )


def version_distribution(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """
    Count occurrences of each distinct value of a version component.

    Missing values form their own group, listed last, so the number of
    rows matches the unique count from `summarize_versions`.

    Args:
        df: Version dataset
        column: 'major' or 'minor'

    Returns:
        DataFrame with columns [column, 'label', 'count'], sorted by value.
        `label` is the display text: whole numbers without a decimal part
        and 'NA' for the missing group.
    """
    _require_columns(df, column)
    distribution = df.groupby(column, dropna=False).size().reset_index(name='count')
    distribution.insert(1, 'label', distribution[column].map(_category_label))
    return distribution


def _category_label(value: Any) -> str:
    if pd.isna(value):
        return 'NA'
    if isinstance(value, (int, float, np.integer, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


def _plot_distribution(
    df: pd.DataFrame,
    column: str,
    title: str,
    color: str,
    figsize: Tuple[int, int],
    save_path: Optional[str]
) -> plt.Figure:
    distribution = version_distribution(df, column)

    fig, ax = plt.subplots(figsize=figsize)
    sns.barplot(
        data=distribution, x='label', y='count',
        order=distribution['label'].tolist(), color=color, ax=ax
    )

    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.set_xlabel(title)
    ax.set_ylabel('Count')
    ax.tick_params(axis='x', labelrotation=45)
    plt.setp(ax.get_xticklabels(), ha='right')
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"{title} distribution saved to {save_path}")

    return fig


def plot_major_distribution(
    df: pd.DataFrame,
    figsize: Tuple[int, int] = (10, 6),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Bar chart of how often each major version occurs.

    Args:
        df: DataFrame with a `major` column
        figsize: Figure size (width, height)
        save_path: Path to save the figure (optional)

    Returns:
        Matplotlib Figure object

    Raises:
        ValueError: If the `major` column is missing
    """
    return _plot_distribution(df, 'major', 'Major Version', 'steelblue', figsize, save_path)


def plot_minor_distribution(
    df: pd.DataFrame,
    figsize: Tuple[int, int] = (10, 6),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Bar chart of how often each minor version occurs.

    Args:
        df: DataFrame with a `minor` column
        figsize: Figure size (width, height)
        save_path: Path to save the figure (optional)

    Returns:
        Matplotlib Figure object

    Raises:
        ValueError: If the `minor` column is missing
    """
    return _plot_distribution(df, 'minor', 'Minor Version', 'lightgreen', figsize, save_path)


def plot_version_progression(
    df: pd.DataFrame,
    figsize: Tuple[int, int] = (12, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Line chart of `major + minor / 10` against row index.

    Rows are plotted in storage order, so the chart only reflects release
    order when the source file is already sorted.

    Args:
        df: DataFrame with `major` and `minor` columns
        figsize: Figure size (width, height)
        save_path: Path to save the figure (optional)

    Returns:
        Matplotlib Figure object
    """
    _require_columns(df, 'major', 'minor')

    index = range(1, len(df) + 1)
    version = df['major'] + df['minor'] / 10

    fig, ax = plt.subplots(figsize=figsize)
    ax.plot(index, version.values, color='blue')
    ax.set_xlabel('Index')
    ax.set_ylabel('Version')
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Version progression plot saved to {save_path}")

    return fig


def generate_eda_report(
    df: pd.DataFrame,
    output_dir: Optional[str] = None,
    show_plots: bool = False
) -> Dict[str, Any]:
    """
    Generate the summary counts and all three version charts.

    Figures are only written to disk when `output_dir` is given; otherwise
    they are returned in memory for the caller to render or save.

    Args:
        df: Version dataset
        output_dir: Directory to save figures (optional)
        show_plots: Whether to display plots interactively

    Returns:
        Dictionary with the summary, figure objects and saved file names
    """
    if output_dir is not None:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

    def _path(name: str) -> Optional[str]:
        return str(output_dir / name) if output_dir is not None else None

    logger.info("=" * 60)
    logger.info("STARTING EXPLORATORY DATA ANALYSIS (Stage 1)")
    logger.info("=" * 60)

    summary = summarize_versions(df)
    report = {
        'summary': summary,
        'figures': {},
        'saved_figures': []
    }

    logger.info("Plotting major version distribution...")
    report['figures']['major_distribution'] = plot_major_distribution(
        df, save_path=_path("01_major_distribution.png")
    )

    logger.info("Plotting minor version distribution...")
    report['figures']['minor_distribution'] = plot_minor_distribution(
        df, save_path=_path("02_minor_distribution.png")
    )

    logger.info("Plotting version progression...")
    report['figures']['version_progression'] = plot_version_progression(
        df, save_path=_path("03_version_progression.png")
    )

    if output_dir is not None:
        report['saved_figures'] = [
            "01_major_distribution.png",
            "02_minor_distribution.png",
            "03_version_progression.png"
        ]

    if show_plots:
        plt.show()

    logger.info("=" * 60)
    logger.info("EDA COMPLETE")
    logger.info("=" * 60)

    return report


def print_summary(summary: DatasetSummary) -> None:
    """
    Print the overview counts to console.

    Args:
        summary: Result of summarize_versions
    """
    print("\n" + "=" * 50)
    print("VERSION OVERVIEW")
    print("=" * 50)
    counts = summary.to_dict()
    print(f"Total versions: {counts['total_rows']}")
    print(f"Total columns: {counts['total_columns']}")
    print(f"Unique Major Versions: {counts['unique_major']}")
    print(f"Unique Minor Versions: {counts['unique_minor']}")
    print("=" * 50 + "\n")
