"""
Model Evaluation Module
=======================

Scores the refit model on the held-out test set and visualizes results.

Features:
    - RMSE, MAE, R² on the test partition
    - Cross-validation RMSE comparison chart
    - Actual vs Predicted plot
"""

import logging
from typing import Dict, Any, Optional, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from sklearn.base import BaseEstimator
from sklearn.metrics import mean_squared_error, mean_absolute_error, r2_score

from .model import FEATURE_COLUMNS, TARGET_COLUMN
from .preprocessing import add_cumulative_version

logger = logging.getLogger(__name__)


def calculate_metrics(y_true: np.ndarray, y_pred: np.ndarray) -> Dict[str, float]:
    """
    Calculate regression metrics for a single target.

    R² is undefined for fewer than two samples and reported as NaN.

    Args:
        y_true: Ground truth values
        y_pred: Predicted values

    Returns:
        Dictionary with rmse, mae, r2, max_error and n_samples
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    errors = y_true - y_pred

    return {
        'rmse': float(np.sqrt(mean_squared_error(y_true, y_pred))),
        'mae': float(mean_absolute_error(y_true, y_pred)),
        'r2': float(r2_score(y_true, y_pred)) if len(y_true) > 1 else float('nan'),
        'max_error': float(np.max(np.abs(errors))),
        'n_samples': int(len(y_true))
    }


def evaluate_on_test_set(model: BaseEstimator, test_df: pd.DataFrame) -> Dict[str, Any]:
    """
    Score a fitted model on the testing partition.

    Args:
        model: Fitted estimator
        test_df: Test rows with major and minor (cumulative_version derived if absent)

    Returns:
        Dictionary with 'metrics', 'y_true' and 'y_pred'
    """
    test_df = add_cumulative_version(test_df)
    y_true = test_df[TARGET_COLUMN].values
    y_pred = model.predict(test_df[FEATURE_COLUMNS].values)

    metrics = calculate_metrics(y_true, y_pred)
    logger.info(
        f"Test set: RMSE={metrics['rmse']:.6f}, MAE={metrics['mae']:.6f}, R²={metrics['r2']:.6f}"
    )

    return {'metrics': metrics, 'y_true': y_true, 'y_pred': y_pred}


def plot_model_comparison(
    results: pd.DataFrame,
    figsize: Tuple[int, int] = (8, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Bar chart of cross-validation RMSE per model.

    Args:
        results: DataFrame with 'Model' and 'RMSE' columns
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    x = np.arange(len(results))
    best = results['RMSE'].values.argmin()
    colors = ['green' if i == best else 'steelblue' for i in range(len(results))]

    ax.bar(x, results['RMSE'].values, 0.6, color=colors, alpha=0.8)
    ax.set_xticks(x)
    ax.set_xticklabels(results['Model'].values, rotation=45, ha='right')
    ax.set_xlabel('Model')
    ax.set_ylabel('RMSE')
    ax.set_title('Cross-Validated RMSE', fontsize=14, fontweight='bold')
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Model comparison plot saved to {save_path}")

    return fig


def plot_actual_vs_predicted(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    figsize: Tuple[int, int] = (7, 7),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Scatter of actual against predicted cumulative version.

    Args:
        y_true: Ground truth values
        y_pred: Predicted values
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    ax.scatter(y_true, y_pred, alpha=0.6, s=25)

    # Perfect prediction line
    min_val = min(np.min(y_true), np.min(y_pred))
    max_val = max(np.max(y_true), np.max(y_pred))
    ax.plot([min_val, max_val], [min_val, max_val], 'r--', linewidth=2, label='Perfect')

    ax.set_xlabel('Actual')
    ax.set_ylabel('Predicted')
    ax.set_title('Actual vs Predicted - Cumulative Version', fontsize=12, fontweight='bold')
    ax.legend(loc='upper left', fontsize=8)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Actual vs Predicted plot saved to {save_path}")

    return fig


def print_evaluation_report(model_name: str, metrics: Dict[str, float]) -> None:
    """
    Print a formatted test-set report to console.

    Args:
        model_name: Identifier of the evaluated model
        metrics: Metrics dictionary from calculate_metrics
    """
    print("\n" + "=" * 50)
    print(f"TEST SET EVALUATION - {model_name}")
    print("=" * 50)
    print(f"  • RMSE: {metrics['rmse']:.6f}")
    print(f"  • MAE: {metrics['mae']:.6f}")
    print(f"  • R²: {metrics['r2']:.6f}")
    print(f"  • Max error: {metrics['max_error']:.6f}")
    print(f"  • Samples evaluated: {metrics['n_samples']}")
    print("=" * 50 + "\n")
