"""
Prediction Module - Stage 4
===========================

Applies the selected model to new major/minor version pairs.

Features:
    - Predict cumulative version for new inputs
    - Export predictions to CSV
"""

import logging
from pathlib import Path
from typing import Dict, Any

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator

from .data_loader import load_dataset
from .model import FEATURE_COLUMNS, load_model
from .preprocessing import cast_version_columns, drop_incomplete_rows

logger = logging.getLogger(__name__)

PREDICTION_COLUMN = 'predicted_cumulative_version'


def predict_cumulative_version(model: BaseEstimator, df: pd.DataFrame) -> np.ndarray:
    """
    Predict cumulative version for each row.

    Args:
        model: Fitted estimator
        df: DataFrame with `major` and `minor` columns

    Returns:
        Array of predictions, one per row
    """
    missing = [col for col in FEATURE_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"The data frame does not contain a '{missing[0]}' column.")

    return model.predict(df[FEATURE_COLUMNS].values)


def export_predictions(
    df: pd.DataFrame,
    predictions: np.ndarray,
    output_dir: str,
    filename: str = "version_predictions.csv"
) -> str:
    """
    Export inputs and predictions to CSV.

    Args:
        df: Input rows
        predictions: Predicted values, aligned with df
        output_dir: Directory to save the file
        filename: Output file name

    Returns:
        Path to the saved file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    out = df[FEATURE_COLUMNS].copy()
    out[PREDICTION_COLUMN] = predictions

    filepath = output_dir / filename
    out.to_csv(filepath, index=False)

    logger.info(f"Predictions exported to {filepath}")
    return str(filepath)


def run_prediction(
    model_path: str,
    input_path: str,
    output_dir: str = "data/predictions/"
) -> Dict[str, Any]:
    """
    Load the saved model, predict for an input CSV and export the results.

    Inputs get the same cleaning as the training data: incomplete rows are
    dropped and version columns cast to integers.

    Args:
        model_path: Path to the joblib model file
        input_path: CSV with major and minor columns
        output_dir: Directory for the predictions CSV

    Returns:
        Dictionary containing model name, inputs, predictions and output path
    """
    logger.info("=" * 60)
    logger.info("STARTING PREDICTION (Stage 4)")
    logger.info("=" * 60)

    state = load_model(model_path)
    inputs = cast_version_columns(drop_incomplete_rows(load_dataset(input_path)))

    predictions = predict_cumulative_version(state['model'], inputs)
    csv_path = export_predictions(inputs, predictions, output_dir)

    logger.info("=" * 60)
    logger.info("PREDICTION COMPLETE")
    logger.info(f"  Rows predicted: {len(predictions)}")
    logger.info(f"  Output: {csv_path}")
    logger.info("=" * 60)

    return {
        'model_name': state['model_name'],
        'inputs': inputs,
        'predictions': predictions,
        'csv_path': csv_path
    }


def print_prediction_results(result: Dict[str, Any], max_rows: int = 10) -> None:
    """
    Print formatted prediction results to console.

    Args:
        result: Result dictionary from run_prediction
        max_rows: Number of rows to show
    """
    print("\n" + "=" * 50)
    print(f"PREDICTION RESULTS - {result['model_name']}")
    print("=" * 50)
    print(f"{'Major':<8} {'Minor':<8} {'Predicted':<12}")
    print("-" * 30)

    inputs = result['inputs']
    for i in range(min(max_rows, len(inputs))):
        row = inputs.iloc[i]
        print(f"{row['major']:<8} {row['minor']:<8} {result['predictions'][i]:<12.4f}")

    if len(inputs) > max_rows:
        print(f"... {len(inputs) - max_rows} more rows")

    print(f"\nPredictions exported to: {result['csv_path']}")
    print("=" * 50 + "\n")
