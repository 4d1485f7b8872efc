"""
Model Selection Module - Stage 3
================================

Chooses between a linear regression and a random forest for predicting
`cumulative_version` from `major` and `minor`.

Selection happens in two phases:
    1. Selection: k-fold cross-validation picks a model family by RMSE
    2. Materialization: every candidate is refit on the full training set
       and the chosen one is looked up in that fresh mapping

Features:
    - Cross-validated RMSE comparison
    - Tie-stable best-model selection
    - Model persistence (save/load)
    - Linear stage tracking for the selection workflow
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import joblib
import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator
from sklearn.ensemble import RandomForestRegressor
from sklearn.linear_model import LinearRegression
from sklearn.model_selection import KFold, cross_val_score

from .preprocessing import CUMULATIVE_COLUMN, VERSION_COLUMNS, add_cumulative_version, split_train_test

logger = logging.getLogger(__name__)

FEATURE_COLUMNS = VERSION_COLUMNS
TARGET_COLUMN = CUMULATIVE_COLUMN

# Model identifier -> estimator class, library defaults, in evaluation order
MODEL_REGISTRY = {
    'linear': LinearRegression,
    'random_forest': RandomForestRegressor,
}

ResultsLike = Union[pd.DataFrame, Iterable[Tuple[str, float]]]


def _check_training_columns(df: pd.DataFrame) -> None:
    missing = [col for col in FEATURE_COLUMNS + [TARGET_COLUMN] if col not in df.columns]
    if missing:
        raise ValueError(f"Training data is missing required columns: {missing}")


def create_model(name: str, random_state: Optional[int] = None) -> BaseEstimator:
    """
    Create an unfitted estimator for a model identifier.

    `random_state` is passed only to estimators that take one; the linear
    model is deterministic and ignores it.
    """
    if name not in MODEL_REGISTRY:
        raise ValueError(f"Unknown model '{name}'. Available: {list(MODEL_REGISTRY)}")
    model = MODEL_REGISTRY[name]()
    if random_state is not None and 'random_state' in model.get_params():
        model.set_params(random_state=random_state)
    return model


def evaluate_models(
    train_df: pd.DataFrame,
    cv_folds: int = 10,
    random_state: Optional[int] = None
) -> pd.DataFrame:
    """
    Estimate each candidate's RMSE with k-fold cross-validation.

    Folds are shuffled. `random_state` seeds both the fold assignment and
    the random forest, so a fixed seed gives identical RMSE values across
    runs. With `random_state=None` neither is seeded.

    Args:
        train_df: Training data with major, minor and cumulative_version
        cv_folds: Number of cross-validation folds
        random_state: Seed for fold shuffling and the random forest (optional)

    Returns:
        DataFrame with columns ['Model', 'RMSE'], one row per candidate
    """
    _check_training_columns(train_df)

    X = train_df[FEATURE_COLUMNS].values
    y = train_df[TARGET_COLUMN].values
    kfold = KFold(n_splits=cv_folds, shuffle=True, random_state=random_state)

    rows = []
    for name in MODEL_REGISTRY:
        scores = cross_val_score(
            create_model(name, random_state=random_state), X, y,
            cv=kfold, scoring='neg_root_mean_squared_error'
        )
        rmse = float(-np.mean(scores))
        logger.info(f"{name}: {cv_folds}-fold CV RMSE = {rmse:.6f}")
        rows.append({'Model': name, 'RMSE': rmse})

    return pd.DataFrame(rows, columns=['Model', 'RMSE'])


def select_best_model(results: ResultsLike) -> str:
    """
    Pick the model with the lowest RMSE.

    Ties go to the model listed first.

    Args:
        results: DataFrame with 'Model' and 'RMSE' columns, or (name, rmse) pairs

    Returns:
        Identifier of the best model
    """
    if not isinstance(results, pd.DataFrame):
        results = pd.DataFrame(list(results), columns=['Model', 'RMSE'])

    if results.empty:
        raise ValueError("No model results to select from.")

    best_pos = int(np.argmin(results['RMSE'].values))
    best_model_name = results['Model'].iloc[best_pos]
    best_rmse = results['RMSE'].iloc[best_pos]

    print(f"The best model is: {best_model_name} with RMSE: {best_rmse}")
    logger.info(f"Selected model '{best_model_name}' (RMSE={best_rmse:.6f})")

    return best_model_name


def fit_candidate_models(
    train_df: pd.DataFrame,
    random_state: Optional[int] = None
) -> Dict[str, BaseEstimator]:
    """
    Fit a fresh instance of every candidate on the full training set.

    Args:
        train_df: Training data with major, minor and cumulative_version
        random_state: Seed for the random forest (optional)

    Returns:
        Mapping of model identifier to fitted estimator
    """
    _check_training_columns(train_df)

    X = train_df[FEATURE_COLUMNS].values
    y = train_df[TARGET_COLUMN].values

    models = {}
    for name in MODEL_REGISTRY:
        models[name] = create_model(name, random_state=random_state).fit(X, y)
    return models


def materialize_model(
    name: str,
    train_df: pd.DataFrame,
    random_state: Optional[int] = None
) -> BaseEstimator:
    """
    Return the fitted estimator for a selected identifier.

    All candidates are refit and the requested one is returned; the
    cross-validation estimators are never reused.

    Args:
        name: Identifier returned by select_best_model
        train_df: Training data
        random_state: Seed for the random forest (optional)

    Returns:
        Fitted estimator
    """
    if name not in MODEL_REGISTRY:
        raise ValueError(f"Unknown model '{name}'. Available: {list(MODEL_REGISTRY)}")
    models = fit_candidate_models(train_df, random_state=random_state)
    return models[name]


def save_model(
    model: BaseEstimator,
    model_name: str,
    filepath: str,
    cv_results: Optional[pd.DataFrame] = None
) -> None:
    """
    Save a fitted model and its selection context to disk.

    Args:
        model: Fitted estimator
        model_name: Model identifier
        filepath: Path to save the model
        cv_results: Cross-validation results table (optional)
    """
    state = {
        'model': model,
        'model_name': model_name,
        'feature_columns': FEATURE_COLUMNS,
        'target_column': TARGET_COLUMN,
        'cv_results': cv_results.to_dict(orient='records') if cv_results is not None else None,
        'trained_at': datetime.now().isoformat()
    }

    Path(filepath).parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(state, filepath)
    logger.info(f"Model saved to {filepath}")


def load_model(filepath: str) -> Dict[str, Any]:
    """
    Load a saved model state from disk.

    Args:
        filepath: Path to the saved model

    Returns:
        State dictionary with 'model', 'model_name' and selection context
    """
    if not Path(filepath).exists():
        raise FileNotFoundError(f"Model file not found: {filepath}")

    state = joblib.load(filepath)
    logger.info(f"Model '{state['model_name']}' loaded from {filepath}")
    return state


class ModelSelectionPipeline:
    """
    Model selection workflow with strictly ordered stages.

    loaded -> split -> evaluated -> selected -> refit

    Each step requires the previous one to have completed; there is no
    branching and no retry. The terminal `refit` stage holds the model.
    """

    STAGES: List[str] = ['loaded', 'split', 'evaluated', 'selected', 'refit']

    def __init__(
        self,
        train_fraction: float = 0.8,
        seed: int = 123,
        cv_folds: int = 10,
        cv_random_state: Optional[int] = None
    ):
        """
        Initialize the workflow.

        Args:
            train_fraction: Fraction of rows used for training
            seed: Seed for the train/test split
            cv_folds: Number of cross-validation folds
            cv_random_state: Seed for fold shuffling and the random forest
                (None leaves both unseeded)
        """
        self.train_fraction = train_fraction
        self.seed = seed
        self.cv_folds = cv_folds
        self.cv_random_state = cv_random_state

        self.stage: Optional[str] = None
        self.data: Optional[pd.DataFrame] = None
        self.train_data: Optional[pd.DataFrame] = None
        self.test_data: Optional[pd.DataFrame] = None
        self.results: Optional[pd.DataFrame] = None
        self.best_model_name: Optional[str] = None
        self.model: Optional[BaseEstimator] = None

    def _advance(self, expected: Optional[str], new_stage: str) -> None:
        if self.stage != expected:
            raise ValueError(
                f"Cannot enter stage '{new_stage}' from '{self.stage}'; "
                f"expected '{expected}'."
            )
        self.stage = new_stage
        logger.info(f"Model selection stage: {new_stage}")

    def load(self, df: pd.DataFrame) -> 'ModelSelectionPipeline':
        """Take the engineered dataset and derive cumulative_version if absent."""
        self._advance(None, 'loaded')
        self.data = add_cumulative_version(df)
        return self

    def split(self) -> 'ModelSelectionPipeline':
        self._advance('loaded', 'split')
        self.train_data, self.test_data = split_train_test(
            self.data, train_fraction=self.train_fraction, seed=self.seed
        )
        return self

    def evaluate(self) -> 'ModelSelectionPipeline':
        self._advance('split', 'evaluated')
        self.results = evaluate_models(
            self.train_data, cv_folds=self.cv_folds, random_state=self.cv_random_state
        )
        return self

    def select(self) -> 'ModelSelectionPipeline':
        self._advance('evaluated', 'selected')
        self.best_model_name = select_best_model(self.results)
        return self

    def refit(self) -> 'ModelSelectionPipeline':
        self._advance('selected', 'refit')
        self.model = materialize_model(
            self.best_model_name, self.train_data, random_state=self.cv_random_state
        )
        return self

    def run(self, df: pd.DataFrame) -> 'ModelSelectionPipeline':
        """Run every stage in order."""
        return self.load(df).split().evaluate().select().refit()


def print_selection_summary(pipeline: ModelSelectionPipeline) -> None:
    """
    Print the cross-validation table and the chosen model.

    Args:
        pipeline: A pipeline that has reached at least the 'evaluated' stage
    """
    print("\n" + "=" * 50)
    print("MODEL SELECTION SUMMARY")
    print("=" * 50)
    print(f"Training rows: {len(pipeline.train_data)}")
    print(f"Testing rows: {len(pipeline.test_data)}")
    print(f"Cross-validation folds: {pipeline.cv_folds}")
    print(f"\n{'Model':<15} {'CV RMSE':<12}")
    print("-" * 30)
    for _, row in pipeline.results.iterrows():
        print(f"{row['Model']:<15} {row['RMSE']:<12.6f}")
    if pipeline.best_model_name is not None:
        print(f"\nSelected model: {pipeline.best_model_name}")
    print("=" * 50 + "\n")
