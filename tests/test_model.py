"""
Test Suite for Model Selection Module
=====================================

Tests for cross-validated evaluation, best-model selection, refit and
the ordered selection workflow.
"""

import numpy as np
import pandas as pd
import pytest
from sklearn.ensemble import RandomForestRegressor
from sklearn.linear_model import LinearRegression

from version_pipeline.model import (
    ModelSelectionPipeline,
    evaluate_models,
    fit_candidate_models,
    load_model,
    materialize_model,
    save_model,
    select_best_model,
)
from version_pipeline.preprocessing import add_cumulative_version


@pytest.fixture
def train_df(version_df):
    """Training frame with the derived target column."""
    return add_cumulative_version(version_df)


class TestSelectBestModel:
    """Tests for select_best_model."""

    def test_lower_rmse_wins(self):
        """Test that the random forest wins with the lower RMSE."""
        assert select_best_model([("linear", 0.42), ("random_forest", 0.31)]) == "random_forest"

    def test_tie_goes_to_first(self):
        """Test that ties resolve to the first listed model."""
        assert select_best_model([("linear", 0.3), ("random_forest", 0.3)]) == "linear"

    def test_accepts_dataframe(self):
        """Test that a results DataFrame is accepted."""
        results = pd.DataFrame({'Model': ['linear', 'random_forest'], 'RMSE': [0.1, 0.2]})

        assert select_best_model(results) == "linear"

    def test_prints_summary(self, capsys):
        """Test that the winner and its RMSE are printed."""
        select_best_model([("linear", 0.42), ("random_forest", 0.31)])

        out = capsys.readouterr().out
        assert "The best model is: random_forest with RMSE: 0.31" in out

    def test_empty_results(self):
        """Test that an empty results table raises ValueError."""
        with pytest.raises(ValueError, match="No model results"):
            select_best_model([])


class TestEvaluateModels:
    """Tests for evaluate_models."""

    def test_results_table(self, train_df):
        """Test one non-negative RMSE per candidate, linear first."""
        results = evaluate_models(train_df, cv_folds=10, random_state=0)

        assert list(results.columns) == ['Model', 'RMSE']
        assert results['Model'].tolist() == ['linear', 'random_forest']
        assert (results['RMSE'] >= 0).all()

    def test_linear_fits_exact_target(self, train_df):
        """Test that the linear model recovers the affine target almost exactly."""
        results = evaluate_models(train_df, cv_folds=5, random_state=0)

        linear_rmse = results.loc[results['Model'] == 'linear', 'RMSE'].iloc[0]
        assert linear_rmse < 1e-8

    def test_seed_makes_results_reproducible(self, train_df):
        """Test that a fixed seed gives identical RMSE for both candidates."""
        first = evaluate_models(train_df, cv_folds=5, random_state=0)
        second = evaluate_models(train_df, cv_folds=5, random_state=0)

        pd.testing.assert_frame_equal(first, second)

    def test_missing_columns(self, version_df):
        """Test that training data without the target is rejected."""
        with pytest.raises(ValueError, match="cumulative_version"):
            evaluate_models(version_df)


class TestMaterialization:
    """Tests for fit_candidate_models and materialize_model."""

    def test_fit_candidates(self, train_df):
        """Test that every candidate is fitted."""
        models = fit_candidate_models(train_df)

        assert isinstance(models['linear'], LinearRegression)
        assert isinstance(models['random_forest'], RandomForestRegressor)
        assert hasattr(models['random_forest'], 'estimators_')

    def test_seed_reaches_random_forest(self, train_df):
        """Test that the seed is passed to the forest and makes refits repeatable."""
        first = materialize_model('random_forest', train_df, random_state=7)
        second = materialize_model('random_forest', train_df, random_state=7)

        assert first.random_state == 7
        np.testing.assert_array_equal(
            first.predict(train_df[['major', 'minor']].values),
            second.predict(train_df[['major', 'minor']].values)
        )

    def test_materialize_linear(self, train_df):
        """Test that the linear artifact learns major + minor / 10."""
        model = materialize_model('linear', train_df)

        np.testing.assert_allclose(model.coef_, [1.0, 0.1], atol=1e-10)
        assert model.predict(np.array([[2, 5]]))[0] == pytest.approx(2.5)

    def test_materialize_refits_each_time(self, train_df):
        """Test that each call returns a freshly fitted estimator."""
        first = materialize_model('linear', train_df)
        second = materialize_model('linear', train_df)

        assert first is not second

    def test_unknown_model(self, train_df):
        """Test that an unknown identifier raises ValueError."""
        with pytest.raises(ValueError, match="Unknown model"):
            materialize_model('svm', train_df)


class TestModelPersistence:
    """Tests for save_model and load_model."""

    def test_save_load(self, train_df, tmp_path):
        """Test that a saved model loads with its context."""
        model = materialize_model('linear', train_df)
        results = pd.DataFrame({'Model': ['linear', 'random_forest'], 'RMSE': [0.0, 0.1]})
        path = tmp_path / "models" / "best.joblib"

        save_model(model, 'linear', str(path), cv_results=results)
        state = load_model(str(path))

        assert state['model_name'] == 'linear'
        assert state['cv_results'][0] == {'Model': 'linear', 'RMSE': 0.0}
        assert state['model'].predict(np.array([[1, 2]]))[0] == pytest.approx(1.2)

    def test_load_missing(self, tmp_path):
        """Test that loading a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_model(str(tmp_path / "missing.joblib"))


class TestModelSelectionPipeline:
    """Tests for the ordered selection workflow."""

    def test_full_run(self, version_df):
        """Test that a full run ends in the refit stage with a model."""
        pipeline = ModelSelectionPipeline(cv_random_state=0).run(version_df)

        assert pipeline.stage == 'refit'
        assert pipeline.best_model_name in ('linear', 'random_forest')
        assert pipeline.model is not None
        assert len(pipeline.train_data) == 48
        assert len(pipeline.test_data) == 12
        assert 'cumulative_version' in pipeline.data.columns

    def test_linear_is_selected_for_exact_target(self, version_df):
        """Test that the exact affine target favours the linear model."""
        pipeline = ModelSelectionPipeline(cv_random_state=0).run(version_df)

        assert pipeline.best_model_name == 'linear'
        assert isinstance(pipeline.model, LinearRegression)

    def test_steps_out_of_order(self, version_df):
        """Test that skipping a stage is rejected."""
        pipeline = ModelSelectionPipeline().load(version_df)

        with pytest.raises(ValueError, match="Cannot enter stage 'evaluated'"):
            pipeline.evaluate()

    def test_no_repeat(self, version_df):
        """Test that a stage cannot be re-entered."""
        pipeline = ModelSelectionPipeline().load(version_df)

        with pytest.raises(ValueError):
            pipeline.load(version_df)

    def test_refit_before_select(self):
        """Test that refit requires a selected model."""
        with pytest.raises(ValueError):
            ModelSelectionPipeline().refit()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
