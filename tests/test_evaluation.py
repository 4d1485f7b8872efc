"""
Test Suite for Evaluation Module
================================
"""

import numpy as np
import pandas as pd
import pytest

from version_pipeline.evaluation import (
    calculate_metrics,
    evaluate_on_test_set,
    plot_actual_vs_predicted,
    plot_model_comparison,
)
from version_pipeline.model import materialize_model
from version_pipeline.preprocessing import add_cumulative_version, split_train_test


class TestCalculateMetrics:
    """Tests for calculate_metrics."""

    def test_perfect_prediction(self):
        """Test that identical arrays give zero error and R² of 1."""
        y = np.array([1.0, 1.2, 2.0, 2.5])
        metrics = calculate_metrics(y, y)

        assert metrics['rmse'] == 0.0
        assert metrics['mae'] == 0.0
        assert metrics['r2'] == pytest.approx(1.0)
        assert metrics['n_samples'] == 4

    def test_known_errors(self):
        """Test RMSE, MAE and max error on a small example."""
        metrics = calculate_metrics([1.0, 2.0], [1.0, 4.0])

        assert metrics['rmse'] == pytest.approx(np.sqrt(2.0))
        assert metrics['mae'] == pytest.approx(1.0)
        assert metrics['max_error'] == pytest.approx(2.0)

    def test_single_sample_r2_is_nan(self):
        """Test that R² is reported as NaN for one sample."""
        assert np.isnan(calculate_metrics([1.0], [1.5])['r2'])


class TestEvaluateOnTestSet:
    """Tests for evaluate_on_test_set."""

    def test_linear_model_on_test_rows(self, version_df):
        """Test that the refit linear model scores near zero error on held-out rows."""
        train, test = split_train_test(add_cumulative_version(version_df))
        model = materialize_model('linear', train)

        result = evaluate_on_test_set(model, test)

        assert result['metrics']['n_samples'] == len(test)
        assert result['metrics']['rmse'] < 1e-8
        assert len(result['y_pred']) == len(test)

    def test_derives_target_when_absent(self, version_df):
        """Test that test rows without cumulative_version are still scored."""
        train, test = split_train_test(add_cumulative_version(version_df))
        model = materialize_model('linear', train)

        result = evaluate_on_test_set(model, test[['major', 'minor']])

        np.testing.assert_allclose(result['y_true'], test['cumulative_version'].values)


class TestPlots:
    """Tests for evaluation charts."""

    def test_model_comparison(self, tmp_path):
        """Test one bar per model and optional saving."""
        results = pd.DataFrame({'Model': ['linear', 'random_forest'], 'RMSE': [0.1, 0.3]})
        path = tmp_path / "comparison.png"

        fig = plot_model_comparison(results, save_path=str(path))

        assert len(fig.axes[0].patches) == 2
        assert path.exists()

    def test_actual_vs_predicted(self):
        """Test that the scatter plot renders with a reference line."""
        fig = plot_actual_vs_predicted(np.array([1.0, 2.0, 3.0]), np.array([1.1, 1.9, 3.2]))

        assert len(fig.axes[0].lines) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
