"""
Test Suite for Prediction Module
================================
"""

import numpy as np
import pandas as pd
import pytest

from version_pipeline.model import materialize_model, save_model
from version_pipeline.prediction import (
    PREDICTION_COLUMN,
    export_predictions,
    predict_cumulative_version,
    run_prediction,
)
from version_pipeline.preprocessing import add_cumulative_version


@pytest.fixture
def linear_model(version_df):
    """Linear model fitted on the full version fixture."""
    return materialize_model('linear', add_cumulative_version(version_df))


class TestPredictCumulativeVersion:
    """Tests for predict_cumulative_version."""

    def test_predictions(self, linear_model, scenario_df):
        """Test predictions for the scenario rows."""
        preds = predict_cumulative_version(linear_model, scenario_df)

        np.testing.assert_allclose(preds, [1.0, 1.2, 2.0, 2.5, 3.0], atol=1e-8)

    def test_missing_column(self, linear_model):
        """Test that inputs without `minor` are rejected."""
        with pytest.raises(ValueError, match="'minor'"):
            predict_cumulative_version(linear_model, pd.DataFrame({'major': [1]}))


class TestExportPredictions:
    """Tests for export_predictions."""

    def test_export(self, scenario_df, tmp_path):
        """Test that inputs and predictions are written side by side."""
        preds = np.array([1.0, 1.2, 2.0, 2.5, 3.0])
        path = export_predictions(scenario_df, preds, str(tmp_path / "out"))

        written = pd.read_csv(path)
        assert list(written.columns) == ['major', 'minor', PREDICTION_COLUMN]
        np.testing.assert_allclose(written[PREDICTION_COLUMN], preds)


class TestRunPrediction:
    """Tests for run_prediction."""

    def test_end_to_end(self, linear_model, raw_csv, tmp_path):
        """Test loading a saved model and predicting a raw CSV."""
        model_path = tmp_path / "model.joblib"
        save_model(linear_model, 'linear', str(model_path))

        result = run_prediction(str(model_path), str(raw_csv), str(tmp_path / "predictions"))

        assert result['model_name'] == 'linear'
        assert len(result['predictions']) == 4
        np.testing.assert_allclose(result['predictions'], [1.0, 2.0, 2.3, 3.0], atol=1e-8)
        assert pd.read_csv(result['csv_path']).shape == (4, 3)

    def test_missing_model(self, raw_csv, tmp_path):
        """Test that a missing model file fails loudly."""
        with pytest.raises(FileNotFoundError):
            run_prediction(str(tmp_path / "nope.joblib"), str(raw_csv), str(tmp_path))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
