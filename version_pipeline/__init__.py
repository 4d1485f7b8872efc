"""
Version Analytics Pipeline
==========================

Exploratory analysis and model selection for software version numbers.

Modules:
    - utils: Third-party package availability checks
    - data_loader: Configuration and CSV ingestion
    - eda: Summary counts and version charts (Stage 1)
    - preprocessing: Feature engineering and train/test splitting (Stage 2)
    - model: Cross-validated model selection and refit (Stage 3)
    - evaluation: Held-out metrics and comparison plots (Stage 3)
    - prediction: Applying the selected model to new inputs (Stage 4)
"""

__version__ = "1.0.0"
__author__ = "Version Analytics Team"
