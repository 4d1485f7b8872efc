#!/usr/bin/env python3
"""
Version Analytics Pipeline - Main Entry Point
=============================================

Runs the version-number analysis stages in order.

Stages:
    1. Explore - Summary counts and version charts
    2. Engineer - Missing-value cleanup and integer casting
    3. Select - Train/test split, cross-validated model selection, refit
    4. Predict - Apply the selected model to new inputs

Usage:
    # Run every stage
    python main.py

    # Run a single stage
    python main.py --phase explore

    # Use a custom config
    python main.py --config config/custom.yaml
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional

from version_pipeline.utils import check_pkg_status

BASE_PACKAGES = ['yaml', 'numpy', 'pandas']

# Import names checked before each stage runs
STAGE_PACKAGES = {
    'explore': ['matplotlib', 'seaborn'],
    'engineer': [],
    'select': ['sklearn', 'joblib', 'matplotlib'],
    'predict': ['sklearn', 'joblib'],
}

PHASES = ['explore', 'engineer', 'select', 'predict']


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure logging for the pipeline."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def _data_paths(config: Dict[str, Any]) -> Dict[str, str]:
    data = config.get('data', {})
    return {
        'raw': data.get('raw_path', 'data/raw/major_minor_versions.csv'),
        'engineered': data.get('engineered_path', 'data/preprocessed/feature_engineered_versions.csv'),
        'training': data.get('training_path', 'data/preprocessed/training_versions.csv'),
        'testing': data.get('testing_path', 'data/preprocessed/testing_versions.csv'),
        'predictions': data.get('predictions_path', 'data/predictions/'),
    }


def _figures_dir(config: Dict[str, Any]) -> Optional[str]:
    output = config.get('output', {})
    if not output.get('save_figures', False):
        return None
    return output.get('figures_path', 'reports/figures/')


def _check_stage_packages(phase: str, config: Dict[str, Any]) -> None:
    deps = config.get('dependencies', {})
    check_pkg_status(
        STAGE_PACKAGES[phase] + deps.get('packages', []),
        auto_install=deps.get('auto_install', True)
    )


def run_explore(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Execute Stage 1: Ingestion & Exploration.

    Args:
        config: Configuration dictionary

    Returns:
        EDA report dictionary
    """
    print("\n" + "=" * 70)
    print("STAGE 1: INGESTION & EXPLORATION")
    print("=" * 70)

    _check_stage_packages('explore', config)
    from version_pipeline.data_loader import load_dataset, print_data_summary
    from version_pipeline.eda import generate_eda_report, print_summary

    df = load_dataset(_data_paths(config)['raw'])
    print_data_summary(df)

    report = generate_eda_report(df, output_dir=_figures_dir(config))
    print_summary(report['summary'])

    return report


def run_engineer(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Execute Stage 2: Feature Engineering.

    Args:
        config: Configuration dictionary

    Returns:
        Feature engineering result dictionary
    """
    print("\n" + "=" * 70)
    print("STAGE 2: FEATURE ENGINEERING")
    print("=" * 70)

    _check_stage_packages('engineer', config)
    from version_pipeline.data_loader import load_dataset
    from version_pipeline.preprocessing import feature_engineering_pipeline, print_feature_engineering_summary

    paths = _data_paths(config)
    df = load_dataset(paths['raw'])

    result = feature_engineering_pipeline(df, output_path=paths['engineered'])
    print_feature_engineering_summary(result)

    return result


def run_select(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Execute Stage 3: Model Selection.

    Splits the engineered data, cross-validates both candidates, refits
    the winner on the training set, scores it on the test set and saves it.

    Args:
        config: Configuration dictionary

    Returns:
        Dictionary with the pipeline, test metrics and model path
    """
    print("\n" + "=" * 70)
    print("STAGE 3: MODEL SELECTION")
    print("=" * 70)

    _check_stage_packages('select', config)
    from version_pipeline.data_loader import load_dataset
    from version_pipeline.evaluation import evaluate_on_test_set, plot_model_comparison, print_evaluation_report
    from version_pipeline.model import ModelSelectionPipeline, print_selection_summary, save_model
    from version_pipeline.preprocessing import save_train_test

    paths = _data_paths(config)
    split_config = config.get('split', {})
    model_config = config.get('model', {})

    pipeline = ModelSelectionPipeline(
        train_fraction=split_config.get('train_fraction', 0.8),
        seed=split_config.get('seed', 123),
        cv_folds=model_config.get('cv_folds', 10),
        cv_random_state=model_config.get('cv_random_state')
    )

    pipeline.load(load_dataset(paths['engineered'])).split()
    save_train_test(pipeline.train_data, pipeline.test_data, paths['training'], paths['testing'])
    pipeline.evaluate().select().refit()
    print_selection_summary(pipeline)

    evaluation = evaluate_on_test_set(pipeline.model, pipeline.test_data)
    print_evaluation_report(pipeline.best_model_name, evaluation['metrics'])

    figures_dir = _figures_dir(config)
    if figures_dir:
        Path(figures_dir).mkdir(parents=True, exist_ok=True)
        plot_model_comparison(
            pipeline.results, save_path=str(Path(figures_dir) / "04_model_comparison.png")
        )

    model_path = model_config.get('model_path', 'models/best_version_model.joblib')
    save_model(pipeline.model, pipeline.best_model_name, model_path, cv_results=pipeline.results)

    return {
        'pipeline': pipeline,
        'evaluation': evaluation,
        'model_path': model_path
    }


def run_predict(config: Dict[str, Any], input_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Execute Stage 4: Prediction.

    Args:
        config: Configuration dictionary
        input_path: CSV of major/minor pairs (default: the testing partition)

    Returns:
        Prediction result dictionary
    """
    print("\n" + "=" * 70)
    print("STAGE 4: PREDICTION")
    print("=" * 70)

    _check_stage_packages('predict', config)
    from version_pipeline.prediction import run_prediction, print_prediction_results

    paths = _data_paths(config)
    model_path = config.get('model', {}).get('model_path', 'models/best_version_model.joblib')

    result = run_prediction(
        model_path,
        input_path or paths['testing'],
        output_dir=paths['predictions']
    )
    print_prediction_results(result)

    return result


def run_full_pipeline(config: Dict[str, Any], input_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Execute all four stages in order.

    Args:
        config: Configuration dictionary
        input_path: Prediction input CSV (optional)

    Returns:
        Dictionary containing all stage results
    """
    print("\n" + "=" * 70)
    print("VERSION ANALYTICS PIPELINE")
    print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 70)

    results = {
        'explore': run_explore(config),
        'engineer': run_engineer(config),
        'select': run_select(config),
    }
    results['predict'] = run_predict(config, input_path)

    print("\n" + "=" * 70)
    print("PIPELINE COMPLETE")
    print("=" * 70)
    print(f"  • Versions analysed: {results['explore']['summary'].total_row_count()}")
    print(f"  • Rows after cleaning: {results['engineer']['rows_after']}")
    print(f"  • Selected model: {results['select']['pipeline'].best_model_name}")
    print(f"  • Model saved to: {results['select']['model_path']}")
    print(f"  • Predictions: {results['predict']['csv_path']}")
    print(f"Completed at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 70 + "\n")

    return results


def run_single_phase(phase: str, config: Dict[str, Any], input_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Execute a single stage.

    Args:
        phase: Stage to run ('explore', 'engineer', 'select', 'predict')
        config: Configuration dictionary
        input_path: Prediction input CSV (optional)

    Returns:
        Stage result dictionary
    """
    if phase == 'explore':
        return run_explore(config)
    elif phase == 'engineer':
        return run_engineer(config)
    elif phase == 'select':
        return run_select(config)
    elif phase == 'predict':
        return run_predict(config, input_path)
    else:
        raise ValueError(f"Unknown phase: {phase}. Choose from: {', '.join(PHASES)}")


def main(argv: Optional[list] = None) -> int:
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(
        description="Exploratory analysis and model selection for software version numbers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  python main.py --phase explore
  python main.py --phase predict --input data/new_versions.csv
        """
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        default='config/config.yaml',
        help='Path to configuration file (default: config/config.yaml)'
    )

    parser.add_argument(
        '--phase', '-p',
        type=str,
        choices=PHASES + ['all'],
        default='all',
        help='Stage to run (default: all)'
    )

    parser.add_argument(
        '--data', '-d',
        type=str,
        default=None,
        help='Override the raw input CSV path'
    )

    parser.add_argument(
        '--input', '-i',
        type=str,
        default=None,
        help='CSV of major/minor pairs to predict (default: testing partition)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else "INFO")

    try:
        check_pkg_status(BASE_PACKAGES)
        from version_pipeline.data_loader import load_config

        config = load_config(args.config)
        log_config = config.get('logging', {})
        setup_logging(
            "DEBUG" if args.verbose else log_config.get('level', 'INFO'),
            log_config.get('file')
        )

        if args.data:
            config.setdefault('data', {})['raw_path'] = args.data

        if args.phase == 'all':
            run_full_pipeline(config, args.input)
        else:
            run_single_phase(args.phase, config, args.input)

        return 0

    except Exception as e:
        logging.error(f"Pipeline failed: {e}", exc_info=True)
        print(f"\n❌ Pipeline failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
