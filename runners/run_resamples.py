# Resampled evaluation runner
# Fits one fixed model over every pair of a configurable partition table

import argparse
import random
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pandas as pd

from resampling.config_schema import validate_resamples_config, ConfigValidationError
from resampling.io import (
    load_config, save_results, create_run_dir, save_data_profile, save_partitions, frame_records
)
from resampling.data import load_dataset, preprocess_data, validate_data_integrity
from resampling.models import build_model, get_model_info
from resampling.adapter import make_partition_table
from resampling.partitioners import get_partitioner
from resampling.cv import fit_resamples, summarize_metrics, metrics_to_dict


def set_seeds(seed):
    """Set all random seeds for reproducibility."""
    random.seed(seed)
    np.random.seed(seed)


def resampling_options(config):
    """Strategy options from config, seeded from experiment.seed unless set."""
    options = dict(config['resampling'].get('options') or {})
    options.setdefault('seed', config['experiment']['seed'])
    return options


def print_summary(summary):
    for row in summary.itertuples(index=False):
        print(f"{row.metric:10s} {row.mean:.4f} ± {row.std_err:.4f} (n={row.n})")


def strata_columns(config):
    """Columns named as strata by the resampling options or the initial split."""
    options = config['resampling'].get('options') or {}
    split = config.get('split') or {}
    return [c for c in (options.get('strata'), split.get('strata')) if c]


def prepare_data(config, dataset_path=None):
    """Load, preprocess and validate; returns (df, X, y, model_frame, path)."""
    df, actual_path = load_dataset(config, dataset_path)
    X, y = preprocess_data(df, config)
    validate_data_integrity(X, y)

    # Features and target side by side so strata can name the target column
    model_frame = pd.concat([X, y], axis=1)

    # Strata may also name a dropped or ignored column; it never reaches X
    for col in strata_columns(config):
        if col not in model_frame.columns and col in df.columns:
            model_frame[col] = df[col].reset_index(drop=True)

    return df, X, y, model_frame, actual_path


def run_resamples(config_path, dataset_path=None, output_dir=None):
    """
    Evaluate a single model configuration over resamples.

    Args:
        config_path: Path to YAML config file
        dataset_path: Optional path to dataset CSV (overrides config)
        output_dir: Optional output directory (overrides config)

    Returns:
        run_dir: Path to experiment output directory
    """
    config = load_config(config_path)

    if output_dir:
        config['experiment']['output_dir'] = output_dir
    if dataset_path:
        config['data']['dataset_path'] = dataset_path

    try:
        validate_resamples_config(config)
    except ConfigValidationError as e:
        print(f"\nCONFIG ERROR:\n{e}")
        raise

    seed = config['experiment']['seed']
    set_seeds(seed)

    target = config['data']['target_column']
    target_type = config['data']['target_type']
    strategy = config['resampling']['strategy']
    options = resampling_options(config)

    print("=" * 60)
    print("RESAMPLED MODEL EVALUATION")
    print("=" * 60)
    print(f"Experiment: {config['experiment']['name']}")
    print(f"Target: {target} ({target_type})")
    print(f"Resampling: {strategy} {options}")
    print(f"Seed: {seed}")
    print("=" * 60)

    df, X, y, model_frame, actual_path = prepare_data(config, dataset_path)
    print(f"\nDataset shape: {X.shape}")

    table = make_partition_table(
        model_frame,
        get_partitioner(strategy),
        options,
        require_disjoint=config['resampling'].get('require_disjoint', False),
    )
    print(f"Partitions: {len(table)}")

    model = build_model(config)
    print(f"\nModel: {config['model']['type']}")

    metric_names = (config.get('metrics') or {}).get('names')
    fold_metrics = fit_resamples(model, X, y, table, target_type, metric_names)
    summary = summarize_metrics(fold_metrics)

    print("\n" + "=" * 60)
    print(f"RESULTS ({strategy}, {len(table)} resamples)")
    print("=" * 60)
    print_summary(summary)

    run_dir = create_run_dir(config)
    save_data_profile(run_dir, df, X, y, actual_path)
    save_partitions(run_dir, table)
    save_results(
        run_dir, config, metrics_to_dict(fold_metrics), model, X, y,
        extra={'summary': frame_records(summary), 'model_info': get_model_info(config['model']['type'])}
    )

    print("\n" + "=" * 60)
    print("Resampled evaluation complete!")
    print("=" * 60)

    return run_dir


def main():
    parser = argparse.ArgumentParser(
        description='Evaluate one model over cross-validation resamples',
        epilog='For hyperparameter grid search, use: run-tuning'
    )
    parser.add_argument('--config', '-c', type=str, default='configs/resamples_decision_tree.yaml',
                        help='Path to config YAML file')
    parser.add_argument('--dataset', '-d', type=str, default=None,
                        help='Path to dataset CSV (overrides config)')
    parser.add_argument('--output', '-o', type=str, default=None,
                        help='Output directory (overrides config)')
    args = parser.parse_args()

    run_resamples(args.config, args.dataset, args.output)


if __name__ == "__main__":
    main()
